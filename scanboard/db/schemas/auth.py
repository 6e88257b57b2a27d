from pydantic import AliasChoices, BaseModel, Field

from .users import User


class LoginRequest(BaseModel):
    username: str
    password: str


class RefreshRequest(BaseModel):
    # The dashboard front end posts camelCase
    refresh_token: str = Field(validation_alias=AliasChoices("refresh_token", "refreshToken"))


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    user: User
    tokens: TokenPair
