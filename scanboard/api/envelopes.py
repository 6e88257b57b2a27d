"""
Envelope rendering for HTTP responses.

Success envelopes map to 200 and failure envelopes to 400; boundary problems
raise EnvelopeError with an explicit status code.
"""
from fastapi import status
from starlette.requests import Request
from starlette.responses import JSONResponse

from scanboard.core.envelope import Envelope


class EnvelopeError(Exception):
    def __init__(self, envelope: Envelope, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(envelope.message or "request failed")
        self.envelope = envelope
        self.status_code = status_code


def envelope_response(envelope: Envelope) -> JSONResponse:
    code = status.HTTP_200_OK if envelope.succeeded else status.HTTP_400_BAD_REQUEST
    return JSONResponse(envelope.to_dict(), status_code=code)


async def envelope_error_handler(request: Request, exc: EnvelopeError) -> JSONResponse:
    return JSONResponse(exc.envelope.to_dict(), status_code=exc.status_code)
