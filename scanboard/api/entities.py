"""
Entity API endpoints.

Thin adapters from HTTP to the repository selected by ``?repo_name=``. Every
body is the repository's envelope. Records are stored exactly as the client
sent them so the same body can later address them for modify/delete; filling
``created``/``updated`` is the client's job (see ``ordering.stamp_timestamps``).
"""
import math
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from scanboard.api.deps import get_repository
from scanboard.api.envelopes import EnvelopeError, envelope_response
from scanboard.core.envelope import INVALID_PAGE, INVALID_PERCENT, Envelope

router = APIRouter(prefix="/api", tags=["entities"])


def _parse_threshold(raw: Optional[str]) -> float:
    try:
        value = float(raw) if raw is not None else math.nan
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        raise EnvelopeError(Envelope.fail(INVALID_PERCENT))
    return value


def _parse_page_argument(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise EnvelopeError(Envelope.fail(INVALID_PAGE))


@router.get("/entities")
def list_entities(
    page: Optional[str] = Query(default=None),
    limit: str = Query(default="10"),
    repo=Depends(get_repository),
):
    if page is None:
        return envelope_response(repo.get_all())
    return envelope_response(repo.get_page(_parse_page_argument(page), _parse_page_argument(limit)))


@router.get("/stats")
def entity_stats(repo=Depends(get_repository)):
    return envelope_response(repo.stats())


@router.post("/add-entity")
def add_entity(record: Any = Body(...), repo=Depends(get_repository)):
    return envelope_response(repo.insert(record))


@router.patch("/modify-entity")
def modify_entity(body: Any = Body(...), repo=Depends(get_repository)):
    if not isinstance(body, list) or len(body) != 2:
        raise EnvelopeError(Envelope.fail("invalid body, expected [old, new]"))
    old, new = body
    return envelope_response(repo.replace(old, new))


@router.delete("/delete")
def delete_entity(record: Any = Body(...), repo=Depends(get_repository)):
    return envelope_response(repo.delete(record))


@router.get("/filter-entities")
def filter_entities(percent: Optional[str] = Query(default=None), repo=Depends(get_repository)):
    return envelope_response(repo.filter(_parse_threshold(percent)))


@router.get("/sort-entities")
def sort_entities(
    order: Optional[str] = Query(default=None),
    by: Optional[str] = Query(default=None),
    repo=Depends(get_repository),
):
    return envelope_response(repo.sort(order, by))
