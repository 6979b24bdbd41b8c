"""
Repository listing and statistics endpoints.

Both endpoints always answer 200 with a complete body. Store failures are
absorbed by the backend selector; the `X-Data-Source` header says which
backend produced the data.
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, Response

from repostats.api.deps import get_backend_selector
from repostats.db import schemas
from repostats.services.backend_selector import BackendSelector
from repostats.services.query_contract import normalize_list_query

router = APIRouter(prefix="/api/repositories", tags=["repositories"])
logger = logging.getLogger(__name__)

DATA_SOURCE_HEADER = "X-Data-Source"


def _tag_data_source(response: Response, selector: BackendSelector) -> None:
    if selector.mode is not None:
        response.headers[DATA_SOURCE_HEADER] = selector.mode.value


@router.get("", response_model=schemas.RepositoryPage)
def list_repositories_endpoint(
    response: Response,
    # Raw strings: malformed values are normalized, never rejected
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    search: Optional[str] = Query(default=None),
    selector: BackendSelector = Depends(get_backend_selector),
):
    query = normalize_list_query(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
    )
    result = selector.resolve_list(query)
    _tag_data_source(response, selector)
    return result


@router.get("/stats", response_model=schemas.RepositoryStats)
def get_repository_stats_endpoint(
    response: Response,
    selector: BackendSelector = Depends(get_backend_selector),
):
    result = selector.resolve_stats()
    _tag_data_source(response, selector)
    return result
