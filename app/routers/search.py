import asyncio
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from app.config import Settings
from app.deps import get_gateway, get_settings, limiter, open_client
from app.services.gateway import Gateway
from app.services.notion_client import NotionAPIError
from app.services.reader import build_reader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notion", tags=["Notion"])

UNAUTHORIZED = "Unauthorized"
BAD_REQUEST_QUERY = "Bad Request: Query parameter is required"
NOT_FOUND_RESULTS = "Not Found: No results found"
INTERNAL_SERVER_ERROR = "Internal Server Error"


def _check_password(config: Settings, password: Optional[str]) -> None:
    """Reject the request when a search password is configured and does not match."""
    expected = config.NOTION_API_PASSWORD
    if expected and not secrets.compare_digest(password or "", expected):
        raise HTTPException(status_code=401, detail=UNAUTHORIZED)


@router.api_route(
    "/search",
    methods=["GET", "POST"],
    response_class=PlainTextResponse,
    summary="Search Notion and return every hit as plain text",
    description=(
        "Runs a workspace search for *query* (oldest edit first) and renders "
        "each hit: databases as `name: value` rows, pages as flattened block "
        "text.  Hits are separated by a `Next page` divider."
    ),
)
@limiter.limit("10/minute")
async def search(
    request: Request,
    query: Optional[str] = Query(default=None, description="Search text."),
    workspace: Optional[str] = Query(default=None, description="Workspace whose API key is used."),
    password: Optional[str] = Query(default=None, description="Search password, when configured."),
    raw: Optional[str] = Query(default=None, description="Return the raw API results."),
    config: Settings = Depends(get_settings),
    gateway: Gateway = Depends(get_gateway),
) -> Response:
    logger.info("Search request received", extra={"query": query, "workspace": workspace})

    _check_password(config, password)

    async with open_client(config, workspace) as client:
        if not query:
            raise HTTPException(status_code=400, detail=BAD_REQUEST_QUERY)

        reader = build_reader(client, gateway, page_size=config.PAGE_SIZE)
        try:
            results = await reader.source.search_records(query)
            if raw is not None:
                return JSONResponse({"results": results})
            content = await reader.aggregator.aggregate(results)
        except (NotionAPIError, asyncio.TimeoutError) as exc:
            logger.error("Error fetching Notion content for query %r: %s", query, exc)
            raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)

    if not content:
        raise HTTPException(status_code=404, detail=NOT_FOUND_RESULTS)

    return PlainTextResponse(content)
