import asyncio
import logging
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

BAD_REQUEST_ID = "Bad Request: id parameter is required"
NOT_FOUND = "Not Found: Page not found"
NO_CONTENT = "No content"
INTERNAL_SERVER_ERROR = "Internal Server Error"


@router.api_route(
    "/page",
    methods=["GET", "POST"],
    response_class=PlainTextResponse,
    summary="Read a Notion page as plain text",
    description=(
        "Fetches the blocks of page *id*, recursing into nested blocks, and "
        "returns their text in document order.  Pass `raw` to get the "
        "unformatted block list as JSON."
    ),
)
@limiter.limit("30/minute")
async def get_page(
    request: Request,
    id: Optional[str] = Query(default=None, description="Page or block ID."),
    workspace: Optional[str] = Query(default=None, description="Workspace whose API key is used."),
    raw: Optional[str] = Query(default=None, description="Return the raw API results."),
    config: Settings = Depends(get_settings),
    gateway: Gateway = Depends(get_gateway),
) -> Response:
    logger.info("Page request received", extra={"id": id, "workspace": workspace})

    async with open_client(config, workspace) as client:
        if not id:
            raise HTTPException(status_code=400, detail=BAD_REQUEST_ID)

        reader = build_reader(client, gateway, page_size=config.PAGE_SIZE)
        try:
            blocks = await reader.source.fetch_page_content(id)
        except (NotionAPIError, asyncio.TimeoutError) as exc:
            logger.error("Error fetching Notion page %s: %s", id, exc)
            raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)

        if raw is not None:
            return JSONResponse({"results": blocks})

        if not blocks:
            raise HTTPException(status_code=404, detail=NOT_FOUND)

        content = await reader.flattener.flatten(blocks, title_id=id)

    return PlainTextResponse(content or NO_CONTENT)
