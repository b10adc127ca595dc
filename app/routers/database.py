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
from app.services.record_mapper import ERROR_MAPPING_CONTENT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notion", tags=["Notion"])

BAD_REQUEST_ID = "Bad Request: id parameter is required"
NOT_FOUND = "Not Found: Database not found"
INTERNAL_SERVER_ERROR = "Internal Server Error"


@router.api_route(
    "/database",
    methods=["GET", "POST"],
    response_class=PlainTextResponse,
    summary="Read a Notion database as plain text",
    description=(
        "Queries the database *id* and renders every row as `name: value` "
        "lines, rows separated by a blank line.  Pass `raw` to get the "
        "unformatted query results as JSON."
    ),
)
@limiter.limit("30/minute")
async def get_database(
    request: Request,
    id: Optional[str] = Query(default=None, description="Database ID."),
    workspace: Optional[str] = Query(default=None, description="Workspace whose API key is used."),
    raw: Optional[str] = Query(default=None, description="Return the raw API results."),
    config: Settings = Depends(get_settings),
    gateway: Gateway = Depends(get_gateway),
) -> Response:
    logger.info("Database request received", extra={"id": id, "workspace": workspace})

    async with open_client(config, workspace) as client:
        if not id:
            raise HTTPException(status_code=400, detail=BAD_REQUEST_ID)

        reader = build_reader(client, gateway, page_size=config.PAGE_SIZE)
        try:
            records = await reader.source.fetch_database_content(id)
        except (NotionAPIError, asyncio.TimeoutError) as exc:
            logger.error("Error fetching Notion database %s: %s", id, exc)
            raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)

        if raw is not None:
            return JSONResponse({"results": records})

        if not records:
            raise HTTPException(status_code=404, detail=NOT_FOUND)

        content = await reader.mapper.map_records(records)

    if content == ERROR_MAPPING_CONTENT:
        logger.error("Error mapping Notion content for database %s", id)
        raise HTTPException(status_code=500, detail=INTERNAL_SERVER_ERROR)

    return PlainTextResponse(content)
