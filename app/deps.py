from typing import Optional

from fastapi import HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import Settings, settings
from app.services.gateway import Gateway
from app.services.notion_client import NotionClient

UNAUTHORIZED = "Unauthorized: API key not found"

limiter = Limiter(key_func=get_remote_address)


def get_settings() -> Settings:
    return settings


def get_gateway(request: Request) -> Gateway:
    """Return the process-wide gateway shared by every request."""
    return request.app.state.gateway


def open_client(config: Settings, workspace: Optional[str]) -> NotionClient:
    """Create a client for *workspace*, or raise 401 when it has no API key."""
    api_key = config.api_key_for(workspace)
    if not api_key:
        raise HTTPException(status_code=401, detail=UNAUTHORIZED)
    return NotionClient(
        api_key,
        base_url=config.NOTION_API_BASE,
        notion_version=config.NOTION_VERSION,
        timeout=config.REQUEST_TIMEOUT,
        max_retries=config.MAX_RETRIES,
        retry_base_delay=config.RETRY_BASE_DELAY,
    )
