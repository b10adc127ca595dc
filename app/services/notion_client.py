"""Thin async client for the Notion REST API."""

import asyncio
import logging
import random
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

NOTION_API_BASE = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
TIMEOUT = 30  # seconds
MAX_RETRIES = 3
RETRY_BASE_DELAY = 1.0  # seconds
RETRY_JITTER_MAX = 0.5  # seconds


class NotionAPIError(Exception):
    """Raised when a Notion API call fails.

    Attributes:
        message: Human-readable error detail.
        status_code: HTTP status code, or 0 for transport errors.
        code: Notion error code from the response body, if any.
    """

    def __init__(self, message: str, status_code: int = 0, code: str = ""):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


def _retry_delay(attempt: int, base_delay: float, retry_after: Optional[str] = None) -> float:
    """Exponential backoff with jitter, never shorter than ``Retry-After``."""
    delay = base_delay * (2 ** attempt)
    if retry_after:
        try:
            delay = max(float(retry_after), delay)
        except ValueError:
            pass
    if base_delay == 0:
        return delay
    return delay + random.uniform(0, RETRY_JITTER_MAX)


def _error_detail(response: httpx.Response, max_len: int = 300) -> tuple[str, str]:
    """Return *(message, code)* from a Notion error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:max_len], ""
    if not isinstance(body, dict):
        return response.text[:max_len], ""
    return str(body.get("message", response.text))[:max_len], str(body.get("code", ""))


class NotionClient:
    """Authenticated Notion API client.

    Use as an async context manager so the underlying connection pool is
    closed when the request is done::

        async with NotionClient(api_key) as client:
            page = await client.retrieve_page(page_id)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = NOTION_API_BASE,
        notion_version: str = NOTION_VERSION,
        timeout: float = TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_base_delay: float = RETRY_BASE_DELAY,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": notion_version,
                "Content-Type": "application/json",
            },
        )

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> dict:
        """Send one API request, retrying on HTTP 429.

        Raises:
            NotionAPIError: on transport errors, timeouts, non-2xx responses,
                or when retries are exhausted.
        """
        for attempt in range(self.max_retries):
            try:
                response = await self._client.request(method, endpoint, json=json_body, params=params)
            except httpx.TimeoutException as exc:
                raise NotionAPIError(f"Timeout calling {method} {endpoint}") from exc
            except httpx.RequestError as exc:
                raise NotionAPIError(f"Error calling {method} {endpoint}: {exc}") from exc

            if response.status_code == 429 and attempt < self.max_retries - 1:
                delay = _retry_delay(attempt, self.retry_base_delay, response.headers.get("Retry-After"))
                logger.warning("Rate limited on %s, waiting %.1fs (attempt %d)", endpoint, delay, attempt + 1)
                await asyncio.sleep(delay)
                continue

            if response.is_error:
                message, code = _error_detail(response)
                raise NotionAPIError(message, status_code=response.status_code, code=code)

            return response.json()

        raise NotionAPIError(f"Max retries ({self.max_retries}) exceeded for {endpoint}", status_code=429)

    async def query_database(self, database_id: str) -> dict:
        return await self._request("POST", f"/databases/{database_id}/query", json_body={})

    async def list_block_children(self, block_id: str, page_size: int = 100) -> dict:
        return await self._request(
            "GET", f"/blocks/{block_id}/children", params={"page_size": page_size}
        )

    async def retrieve_page(self, page_id: str) -> dict:
        return await self._request("GET", f"/pages/{page_id}")

    async def retrieve_page_property(self, page_id: str, property_id: str) -> dict:
        return await self._request("GET", f"/pages/{page_id}/properties/{property_id}")

    async def search(self, query: str) -> dict:
        return await self._request(
            "POST",
            "/search",
            json_body={
                "query": query,
                "sort": {"direction": "ascending", "timestamp": "last_edited_time"},
            },
        )
