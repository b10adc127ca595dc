"""Remote fetch operations used by the formatters, admitted through the Gateway."""

import logging
from typing import List

from app.models.notion import PropertyItemList, Record
from app.services.gateway import Gateway
from app.services.notion_client import NotionClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


class ContentSource:
    """Fetches records, blocks and property values for one traversal.

    Listing calls return raw result dicts so that callers can isolate
    failures per item while parsing them.  Only the first page of any
    paginated listing is fetched.
    """

    def __init__(self, client: NotionClient, gateway: Gateway, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._client = client
        self._gateway = gateway
        self.page_size = min(page_size, DEFAULT_PAGE_SIZE)

    async def fetch_database_content(self, database_id: str) -> List[dict]:
        response = await self._gateway.enqueue(lambda: self._client.query_database(database_id))
        return response.get("results", [])

    async def fetch_page_content(self, page_id: str) -> List[dict]:
        response = await self._gateway.enqueue(
            lambda: self._client.list_block_children(page_id, page_size=self.page_size)
        )
        if response.get("has_more"):
            logger.debug("Block list for %s truncated at %d items", page_id, self.page_size)
        return response.get("results", [])

    async def fetch_record_metadata(self, record_id: str) -> Record:
        response = await self._gateway.enqueue(lambda: self._client.retrieve_page(record_id))
        return Record.model_validate(response)

    async def fetch_property_value(self, record_id: str, property_id: str) -> PropertyItemList:
        response = await self._gateway.enqueue(
            lambda: self._client.retrieve_page_property(record_id, property_id)
        )
        return PropertyItemList.model_validate(response)

    async def search_records(self, query: str) -> List[dict]:
        response = await self._gateway.enqueue(lambda: self._client.search(query))
        return response.get("results", [])
