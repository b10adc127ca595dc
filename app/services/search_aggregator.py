"""Merging heterogeneous search hits into one text document."""

import asyncio
import logging
from typing import List

from app.services.block_flattener import BlockTreeFlattener
from app.services.content_source import ContentSource
from app.services.record_mapper import RecordMapper

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n-----------Next page---------------\n\n"


class SearchAggregator:
    """Dispatches each search hit to the database or page renderer.

    ``database`` hits are queried and rendered with :class:`RecordMapper`;
    ``page`` hits have their blocks fetched and flattened with the page's
    title on top.  Every hit yields exactly one entry, in result order.
    """

    def __init__(
        self,
        source: ContentSource,
        mapper: RecordMapper,
        flattener: BlockTreeFlattener,
    ) -> None:
        self._source = source
        self._mapper = mapper
        self._flattener = flattener

    async def aggregate(self, results: List[dict]) -> str:
        content = await asyncio.gather(*(self._get_content(result) for result in results))
        return PAGE_SEPARATOR.join(content)

    async def _get_content(self, item: dict) -> str:
        kind = item.get("object")
        item_id = item.get("id")
        try:
            if kind == "database":
                records = await self._source.fetch_database_content(item_id)
                return await self._mapper.map_records(records)
            if kind == "page":
                blocks = await self._source.fetch_page_content(item_id)
                return await self._flattener.flatten(blocks, title_id=item_id)
            logger.warning("Unknown object type %r for id %s", kind, item_id)
            return f"Unknown object type {kind} with id {item_id}"
        except Exception as exc:
            logger.error("Error processing Notion content for %s with id %s: %s", kind, item_id, exc)
            return f"Error processing content for {kind} with id {item_id}"
