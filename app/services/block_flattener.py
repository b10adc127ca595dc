"""Depth-first flattening of Notion block trees into plain text."""

import asyncio
import logging
from typing import List, Optional

from app.models.notion import Block
from app.services.content_source import ContentSource
from app.services.property_formatter import PropertyFormatter

logger = logging.getLogger(__name__)


class BlockTreeFlattener:
    """Turns a list of blocks (and their fetched children) into one text blob.

    Sibling blocks are processed concurrently but joined in document order.
    A block that fails to process contributes nothing instead of failing the
    whole call.  Recursion follows the source tree; cycles are not checked.
    """

    def __init__(self, source: ContentSource, formatter: PropertyFormatter) -> None:
        self._source = source
        self._formatter = formatter

    async def flatten(self, blocks: List[dict], title_id: Optional[str] = None) -> str:
        """Flatten *blocks*, prefixed by the title of *title_id* when it has one."""
        title = await self._fetch_title(title_id) if title_id else None

        content = list(await asyncio.gather(*(self._process_block(block) for block in blocks)))
        if title:
            content.insert(0, title + "\n")

        return "\n\n".join(text for text in content if text.strip())

    async def _process_block(self, raw: dict) -> str:
        block_id = raw.get("id") if isinstance(raw, dict) else None
        try:
            block = Block.model_validate(raw)
            content = block.plain_text

            if block.has_children:
                children = await self._source.fetch_page_content(block.id)
                content += "\n" + await self.flatten(children)

            return content.strip()
        except Exception:
            logger.exception("Error processing block %s", block_id)
            return ""

    async def _fetch_title(self, record_id: str) -> Optional[str]:
        try:
            return await self._formatter.resolve_title(record_id)
        except Exception:
            logger.exception("Error fetching title for %s", record_id)
            return None
