"""Rendering of database query results as ``name: value`` text."""

import asyncio
import logging
from typing import List, Optional

from app.models.notion import Record
from app.models.property import Property
from app.services.property_formatter import PropertyFormatter

logger = logging.getLogger(__name__)

ERROR_MAPPING_CONTENT = "Error mapping content"
ERROR_PROCESSING_PAGE = "Error processing page"
ERROR_FORMATTING_PROPERTY = "Error formatting property"


class RecordMapper:
    def __init__(self, formatter: PropertyFormatter) -> None:
        self._formatter = formatter

    async def map_records(self, records: List[dict], title: Optional[str] = None) -> str:
        """Render each record as newline-separated properties, records separated by a blank line.

        A record that cannot be processed is replaced by
        ``"Error processing page"``; records with nothing to show are left
        out.  Never raises: a failure outside any single record returns
        ``"Error mapping content"``.
        """
        try:
            content = list(await asyncio.gather(*(self._map_record(record) for record in records)))
            if title:
                content.insert(0, title)
            return "\n\n".join(entry for entry in content if entry)
        except Exception:
            logger.exception(ERROR_MAPPING_CONTENT)
            return ERROR_MAPPING_CONTENT

    async def _map_record(self, raw: dict) -> str:
        try:
            record = Record.model_validate(raw)
            lines = await asyncio.gather(
                *(self._format_entry(name, prop) for name, prop in record.properties.items())
            )
            return "\n".join(line for line in lines if line)
        except Exception:
            logger.exception("%s %s", ERROR_PROCESSING_PAGE, raw.get("id") if isinstance(raw, dict) else None)
            return ERROR_PROCESSING_PAGE

    async def _format_entry(self, name: str, prop: Property) -> str:
        try:
            value = await self._formatter.format(prop)
        except Exception:
            logger.exception("Error formatting property %s - Type=%s", name, prop.type)
            return f"{name}: {ERROR_FORMATTING_PROPERTY}"
        # Empty values are skipped.
        if not value:
            return ""
        return f"{name}: {value}"
