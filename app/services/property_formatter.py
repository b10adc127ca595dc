"""Plain-text rendering of Notion property values."""

import asyncio
import logging
from typing import List, Optional

from app.models.property import (
    CheckboxProperty,
    CreatedByProperty,
    CreatedTimeProperty,
    DateProperty,
    EmailProperty,
    LastEditedByProperty,
    LastEditedTimeProperty,
    MultiSelectProperty,
    NumberProperty,
    PeopleProperty,
    PhoneNumberProperty,
    Property,
    RelationProperty,
    RelationRef,
    RichTextFragment,
    RichTextProperty,
    SelectProperty,
    StatusProperty,
    TitleProperty,
    UnknownProperty,
    UrlProperty,
    VerificationProperty,
)
from app.services.content_source import ContentSource

logger = logging.getLogger(__name__)

UNKNOWN_TYPE = "Unknown Type"
NO_TITLE = "No Title"
CHECKED = "V"
UNCHECKED = "X"


def _join_text(fragments: List[RichTextFragment]) -> str:
    return "".join(fragment.plain_text for fragment in fragments)


def _format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    if value.is_integer():
        return str(int(value))
    return str(value)


def format_static(prop: Property) -> str:
    """Render every variant except relations, which need remote lookups.

    Unknown variants render as ``"Unknown Type"`` and log a warning.
    """
    if isinstance(prop, TitleProperty):
        return _join_text(prop.title)
    if isinstance(prop, RichTextProperty):
        return _join_text(prop.rich_text)
    if isinstance(prop, SelectProperty):
        return prop.select.name if prop.select else ""
    if isinstance(prop, StatusProperty):
        return prop.status.name if prop.status else ""
    if isinstance(prop, MultiSelectProperty):
        return ", ".join(option.name for option in prop.multi_select)
    if isinstance(prop, EmailProperty):
        return prop.email or ""
    if isinstance(prop, PhoneNumberProperty):
        return prop.phone_number or ""
    if isinstance(prop, UrlProperty):
        return prop.url or ""
    if isinstance(prop, DateProperty):
        # Only the start date; end date and time zone are dropped.
        return prop.date.start if prop.date else ""
    if isinstance(prop, PeopleProperty):
        return ", ".join(person.name for person in prop.people if person.name)
    if isinstance(prop, CheckboxProperty):
        return CHECKED if prop.checkbox else UNCHECKED
    if isinstance(prop, NumberProperty):
        return _format_number(prop.number)
    if isinstance(prop, CreatedTimeProperty):
        return prop.created_time
    if isinstance(prop, LastEditedTimeProperty):
        return prop.last_edited_time
    if isinstance(prop, CreatedByProperty):
        return (prop.created_by.name or "") if prop.created_by else ""
    if isinstance(prop, LastEditedByProperty):
        return (prop.last_edited_by.name or "") if prop.last_edited_by else ""
    if isinstance(prop, VerificationProperty):
        return prop.verification.state if prop.verification else ""
    if isinstance(prop, RelationProperty):
        raise TypeError("relation properties must be formatted with PropertyFormatter.format")
    if isinstance(prop, UnknownProperty):
        logger.warning("Unknown property type: %s", prop.type)
        return UNKNOWN_TYPE
    raise TypeError(f"Unsupported property model: {type(prop).__name__}")


class PropertyFormatter:
    """Formats properties, resolving relations through a :class:`ContentSource`."""

    def __init__(self, source: ContentSource) -> None:
        self._source = source

    async def format(self, prop: Property) -> str:
        if isinstance(prop, RelationProperty):
            return await self.format_relation(prop.relation)
        return format_static(prop)

    async def format_relation(self, relations: List[RelationRef]) -> str:
        """Return the titles of the related records joined with ``", "``."""
        titles = await asyncio.gather(*(self._relation_title(ref.id) for ref in relations))
        return ", ".join(titles)

    async def _relation_title(self, record_id: str) -> str:
        title = await self.resolve_title(record_id)
        return NO_TITLE if title is None else title

    async def resolve_title(self, record_id: str) -> Optional[str]:
        """Fetch the title text of a record, or ``None`` when it has none.

        The record is fetched first; the value of its first title-typed
        property is then fetched separately and the plain text of the first
        fragment is returned.
        """
        record = await self._source.fetch_record_metadata(record_id)
        title_prop = record.title_property()
        if title_prop is None:
            return None
        items = await self._source.fetch_property_value(record.id, title_prop.id)
        return items.first_title()
