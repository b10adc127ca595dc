from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator, model_validator

from app.models.property import Property, RichTextFragment, parse_property


class Record(BaseModel):
    """A page (database row) with its properties in stored order."""

    id: str
    object: str = "page"
    properties: Dict[str, Property] = {}

    @field_validator("properties", mode="before")
    @classmethod
    def _parse_properties(cls, value):
        if not isinstance(value, dict):
            raise ValueError("properties must be an object")
        return {name: parse_property(prop) for name, prop in value.items()}

    def title_property(self) -> Optional[Property]:
        """Return the first title-typed property in iteration order."""
        for prop in self.properties.values():
            if prop.type == "title":
                return prop
        return None


class Block(BaseModel):
    id: str
    type: str = ""
    has_children: bool = False
    rich_text: List[RichTextFragment] = []

    @model_validator(mode="before")
    @classmethod
    def _lift_rich_text(cls, data):
        # Inline text lives under the key named by the block's own type,
        # e.g. {"type": "paragraph", "paragraph": {"rich_text": [...]}}.
        if isinstance(data, dict) and "rich_text" not in data:
            payload = data.get(data.get("type") or "")
            if isinstance(payload, dict) and "rich_text" in payload:
                data = {**data, "rich_text": payload["rich_text"]}
        return data

    @property
    def plain_text(self) -> str:
        return "".join(fragment.plain_text for fragment in self.rich_text)


class PropertyItem(BaseModel):
    type: str = ""
    title: Optional[RichTextFragment] = None


class PropertyItemList(BaseModel):
    """Response of the page-property endpoint for list-valued properties."""

    results: List[PropertyItem] = []

    def first_title(self) -> Optional[str]:
        if not self.results or self.results[0].title is None:
            return None
        return self.results[0].title.plain_text
