"""Typed Notion property values.

Every property tag the formatter understands has its own model with a
``Literal`` type tag.  Any other tag is parsed into :class:`UnknownProperty`
so the set of variants stays closed.
"""

from typing import Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel


class RichTextFragment(BaseModel):
    plain_text: str = ""


class SelectOption(BaseModel):
    name: str = ""


class PersonRef(BaseModel):
    id: str = ""
    name: Optional[str] = None


class DateValue(BaseModel):
    start: str = ""
    end: Optional[str] = None
    time_zone: Optional[str] = None


class RelationRef(BaseModel):
    id: str


class VerificationValue(BaseModel):
    state: str = ""


class _PropertyBase(BaseModel):
    id: str = ""


class TitleProperty(_PropertyBase):
    type: Literal["title"]
    title: List[RichTextFragment] = []


class RichTextProperty(_PropertyBase):
    type: Literal["rich_text"]
    rich_text: List[RichTextFragment] = []


class SelectProperty(_PropertyBase):
    type: Literal["select"]
    select: Optional[SelectOption] = None


class MultiSelectProperty(_PropertyBase):
    type: Literal["multi_select"]
    multi_select: List[SelectOption] = []


class StatusProperty(_PropertyBase):
    type: Literal["status"]
    status: Optional[SelectOption] = None


class EmailProperty(_PropertyBase):
    type: Literal["email"]
    email: Optional[str] = None


class PhoneNumberProperty(_PropertyBase):
    type: Literal["phone_number"]
    phone_number: Optional[str] = None


class UrlProperty(_PropertyBase):
    type: Literal["url"]
    url: Optional[str] = None


class DateProperty(_PropertyBase):
    type: Literal["date"]
    date: Optional[DateValue] = None


class RelationProperty(_PropertyBase):
    type: Literal["relation"]
    relation: List[RelationRef] = []


class PeopleProperty(_PropertyBase):
    type: Literal["people"]
    people: List[PersonRef] = []


class CheckboxProperty(_PropertyBase):
    type: Literal["checkbox"]
    checkbox: bool = False


class NumberProperty(_PropertyBase):
    type: Literal["number"]
    number: Optional[float] = None


class CreatedTimeProperty(_PropertyBase):
    type: Literal["created_time"]
    created_time: str = ""


class LastEditedTimeProperty(_PropertyBase):
    type: Literal["last_edited_time"]
    last_edited_time: str = ""


class CreatedByProperty(_PropertyBase):
    type: Literal["created_by"]
    created_by: Optional[PersonRef] = None


class LastEditedByProperty(_PropertyBase):
    type: Literal["last_edited_by"]
    last_edited_by: Optional[PersonRef] = None


class VerificationProperty(_PropertyBase):
    type: Literal["verification"]
    verification: Optional[VerificationValue] = None


class UnknownProperty(_PropertyBase):
    type: str = ""


Property = Union[
    TitleProperty,
    RichTextProperty,
    SelectProperty,
    MultiSelectProperty,
    StatusProperty,
    EmailProperty,
    PhoneNumberProperty,
    UrlProperty,
    DateProperty,
    RelationProperty,
    PeopleProperty,
    CheckboxProperty,
    NumberProperty,
    CreatedTimeProperty,
    LastEditedTimeProperty,
    CreatedByProperty,
    LastEditedByProperty,
    VerificationProperty,
    UnknownProperty,
]

PROPERTY_MODELS: Dict[str, Type[_PropertyBase]] = {
    "title": TitleProperty,
    "rich_text": RichTextProperty,
    "select": SelectProperty,
    "multi_select": MultiSelectProperty,
    "status": StatusProperty,
    "email": EmailProperty,
    "phone_number": PhoneNumberProperty,
    "url": UrlProperty,
    "date": DateProperty,
    "relation": RelationProperty,
    "people": PeopleProperty,
    "checkbox": CheckboxProperty,
    "number": NumberProperty,
    "created_time": CreatedTimeProperty,
    "last_edited_time": LastEditedTimeProperty,
    "created_by": CreatedByProperty,
    "last_edited_by": LastEditedByProperty,
    "verification": VerificationProperty,
}


def parse_property(data) -> Property:
    """Validate a raw property payload into the model matching its ``type`` tag.

    Raises:
        pydantic.ValidationError: if the payload does not fit its variant.
    """
    if isinstance(data, _PropertyBase):
        return data
    model = PROPERTY_MODELS.get(data.get("type"), UnknownProperty)
    return model.model_validate(data)
