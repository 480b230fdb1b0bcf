"""Shared pydantic building blocks: camelCase wire names and UTC timestamps."""
from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


def to_utc_naive(value: datetime) -> datetime:
    """Normalize to naive UTC, the form stored in the database"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def format_timestamp(value: datetime) -> str:
    return to_utc_naive(value).isoformat() + "Z"


# Accepts a datetime or an ISO-8601 string; always serialized as ISO UTC
Timestamp = Annotated[
    datetime,
    AfterValidator(to_utc_naive),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase keys, emits camelCase"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )
