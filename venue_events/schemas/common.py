"""
Shared schema plumbing: camelCase wire names and money serialization.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Decimal internally, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiModel(BaseModel):
    """Immutable model that reads and writes the API's camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_payload(self) -> dict:
        """Serialize to a JSON-ready request body, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps from the API as UTC so they compare with aware clocks."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
