"""
Shared base models for persisted records.

Records are stored as flat keyed documents with camelCase keys; Python code
works with the snake_case attribute names.

Timestamps are always timezone-aware UTC. Epoch numbers (as read back from
SQLite) and ISO strings both parse into ``datetime``; a value without an
offset is taken to be UTC.
"""

from datetime import UTC, datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class DocumentModel(BaseModel):
    """A model that round-trips through the document store."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("*", mode="after")
    @classmethod
    def ensure_utc(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return as_utc(value)
        return value

    def to_document(self) -> dict[str, Any]:
        """Serialize to a store document (camelCase keys, no ``id``)."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"id"})

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Self:
        """Build a model from a store document and its key."""
        return cls.model_validate({**data, "id": doc_id})


class Money(BaseModel):
    """An amount in a single currency."""

    amount: float = 0.0
    currency: str = "INR"

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(amount=0.0, currency=currency)
