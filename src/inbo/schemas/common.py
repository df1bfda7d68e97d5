# Shared schema base.
#
# The backend is inconsistent about casing: the same field arrives as
# ``isRead`` from one endpoint and ``is_read`` from another. Every model
# accepts both spellings and exposes the snake_case attribute.

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def _either_case(name: str) -> AliasChoices:
    return AliasChoices(to_camel(name), name)


class InboModel(BaseModel):
    """Base for backend payloads.

    Request bodies go out camelCase: ``model.to_payload()``.
    """

    model_config = ConfigDict(
        alias_generator=AliasGenerator(
            validation_alias=_either_case,
            serialization_alias=to_camel,
        ),
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class StatusResponse(InboModel):
    success: bool = True
    message: str | None = None


class Page(InboModel, Generic[T]):
    """DRF-style paginated list."""

    count: int = 0
    next: str | None = None
    previous: str | None = None
    results: list[T] = []
