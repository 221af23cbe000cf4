"""Message envelope and validation failure schemas."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class MessageResponse(BaseModel):
    """Top-level response envelope carrying an ordered list of messages."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    messages: list[str] = Field(default_factory=list, alias="Messages")

    def to_wire(self) -> dict[str, list[str]]:
        """Return the body exactly as clients receive it."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class ValidationFailure:
    """Single invalid field as reported by the validator."""

    field: str
    message: str
