"""Pydantic schema for extracted transcripts.

Attributes are snake_case in Python; ``model_dump(by_alias=True)`` produces
the camelCase wire shape (``sourceUrl``, ``messageCount`` …) expected by the
storage layer.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator, model_validator
from pydantic.alias_generators import to_camel

ChatSource = Literal["claude-web", "claude-code", "chatgpt", "generic"]

MessageRole = Literal["user", "assistant", "system"]

# Only "text" and "code" are produced by the HTML extractor; the rest are
# reserved for other transcript producers.
ContentType = Literal["text", "code", "thinking", "artifact", "tool-use", "tool-result", "image"]


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContentSegment(_Model):
    type: ContentType
    content: str
    language: str | None = None
    title: str | None = None
    metadata: dict[str, Any] | None = None


class Message(_Model):
    id: str
    index: NonNegativeInt
    role: MessageRole
    content: list[ContentSegment] = Field(min_length=1)
    timestamp: int | None = None

    @property
    def text(self) -> str:
        """All segment payloads joined by newlines."""
        return "\n".join(segment.content for segment in self.content)


class Participants(_Model):
    user: str
    assistant: str


class Transcript(_Model):
    """Canonical output of one extraction."""

    # Identity
    id: str
    source: ChatSource = "claude-web"
    source_url: str

    # Metadata
    title: str
    created_at: int | None = None
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Stats
    message_count: NonNegativeInt = 0
    word_count: NonNegativeInt = 0

    # Content
    messages: list[Message] = Field(default_factory=list)
    participants: Participants | None = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v or ""

    @model_validator(mode="after")
    def check_message_count(self) -> Transcript:
        if self.message_count != len(self.messages):
            raise ValueError(
                f"message_count={self.message_count} but {len(self.messages)} messages",
            )
        return self

    def to_json_dict(self) -> dict[str, Any]:
        """Return the camelCase JSON-ready representation."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
