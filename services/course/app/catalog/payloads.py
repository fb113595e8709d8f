"""Per-type content payload models.

``ContentItem.data`` is free-form JSON in the database; writes are checked
against the model registered for the item's ``content_type``. Unknown keys
are kept so clients can attach presentation hints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from app.exceptions import InvalidContentPayloadError
from app.models.enums import ContentType


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow", str_strip_whitespace=True)


class MediaPayload(_Payload):
    """video, pdf and image items point at an external asset."""

    url: str = Field(min_length=1, description="Asset URL (CDN or signed storage URL).")


class TextPayload(_Payload):
    """text and note items carry their body inline."""

    content: str = Field(min_length=1, description="Body text. Markdown supported.")


class McqPayload(_Payload):
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=2, description="At least two answer options.")
    correct_answer: int = Field(ge=0, description="Zero-based index into options.")
    explanation: str | None = None

    @model_validator(mode="after")
    def _answer_in_range(self) -> McqPayload:
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index one of the options")
        return self


class AssignmentPayload(_Payload):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)


PAYLOAD_MODELS: dict[ContentType, type[_Payload]] = {
    ContentType.VIDEO: MediaPayload,
    ContentType.PDF: MediaPayload,
    ContentType.IMAGE: MediaPayload,
    ContentType.TEXT: TextPayload,
    ContentType.NOTE: TextPayload,
    ContentType.MCQ: McqPayload,
    ContentType.ASSIGNMENT: AssignmentPayload,
}


def validate_payload(content_type: ContentType, data: dict | None) -> dict:
    """Return the normalised payload for ``content_type`` or raise InvalidContentPayloadError."""
    model = PAYLOAD_MODELS[content_type]
    try:
        payload = model.model_validate(data or {})
    except ValidationError as exc:
        errors = [
            {"loc": ("data", *err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        raise InvalidContentPayloadError(
            f"Invalid data for {content_type.value} content", errors=errors
        ) from exc
    return payload.model_dump(exclude_none=True)
