"""Certificate domain Pydantic V2 schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CertificateResponse(BaseModel):
    """Certificate record returned after completion or retrieval."""

    model_config = ConfigDict(from_attributes=True)

    certificate_id: UUID
    certificate_code: str = Field(description="Public certificate identifier, CERT-XXXXXXXXXXXXXXXX.")
    user_id: UUID
    course_id: UUID
    course_title: str = Field(description="Course title at the time of issuance.")
    issued_at: datetime
