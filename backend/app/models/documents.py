"""Document generation domain models."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.models.branding import BrandingProfile
from backend.app.models.common import DocumentType, normalize_hex_color


class SectionSpec(BaseModel):
    """One titled, leveled block of caller-supplied content."""

    title: str = Field(..., min_length=1)
    content: str = ""
    level: int | None = Field(1, description="Heading level; 2 and 3 are sub-levels")

    @field_validator("title")
    @classmethod
    def validate_title_not_blank(cls, v: str) -> str:
        """Reject whitespace-only titles."""
        if not v.strip():
            raise ValueError("section title must not be blank")
        return v


class DocumentRequest(BaseModel):
    """Generation request for one client document."""

    model_config = ConfigDict(populate_by_name=True)

    client_id: UUID = Field(..., alias="clientId")
    title: str = Field(..., min_length=1)
    sections: list[SectionSpec] = Field(default_factory=list)
    primary_color: str | None = Field(None, alias="primaryColor")
    secondary_color: str | None = Field(None, alias="secondaryColor")
    logo: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title_not_blank(cls, v: str) -> str:
        """Reject whitespace-only titles."""
        if not v.strip():
            raise ValueError("title must not be blank")
        return v

    @field_validator("primary_color", "secondary_color")
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        """Explicit colors must be valid hex."""
        if v is None:
            return None
        return normalize_hex_color(v)

    def branding_override(self) -> BrandingProfile:
        """Explicit branding carried by the request."""
        return BrandingProfile(
            logo=self.logo,
            primary_color=self.primary_color,
            secondary_color=self.secondary_color,
        )


class DocumentHistoryEntry(BaseModel):
    """One generated document in a client's version history."""

    name: str
    type: DocumentType = DocumentType.docx
    storage_ref: str | None = None
    created_at: datetime
    version: int | None = Field(None, ge=1)
    content_snippet: str | None = None


class VersionAssignment(BaseModel):
    """Output of the version namer."""

    version: int = Field(..., ge=1)
    display_title: str
    filename: str


class GenerationResult(BaseModel):
    """Structured outcome returned to the tool-calling layer."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    download_ref: str | None = Field(None, alias="downloadRef")
    filename: str | None = None
    version: int | None = None
    message: str | None = None
    error: str | None = None
    error_kind: Literal[
        "input_validation", "client_not_found", "encoding", "persistence"
    ] | None = Field(None, alias="errorKind")

    def to_payload(self) -> dict[str, object]:
        """Wire form: camelCase keys, unset fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)
