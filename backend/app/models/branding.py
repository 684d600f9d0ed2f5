"""Branding models - logo and accent colors applied to generated documents."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from backend.app.models.common import normalize_hex_color


class BrandingProfile(BaseModel):
    """Stored or explicitly supplied branding.

    Absent fields are None. Colors are normalized to "#RRGGBB"; invalid
    colors fail validation instead of falling back to a default.
    """

    model_config = ConfigDict(populate_by_name=True)

    logo: str | None = Field(None, description="Base64 image or data:image/<fmt>;base64 URL")
    primary_color: str | None = Field(None, alias="primaryColor")
    secondary_color: str | None = Field(None, alias="secondaryColor")
    extra: dict[str, str] = Field(
        default_factory=dict, description="Open-ended extension fields (e.g. font)"
    )

    @field_validator("primary_color", "secondary_color")
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        """Normalize hex colors."""
        if v is None:
            return None
        return normalize_hex_color(v)

    @field_validator("logo")
    @classmethod
    def validate_logo(cls, v: str | None) -> str | None:
        """Treat blank logos as absent."""
        if v is None or not v.strip():
            return None
        return v.strip()

    def is_empty(self) -> bool:
        """True when no branding field is set."""
        return (
            self.logo is None
            and self.primary_color is None
            and self.secondary_color is None
            and not self.extra
        )


class BrandingUpdate(BrandingProfile):
    """Partial branding write.

    Only fields explicitly present in the payload are applied; see
    `merge_branding`.
    """


class ResolvedBranding(BaseModel):
    """Branding after override/stored/default resolution."""

    logo: str | None = None
    primary_color: str
    secondary_color: str


def merge_branding(current: BrandingProfile | None, update: BrandingUpdate) -> BrandingProfile:
    """Merge a partial update into the current profile.

    Fields not supplied in the update are left unchanged, never cleared.
    Extension keys are merged key by key.
    """
    base = current or BrandingProfile()
    supplied = update.model_fields_set

    return BrandingProfile(
        logo=update.logo if "logo" in supplied and update.logo is not None else base.logo,
        primary_color=(
            update.primary_color
            if "primary_color" in supplied and update.primary_color is not None
            else base.primary_color
        ),
        secondary_color=(
            update.secondary_color
            if "secondary_color" in supplied and update.secondary_color is not None
            else base.secondary_color
        ),
        extra={**base.extra, **update.extra},
    )
