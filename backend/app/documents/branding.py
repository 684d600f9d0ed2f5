"""Branding resolution - explicit override, stored profile, built-in default."""

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from backend.app.documents.errors import AssetDecodeError
from backend.app.models.branding import BrandingProfile, ResolvedBranding
from backend.app.models.common import normalize_hex_color
from backend.app.utils.metrics import logo_decode_failures_total

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_COLOR = "#1E40AF"
DEFAULT_SECONDARY_COLOR = "#3B82F6"

_EXTENSION_SUBTYPES = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".png": "png",
    ".gif": "gif",
    ".bmp": "bmp",
}

_DATA_URL_RE = re.compile(r"^data:image/(\w+);base64,")
_SUPPORTED_SUBTYPES = {"png", "gif", "bmp"}


@dataclass(frozen=True)
class DecodedLogo:
    """Raw logo bytes plus the image subtype inferred from the data URL."""

    data: bytes
    subtype: str


def decode_logo(logo: str) -> DecodedLogo:
    """Decode a base64 logo, with or without a data-URL prefix.

    Raises:
        AssetDecodeError: If the payload is empty or not valid base64
    """
    subtype = "png"
    match = _DATA_URL_RE.match(logo)
    if match:
        fmt = match.group(1).lower()
        if fmt in ("jpeg", "jpg"):
            subtype = "jpg"
        elif fmt in _SUPPORTED_SUBTYPES:
            subtype = fmt
        logo = logo[match.end():]

    payload = "".join(logo.split())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AssetDecodeError(f"logo is not valid base64: {e}") from e

    if not data:
        raise AssetDecodeError("logo is empty")

    return DecodedLogo(data=data, subtype=subtype)


def load_default_logo(path: Path | None) -> str | None:
    """Read the bundled default logo as a data URL.

    Returns None (and logs) when the asset is missing or unreadable, so the
    document is still produced, just without an image.
    """
    if path is None:
        return None

    try:
        data = path.read_bytes()
    except OSError as e:
        logger.warning(
            "Default logo unavailable, continuing without logo",
            extra={"structured": {"path": str(path), "error": type(e).__name__}},
        )
        return None

    subtype = _EXTENSION_SUBTYPES.get(path.suffix.lower(), "png")
    return f"data:image/{subtype};base64,{base64.b64encode(data).decode('ascii')}"


def _valid_stored_color(value: str | None, field: str) -> str | None:
    """Stored colors that fail validation are skipped, not raised."""
    if value is None:
        return None
    try:
        return normalize_hex_color(value)
    except ValueError:
        logger.warning(
            "Ignoring invalid stored branding color",
            extra={"structured": {"field": field, "value": value}},
        )
        return None


def coerce_stored_profile(raw: dict[str, object] | None) -> BrandingProfile | None:
    """Build a profile from a raw stored record, dropping invalid colors."""
    if raw is None:
        return None

    extra = raw.get("extra") or {}
    try:
        return BrandingProfile(
            logo=raw.get("logo"),
            primary_color=_valid_stored_color(raw.get("primary_color"), "primary_color"),  # type: ignore[arg-type]
            secondary_color=_valid_stored_color(raw.get("secondary_color"), "secondary_color"),  # type: ignore[arg-type]
            extra={str(k): str(v) for k, v in dict(extra).items()},  # type: ignore[call-overload]
        )
    except ValidationError:
        logger.warning("Ignoring malformed stored branding record")
        return None


def _valid_logo(value: str | None, source: str) -> str | None:
    """Logos that do not decode are skipped so the next source can apply."""
    if not value:
        return None
    try:
        decode_logo(value)
    except AssetDecodeError as e:
        logger.warning(
            "Ignoring undecodable branding logo",
            extra={"structured": {"source": source, "error": str(e)}},
        )
        logo_decode_failures_total.labels(reason="invalid_source").inc()
        return None
    return value


def resolve_branding(
    override: BrandingProfile | None,
    stored: BrandingProfile | None,
    default_logo: str | None,
    *,
    default_primary: str = DEFAULT_PRIMARY_COLOR,
    default_secondary: str = DEFAULT_SECONDARY_COLOR,
) -> ResolvedBranding:
    """Resolve each branding field independently.

    Order per field: explicit override, stored profile, built-in default.
    A logo only counts when it decodes; otherwise the next source is tried.
    Never raises for missing or invalid values.

    Args:
        override: Branding supplied with the request (already validated)
        stored: Branding stored for the client or user
        default_logo: Built-in logo as a data URL, or None if unavailable
        default_primary: Fallback heading color
        default_secondary: Fallback subheading color

    Returns:
        ResolvedBranding with both colors set and an optional logo
    """
    override = override or BrandingProfile()
    stored = stored or BrandingProfile()

    return ResolvedBranding(
        logo=(
            _valid_logo(override.logo, "override")
            or _valid_logo(stored.logo, "stored")
            or _valid_logo(default_logo, "default")
        ),
        primary_color=override.primary_color or stored.primary_color or default_primary,
        secondary_color=override.secondary_color or stored.secondary_color or default_secondary,
    )
