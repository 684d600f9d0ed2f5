"""Common types and helpers shared across all models."""

import re
from datetime import datetime, timezone
from enum import Enum

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class BrandingOwnerKind(str, Enum):
    """Entity a branding profile belongs to."""

    user = "user"
    client = "client"


class DocumentType(str, Enum):
    """Category tag stored on history entries."""

    docx = "docx"
    pdf = "pdf"
    text = "text"


def normalize_hex_color(value: str) -> str:
    """Normalize a hex color to "#RRGGBB" (uppercase).

    Accepts 3 or 6 hex digits with or without a leading "#".

    Raises:
        ValueError: If value is not a hex color
    """
    match = _HEX_COLOR_RE.match(value.strip())
    if match is None:
        raise ValueError(f"invalid hex color: {value!r}")

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return f"#{digits.upper()}"
