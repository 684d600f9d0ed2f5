"""Models package - re-exports for convenience."""

from backend.app.models.branding import (
    BrandingProfile,
    BrandingUpdate,
    ResolvedBranding,
    merge_branding,
)
from backend.app.models.common import (
    DOCX_CONTENT_TYPE,
    BrandingOwnerKind,
    DocumentType,
    normalize_hex_color,
)
from backend.app.models.documents import (
    DocumentHistoryEntry,
    DocumentRequest,
    GenerationResult,
    SectionSpec,
    VersionAssignment,
)

__all__ = [
    # Common
    "DOCX_CONTENT_TYPE",
    "BrandingOwnerKind",
    "DocumentType",
    "normalize_hex_color",
    # Branding
    "BrandingProfile",
    "BrandingUpdate",
    "ResolvedBranding",
    "merge_branding",
    # Documents
    "DocumentRequest",
    "SectionSpec",
    "DocumentHistoryEntry",
    "VersionAssignment",
    "GenerationResult",
]
