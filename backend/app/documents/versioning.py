"""Version naming for regenerated documents."""

import re
from collections.abc import Sequence

from backend.app.models.documents import DocumentHistoryEntry, VersionAssignment

_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")
_VERSION_SUFFIX_RE = re.compile(r"\s*\(v\d+\)$")


def sanitize_filename_stem(value: str) -> str:
    """Replace every non-alphanumeric character with "_" and lowercase.

    Idempotent: sanitizing an already sanitized stem returns it unchanged.
    """
    return _NON_ALNUM_RE.sub("_", value).lower()


def base_title(name: str) -> str:
    """Strip a trailing "(vN)" suffix from a display title."""
    return _VERSION_SUFFIX_RE.sub("", name)


def next_version(
    history: Sequence[DocumentHistoryEntry], requested_title: str
) -> VersionAssignment:
    """Compute the next version for a title against a history snapshot.

    Matching is a plain prefix check of each entry name against the requested
    title, so "Plan" also matches an existing "Plan B (v1)". Entries without
    a version count as version 1.

    Args:
        history: Point-in-time snapshot of the client's document history
        requested_title: Title as supplied by the caller

    Returns:
        Version number, versioned display title and derived .docx filename
    """
    matched = [entry for entry in history if entry.name.startswith(requested_title)]

    if not matched:
        version = 1
    else:
        version = 1 + max(entry.version or 1 for entry in matched)

    display_title = f"{requested_title} (v{version})"
    filename = f"{sanitize_filename_stem(display_title)}.docx"

    return VersionAssignment(version=version, display_title=display_title, filename=filename)
