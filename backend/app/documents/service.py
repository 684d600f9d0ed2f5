"""Business-plan generation service.

Single entry point used by both the HTTP route and the agent tool-calling
layer. Steps run strictly in sequence for one request:

    validate -> client lookup -> branding read -> resolve
    -> history snapshot -> next version -> assemble -> encode
    -> persist artifact -> append history

The history snapshot is not locked: two concurrent requests for the same
client and title can both compute the same version number.
"""

import logging
import time
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import ValidationError

from backend.app.config import Settings, get_settings
from backend.app.db.context import RequestContext
from backend.app.db.repositories import (
    ArtifactStore,
    BrandingOwner,
    BrandingRepository,
    ClientRecord,
    ClientRepository,
    DocumentHistoryRepository,
)
from backend.app.documents.assembler import assemble_sections
from backend.app.documents.branding import load_default_logo, resolve_branding
from backend.app.documents.encoder import encode_document
from backend.app.documents.errors import (
    ClientNotFoundError,
    DocumentGenerationError,
    InputValidationError,
    PersistenceError,
)
from backend.app.documents.versioning import next_version
from backend.app.models.branding import BrandingProfile
from backend.app.models.common import (
    DOCX_CONTENT_TYPE,
    BrandingOwnerKind,
    DocumentType,
    utcnow,
)
from backend.app.models.documents import DocumentHistoryEntry, DocumentRequest, GenerationResult
from backend.app.utils.logging import StructuredGenerationLogger
from backend.app.utils.metrics import PrometheusGenerationMetrics

logger = logging.getLogger(__name__)

_generation_logger = StructuredGenerationLogger()
_metrics = PrometheusGenerationMetrics()

T = TypeVar("T")


@dataclass(frozen=True)
class DocumentStores:
    """Storage collaborators needed for one generation request."""

    clients: ClientRepository
    branding: BrandingRepository
    history: DocumentHistoryRepository
    artifacts: ArtifactStore


def parse_request(payload: Mapping[str, Any] | DocumentRequest) -> DocumentRequest:
    """Validate a raw generation payload.

    Raises:
        InputValidationError: With a readable summary of every failed field
    """
    if isinstance(payload, DocumentRequest):
        return payload

    try:
        return DocumentRequest.model_validate(payload)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InputValidationError(f"Invalid document request: {problems}") from e


def build_content_snippet(request: DocumentRequest, max_chars: int) -> str | None:
    """Short indexable text for the history entry."""
    parts = [request.title]
    for section in request.sections:
        parts.append(section.title)
        parts.append(section.content)

    text = " ".join(" ".join(parts).split())
    if not text or max_chars <= 0:
        return None
    return text[:max_chars]


async def _storage_call(operation: str, call: Awaitable[T]) -> T:
    """Await a storage operation, converting failures to PersistenceError."""
    try:
        return await call
    except Exception as e:
        logger.exception("Storage operation failed: %s", operation)
        raise PersistenceError(f"{operation} failed: {type(e).__name__}") from e


async def load_stored_branding(
    branding: BrandingRepository, client: ClientRecord
) -> BrandingProfile | None:
    """Client branding if any field is set, otherwise the owning user's."""
    client_profile = await branding.get_branding(
        BrandingOwner(kind=BrandingOwnerKind.client, owner_id=client.client_id)
    )
    if client_profile is not None and not client_profile.is_empty():
        return client_profile

    return await branding.get_branding(
        BrandingOwner(kind=BrandingOwnerKind.user, owner_id=client.user_id)
    )


async def generate_document(
    payload: Mapping[str, Any] | DocumentRequest,
    *,
    ctx: RequestContext,
    stores: DocumentStores,
    settings: Settings | None = None,
) -> GenerationResult:
    """Generate, persist and record one versioned business-plan document.

    Never raises across the boundary: every failure is returned as
    `GenerationResult(success=False, error=...)`.

    Args:
        payload: Raw request (camelCase or snake_case keys) or a DocumentRequest
        ctx: Caller identity; non-admins may only use their own clients
        stores: Storage collaborators
        settings: Settings override (defaults to cached settings)

    Returns:
        GenerationResult with download reference, filename and version
    """
    settings = settings or get_settings()
    start = time.perf_counter()
    request: DocumentRequest | None = None

    try:
        request = parse_request(payload)

        client = await _storage_call("client lookup", stores.clients.get_client(request.client_id))
        if client is None or (not ctx.is_admin and client.user_id != ctx.user_id):
            raise ClientNotFoundError(f"client {request.client_id} not visible to caller")

        stored = await _storage_call("branding read", load_stored_branding(stores.branding, client))
        resolved = resolve_branding(
            request.branding_override(),
            stored,
            load_default_logo(settings.default_logo_path),
            default_primary=settings.default_primary_color,
            default_secondary=settings.default_secondary_color,
        )

        snapshot = await _storage_call("history read", stores.history.list_history(client.client_id))
        assignment = next_version(snapshot, request.title)

        blocks = assemble_sections(assignment.display_title, request.sections)
        data = encode_document(blocks, resolved)

        storage_ref = await _storage_call(
            "artifact write",
            stores.artifacts.persist(data, assignment.filename, DOCX_CONTENT_TYPE),
        )

        # An artifact without a history entry is accepted if this append fails
        entry = DocumentHistoryEntry(
            name=assignment.display_title,
            type=DocumentType.docx,
            storage_ref=storage_ref,
            created_at=utcnow(),
            version=assignment.version,
            content_snippet=build_content_snippet(request, settings.history_snippet_chars),
        )
        await _storage_call("history append", stores.history.append_history(client.client_id, entry))

    except DocumentGenerationError as e:
        latency_ms = (time.perf_counter() - start) * 1000
        _metrics.record_outcome(e.error_kind, latency_ms)
        _generation_logger.log_outcome(
            client_id=request.client_id if request else None,
            title=request.title if request else None,
            outcome=e.error_kind,
            latency_ms=latency_ms,
            error_reason=str(e),
        )
        return GenerationResult(success=False, error=e.public_message, error_kind=e.error_kind)

    latency_ms = (time.perf_counter() - start) * 1000
    _metrics.record_outcome("success", latency_ms)
    _generation_logger.log_outcome(
        client_id=request.client_id,
        title=request.title,
        outcome="success",
        latency_ms=latency_ms,
        version=assignment.version,
        storage_ref=storage_ref,
    )

    return GenerationResult(
        success=True,
        download_ref=storage_ref,
        filename=assignment.filename,
        version=assignment.version,
        message=f"Generated '{assignment.display_title}'",
    )
