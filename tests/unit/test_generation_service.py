"""Test the generation service end to end over in-memory stores."""

import io
import uuid
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from docx import Document
from docx.shared import RGBColor

from backend.app.config import Settings
from backend.app.db.context import RequestContext
from backend.app.db.inmemory import InMemoryArtifactStore, InMemoryDocumentHistoryRepository
from backend.app.db.repositories import BrandingOwner, ClientRecord
from backend.app.documents.errors import InputValidationError
from backend.app.documents.service import (
    DocumentStores,
    build_content_snippet,
    generate_document,
    parse_request,
)
from backend.app.models.branding import BrandingUpdate
from backend.app.models.common import DOCX_CONTENT_TYPE, BrandingOwnerKind
from backend.app.models.documents import (
    DocumentHistoryEntry,
    DocumentRequest,
    GenerationResult,
    SectionSpec,
)


class SpyStore:
    """Records every storage call; used to prove nothing was touched."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def __getattr__(self, name: str) -> Any:
        async def _record(*args: Any, **kwargs: Any) -> None:
            self.calls.append(name)
            return None

        return _record


class FailingArtifactStore(InMemoryArtifactStore):
    """Artifact store whose writes always fail."""

    async def persist(self, data: bytes, filename: str, content_type: str) -> str:
        raise RuntimeError("disk full")


class FailingHistoryRepository(InMemoryDocumentHistoryRepository):
    """History repository whose appends always fail."""

    async def append_history(self, client_id: uuid.UUID, entry: DocumentHistoryEntry) -> None:
        raise RuntimeError("connection lost")


@pytest.fixture
def settings() -> Settings:
    """Settings with the bundled logo."""
    return Settings()


@pytest_asyncio.fixture
async def client(memory_stores: DocumentStores, owner_id: uuid.UUID) -> ClientRecord:
    """Client owned by owner_id."""
    return await memory_stores.clients.create_client(owner_id, "Acme")


def _payload(client: ClientRecord, title: str = "Acme Q1", **extra: Any) -> dict[str, Any]:
    return {
        "clientId": str(client.client_id),
        "title": title,
        "sections": [{"title": "Summary", "content": "We grow.\nFast.", "level": 1}],
        **extra,
    }


@pytest.mark.asyncio
async def test_first_and_second_generation(
    memory_stores: DocumentStores,
    client: ClientRecord,
    admin_ctx: RequestContext,
    settings: Settings,
) -> None:
    """Test "Acme Q1" yields v1 then v2 with matching history entries."""
    first = await generate_document(
        _payload(client), ctx=admin_ctx, stores=memory_stores, settings=settings
    )
    second = await generate_document(
        _payload(client), ctx=admin_ctx, stores=memory_stores, settings=settings
    )

    assert first.success is True
    assert first.version == 1
    assert first.filename == "acme_q1__v1_.docx"
    assert first.message == "Generated 'Acme Q1 (v1)'"
    assert second.version == 2
    assert second.filename == "acme_q1__v2_.docx"

    history = await memory_stores.history.list_history(client.client_id)
    assert [(e.name, e.version) for e in history] == [("Acme Q1 (v1)", 1), ("Acme Q1 (v2)", 2)]
    assert history[1].storage_ref == second.download_ref
    assert history[1].type.value == "docx"


@pytest.mark.asyncio
async def test_three_plan_requests_versions(
    memory_stores: DocumentStores,
    client: ClientRecord,
    admin_ctx: RequestContext,
    settings: Settings,
) -> None:
    """Test three serialized "Plan" requests get versions 1, 2, 3."""
    versions = []
    for _ in range(3):
        result = await generate_document(
            _payload(client, "Plan"), ctx=admin_ctx, stores=memory_stores, settings=settings
        )
        versions.append(result.version)

    assert versions == [1, 2, 3]


@pytest.mark.asyncio
async def test_long_title_is_accepted(
    memory_stores: DocumentStores,
    client: ClientRecord,
    admin_ctx: RequestContext,
    settings: Settings,
) -> None:
    """Test titles have no upper length bound."""
    title = "P" * 201

    result = await generate_document(
        _payload(client, title), ctx=admin_ctx, stores=memory_stores, settings=settings
    )

    assert result.success is True
    assert result.version == 1


@pytest.mark.asyncio
async def test_undecodable_override_logo_uses_default_logo(
    memory_stores: DocumentStores,
    client: ClientRecord,
    admin_ctx: RequestContext,
    settings: Settings,
) -> None:
    """Test a malformed request logo still yields the bundled logo."""
    result = await generate_document(
        _payload(client, logo="not base64!!"),
        ctx=admin_ctx,
        stores=memory_stores,
        settings=settings,
    )

    assert result.success is True
    assert result.download_ref is not None
    artifact = await memory_stores.artifacts.fetch(result.download_ref)
    assert artifact is not None
    assert len(Document(io.BytesIO(artifact.data)).inline_shapes) == 1


@pytest.mark.asyncio
async def test_artifact_is_retrievable_docx(
    memory_stores: DocumentStores,
    client: ClientRecord,
    admin_ctx: RequestContext,
    settings: Settings,
) -> None:
    """Test the stored artifact is a DOCX titled with the versioned title."""
    result = await generate_document(
        _payload(client), ctx=admin_ctx, stores=memory_stores, settings=settings
    )

    assert result.download_ref is not None
    artifact = await memory_stores.artifacts.fetch(result.download_ref)
    assert artifact is not None
    assert artifact.content_type == DOCX_CONTENT_TYPE
    assert artifact.filename == "acme_q1__v1_.docx"

    doc = Document(io.BytesIO(artifact.data))
    titles = [p.text for p in doc.paragraphs if p.style.name == "Title"]
    assert titles == ["Acme Q1 (v1)"]
    # Bundled default logo
    assert len(doc.inline_shapes) == 1


@pytest.mark.asyncio
async def test_invalid_color_rejected_before_storage_access(
    admin_ctx: RequestContext, settings: Settings
) -> None:
    """Test "#ZZZZZZ" fails validation without touching any store."""
    spy = SpyStore()
    stores = DocumentStores(clients=spy, branding=spy, history=spy, artifacts=spy)  # type: ignore[arg-type]

    result = await generate_document(
        {"clientId": str(uuid.uuid4()), "title": "Plan", "primaryColor": "#ZZZZZZ"},
        ctx=admin_ctx,
        stores=stores,
        settings=settings,
    )

    assert result.success is False
    assert result.error_kind == "input_validation"
    assert result.error is not None
    assert "primaryColor" in result.error
    assert spy.calls == []


@pytest.mark.asyncio
async def test_blank_title_rejected(
    admin_ctx: RequestContext, memory_stores: DocumentStores, settings: Settings
) -> None:
    """Test a whitespace-only title is an input validation failure."""
    result = await generate_document(
        {"clientId": str(uuid.uuid4()), "title": "   "},
        ctx=admin_ctx,
        stores=memory_stores,
        settings=settings,
    )

    assert result.success is False
    assert result.error_kind == "input_validation"


@pytest.mark.asyncio
async def test_unknown_client(
    admin_ctx: RequestContext, memory_stores: DocumentStores, settings: Settings
) -> None:
    """Test an unknown client id returns client_not_found."""
    result = await generate_document(
        {"clientId": str(uuid.uuid4()), "title": "Plan"},
        ctx=admin_ctx,
        stores=memory_stores,
        settings=settings,
    )

    assert result.success is False
    assert result.error_kind == "client_not_found"
    assert result.error == "Client not found"


@pytest.mark.asyncio
async def test_other_users_client_not_visible(
    memory_stores: DocumentStores, client: ClientRecord, settings: Settings
) -> None:
    """Test non-admins cannot generate for someone else's client."""
    stranger = RequestContext(user_id=uuid.uuid4(), is_admin=False)

    result = await generate_document(
        _payload(client), ctx=stranger, stores=memory_stores, settings=settings
    )

    assert result.error_kind == "client_not_found"
    assert await memory_stores.history.list_history(client.client_id) == []


@pytest.mark.asyncio
async def test_owner_may_generate_without_admin(
    memory_stores: DocumentStores, client: ClientRecord, owner_id: uuid.UUID, settings: Settings
) -> None:
    """Test a non-admin owner can generate for their own client."""
    ctx = RequestContext(user_id=owner_id, is_admin=False)

    result = await generate_document(
        _payload(client), ctx=ctx, stores=memory_stores, settings=settings
    )

    assert result.success is True


@pytest.mark.asyncio
async def test_unreadable_default_logo_still_succeeds(
    memory_stores: DocumentStores, client: ClientRecord, admin_ctx: RequestContext, tmp_path: Path
) -> None:
    """Test a missing default logo yields a document with zero images."""
    settings = Settings(default_logo_path=tmp_path / "missing.png")

    result = await generate_document(
        _payload(client), ctx=admin_ctx, stores=memory_stores, settings=settings
    )

    assert result.success is True
    assert result.download_ref is not None
    artifact = await memory_stores.artifacts.fetch(result.download_ref)
    assert artifact is not None
    assert len(Document(io.BytesIO(artifact.data)).inline_shapes) == 0


@pytest.mark.asyncio
async def test_branding_precedence_in_document(
    memory_stores: DocumentStores,
    client: ClientRecord,
    owner_id: uuid.UUID,
    admin_ctx: RequestContext,
    settings: Settings,
) -> None:
    """Test override beats client branding, client beats user branding."""
    await memory_stores.branding.update_branding(
        BrandingOwner(kind=BrandingOwnerKind.user, owner_id=owner_id),
        BrandingUpdate(primary_color="#000001", secondary_color="#000002"),
    )
    await memory_stores.branding.update_branding(
        BrandingOwner(kind=BrandingOwnerKind.client, owner_id=client.client_id),
        BrandingUpdate(primary_color="#0000AA"),
    )

    result = await generate_document(
        _payload(client, secondaryColor="#00BB00"),
        ctx=admin_ctx,
        stores=memory_stores,
        settings=settings,
    )

    assert result.download_ref is not None
    artifact = await memory_stores.artifacts.fetch(result.download_ref)
    assert artifact is not None
    doc = Document(io.BytesIO(artifact.data))
    assert doc.styles["Heading 1"].font.color.rgb == RGBColor(0x00, 0x00, 0xAA)
    assert doc.styles["Heading 2"].font.color.rgb == RGBColor(0x00, 0xBB, 0x00)


@pytest.mark.asyncio
async def test_user_branding_used_when_client_has_none(
    memory_stores: DocumentStores,
    client: ClientRecord,
    owner_id: uuid.UUID,
    admin_ctx: RequestContext,
    settings: Settings,
) -> None:
    """Test the owning user's branding applies when the client has none."""
    await memory_stores.branding.update_branding(
        BrandingOwner(kind=BrandingOwnerKind.user, owner_id=owner_id),
        BrandingUpdate(primary_color="#123456"),
    )

    result = await generate_document(
        _payload(client), ctx=admin_ctx, stores=memory_stores, settings=settings
    )

    assert result.download_ref is not None
    artifact = await memory_stores.artifacts.fetch(result.download_ref)
    assert artifact is not None
    doc = Document(io.BytesIO(artifact.data))
    assert doc.styles["Heading 1"].font.color.rgb == RGBColor(0x12, 0x34, 0x56)


@pytest.mark.asyncio
async def test_persist_failure_skips_history_append(
    memory_stores: DocumentStores,
    client: ClientRecord,
    admin_ctx: RequestContext,
    settings: Settings,
) -> None:
    """Test a failed artifact write leaves history untouched."""
    stores = DocumentStores(
        clients=memory_stores.clients,
        branding=memory_stores.branding,
        history=memory_stores.history,
        artifacts=FailingArtifactStore(),
    )

    result = await generate_document(
        _payload(client), ctx=admin_ctx, stores=stores, settings=settings
    )

    assert result.success is False
    assert result.error_kind == "persistence"
    assert result.error == "Failed to save document"
    assert "disk full" not in (result.error or "")
    assert await memory_stores.history.list_history(client.client_id) == []


@pytest.mark.asyncio
async def test_history_append_failure_leaves_orphan_artifact(
    memory_stores: DocumentStores,
    client: ClientRecord,
    admin_ctx: RequestContext,
    settings: Settings,
) -> None:
    """Test an append failure after a successful write is reported, not rolled back."""
    artifacts = InMemoryArtifactStore()
    stores = DocumentStores(
        clients=memory_stores.clients,
        branding=memory_stores.branding,
        history=FailingHistoryRepository(),
        artifacts=artifacts,
    )

    result = await generate_document(
        _payload(client), ctx=admin_ctx, stores=stores, settings=settings
    )

    assert result.success is False
    assert result.error_kind == "persistence"
    assert len(artifacts._artifacts) == 1


def test_parse_request_reports_fields() -> None:
    """Test validation errors list the failing locations."""
    with pytest.raises(InputValidationError) as exc_info:
        parse_request({"title": "Plan", "sections": [{"title": ""}]})

    message = exc_info.value.public_message
    assert message.startswith("Invalid document request:")
    assert "clientId" in message
    assert "sections.0.title" in message


def test_parse_request_passes_models_through() -> None:
    """Test an already-built request is returned as is."""
    request = DocumentRequest(client_id=uuid.uuid4(), title="Plan")

    assert parse_request(request) is request


def test_build_content_snippet_collapses_and_truncates() -> None:
    """Test the snippet is whitespace-collapsed and capped."""
    request = DocumentRequest(
        client_id=uuid.uuid4(),
        title="Plan",
        sections=[SectionSpec(title="Intro", content="a\n\n  b   c")],
    )

    assert build_content_snippet(request, 500) == "Plan Intro a b c"
    assert build_content_snippet(request, 6) == "Plan I"
    assert build_content_snippet(request, 0) is None


def test_result_payload_uses_camel_case() -> None:
    """Test the wire form of a success result."""
    payload = GenerationResult(
        success=True, download_ref="ref", filename="plan__v1_.docx", version=1, message="ok"
    ).to_payload()

    assert payload == {
        "success": True,
        "downloadRef": "ref",
        "filename": "plan__v1_.docx",
        "version": 1,
        "message": "ok",
    }
