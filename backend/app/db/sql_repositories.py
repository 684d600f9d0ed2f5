"""SQL implementations of repository interfaces."""

import uuid
from datetime import datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import Branding, Client, ClientDocument, GeneratedFile
from backend.app.db.repositories import BrandingOwner, ClientRecord, StoredArtifact
from backend.app.documents.branding import coerce_stored_profile
from backend.app.models.branding import BrandingProfile, BrandingUpdate, merge_branding
from backend.app.models.common import utcnow
from backend.app.models.documents import DocumentHistoryEntry


class SqlClientRepository:
    """SQL implementation of ClientRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_client(self, user_id: uuid.UUID, name: str) -> ClientRecord:
        """Create a client owned by a user."""
        record = ClientRecord(
            client_id=uuid.uuid4(), user_id=user_id, name=name, created_at=utcnow()
        )
        self._session.add(
            Client(
                client_id=record.client_id,
                user_id=record.user_id,
                name=record.name,
                created_at=record.created_at,
            )
        )
        await self._session.commit()

        return record

    async def get_client(self, client_id: uuid.UUID) -> ClientRecord | None:
        """Get client by ID."""
        result = await self._session.execute(select(Client).where(Client.client_id == client_id))
        client = result.scalar_one_or_none()

        if client is None:
            return None

        return ClientRecord(
            client_id=client.client_id,
            user_id=client.user_id,
            name=client.name,
            created_at=client.created_at,
        )


class SqlBrandingRepository:
    """SQL implementation of BrandingRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_row(self, owner: BrandingOwner) -> Branding | None:
        result = await self._session.execute(
            select(Branding).where(
                Branding.owner_kind == owner.kind.value,
                Branding.owner_id == owner.owner_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_profile(row: Branding) -> BrandingProfile | None:
        # Stored values that no longer validate are dropped
        return coerce_stored_profile(
            {
                "logo": row.logo,
                "primary_color": row.primary_color,
                "secondary_color": row.secondary_color,
                "extra": row.extra,
            }
        )

    async def get_branding(self, owner: BrandingOwner) -> BrandingProfile | None:
        """Get stored branding."""
        row = await self._get_row(owner)

        if row is None:
            return None

        return self._to_profile(row)

    async def update_branding(
        self, owner: BrandingOwner, update: BrandingUpdate
    ) -> BrandingProfile:
        """Merge a partial update into stored branding."""
        row = await self._get_row(owner)
        current = self._to_profile(row) if row is not None else None
        merged = merge_branding(current, update)

        if row is None:
            row = Branding(owner_kind=owner.kind.value, owner_id=owner.owner_id)
            self._session.add(row)

        row.logo = merged.logo
        row.primary_color = merged.primary_color
        row.secondary_color = merged.secondary_color
        row.extra = dict(merged.extra)
        row.updated_at = utcnow()

        await self._session.commit()
        return merged


class SqlDocumentHistoryRepository:
    """SQL implementation of DocumentHistoryRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_history(self, client_id: uuid.UUID) -> list[DocumentHistoryEntry]:
        """List a client's history entries in insertion order."""
        result = await self._session.execute(
            select(ClientDocument)
            .where(ClientDocument.client_id == client_id)
            .order_by(ClientDocument.entry_id)
        )

        return [
            DocumentHistoryEntry(
                name=row.name,
                type=row.type,  # type: ignore[arg-type]
                storage_ref=row.storage_ref,
                created_at=row.created_at,
                version=row.version,
                content_snippet=row.content_snippet,
            )
            for row in result.scalars().all()
        ]

    async def append_history(
        self, client_id: uuid.UUID, entry: DocumentHistoryEntry
    ) -> None:
        """Atomically append one entry (single-row insert)."""
        self._session.add(
            ClientDocument(
                client_id=client_id,
                name=entry.name,
                type=entry.type.value,
                storage_ref=entry.storage_ref,
                version=entry.version,
                content_snippet=entry.content_snippet,
                created_at=entry.created_at,
            )
        )
        await self._session.commit()


class SqlArtifactStore:
    """SQL implementation of ArtifactStore."""

    def __init__(self, session: AsyncSession, ttl_hours: int = 0) -> None:
        self._session = session
        self._ttl_hours = ttl_hours

    async def persist(self, data: bytes, filename: str, content_type: str) -> str:
        """Write an artifact and commit before returning its reference."""
        created_at = utcnow()
        expires_at = (
            created_at + timedelta(hours=self._ttl_hours) if self._ttl_hours > 0 else None
        )

        file_id = uuid.uuid4()
        row = GeneratedFile(
            file_id=file_id,
            filename=filename,
            content_type=content_type,
            data=data,
            created_at=created_at,
            expires_at=expires_at,
        )
        self._session.add(row)
        await self._session.commit()

        return str(file_id)

    async def fetch(self, ref: str, now: datetime | None = None) -> StoredArtifact | None:
        """Resolve a storage reference; expired rows are filtered in SQL."""
        try:
            file_id = uuid.UUID(ref)
        except ValueError:
            return None

        if now is None:
            now = utcnow()

        result = await self._session.execute(
            select(GeneratedFile).where(
                GeneratedFile.file_id == file_id,
                or_(GeneratedFile.expires_at.is_(None), GeneratedFile.expires_at > now),
            )
        )
        row = result.scalar_one_or_none()

        if row is None:
            return None

        return StoredArtifact(
            ref=str(row.file_id),
            filename=row.filename,
            content_type=row.content_type,
            data=row.data,
            created_at=row.created_at,
            expires_at=row.expires_at,
        )
