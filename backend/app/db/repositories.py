"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from backend.app.models.branding import BrandingProfile, BrandingUpdate
from backend.app.models.common import BrandingOwnerKind
from backend.app.models.documents import DocumentHistoryEntry


@dataclass(frozen=True)
class BrandingOwner:
    """Entity that owns a branding profile."""

    kind: BrandingOwnerKind
    owner_id: UUID


@dataclass
class ClientRecord:
    """Client data record."""

    client_id: UUID
    user_id: UUID
    name: str
    created_at: datetime


@dataclass
class StoredArtifact:
    """Persisted generated file."""

    ref: str
    filename: str
    content_type: str
    data: bytes
    created_at: datetime
    expires_at: datetime | None


class ClientRepository(Protocol):
    """Repository for client lookups."""

    async def create_client(self, user_id: UUID, name: str) -> ClientRecord:
        """Create a client owned by a user.

        Args:
            user_id: Owning user
            name: Client display name

        Returns:
            Created client record
        """
        ...

    async def get_client(self, client_id: UUID) -> ClientRecord | None:
        """Get client by ID.

        Args:
            client_id: Client ID

        Returns:
            Client record or None if not found
        """
        ...


class BrandingRepository(Protocol):
    """Repository for user and client branding."""

    async def get_branding(self, owner: BrandingOwner) -> BrandingProfile | None:
        """Get stored branding.

        Args:
            owner: User or client owning the branding

        Returns:
            Stored profile or None if nothing was ever stored
        """
        ...

    async def update_branding(
        self, owner: BrandingOwner, update: BrandingUpdate
    ) -> BrandingProfile:
        """Merge a partial update into stored branding.

        Fields not supplied are left unchanged, never cleared.

        Args:
            owner: User or client owning the branding
            update: Partial branding

        Returns:
            Branding after the merge
        """
        ...


class DocumentHistoryRepository(Protocol):
    """Repository for per-client document version history."""

    async def list_history(self, client_id: UUID) -> list[DocumentHistoryEntry]:
        """List a client's history entries in insertion order.

        Args:
            client_id: Client ID

        Returns:
            Snapshot of history entries
        """
        ...

    async def append_history(self, client_id: UUID, entry: DocumentHistoryEntry) -> None:
        """Atomically append one entry to a client's history.

        Args:
            client_id: Client ID
            entry: Entry to append
        """
        ...


class ArtifactStore(Protocol):
    """Store for generated binary artifacts."""

    async def persist(self, data: bytes, filename: str, content_type: str) -> str:
        """Write an artifact.

        Args:
            data: File bytes
            filename: Download filename
            content_type: MIME type

        Returns:
            Opaque storage reference
        """
        ...

    async def fetch(self, ref: str) -> StoredArtifact | None:
        """Resolve a storage reference.

        Args:
            ref: Storage reference returned by persist

        Returns:
            Artifact or None if unknown, malformed or expired
        """
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...
