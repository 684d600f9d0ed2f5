"""In-memory implementations of repository interfaces."""

import uuid
from collections.abc import Callable
from datetime import datetime, timedelta

from backend.app.db.repositories import (
    BrandingOwner,
    ClientRecord,
    RetryAfter,
    StoredArtifact,
)
from backend.app.models.branding import BrandingProfile, BrandingUpdate, merge_branding
from backend.app.models.common import utcnow
from backend.app.models.documents import DocumentHistoryEntry


class InMemoryClientRepository:
    """In-memory implementation of ClientRepository."""

    def __init__(self) -> None:
        self._clients: dict[uuid.UUID, ClientRecord] = {}

    async def create_client(self, user_id: uuid.UUID, name: str) -> ClientRecord:
        """Create a client owned by a user."""
        record = ClientRecord(
            client_id=uuid.uuid4(),
            user_id=user_id,
            name=name,
            created_at=utcnow(),
        )
        self._clients[record.client_id] = record
        return record

    async def get_client(self, client_id: uuid.UUID) -> ClientRecord | None:
        """Get client by ID."""
        return self._clients.get(client_id)


class InMemoryBrandingRepository:
    """In-memory implementation of BrandingRepository."""

    def __init__(self) -> None:
        self._profiles: dict[BrandingOwner, BrandingProfile] = {}

    async def get_branding(self, owner: BrandingOwner) -> BrandingProfile | None:
        """Get stored branding."""
        return self._profiles.get(owner)

    async def update_branding(
        self, owner: BrandingOwner, update: BrandingUpdate
    ) -> BrandingProfile:
        """Merge a partial update into stored branding."""
        merged = merge_branding(self._profiles.get(owner), update)
        self._profiles[owner] = merged
        return merged


class InMemoryDocumentHistoryRepository:
    """In-memory implementation of DocumentHistoryRepository."""

    def __init__(self) -> None:
        self._history: dict[uuid.UUID, list[DocumentHistoryEntry]] = {}

    async def list_history(self, client_id: uuid.UUID) -> list[DocumentHistoryEntry]:
        """List a client's history entries in insertion order."""
        return list(self._history.get(client_id, []))

    async def append_history(
        self, client_id: uuid.UUID, entry: DocumentHistoryEntry
    ) -> None:
        """Atomically append one entry to a client's history."""
        self._history.setdefault(client_id, []).append(entry)


class InMemoryArtifactStore:
    """In-memory implementation of ArtifactStore."""

    def __init__(
        self, ttl_hours: int = 0, clock: Callable[[], datetime] = utcnow
    ) -> None:
        """Initialize artifact store.

        Args:
            ttl_hours: Hours until artifacts expire (0 disables expiry)
            clock: Time source
        """
        self._artifacts: dict[str, StoredArtifact] = {}
        self._ttl_hours = ttl_hours
        self._clock = clock

    async def persist(self, data: bytes, filename: str, content_type: str) -> str:
        """Write an artifact, dropping any that have already expired."""
        ref = str(uuid.uuid4())
        created_at = self._clock()
        self._sweep(created_at)
        expires_at = (
            created_at + timedelta(hours=self._ttl_hours) if self._ttl_hours > 0 else None
        )

        self._artifacts[ref] = StoredArtifact(
            ref=ref,
            filename=filename,
            content_type=content_type,
            data=data,
            created_at=created_at,
            expires_at=expires_at,
        )
        return ref

    def _sweep(self, now: datetime) -> None:
        expired = [
            ref
            for ref, artifact in self._artifacts.items()
            if artifact.expires_at is not None and now >= artifact.expires_at
        ]
        for ref in expired:
            del self._artifacts[ref]

    async def fetch(self, ref: str) -> StoredArtifact | None:
        """Resolve a storage reference."""
        artifact = self._artifacts.get(ref)

        if artifact is None:
            return None

        # Check if expired
        if artifact.expires_at is not None and self._clock() >= artifact.expires_at:
            del self._artifacts[ref]
            return None

        return artifact


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 60) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default 60)
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._windows: dict[str, tuple[datetime, int]] = {}

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        if key not in self._windows:
            self._windows[key] = (now, 1)
            return None

        window_start, count = self._windows[key]
        window_end = window_start + timedelta(seconds=self._window_seconds)

        # Window expired, start a new one
        if now >= window_end:
            self._windows[key] = (now, 1)
            return None

        if count >= self._max_requests:
            seconds_remaining = int((window_end - now).total_seconds())
            return RetryAfter(seconds=max(1, seconds_remaining))

        self._windows[key] = (window_start, count + 1)
        return None
