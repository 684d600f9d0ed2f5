"""FastAPI dependencies wiring repositories and rate limiting."""

from functools import lru_cache
from typing import Annotated

import redis
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.auth import get_current_context
from backend.app.config import Settings, get_settings
from backend.app.db.context import RequestContext
from backend.app.db.engine import get_session
from backend.app.db.inmemory import InMemoryRateLimiter
from backend.app.db.repositories import ArtifactStore, BrandingRepository
from backend.app.db.sql_repositories import (
    SqlArtifactStore,
    SqlBrandingRepository,
    SqlClientRepository,
    SqlDocumentHistoryRepository,
)
from backend.app.documents.service import DocumentStores
from backend.app.middleware.ratelimit import RateLimitMiddleware, create_default_bucket_map
from backend.app.ratelimit import RedisRateLimiter


def get_document_stores(
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DocumentStores:
    """SQL-backed stores sharing one request session."""
    return DocumentStores(
        clients=SqlClientRepository(session),
        branding=SqlBrandingRepository(session),
        history=SqlDocumentHistoryRepository(session),
        artifacts=SqlArtifactStore(session, ttl_hours=settings.artifact_ttl_hours),
    )


def get_artifact_store(
    stores: Annotated[DocumentStores, Depends(get_document_stores)],
) -> ArtifactStore:
    """Artifact store for the retrieval endpoint."""
    return stores.artifacts


def get_branding_repository(
    stores: Annotated[DocumentStores, Depends(get_document_stores)],
) -> BrandingRepository:
    """Branding repository for the branding endpoints."""
    return stores.branding


@lru_cache
def get_rate_limit_middleware() -> RateLimitMiddleware:
    """Process-wide rate limiter: Redis when configured, in-memory otherwise."""
    settings = get_settings()

    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        limiter = RedisRateLimiter(client, max_requests=settings.document_generations_per_min)
    else:
        limiter = InMemoryRateLimiter(max_requests=settings.document_generations_per_min)  # type: ignore[assignment]

    return RateLimitMiddleware(limiter, create_default_bucket_map())


async def enforce_rate_limit(
    request: Request,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    middleware: Annotated[RateLimitMiddleware, Depends(get_rate_limit_middleware)],
) -> None:
    """Reject the request with 429 when the caller is over quota."""
    allowed, retry_after = middleware.check_rate_limit(request.method, request.url.path, ctx)

    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(retry_after)},
        )
