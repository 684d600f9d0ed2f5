"""Request-to-bucket mapping for rate limiting."""

from datetime import datetime

from backend.app.db.context import RequestContext
from backend.app.db.repositories import RateLimiter
from backend.app.ratelimit import make_rate_limit_key

BucketMap = dict[tuple[str, str], str]


class RateLimitMiddleware:
    """Maps (method, path suffix) to buckets and enforces per-user quotas."""

    def __init__(self, limiter: RateLimiter, bucket_map: BucketMap) -> None:
        """Initialize rate limit middleware.

        Args:
            limiter: Rate limiter implementation
            bucket_map: (HTTP method, path suffix) -> bucket name
        """
        self._limiter = limiter
        self._bucket_map = bucket_map

    def check_rate_limit(
        self, method: str, path: str, ctx: RequestContext, now: datetime | None = None
    ) -> tuple[bool, int]:
        """Check if request is allowed under rate limit.

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        bucket = self.bucket_for(method, path)
        if bucket is None:
            return (True, 0)

        retry_after = self._limiter.check_quota(
            make_rate_limit_key(ctx, bucket), now or datetime.now()
        )
        if retry_after is None:
            return (True, 0)

        return (False, retry_after.seconds)

    def bucket_for(self, method: str, path: str) -> str | None:
        """Bucket for a request, or None if it is not limited."""
        path = path.rstrip("/")
        for (bucket_method, suffix), bucket in self._bucket_map.items():
            if method.upper() == bucket_method and path.endswith(suffix):
                return bucket

        return None


def create_default_bucket_map() -> BucketMap:
    """Only document generation is limited; reads are free."""
    return {
        ("POST", "/documents"): "document_generation",
    }
