"""Per-user generation quotas backed by Redis."""

from datetime import datetime

import redis

from backend.app.db.context import RequestContext
from backend.app.db.repositories import RetryAfter


def make_rate_limit_key(ctx: RequestContext, bucket: str) -> str:
    """Quota key for one caller in one bucket, e.g. "document_generation:<user_id>"."""
    return f"{bucket}:{ctx.user_id}"


class RedisRateLimiter:
    """Fixed-window limiter shared by all API workers.

    Counts live under one Redis key per window, so a key is never reused
    across windows and stale keys simply expire.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        max_requests: int,
        window_seconds: int = 60,
        prefix: str = "ratelimit",
    ) -> None:
        self._redis = redis_client
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._prefix = prefix

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Count this request and report whether it is over quota.

        Args:
            key: Rate limit key from make_rate_limit_key
            now: Current timestamp

        Returns:
            RetryAfter (seconds until the window closes) if over quota, else None
        """
        window = int(now.timestamp()) // self._window_seconds
        redis_key = f"{self._prefix}:{key}:{window}"

        pipe = self._redis.pipeline()
        pipe.incr(redis_key)
        pipe.expire(redis_key, self._window_seconds)
        count, _ = pipe.execute()

        if count <= self._max_requests:
            return None

        window_end = (window + 1) * self._window_seconds
        return RetryAfter(seconds=max(1, window_end - int(now.timestamp())))
