"""Shared Redis client."""

import redis

from machine_registry.config import settings

# Connection is opened lazily on first command
redis_client: redis.Redis = redis.from_url(settings.redis_url)  # type: ignore[no-untyped-call]
