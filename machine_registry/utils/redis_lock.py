"""Redis-based single-flight lock."""

from collections.abc import Generator
from contextlib import contextmanager

import redis

from machine_registry.utils.redis import redis_client


class LockUnavailable(Exception):
    """Lock is held by someone else."""


@contextmanager
def RedisLock(
    key: str,
    ttl: int = 60,
    *,
    client: redis.Redis | None = None,
) -> Generator[None, None, None]:
    """Hold ``key`` for the duration of the block using Redis SET NX with a TTL.

    Raises LockUnavailable instead of entering the block when the key is
    already taken. The TTL bounds how long a crashed holder can block others.

        try:
            with RedisLock(f"sequence-reformat:{config_id}", ttl=600):
                run_reformat()
        except LockUnavailable:
            logger.info("Reformat already running")

    Args:
        key: Lock name (stored as "RedisLock:<key>").
        ttl: Seconds until the lock expires on its own.
        client: Redis client, defaults to the shared one.
    """
    client = client or redis_client
    full_key = f"RedisLock:{key}"
    if not client.set(full_key, "1", nx=True, ex=ttl):
        raise LockUnavailable(f"Could not acquire lock: {full_key}")

    try:
        yield
    finally:
        client.delete(full_key)
