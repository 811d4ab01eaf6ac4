"""Background reformatting of machine identifiers after a template change."""

import asyncio

import dramatiq
import structlog

from machine_registry.config import settings
from machine_registry.services.exceptions import ServiceError
from machine_registry.services.sequences.config_service import SequenceConfigService
from machine_registry.services.sequences.reformat_service import ReformatService
from machine_registry.tasks.task_db import task_db_session
from machine_registry.utils.redis_lock import LockUnavailable, RedisLock

logger = structlog.get_logger(__name__)


def reformat_lock_key(config_id: str) -> str:
    return f"sequence-reformat:{config_id}"


@dramatiq.actor(max_retries=5, min_backoff=5000, max_backoff=60000)
def reformat_identifiers(config_id: str, old_template: str) -> None:
    """Rewrite identifiers of a config's machines from ``old_template`` to its current template.

    Only one reformat per config runs at a time. If another one holds the
    lock the message is retried later, so consecutive template changes are
    applied in order rather than dropped.
    """
    try:
        with RedisLock(reformat_lock_key(config_id), ttl=settings.reformat_lock_ttl):
            asyncio.run(_reformat_identifiers_async(config_id, old_template))
    except LockUnavailable:
        logger.info("Reformat already running for config, will retry", config_id=config_id)
        raise


async def _reformat_identifiers_async(config_id: str, old_template: str) -> None:
    """Async implementation of reformat_identifiers."""
    logger.info("Starting identifier reformat", config_id=config_id, old_template=old_template)

    async with task_db_session() as session:
        try:
            config = await SequenceConfigService(session).get(config_id)
            report = await ReformatService(session).reformat(config, old_template)
        except ServiceError as e:
            # Config deleted or template invalid: retrying will not help
            logger.error("Identifier reformat failed", config_id=config_id, code=e.code, error=e.message)
            return

    logger.info(
        "Completed identifier reformat",
        config_id=config_id,
        updated=report.updated,
        unchanged=report.unchanged,
        undecodable=report.undecodable,
        failed=report.failed,
        total=report.total,
    )
