"""Dramatiq broker configuration."""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.brokers.stub import StubBroker

from machine_registry.config import settings
from machine_registry.logging import setup_logging

# Configure logging before anything else
setup_logging()

broker: dramatiq.Broker
if settings.dramatiq_broker == "stub":
    # In-process broker, messages are only queued (tests)
    broker = StubBroker()
    broker.emit_after("process_boot")
else:
    broker = RedisBroker(url=settings.redis_url)  # type: ignore[no-untyped-call]

dramatiq.set_broker(broker)
