"""Dramatiq background tasks package.

Run workers with ``dramatiq machine_registry.tasks``.
"""

from machine_registry.tasks.broker import broker

# Import all tasks to register them with Dramatiq (must be after broker setup)
import machine_registry.tasks.sequences.reformat_identifiers  # noqa: E402, F401

__all__ = ["broker"]
