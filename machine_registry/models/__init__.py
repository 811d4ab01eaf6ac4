"""Database models."""

from sqlmodel import SQLModel

from machine_registry.models.category import Category
from machine_registry.models.machine import Machine
from machine_registry.models.sequence_config import SequenceConfig

__all__ = [
    "SQLModel",
    "Category",
    "Machine",
    "SequenceConfig",
]
