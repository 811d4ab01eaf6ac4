"""Column types shared by the models."""

from typing import Any
from uuid import UUID

from sqlalchemy import Uuid
from sqlalchemy.types import TypeDecorator
from ulid import ULID


class ULIDType(TypeDecorator[str]):
    """ULID primary/foreign key column.

    Stored as a native UUID on PostgreSQL (CHAR(32) on SQLite), exposed to
    Python as the 26-character ULID string so ids sort by creation time and
    serialize as-is in API responses.
    """

    impl = Uuid
    cache_ok = True

    def process_bind_param(self, value: str | ULID | UUID | None, dialect: Any) -> UUID | None:
        if value is None:
            return None
        if isinstance(value, UUID):
            return value
        if isinstance(value, str):
            value = ULID.from_str(value)
        if not isinstance(value, ULID):
            raise ValueError(f"Cannot store {type(value).__name__} as ULID")
        return value.to_uuid()

    def process_result_value(self, value: UUID | None, dialect: Any) -> str | None:
        return None if value is None else str(ULID.from_uuid(value))
