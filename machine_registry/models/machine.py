"""Machine database model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey
from sqlmodel import Field, SQLModel

from machine_registry.models.base import new_ulid, utc_now
from machine_registry.models.types import ULIDType


class Machine(SQLModel, table=True):
    """Machine record.

    ``machine_sequence`` is unique among live machines only (``deleted_at IS NULL``),
    so uniqueness is checked in the service layer rather than by a database index.
    """

    __tablename__ = "machines"

    id: str = Field(
        default_factory=new_ulid,
        max_length=26,
        sa_column=Column(ULIDType, primary_key=True),
    )
    category_id: str = Field(
        sa_column=Column(ULIDType, ForeignKey("categories.id"), index=True, nullable=False),
    )
    subcategory_id: str | None = Field(
        default=None,
        sa_column=Column(ULIDType, ForeignKey("categories.id"), index=True, nullable=True),
    )

    # Display identifier, e.g. "PUMP-CENTRIFUGAL-007"
    machine_sequence: str | None = Field(default=None, max_length=50, index=True)

    location: str = Field(max_length=100)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    deleted_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), index=True))
