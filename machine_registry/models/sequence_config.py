"""Sequence configuration model for generating machine identifiers."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint
from sqlmodel import Field, SQLModel

from machine_registry.models.base import new_ulid, utc_now
from machine_registry.models.types import ULIDType

# One config per (category, subcategory); a NULL subcategory is a single
# category-wide scope, not "any", hence NULLS NOT DISTINCT on PostgreSQL.
SEQUENCE_CONFIG_SCOPE_CONSTRAINT = UniqueConstraint(
    "category_id",
    "subcategory_id",
    name="uq_sequence_config_scope",
    postgresql_nulls_not_distinct=True,
)


class SequenceConfig(SQLModel, table=True):
    """Per-scope counter and rendering template for machine identifiers.

    ``current_sequence`` holds the last number actually issued. It is advanced
    with a single ``UPDATE ... RETURNING`` so the row stays locked until the
    allocating transaction ends.
    """

    __tablename__ = "sequence_configs"
    __table_args__ = (SEQUENCE_CONFIG_SCOPE_CONSTRAINT,)

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

    prefix: str = Field(max_length=10)
    template: str = Field(max_length=100)  # e.g. "{category}-{subcategory}-{sequence}"
    starting_number: int = 1
    current_sequence: int = 0
    is_active: bool = True

    created_by: str | None = Field(default=None, max_length=100)
    updated_by: str | None = Field(default=None, max_length=100)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
