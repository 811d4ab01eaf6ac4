"""Category database model.

Categories form a two-level hierarchy (category -> subcategory). Hierarchy
management lives outside this service; sequence numbering only reads
categories by id to resolve their slugs.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey
from sqlmodel import Field, SQLModel

from machine_registry.models.base import new_ulid, utc_now
from machine_registry.models.types import ULIDType


class Category(SQLModel, table=True):
    """Machine category or subcategory."""

    __tablename__ = "categories"

    id: str = Field(
        default_factory=new_ulid,
        max_length=26,
        sa_column=Column(ULIDType, primary_key=True),
    )
    name: str = Field(max_length=100)
    slug: str = Field(max_length=50, unique=True, index=True)
    parent_id: str | None = Field(
        default=None,
        sa_column=Column(ULIDType, ForeignKey("categories.id"), index=True, nullable=True),
    )
    level: int = 0  # 0 = top-level category, 1 = subcategory
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False))
