"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-16 09:12:31.204518

"""

from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create categories table (ULID as UUID)
    op.create_table(
        "categories",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("slug", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("parent_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["parent_id"], ["categories.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_categories_slug"), "categories", ["slug"], unique=True)
    op.create_index(op.f("ix_categories_parent_id"), "categories", ["parent_id"], unique=False)

    # Create machines table
    op.create_table(
        "machines",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("category_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("subcategory_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("machine_sequence", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.Column("location", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"]),
        sa.ForeignKeyConstraint(["subcategory_id"], ["categories.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_machines_category_id"), "machines", ["category_id"], unique=False)
    op.create_index(op.f("ix_machines_subcategory_id"), "machines", ["subcategory_id"], unique=False)
    op.create_index(op.f("ix_machines_machine_sequence"), "machines", ["machine_sequence"], unique=False)
    op.create_index(op.f("ix_machines_deleted_at"), "machines", ["deleted_at"], unique=False)

    # Create sequence_configs table
    op.create_table(
        "sequence_configs",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("category_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("subcategory_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("prefix", sqlmodel.sql.sqltypes.AutoString(length=10), nullable=False),
        sa.Column("template", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("starting_number", sa.Integer(), nullable=False),
        sa.Column("current_sequence", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_by", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.Column("updated_by", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"]),
        sa.ForeignKeyConstraint(["subcategory_id"], ["categories.id"]),
        sa.PrimaryKeyConstraint("id"),
        # A NULL subcategory is the single category-wide scope
        sa.UniqueConstraint(
            "category_id",
            "subcategory_id",
            name="uq_sequence_config_scope",
            postgresql_nulls_not_distinct=True,
        ),
    )
    op.create_index(op.f("ix_sequence_configs_category_id"), "sequence_configs", ["category_id"], unique=False)
    op.create_index(op.f("ix_sequence_configs_subcategory_id"), "sequence_configs", ["subcategory_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_sequence_configs_subcategory_id"), table_name="sequence_configs")
    op.drop_index(op.f("ix_sequence_configs_category_id"), table_name="sequence_configs")
    op.drop_table("sequence_configs")

    op.drop_index(op.f("ix_machines_deleted_at"), table_name="machines")
    op.drop_index(op.f("ix_machines_machine_sequence"), table_name="machines")
    op.drop_index(op.f("ix_machines_subcategory_id"), table_name="machines")
    op.drop_index(op.f("ix_machines_category_id"), table_name="machines")
    op.drop_table("machines")

    op.drop_index(op.f("ix_categories_parent_id"), table_name="categories")
    op.drop_index(op.f("ix_categories_slug"), table_name="categories")
    op.drop_table("categories")
