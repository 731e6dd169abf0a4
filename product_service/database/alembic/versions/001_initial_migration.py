"""Initial catalog schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Root table of the joined-table hierarchy; category is the discriminator
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", sa.DECIMAL(precision=10, scale=2), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("image_url", sa.String(length=512), nullable=True),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.CheckConstraint("price >= 0", name="product_price_non_negative"),
        sa.CheckConstraint("stock >= 0", name="product_stock_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_products_category", "products", ["category"])

    op.create_table(
        "clothes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("brand", sa.String(length=255), nullable=True),
        sa.Column("size", sa.String(length=32), nullable=True),
        sa.Column("color", sa.String(length=64), nullable=True),
        sa.Column("fabric_type", sa.String(length=128), nullable=True),
        sa.ForeignKeyConstraint(["id"], ["products.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "electronics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("brand", sa.String(length=255), nullable=True),
        sa.Column("model", sa.String(length=255), nullable=True),
        sa.Column("warranty_period", sa.String(length=64), nullable=True),
        sa.Column("specifications", sa.String(length=1024), nullable=True),
        sa.ForeignKeyConstraint(["id"], ["products.id"]),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "smartphones",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("operating_system", sa.String(length=64), nullable=True),
        sa.Column("storage_capacity", sa.Integer(), nullable=True),
        sa.Column("ram", sa.Integer(), nullable=True),
        sa.Column("processor", sa.String(length=128), nullable=True),
        sa.Column("screen_size", sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(["id"], ["electronics.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("smartphones")
    op.drop_table("electronics")
    op.drop_table("clothes")
    op.drop_index("ix_products_category", table_name="products")
    op.drop_table("products")
