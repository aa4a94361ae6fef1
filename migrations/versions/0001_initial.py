"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-16 00:00:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # customers
    op.create_table(
        "customers",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("vat_no", sa.String(), nullable=False, server_default=""),
        sa.Column("address_lines", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("contact_name", sa.String(), nullable=False, server_default=""),
        sa.Column("phone", sa.String(), nullable=False, server_default=""),
        sa.Column("email", sa.String(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )

    # products
    op.create_table(
        "products",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("sku", sa.String(), nullable=False, server_default=""),
        sa.Column("unit_label", sa.String(), nullable=False, server_default="pcs"),
        sa.Column("default_price", sa.Numeric(14, 3), nullable=False, server_default="0"),
        sa.Column("is_taxable", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_products_name", "products", ["name"])

    # quotes
    op.create_table(
        "quotes",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("status", sa.String(), nullable=False, server_default="draft"),
        sa.Column("customer", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("items", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("discount", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("vat_rate", sa.Numeric(6, 4), nullable=True),
        sa.Column("currency", sa.String(), nullable=False, server_default="BHD"),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("quote_number", sa.String(), nullable=True, unique=True),
        sa.Column("issue_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("customer_snapshot", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("company_snapshot", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("totals", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_quotes_status_created_at", "quotes", ["status", "created_at"])

    # company_settings (singleton row id=1)
    op.create_table(
        "company_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("letterhead", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("numbering", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )

    # sequence_counters
    op.create_table(
        "sequence_counters",
        sa.Column("scope", sa.String(), primary_key=True),
        sa.Column("value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )


def downgrade() -> None:
    op.drop_table("sequence_counters")
    op.drop_table("company_settings")
    op.drop_index("ix_quotes_status_created_at", table_name="quotes")
    op.drop_table("quotes")
    op.drop_index("ix_products_name", table_name="products")
    op.drop_table("products")
    op.drop_table("customers")
