from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from quoteforge.db.base import Base, BigIntPK, JSONDoc

QUOTE_DRAFT = "draft"
QUOTE_FINALIZED = "finalized"


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    vat_no: Mapped[str] = mapped_column(String, nullable=False, default="")
    address_lines: Mapped[list[str]] = mapped_column(JSONDoc, nullable=False, default=list)
    contact_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    phone: Mapped[str] = mapped_column(String, nullable=False, default="")
    email: Mapped[str] = mapped_column(String, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    sku: Mapped[str] = mapped_column(String, nullable=False, default="")
    unit_label: Mapped[str] = mapped_column(String, nullable=False, default="pcs")
    default_price: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False, default=0)
    is_taxable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class Quote(Base):
    __tablename__ = "quotes"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default=QUOTE_DRAFT)

    # Editable while status == draft
    customer: Mapped[dict[str, Any]] = mapped_column(JSONDoc, nullable=False, default=dict)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSONDoc, nullable=False, default=list)
    discount: Mapped[dict[str, Any]] = mapped_column(JSONDoc, nullable=False, default=dict)
    vat_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 4), nullable=True)
    currency: Mapped[str] = mapped_column(String, nullable=False, default="BHD")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Set once by finalize
    quote_number: Mapped[Optional[str]] = mapped_column(String, unique=True, nullable=True)
    issue_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    customer_snapshot: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONDoc, nullable=True)
    company_snapshot: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONDoc, nullable=True)
    totals: Mapped[Optional[dict[str, str]]] = mapped_column(JSONDoc, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class CompanySettings(Base):
    __tablename__ = "company_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    company: Mapped[dict[str, Any]] = mapped_column(JSONDoc, nullable=False)
    letterhead: Mapped[dict[str, Any]] = mapped_column(JSONDoc, nullable=False)
    numbering: Mapped[dict[str, Any]] = mapped_column(JSONDoc, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    scope: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
