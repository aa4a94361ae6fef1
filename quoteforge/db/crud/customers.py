"""Customers CRUD."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.orm import Session

from quoteforge.db.models import Customer

CUSTOMER_FIELDS = ("name", "vat_no", "address_lines", "contact_name", "phone", "email")


def list_customers(db: Session) -> list[Customer]:
    return db.query(Customer).order_by(Customer.created_at.desc(), Customer.id.desc()).all()


def get_customer(db: Session, customer_id: int) -> Optional[Customer]:
    return db.query(Customer).filter(Customer.id == customer_id).one_or_none()


def create_customer(db: Session, data: dict[str, Any]) -> Customer:
    customer = Customer(**{k: data[k] for k in CUSTOMER_FIELDS if k in data})
    db.add(customer)
    db.flush()
    return customer


def update_customer(db: Session, customer: Customer, data: dict[str, Any]) -> Customer:
    for k in CUSTOMER_FIELDS:
        if k in data:
            setattr(customer, k, data[k])
    db.flush()
    return customer


def delete_customer(db: Session, customer: Customer) -> None:
    db.delete(customer)
    db.flush()
