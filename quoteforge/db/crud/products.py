"""Product catalog CRUD with soft delete."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from quoteforge.db.models import Product

PRODUCT_FIELDS = ("name", "sku", "unit_label", "default_price", "is_taxable")
MAX_LIMIT = 200


def list_products(
    db: Session, *, q: str | None = None, include_deleted: bool = False, limit: int = 50
) -> list[Product]:
    query = db.query(Product)
    if not include_deleted:
        query = query.filter(Product.deleted.is_(False))
    if q:
        query = query.filter(func.lower(Product.name).like(f"%{q.lower()}%"))
    return query.order_by(Product.name.asc()).limit(min(limit, MAX_LIMIT)).all()


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).one_or_none()


def create_product(db: Session, data: dict[str, Any]) -> Product:
    product = Product(**{k: data[k] for k in PRODUCT_FIELDS if k in data})
    db.add(product)
    db.flush()
    return product


def update_product(db: Session, product: Product, data: dict[str, Any]) -> Product:
    for k in PRODUCT_FIELDS:
        if k in data:
            setattr(product, k, data[k])
    db.flush()
    return product


def soft_delete_product(db: Session, product: Product) -> None:
    product.deleted = True
    db.flush()
