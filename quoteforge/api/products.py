from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from quoteforge.core.errors import NotFoundError, ValidationFailedError
from quoteforge.db.crud import products as crud
from quoteforge.db.models import Product
from quoteforge.db.session import get_db
from quoteforge.schemas.dto import ProductIn, ProductOut

router = APIRouter()


def _to_dto(p: Product) -> ProductOut:
    return ProductOut(
        id=int(p.id),
        name=p.name,
        sku=p.sku or "",
        unit_label=p.unit_label,
        default_price=p.default_price,
        is_taxable=bool(p.is_taxable),
        deleted=bool(p.deleted),
    )


def _clean(payload: ProductIn) -> dict:
    data = payload.model_dump()
    data["name"] = data["name"].strip()
    data["unit_label"] = data["unit_label"].strip() or "pcs"
    if not data["name"]:
        raise ValidationFailedError("Invalid product", ["name: name is required"])
    return data


def _load(db: Session, product_id: int) -> Product:
    product = crud.get_product(db, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


@router.get("", response_model=list[ProductOut])
def list_products(
    q: Optional[str] = Query(default=None, description="Case-insensitive name filter"),
    include_deleted: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
) -> list[ProductOut]:
    products = crud.list_products(db, q=(q or "").strip() or None, include_deleted=include_deleted, limit=limit)
    return [_to_dto(p) for p in products]


@router.post("", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db)) -> ProductOut:
    product = crud.create_product(db, _clean(payload))
    db.commit()
    return _to_dto(product)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductIn, db: Session = Depends(get_db)) -> ProductOut:
    product = crud.update_product(db, _load(db, product_id), _clean(payload))
    db.commit()
    return _to_dto(product)


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)) -> dict:
    crud.soft_delete_product(db, _load(db, product_id))
    db.commit()
    return {"ok": True}
