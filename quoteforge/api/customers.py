from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from quoteforge.core.errors import NotFoundError
from quoteforge.db.crud import customers as crud
from quoteforge.db.models import Customer
from quoteforge.db.session import get_db
from quoteforge.schemas.dto import CustomerIn, CustomerOut
from quoteforge.validation.schemas import STRICT, ensure_valid

router = APIRouter()


def _to_dto(c: Customer) -> CustomerOut:
    return CustomerOut(
        id=int(c.id),
        name=c.name,
        vat_no=c.vat_no or "",
        address_lines=list(c.address_lines or []),
        contact_name=c.contact_name or "",
        phone=c.phone or "",
        email=c.email or "",
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


def _load(db: Session, customer_id: int) -> Customer:
    customer = crud.get_customer(db, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


@router.get("", response_model=list[CustomerOut])
def list_customers(db: Session = Depends(get_db)) -> list[CustomerOut]:
    return [_to_dto(c) for c in crud.list_customers(db)]


@router.post("", response_model=CustomerOut, status_code=201)
def create_customer(payload: CustomerIn, db: Session = Depends(get_db)) -> CustomerOut:
    data = payload.model_dump()
    ensure_valid("customer", data, STRICT, message="Invalid customer")
    customer = crud.create_customer(db, data)
    db.commit()
    return _to_dto(customer)


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db)) -> CustomerOut:
    return _to_dto(_load(db, customer_id))


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: int, payload: CustomerIn, db: Session = Depends(get_db)) -> CustomerOut:
    data = payload.model_dump()
    ensure_valid("customer", data, STRICT, message="Invalid customer")
    customer = crud.update_customer(db, _load(db, customer_id), data)
    db.commit()
    db.refresh(customer)
    return _to_dto(customer)


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)) -> dict:
    crud.delete_customer(db, _load(db, customer_id))
    db.commit()
    return {"ok": True}
