from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class CustomerIn(BaseModel):
    name: str = ""
    vat_no: str = ""
    address_lines: list[str] = Field(default_factory=list)
    contact_name: str = ""
    phone: str = ""
    email: str = ""


class CustomerOut(CustomerIn):
    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductIn(BaseModel):
    name: str
    sku: str = ""
    unit_label: str = "pcs"
    default_price: Decimal = Field(default=Decimal("0"), ge=0)
    is_taxable: bool = True


class ProductOut(ProductIn):
    id: int
    deleted: bool = False


class LineItem(BaseModel):
    product_id: str | int | None = None
    product_name: str = ""
    description: str = ""
    unit_price: float = 0
    quantity: float = 0
    unit_label: str = "pcs"
    is_taxable: bool = True


class Discount(BaseModel):
    type: Literal["none", "percent", "amount"] = "none"
    value: float = 0


class QuoteDraftIn(BaseModel):
    customer: CustomerIn = Field(default_factory=CustomerIn)
    items: list[LineItem] = Field(default_factory=list)
    discount: Discount = Field(default_factory=Discount)
    vat_rate: float | None = 0.1
    currency: str = "BHD"
    notes: str = ""


class TotalsRequest(BaseModel):
    items: list[LineItem] = Field(default_factory=list)
    discount: Discount = Field(default_factory=Discount)
    vat_rate: float = 0


class TotalsOut(BaseModel):
    subtotal: Decimal
    discount_amount: Decimal
    taxable_base: Decimal
    vat_amount: Decimal
    grand_total: Decimal


class Margins(BaseModel):
    top: float = 24
    right: float = 24
    bottom: float = 24
    left: float = 24


class CompanySnapshot(BaseModel):
    company_name: str
    vat_no: str = ""
    address: list[str] = Field(default_factory=list)
    footer_text: str = ""
    currency: str
    vat_rate: float
    letterhead_url: str = ""
    margins: Margins = Field(default_factory=Margins)
    numbering_prefix: str = "QF"


class QuoteSummary(BaseModel):
    id: int
    status: Literal["draft", "finalized"]
    quote_number: str | None = None
    customer_name: str = ""
    currency: str
    grand_total: Decimal | None = None
    created_at: datetime | None = None


class QuoteOut(BaseModel):
    id: int
    status: Literal["draft", "finalized"]
    customer: CustomerIn
    items: list[LineItem]
    discount: Discount
    vat_rate: float | None = None
    currency: str
    notes: str = ""
    quote_number: str | None = None
    issue_date: datetime | None = None
    customer_snapshot: CustomerIn | None = None
    company_snapshot: CompanySnapshot | None = None
    totals: TotalsOut | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class FinalizeResponse(BaseModel):
    ok: bool = True
    quote_number: str
    totals: TotalsOut


class CompanyInfo(BaseModel):
    name: str = "My Company"
    vat_no: str = ""
    address: list[str] = Field(default_factory=list)
    footer_text: str = ""
    currency: str = "BHD"
    default_vat_rate: float = 0.1


class Letterhead(BaseModel):
    url: str = ""
    margins: Margins = Field(default_factory=Margins)


class Numbering(BaseModel):
    prefix: str = "QF"
    year_reset: bool = True


class SettingsDoc(BaseModel):
    company: CompanyInfo = Field(default_factory=CompanyInfo)
    letterhead: Letterhead = Field(default_factory=Letterhead)
    numbering: Numbering = Field(default_factory=Numbering)
