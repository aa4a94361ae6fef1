"""Dev seed script: create settings, a customer, a product and a draft quote,
finalize it and write the PDF next to the script's working directory.

Usage:
  python scripts/dev_seed.py [output.pdf]

Requirements:
  - DB schema applied (alembic upgrade head)
  - DATABASE_URL configured (e.g., via .env)
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from quoteforge.db.crud.customers import create_customer
from quoteforge.db.crud.products import create_product
from quoteforge.db.crud.settings import get_or_create_settings
from quoteforge.db.session import SessionLocal
from quoteforge.render.pdf import render_quote_pdf
from quoteforge.workflow.drafts import create_draft, load_quote
from quoteforge.workflow.finalize import finalize_quote
from quoteforge.workflow.views import build_final_view

CUSTOMER = {
    "name": "Gulf Trading W.L.L.",
    "vat_no": "200000000100002",
    "address_lines": ["Building 101, Road 2803", "Seef, Kingdom of Bahrain"],
    "contact_name": "Procurement",
    "phone": "+973 1700 0000",
    "email": "procurement@example.com",
}


def main(argv: Optional[list[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    out_path = Path(argv[0] if argv else "seed-quote.pdf")

    db = SessionLocal()
    try:
        get_or_create_settings(db)
        create_customer(db, CUSTOMER)
        widget = create_product(db, {"name": "Widget A", "unit_label": "pcs", "default_price": 12.5})
        service = create_product(
            db, {"name": "Installation", "unit_label": "hr", "default_price": 20, "is_taxable": False}
        )
        db.commit()

        draft = create_draft(
            db,
            {
                "customer": CUSTOMER,
                "items": [
                    {
                        "product_id": widget.id,
                        "product_name": widget.name,
                        "description": "",
                        "unit_price": 12.5,
                        "quantity": 8,
                        "unit_label": "pcs",
                        "is_taxable": True,
                    },
                    {
                        "product_id": service.id,
                        "product_name": service.name,
                        "description": "On-site, two technicians",
                        "unit_price": 20,
                        "quantity": 3,
                        "unit_label": "hr",
                        "is_taxable": False,
                    },
                ],
                "discount": {"type": "percent", "value": 5},
                "vat_rate": 0.1,
                "currency": "BHD",
                "notes": "Valid for 30 days.",
            },
        )
        result = finalize_quote(db, draft.id)
        doc = render_quote_pdf(build_final_view(load_quote(db, draft.id)))
        out_path.write_bytes(doc.content)

        print({"quote_id": draft.id, "quote_number": result.quote_number, **result.totals.as_json(), "pdf": str(out_path)})
    finally:
        db.close()


if __name__ == "__main__":
    main()
