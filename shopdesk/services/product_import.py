"""Bulk product creation from an uploaded CSV file.

The header row is matched case-insensitively and must contain ``name``,
``sku``, ``sellingPrice`` and ``costPrice``. Optional columns are
``barcode``, ``description`` and ``quantity``. Rows are validated and
inserted independently; a bad row is reported with its line number and does
not stop the rest of the file.
"""

import csv
import io
import logging
from dataclasses import dataclass, field

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from shopdesk.core.errors import BadRequestError
from shopdesk.models.inventory import Product
from shopdesk.schemas.product import ProductCreate
from shopdesk.services.catalog import create_product

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("name", "sku", "sellingprice", "costprice")


@dataclass
class ImportResult:
    products: list[dict[str, str]] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.products)


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise BadRequestError("File must be UTF-8 encoded")


def _first_validation_message(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))


def import_products_csv(db: Session, raw: bytes, *, actor_id: int | None) -> ImportResult:
    reader = csv.reader(io.StringIO(_decode(raw)))
    rows = [(reader.line_num, row) for row in reader if any(cell.strip() for cell in row)]
    if len(rows) < 2:
        raise BadRequestError("CSV file is empty or has no data rows")

    header = [column.strip().lower() for column in rows[0][1]]
    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise BadRequestError(f"Missing required columns: {', '.join(missing)}")

    existing_skus = set(db.scalars(select(Product.sku)).all())
    existing_barcodes = set(db.scalars(select(Product.barcode).where(Product.barcode.is_not(None))).all())
    result = ImportResult()

    for line_number, values in rows[1:]:
        record = {column: (values[idx].strip() if idx < len(values) else "") for idx, column in enumerate(header)}
        name = record.get("name", "")
        sku = record.get("sku", "")
        barcode = record.get("barcode") or None

        if not name or not sku:
            result.errors.append({"row": line_number, "error": "Name and SKU are required"})
            continue
        if sku in existing_skus:
            result.errors.append({"row": line_number, "error": f"SKU '{sku}' already exists"})
            continue
        if barcode and barcode in existing_barcodes:
            result.errors.append({"row": line_number, "error": f"Barcode '{barcode}' already exists"})
            continue

        try:
            payload = ProductCreate(
                name=name,
                sku=sku,
                barcode=barcode,
                selling_price=record.get("sellingprice") or None,
                cost_price=record.get("costprice") or None,
                description=record.get("description") or None,
                initial_quantity=record.get("quantity") or 0,
            )
        except ValidationError as exc:
            result.errors.append({"row": line_number, "error": _first_validation_message(exc)})
            continue

        create_product(db, payload, actor_id=actor_id)
        existing_skus.add(payload.sku)
        if payload.barcode:
            existing_barcodes.add(payload.barcode)
        result.products.append({"sku": payload.sku, "name": payload.name})

    logger.info("csv import finished imported=%s errors=%s", result.imported, len(result.errors))
    return result
