import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopdesk.core.config import settings
from shopdesk.core.errors import ConflictError, NotFoundError
from shopdesk.models.inventory import Product, ProductDeliveryStats, Stock, StockMovementType
from shopdesk.schemas.product import ProductCreate, ProductUpdate
from shopdesk.services.money import quantize_money
from shopdesk.services.stock_ledger import apply_movement

logger = logging.getLogger(__name__)


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def ensure_unique_identifiers(
    db: Session,
    *,
    sku: str | None,
    barcode: str | None,
    exclude_id: int | None = None,
) -> None:
    if sku:
        query = select(Product.id).where(Product.sku == sku)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        if db.scalar(query) is not None:
            raise ConflictError(f"SKU '{sku}' already exists")
    if barcode:
        query = select(Product.id).where(Product.barcode == barcode)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        if db.scalar(query) is not None:
            raise ConflictError(f"Barcode '{barcode}' already exists")


def create_product(db: Session, payload: ProductCreate, *, actor_id: int | None) -> Product:
    """Insert a product with its stock row and delivery counters.

    Flushes only; the caller commits. A non-zero ``initial_quantity`` is
    written through the ledger so the history chain starts at the product's
    first stock level.
    """
    ensure_unique_identifiers(db, sku=payload.sku, barcode=payload.barcode)

    product = Product(
        name=payload.name,
        sku=payload.sku,
        barcode=payload.barcode,
        selling_price=quantize_money(payload.selling_price),
        cost_price=quantize_money(payload.cost_price),
        description=payload.description,
        image_url=payload.image_url,
        created_by=actor_id,
    )
    db.add(product)
    db.flush()

    min_level = payload.min_stock_level
    stock = Stock(
        product_id=product.id,
        quantity=0,
        min_stock_level=settings.default_min_stock_level if min_level is None else min_level,
        warehouse_location=payload.warehouse_location,
    )
    db.add(stock)
    db.add(ProductDeliveryStats(product_id=product.id))
    db.flush()

    if payload.initial_quantity:
        apply_movement(
            db,
            product=product,
            stock=stock,
            change=payload.initial_quantity,
            movement_type=StockMovementType.ADJUSTMENT,
            reason="Initial stock",
            actor_id=actor_id,
        )

    logger.info("product created id=%s sku=%s", product.id, product.sku)
    return product


def update_product(db: Session, product: Product, payload: ProductUpdate) -> Product:
    changes = payload.model_dump(exclude_unset=True)
    if "barcode" in changes:
        changes["barcode"] = (changes["barcode"] or "").strip() or None
    ensure_unique_identifiers(
        db,
        sku=changes.get("sku"),
        barcode=changes.get("barcode"),
        exclude_id=product.id,
    )
    for field_name in ("selling_price", "cost_price"):
        if changes.get(field_name) is not None:
            changes[field_name] = quantize_money(Decimal(changes[field_name]))
    for field_name, value in changes.items():
        if field_name in {"name", "sku", "selling_price", "cost_price", "is_active"} and value is None:
            continue
        setattr(product, field_name, value)
    db.flush()
    return product
