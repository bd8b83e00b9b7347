"""Stock ledger: every quantity change goes through here.

Each movement writes one ``StockHistory`` row whose ``new_quantity`` equals
``previous_quantity + quantity_change``, so replaying a product's history in
id order reproduces its current ``Stock.quantity``. Stock never goes negative.

Functions in this module only flush; the caller owns the transaction.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopdesk.core.errors import InsufficientStockError, NotFoundError
from shopdesk.models.inventory import Product, Stock, StockHistory, StockMovementType

logger = logging.getLogger(__name__)


def lock_stock(db: Session, product_id: int) -> tuple[Product, Stock]:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    stock = db.scalar(select(Stock).where(Stock.product_id == product_id).with_for_update())
    if not stock:
        raise NotFoundError("Stock record not found")
    return product, stock


def apply_movement(
    db: Session,
    *,
    product: Product,
    stock: Stock,
    change: int,
    movement_type: StockMovementType,
    reason: str | None,
    actor_id: int | None,
) -> StockHistory:
    previous_quantity = int(stock.quantity)
    new_quantity = previous_quantity + int(change)
    if new_quantity < 0:
        raise InsufficientStockError(
            product_id=product.id,
            product_name=product.name,
            available=previous_quantity,
            requested=-int(change),
        )

    stock.quantity = new_quantity
    stock.last_updated = datetime.utcnow()
    entry = StockHistory(
        product_id=product.id,
        quantity_change=int(change),
        type=movement_type,
        reason=reason,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        created_by=actor_id,
    )
    db.add(entry)
    db.flush()
    return entry


def add_stock(
    db: Session,
    product_id: int,
    quantity: int,
    *,
    reason: str | None = None,
    actor_id: int | None = None,
) -> Stock:
    product, stock = lock_stock(db, product_id)
    apply_movement(
        db,
        product=product,
        stock=stock,
        change=quantity,
        movement_type=StockMovementType.ADD,
        reason=(reason or "").strip() or f"Added {quantity} units",
        actor_id=actor_id,
    )
    logger.info("stock added product=%s qty=%s now=%s", product.id, quantity, stock.quantity)
    return stock


def remove_stock(
    db: Session,
    product_id: int,
    quantity: int,
    *,
    reason: str | None = None,
    actor_id: int | None = None,
) -> Stock:
    product, stock = lock_stock(db, product_id)
    apply_movement(
        db,
        product=product,
        stock=stock,
        change=-quantity,
        movement_type=StockMovementType.REMOVE,
        reason=(reason or "").strip() or f"Removed {quantity} units",
        actor_id=actor_id,
    )
    logger.info("stock removed product=%s qty=%s now=%s", product.id, quantity, stock.quantity)
    return stock


def replay_quantity(db: Session, product_id: int) -> int:
    """Fold the history chain for a product and return the resulting quantity.

    Raises ``ValueError`` if any row breaks the ``previous + change == new``
    link or does not start where the previous row ended.
    """
    quantity = 0
    entries = db.scalars(
        select(StockHistory).where(StockHistory.product_id == product_id).order_by(StockHistory.id.asc())
    ).all()
    for entry in entries:
        if entry.previous_quantity != quantity:
            raise ValueError(f"History row {entry.id} starts at {entry.previous_quantity}, expected {quantity}")
        if entry.previous_quantity + entry.quantity_change != entry.new_quantity:
            raise ValueError(f"History row {entry.id} does not balance")
        quantity = entry.new_quantity
    return quantity
