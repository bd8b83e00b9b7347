"""Order lifecycle: creation, status transitions and warehouse scans.

Creation reserves stock for every line in a single transaction and fails the
whole order if any line cannot be filled. Status transitions keep the
per-product delivery counters in step with the order's current status and
restock returned goods.
"""

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shopdesk.core.config import settings
from shopdesk.core.errors import BadRequestError, ConflictError, InsufficientStockError, NotFoundError
from shopdesk.models.inventory import Product, ProductDeliveryStats, Stock, StockMovementType
from shopdesk.models.orders import Order, OrderItem, OrderStatus, PaymentStatus, ScannedOrder
from shopdesk.models.user import User, UserRole
from shopdesk.schemas.order import OrderCreate, ScanOrderCreate
from shopdesk.services.money import quantize_money
from shopdesk.services.stock_ledger import apply_movement

logger = logging.getLogger(__name__)

STATUS_COUNTERS: dict[OrderStatus, str] = {
    OrderStatus.DELIVERED: "delivered_orders",
    OrderStatus.CANCELLED: "cancelled_orders",
    OrderStatus.RETURNED: "returned_orders",
    OrderStatus.IN_TRANSIT: "in_transit_orders",
}

UNSCANNABLE_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.RETURNED})


def order_number_prefix(day: datetime) -> str:
    return f"{settings.order_number_prefix}-{day:%Y%m%d}-"


def next_order_number(db: Session, day: datetime) -> str:
    prefix = order_number_prefix(day)
    latest = db.scalar(
        select(Order.order_number)
        .where(Order.order_number.like(f"{prefix}%"))
        .order_by(func.length(Order.order_number).desc(), Order.order_number.desc())
        .limit(1)
    )
    sequence = 1
    if latest:
        try:
            sequence = int(latest[len(prefix):]) + 1
        except ValueError:
            sequence = 1
    return f"{prefix}{sequence:04d}"


def _is_order_number_collision(exc: IntegrityError) -> bool:
    return "order_number" in str(exc.orig)


def _merge_lines(payload: OrderCreate) -> dict[int, int]:
    quantities: dict[int, int] = {}
    for item in payload.items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return quantities


def _lock_delivery_stats(db: Session, product_ids: list[int]) -> dict[int, ProductDeliveryStats]:
    rows = {
        row.product_id: row
        for row in db.scalars(
            select(ProductDeliveryStats)
            .where(ProductDeliveryStats.product_id.in_(product_ids))
            .order_by(ProductDeliveryStats.product_id)
            .with_for_update()
        ).all()
    }
    for product_id in product_ids:
        if product_id not in rows:
            row = ProductDeliveryStats(
                product_id=product_id,
                total_orders=0,
                delivered_orders=0,
                cancelled_orders=0,
                returned_orders=0,
                in_transit_orders=0,
            )
            db.add(row)
            rows[product_id] = row
    return rows


def _build_order(db: Session, payload: OrderCreate, actor: User) -> Order:
    quantities = _merge_lines(payload)
    product_ids = sorted(quantities)

    products = {
        product.id: product
        for product in db.scalars(select(Product).where(Product.id.in_(product_ids))).all()
    }
    missing = [product_id for product_id in product_ids if product_id not in products]
    if missing:
        raise NotFoundError("Product not found", details={"productIds": missing})
    inactive = [product_id for product_id in product_ids if not products[product_id].is_active]
    if inactive:
        raise BadRequestError("Cannot order inactive products", details={"productIds": inactive})

    stocks = {
        stock.product_id: stock
        for stock in db.scalars(
            select(Stock).where(Stock.product_id.in_(product_ids)).order_by(Stock.product_id).with_for_update()
        ).all()
    }
    for product_id in product_ids:
        stock = stocks.get(product_id)
        if stock is None:
            raise NotFoundError("Stock record not found", details={"productId": product_id})
        if stock.quantity < quantities[product_id]:
            raise InsufficientStockError(
                product_id=product_id,
                product_name=products[product_id].name,
                available=int(stock.quantity),
                requested=quantities[product_id],
            )

    now = datetime.utcnow()
    order_number = next_order_number(db, now)
    delivery_price = quantize_money(payload.delivery_price)

    items: list[OrderItem] = []
    for product_id, quantity in quantities.items():
        unit_price = quantize_money(products[product_id].selling_price)
        items.append(
            OrderItem(
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
                subtotal=quantize_money(unit_price * quantity),
            )
        )
    items_total = sum((item.subtotal for item in items), quantize_money(0))

    order = Order(
        order_number=order_number,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone.strip(),
        customer_address=payload.customer_address,
        customer_city=payload.customer_city,
        total_amount=quantize_money(items_total + delivery_price),
        delivery_price=delivery_price,
        status=OrderStatus.PENDING,
        payment_status=PaymentStatus.UNPAID,
        notes=payload.notes,
        is_from_shop=actor.role == UserRole.SHOP_AGENT,
        created_by=actor.id,
        created_at=now,
        updated_at=now,
        items=items,
    )
    db.add(order)
    db.flush()

    for product_id, quantity in quantities.items():
        apply_movement(
            db,
            product=products[product_id],
            stock=stocks[product_id],
            change=-quantity,
            movement_type=StockMovementType.REMOVE,
            reason=f"Order #{order_number}",
            actor_id=actor.id,
        )

    for stats in _lock_delivery_stats(db, product_ids).values():
        stats.total_orders = int(stats.total_orders or 0) + 1
    db.flush()
    return order


def create_order(db: Session, payload: OrderCreate, actor: User) -> Order:
    """Create an order, reserve its stock and commit.

    The order number is the highest same-day sequence plus one. A concurrent
    writer can take the same number first; the unique constraint rejects the
    second insert and the whole creation is retried from scratch.
    """
    attempts = settings.order_number_max_attempts
    for attempt in range(1, attempts + 1):
        try:
            order = _build_order(db, payload, actor)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if not _is_order_number_collision(exc):
                raise
            if attempt == attempts:
                raise ConflictError("Could not allocate a unique order number, please retry")
            logger.warning("order number collision, retrying attempt=%s", attempt + 1)
            continue
        db.refresh(order)
        logger.info(
            "order created number=%s total=%s items=%s by=%s",
            order.order_number,
            order.total_amount,
            len(order.items),
            actor.id,
        )
        return order
    raise ConflictError("Could not allocate a unique order number, please retry")


def get_order(db: Session, order_id: int, *, for_update: bool = False) -> Order:
    query = select(Order).where(Order.id == order_id)
    if for_update:
        query = query.with_for_update()
    order = db.scalar(query)
    if not order:
        raise NotFoundError("Order not found")
    return order


def apply_status_transition(
    db: Session,
    order: Order,
    new_status: OrderStatus,
    *,
    actor_id: int | None,
) -> bool:
    """Move ``order`` to ``new_status`` and apply the side effects.

    Returns ``False`` when the order is already in ``new_status``. A returned
    order cannot move again since its goods are already back in stock.
    Stock rows are locked before delivery stats rows, the same order
    ``create_order`` uses. Flushes only; the caller commits.
    """
    previous = order.status
    if new_status == previous:
        return False
    if previous == OrderStatus.RETURNED:
        raise BadRequestError(
            "Invalid status transition",
            details={"from": previous.value, "to": new_status.value},
        )

    if new_status == OrderStatus.DELIVERED:
        order.payment_status = PaymentStatus.PAID
    elif new_status == OrderStatus.RETURNED:
        _restock_returned(db, order, actor_id=actor_id)
        order.payment_status = PaymentStatus.REFUNDED

    product_ids = sorted({item.product_id for item in order.items})
    previous_counter = STATUS_COUNTERS.get(previous)
    new_counter = STATUS_COUNTERS.get(new_status)
    if product_ids and (previous_counter or new_counter):
        for stats in _lock_delivery_stats(db, product_ids).values():
            if previous_counter:
                setattr(stats, previous_counter, max(0, int(getattr(stats, previous_counter) or 0) - 1))
            if new_counter:
                setattr(stats, new_counter, int(getattr(stats, new_counter) or 0) + 1)

    order.status = new_status
    order.updated_at = datetime.utcnow()
    db.flush()
    logger.info("order %s status %s -> %s", order.order_number, previous.value, new_status.value)
    return True


def _restock_returned(db: Session, order: Order, *, actor_id: int | None) -> None:
    product_ids = sorted({item.product_id for item in order.items})
    products = {p.id: p for p in db.scalars(select(Product).where(Product.id.in_(product_ids))).all()}
    stocks = {
        stock.product_id: stock
        for stock in db.scalars(
            select(Stock).where(Stock.product_id.in_(product_ids)).order_by(Stock.product_id).with_for_update()
        ).all()
    }
    for item in order.items:
        stock = stocks.get(item.product_id)
        if stock is None or item.product_id not in products:
            raise NotFoundError("Stock record not found", details={"productId": item.product_id})
        apply_movement(
            db,
            product=products[item.product_id],
            stock=stock,
            change=item.quantity,
            movement_type=StockMovementType.ADD,
            reason=f"Returned order #{order.order_number}",
            actor_id=actor_id,
        )


def transition_order_status(db: Session, order_id: int, new_status: OrderStatus, *, actor_id: int | None) -> Order:
    order = get_order(db, order_id, for_update=True)
    apply_status_transition(db, order, new_status, actor_id=actor_id)
    db.commit()
    db.refresh(order)
    return order


def scan_order(db: Session, payload: ScanOrderCreate, actor: User) -> ScannedOrder:
    order = get_order(db, payload.order_id, for_update=True)
    if db.scalar(select(ScannedOrder.id).where(ScannedOrder.order_id == order.id)) is not None:
        raise ConflictError("Order has already been scanned")
    if order.status in UNSCANNABLE_STATUSES:
        raise BadRequestError(
            "Invalid status transition",
            details={"from": order.status.value, "to": OrderStatus.PICKED_UP.value},
        )

    apply_status_transition(db, order, OrderStatus.PICKED_UP, actor_id=actor.id)
    scan = ScannedOrder(
        order_id=order.id,
        delivery_company=payload.delivery_company,
        tracking_number=payload.tracking_number,
        scanned_by=actor.id,
        notes=payload.notes,
    )
    db.add(scan)
    db.commit()
    db.refresh(scan)
    logger.info("order %s scanned by %s", order.order_number, actor.id)
    return scan
