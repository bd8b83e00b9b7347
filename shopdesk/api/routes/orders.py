from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from shopdesk.api.deps import require_access
from shopdesk.api.pagination import PageParams, page_meta, page_params, paginate_scalars
from shopdesk.core.errors import ForbiddenError, NotFoundError
from shopdesk.core.permissions import ADMINS_ONLY, Action, Resource
from shopdesk.db.database import get_db
from shopdesk.models.inventory import Product
from shopdesk.models.orders import Order, OrderStatus, PaymentStatus
from shopdesk.models.user import User, UserRole
from shopdesk.schemas.order import (
    OrderCreate,
    OrderItemOut,
    OrderListOut,
    OrderOut,
    OrderStatsOut,
    OrderStatusOut,
    OrderStatusUpdate,
    OrderUpdate,
)
from shopdesk.services.orders import apply_status_transition, create_order, get_order, transition_order_status
from shopdesk.services.reporting import order_stats

router = APIRouter(prefix="/api/orders", tags=["Orders"])


def _is_own_scope(user: User) -> bool:
    return user.role == UserRole.SHOP_AGENT


def _ensure_can_view(user: User, order: Order) -> None:
    if _is_own_scope(user) and order.created_by != user.id:
        raise ForbiddenError("You can only view your own orders")


def order_out(db: Session, order: Order) -> OrderOut:
    product_ids = {item.product_id for item in order.items}
    products = {}
    if product_ids:
        products = {
            product_id: (name, sku)
            for product_id, name, sku in db.execute(
                select(Product.id, Product.name, Product.sku).where(Product.id.in_(product_ids))
            ).all()
        }
    out = OrderOut.model_validate(order)
    items = []
    for item in order.items:
        item_out = OrderItemOut.model_validate(item)
        item_out.product_name, item_out.product_sku = products.get(item.product_id, (None, None))
        items.append(item_out)
    out.items = items
    return out


@router.get("", response_model=OrderListOut)
def list_orders(
    search: str | None = None,
    order_status: OrderStatus | None = Query(default=None, alias="status"),
    payment_status: PaymentStatus | None = Query(default=None, alias="paymentStatus"),
    from_date: date | None = Query(default=None, alias="fromDate"),
    to_date: date | None = Query(default=None, alias="toDate"),
    params: PageParams = Depends(page_params),
    current_user: User = Depends(require_access(Resource.ORDERS, Action.READ)),
    db: Session = Depends(get_db),
):
    query = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
    if _is_own_scope(current_user):
        query = query.where(Order.created_by == current_user.id)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(
                Order.order_number.ilike(pattern),
                Order.customer_name.ilike(pattern),
                Order.customer_phone.ilike(pattern),
            )
        )
    if order_status is not None:
        query = query.where(Order.status == order_status)
    if payment_status is not None:
        query = query.where(Order.payment_status == payment_status)
    if from_date is not None:
        query = query.where(Order.created_at >= datetime.combine(from_date, datetime.min.time()))
    if to_date is not None:
        query = query.where(Order.created_at < datetime.combine(to_date + timedelta(days=1), datetime.min.time()))
    orders, total = paginate_scalars(db, query, params)
    return OrderListOut(orders=orders, **page_meta(total, params))


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order_route(
    payload: OrderCreate,
    current_user: User = Depends(require_access(Resource.ORDERS, Action.CREATE)),
    db: Session = Depends(get_db),
):
    order = create_order(db, payload, current_user)
    return order_out(db, order)


@router.get("/stats", response_model=OrderStatsOut)
def get_order_stats(
    _: User = Depends(require_access(Resource.ORDERS, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    return order_stats(db)


@router.get("/number/{order_number}", response_model=OrderOut)
def get_order_by_number(
    order_number: str,
    current_user: User = Depends(require_access(Resource.ORDERS, Action.READ)),
    db: Session = Depends(get_db),
):
    order = db.scalar(select(Order).where(Order.order_number == order_number.strip()))
    if not order:
        raise NotFoundError("Order not found")
    _ensure_can_view(current_user, order)
    return order_out(db, order)


@router.get("/{order_id}", response_model=OrderOut)
def get_order_route(
    order_id: int,
    current_user: User = Depends(require_access(Resource.ORDERS, Action.READ)),
    db: Session = Depends(get_db),
):
    order = get_order(db, order_id)
    _ensure_can_view(current_user, order)
    return order_out(db, order)


@router.put("/{order_id}", response_model=OrderOut)
def update_order(
    order_id: int,
    payload: OrderUpdate,
    current_user: User = Depends(require_access(Resource.ORDERS, Action.UPDATE)),
    db: Session = Depends(get_db),
):
    if current_user.role == UserRole.WAREHOUSE_AGENT and payload.notes is not None:
        raise ForbiddenError("Warehouse agents can only update order status")

    order = get_order(db, order_id, for_update=True)
    if payload.notes is not None:
        order.notes = payload.notes
    if payload.status is not None:
        apply_status_transition(db, order, payload.status, actor_id=current_user.id)
    db.commit()
    db.refresh(order)
    return order_out(db, order)


@router.put("/{order_id}/status", response_model=OrderStatusOut)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    current_user: User = Depends(require_access(Resource.ORDERS, Action.UPDATE)),
    db: Session = Depends(get_db),
):
    order = transition_order_status(db, order_id, payload.status, actor_id=current_user.id)
    return OrderStatusOut(
        order=order_out(db, order),
        message=f"Order status updated to {order.status.value}",
    )
