"""Read-only aggregations behind the order stats and dashboard endpoints.

Counts and sums run in SQL. Time series are bucketed in Python so the same
code runs on PostgreSQL and SQLite.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopdesk.models.finance import AdCost, Charge, Salary
from shopdesk.models.inventory import Product, Stock
from shopdesk.models.orders import Order, OrderItem, OrderStatus
from shopdesk.services.money import quantize_money

GRANULARITIES = ("day", "week", "month")


def _bucket_start(value: datetime, granularity: str) -> datetime:
    if granularity == "month":
        return datetime(value.year, value.month, 1)
    if granularity == "week":
        start_date = value.date() - timedelta(days=value.weekday())
        return datetime(start_date.year, start_date.month, start_date.day)
    return datetime(value.year, value.month, value.day)


def _bucket_label(value: datetime, granularity: str) -> str:
    if granularity == "month":
        return value.strftime("%Y-%m")
    if granularity == "week":
        iso = value.isocalendar()
        return f"{iso.year}-W{iso.week:02d}"
    return value.strftime("%Y-%m-%d")


def _months_ago(now: datetime, months: int) -> datetime:
    month_index = now.year * 12 + (now.month - 1) - months
    return datetime(month_index // 12, month_index % 12 + 1, 1)


def _today_start(now: datetime) -> datetime:
    return datetime(now.year, now.month, now.day)


def _sum(db: Session, column, *conditions) -> Decimal:
    return quantize_money(db.scalar(select(func.coalesce(func.sum(column), 0)).where(*conditions)) or 0)


def _count(db: Session, column, *conditions) -> int:
    return int(db.scalar(select(func.count(column)).where(*conditions)) or 0)


def orders_by_status(db: Session) -> list[dict]:
    rows = db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status)).all()
    counts = {status: int(count) for status, count in rows}
    return [{"status": status, "count": counts[status]} for status in OrderStatus if status in counts]


def revenue_trend(
    db: Session,
    *,
    since: datetime,
    granularity: str = "month",
) -> list[dict]:
    """Delivered revenue and order count per bucket, oldest first."""
    rows = db.execute(
        select(Order.created_at, Order.total_amount)
        .where(Order.status == OrderStatus.DELIVERED, Order.created_at >= since)
        .order_by(Order.created_at.asc())
    ).all()

    buckets: dict[datetime, dict] = {}
    for created_at, total_amount in rows:
        bucket = _bucket_start(created_at, granularity)
        data = buckets.setdefault(bucket, {"revenue": Decimal("0"), "orders": 0})
        data["revenue"] += Decimal(total_amount)
        data["orders"] += 1

    return [
        {
            "period": _bucket_label(bucket, granularity),
            "revenue": quantize_money(data["revenue"]),
            "orders": data["orders"],
        }
        for bucket, data in sorted(buckets.items())
    ]


def order_stats(db: Session, *, now: datetime | None = None, months: int = 6) -> dict:
    now = now or datetime.utcnow()
    today = _today_start(now)
    delivered = Order.status == OrderStatus.DELIVERED
    return {
        "total_orders": _count(db, Order.id),
        "pending_orders": _count(db, Order.id, Order.status == OrderStatus.PENDING),
        "delivered_orders": _count(db, Order.id, delivered),
        "total_revenue": _sum(db, Order.total_amount, delivered),
        "today_revenue": _sum(db, Order.total_amount, delivered, Order.created_at >= today),
        "today_orders": _count(db, Order.id, Order.created_at >= today),
        "orders_by_status": orders_by_status(db),
        "revenue_by_month": revenue_trend(db, since=_months_ago(now, months), granularity="month"),
    }


def inventory_stats(db: Session) -> dict:
    active = Product.is_active.is_(True)
    base = select(Stock).join(Product, Product.id == Stock.product_id).where(active).subquery()
    totals = db.execute(
        select(
            func.count(Stock.id),
            func.coalesce(func.sum(Stock.quantity), 0),
            func.coalesce(func.sum(Stock.quantity * Product.cost_price), 0),
        )
        .join(Product, Product.id == Stock.product_id)
        .where(active)
    ).one()
    low_stock = int(db.scalar(select(func.count()).select_from(base).where(base.c.quantity < base.c.min_stock_level)) or 0)
    out_of_stock = int(db.scalar(select(func.count()).select_from(base).where(base.c.quantity == 0)) or 0)
    return {
        "total_products": int(totals[0] or 0),
        "total_units": int(totals[1] or 0),
        "total_value": quantize_money(totals[2] or 0),
        "low_stock_count": low_stock,
        "out_of_stock_count": out_of_stock,
    }


def top_products(db: Session, *, limit: int = 5) -> list[dict]:
    quantity = func.sum(OrderItem.quantity)
    rows = db.execute(
        select(Product.id, Product.name, Product.sku, quantity, func.sum(OrderItem.subtotal))
        .join(OrderItem, OrderItem.product_id == Product.id)
        .join(Order, Order.id == OrderItem.order_id)
        .where(Order.status == OrderStatus.DELIVERED)
        .group_by(Product.id, Product.name, Product.sku)
        .order_by(quantity.desc(), Product.id.asc())
        .limit(limit)
    ).all()
    return [
        {
            "product_id": product_id,
            "name": name,
            "sku": sku,
            "quantity": int(qty or 0),
            "revenue": quantize_money(revenue or 0),
        }
        for product_id, name, sku, qty, revenue in rows
    ]


def low_stock_products(db: Session, *, limit: int = 10) -> list[dict]:
    rows = db.execute(
        select(Product.id, Product.name, Product.sku, Stock.quantity, Stock.min_stock_level)
        .join(Stock, Stock.product_id == Product.id)
        .where(Product.is_active.is_(True), Stock.quantity < Stock.min_stock_level)
        .order_by(Stock.quantity.asc(), Product.id.asc())
        .limit(limit)
    ).all()
    return [
        {
            "product_id": product_id,
            "name": name,
            "sku": sku,
            "quantity": int(qty),
            "min_stock_level": int(min_level),
        }
        for product_id, name, sku, qty, min_level in rows
    ]


def expense_totals(db: Session, *, since: date | None = None) -> dict:
    charge_conditions = [Charge.charge_date >= since] if since else []
    ad_conditions = [AdCost.campaign_date >= since] if since else []
    salary_conditions = []
    if since:
        salary_conditions.append(Salary.year * 100 + Salary.month >= since.year * 100 + since.month)
    charges = _sum(db, Charge.amount, *charge_conditions)
    salaries = _sum(db, Salary.total_amount, *salary_conditions)
    ads = _sum(db, AdCost.cost, *ad_conditions)
    return {
        "charges": charges,
        "salaries": salaries,
        "ads_costs": ads,
        "total": quantize_money(charges + salaries + ads),
    }


def dashboard(
    db: Session,
    *,
    now: datetime | None = None,
    months: int = 6,
    granularity: str = "month",
) -> dict:
    now = now or datetime.utcnow()
    since = _months_ago(now, months)
    stats = order_stats(db, now=now, months=months)
    inventory = inventory_stats(db)
    recent = db.scalars(select(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(10)).all()
    return {
        "stats": {
            "total_products": inventory["total_products"],
            "total_stock_value": inventory["total_value"],
            "total_stock_units": inventory["total_units"],
            "low_stock_count": inventory["low_stock_count"],
            "out_of_stock_count": inventory["out_of_stock_count"],
            "total_orders": stats["total_orders"],
            "pending_orders": stats["pending_orders"],
            "delivered_orders": stats["delivered_orders"],
            "total_revenue": stats["total_revenue"],
            "today_revenue": stats["today_revenue"],
            "today_orders": stats["today_orders"],
        },
        "charts": {
            "orders_by_status": stats["orders_by_status"],
            "revenue_trend": revenue_trend(db, since=since, granularity=granularity),
            "top_products": top_products(db),
        },
        "recent_orders": list(recent),
        "low_stock_products": low_stock_products(db),
        "expenses": expense_totals(db, since=since.date()),
    }
