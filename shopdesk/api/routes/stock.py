from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from shopdesk.api.deps import require_access
from shopdesk.api.pagination import PageParams, page_meta, page_params, paginate_rows
from shopdesk.core.permissions import ADMINS_ONLY, Action, Resource
from shopdesk.db.database import get_db
from shopdesk.models.inventory import Product, Stock, StockHistory
from shopdesk.models.user import User
from shopdesk.schemas.stock import (
    StockHistoryListOut,
    StockHistoryOut,
    StockItemOut,
    StockListOut,
    StockMoveOut,
    StockMoveRequest,
    StockOut,
    StockSettingsUpdate,
    StockStatsOut,
)
from shopdesk.services.reporting import inventory_stats
from shopdesk.services.stock_ledger import add_stock, lock_stock, remove_stock

router = APIRouter(prefix="/api/stock", tags=["Stock"])


def _stock_item(stock: Stock, product: Product) -> StockItemOut:
    return StockItemOut(
        id=stock.id,
        product_id=stock.product_id,
        quantity=stock.quantity,
        warehouse_location=stock.warehouse_location,
        min_stock_level=stock.min_stock_level,
        last_updated=stock.last_updated,
        product_name=product.name,
        product_sku=product.sku,
        product_barcode=product.barcode,
        selling_price=product.selling_price,
        cost_price=product.cost_price,
        is_low_stock=stock.quantity < stock.min_stock_level,
        is_out_of_stock=stock.quantity == 0,
    )


@router.get("", response_model=StockListOut)
def list_stock(
    low_stock: bool = Query(default=False, alias="lowStock"),
    search: str | None = None,
    _: User = Depends(require_access(Resource.STOCK, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    query = (
        select(Stock, Product)
        .join(Product, Product.id == Stock.product_id)
        .where(Product.is_active.is_(True))
        .order_by(Product.name.asc(), Product.id.asc())
    )
    if low_stock:
        query = query.where(Stock.quantity < Stock.min_stock_level)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Product.name.ilike(pattern), Product.sku.ilike(pattern)))
    rows = db.execute(query).all()
    return StockListOut(
        stock=[_stock_item(stock, product) for stock, product in rows],
        stats=StockStatsOut(**inventory_stats(db)),
    )


@router.post("/add", response_model=StockMoveOut)
def add_stock_route(
    payload: StockMoveRequest,
    current_user: User = Depends(require_access(Resource.STOCK, Action.UPDATE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    stock = add_stock(db, payload.product_id, payload.quantity, reason=payload.reason, actor_id=current_user.id)
    db.commit()
    db.refresh(stock)
    return StockMoveOut(
        stock=StockOut.model_validate(stock),
        message=f"Added {payload.quantity} units to stock",
    )


@router.post("/remove", response_model=StockMoveOut)
def remove_stock_route(
    payload: StockMoveRequest,
    current_user: User = Depends(require_access(Resource.STOCK, Action.UPDATE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    stock = remove_stock(db, payload.product_id, payload.quantity, reason=payload.reason, actor_id=current_user.id)
    db.commit()
    db.refresh(stock)
    return StockMoveOut(
        stock=StockOut.model_validate(stock),
        message=f"Removed {payload.quantity} units from stock",
    )


@router.get("/history", response_model=StockHistoryListOut)
def list_stock_history(
    product_id: int | None = Query(default=None, alias="productId"),
    params: PageParams = Depends(page_params),
    _: User = Depends(require_access(Resource.STOCK, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    query = (
        select(StockHistory, Product.name, Product.sku, User.name)
        .join(Product, Product.id == StockHistory.product_id)
        .outerjoin(User, User.id == StockHistory.created_by)
        .order_by(StockHistory.created_at.desc(), StockHistory.id.desc())
    )
    if product_id is not None:
        query = query.where(StockHistory.product_id == product_id)
    rows, total = paginate_rows(db, query, params)
    history = []
    for entry, product_name, product_sku, user_name in rows:
        item = StockHistoryOut.model_validate(entry)
        item.product_name = product_name
        item.product_sku = product_sku
        item.created_by_name = user_name
        history.append(item)
    return StockHistoryListOut(history=history, **page_meta(total, params))


@router.put("/{product_id}", response_model=StockOut)
def update_stock_settings(
    product_id: int,
    payload: StockSettingsUpdate,
    _: User = Depends(require_access(Resource.STOCK, Action.UPDATE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    _, stock = lock_stock(db, product_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("min_stock_level") is not None:
        stock.min_stock_level = changes["min_stock_level"]
    if "warehouse_location" in changes:
        stock.warehouse_location = (changes["warehouse_location"] or "").strip() or None
    db.commit()
    db.refresh(stock)
    return stock
