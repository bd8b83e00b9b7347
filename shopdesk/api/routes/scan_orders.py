from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopdesk.api.deps import require_access
from shopdesk.api.pagination import PageParams, page_meta, page_params, paginate_rows
from shopdesk.core.permissions import Action, Resource
from shopdesk.db.database import get_db
from shopdesk.models.orders import Order, ScannedOrder
from shopdesk.models.user import User, UserRole
from shopdesk.schemas.order import ScannedOrderListOut, ScannedOrderOut, ScanOrderCreate
from shopdesk.services.orders import scan_order

router = APIRouter(prefix="/api/scan-orders", tags=["Scan Orders"])

SCAN_ROLES = [UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.WAREHOUSE_AGENT]


def _scan_out(scan: ScannedOrder, order: Order | None, scanner_name: str | None) -> ScannedOrderOut:
    out = ScannedOrderOut.model_validate(scan)
    if order is not None:
        out.order_number = order.order_number
        out.customer_name = order.customer_name
        out.order_status = order.status
    out.scanned_by_name = scanner_name
    return out


@router.post("", response_model=ScannedOrderOut, status_code=status.HTTP_201_CREATED)
def create_scan(
    payload: ScanOrderCreate,
    current_user: User = Depends(require_access(Resource.SCAN_ORDERS, Action.CREATE, SCAN_ROLES)),
    db: Session = Depends(get_db),
):
    scan = scan_order(db, payload, current_user)
    return _scan_out(scan, db.get(Order, scan.order_id), current_user.name)


@router.get("", response_model=ScannedOrderListOut)
def list_scans(
    params: PageParams = Depends(page_params),
    _: User = Depends(require_access(Resource.SCAN_ORDERS, Action.READ, SCAN_ROLES)),
    db: Session = Depends(get_db),
):
    query = (
        select(ScannedOrder, Order, User.name)
        .join(Order, Order.id == ScannedOrder.order_id)
        .outerjoin(User, User.id == ScannedOrder.scanned_by)
        .order_by(ScannedOrder.scanned_at.desc(), ScannedOrder.id.desc())
    )
    rows, total = paginate_rows(db, query, params)
    now = datetime.utcnow()
    today_scans = int(
        db.scalar(
            select(func.count(ScannedOrder.id)).where(
                ScannedOrder.scanned_at >= datetime(now.year, now.month, now.day)
            )
        )
        or 0
    )
    return ScannedOrderListOut(
        scans=[_scan_out(scan, order, scanner_name) for scan, order, scanner_name in rows],
        today_scans=today_scans,
        **page_meta(total, params),
    )
