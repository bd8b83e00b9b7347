from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shopdesk.api.deps import require_access
from shopdesk.core.permissions import ADMINS_ONLY, Action, Resource
from shopdesk.db.database import get_db
from shopdesk.models.user import User
from shopdesk.schemas.dashboard import DashboardOut
from shopdesk.services.reporting import GRANULARITIES, dashboard

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardOut)
def dashboard_stats(
    granularity: str = Query(default="month", pattern=f"^({'|'.join(GRANULARITIES)})$"),
    months: int = Query(default=6, ge=1, le=24),
    _: User = Depends(require_access(Resource.DASHBOARD, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    return dashboard(db, months=months, granularity=granularity)
