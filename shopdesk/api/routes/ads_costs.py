from decimal import Decimal

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopdesk.api.deps import require_access
from shopdesk.api.pagination import PageParams, page_meta, page_params, paginate_scalars
from shopdesk.core.errors import NotFoundError
from shopdesk.core.permissions import ADMINS_ONLY, Action, Resource
from shopdesk.db.database import get_db
from shopdesk.models.finance import AdCost
from shopdesk.models.user import User
from shopdesk.schemas.common import MessageOut
from shopdesk.schemas.finance import (
    AdCostCreate,
    AdCostListOut,
    AdCostOut,
    AdCostSummaryOut,
    AdCostUpdate,
    PlatformSummaryOut,
)
from shopdesk.services.money import ZERO, quantize_money

router = APIRouter(prefix="/api/ads-costs", tags=["Ads Costs"])


def cost_per_result(cost: Decimal, results: int) -> Decimal:
    if not results:
        return ZERO
    return quantize_money(Decimal(cost) / Decimal(results))


def _get_ad_cost(db: Session, ad_cost_id: int) -> AdCost:
    ad_cost = db.get(AdCost, ad_cost_id)
    if not ad_cost:
        raise NotFoundError("Ad cost not found")
    return ad_cost


@router.get("", response_model=AdCostListOut)
def list_ads_costs(
    params: PageParams = Depends(page_params),
    _: User = Depends(require_access(Resource.ADS_COSTS, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    query = select(AdCost).order_by(AdCost.campaign_date.desc(), AdCost.id.desc())
    ads_costs, total = paginate_scalars(db, query, params)

    rows = db.execute(
        select(
            AdCost.platform,
            func.coalesce(func.sum(AdCost.cost), 0),
            func.coalesce(func.sum(AdCost.results), 0),
            func.count(AdCost.id),
        ).group_by(AdCost.platform)
    ).all()
    by_platform = [
        PlatformSummaryOut(
            platform=platform,
            total_cost=quantize_money(platform_cost),
            total_results=int(platform_results),
            campaigns=int(campaigns),
        )
        for platform, platform_cost, platform_results, campaigns in rows
    ]
    total_cost = quantize_money(sum((item.total_cost for item in by_platform), ZERO))
    total_results = sum(item.total_results for item in by_platform)
    summary = AdCostSummaryOut(
        by_platform=by_platform,
        total_cost=total_cost,
        total_results=total_results,
        avg_cost_per_result=cost_per_result(total_cost, total_results),
    )
    return AdCostListOut(ads_costs=ads_costs, summary=summary, **page_meta(total, params))


@router.post("", response_model=AdCostOut, status_code=status.HTTP_201_CREATED)
def create_ad_cost(
    payload: AdCostCreate,
    current_user: User = Depends(require_access(Resource.ADS_COSTS, Action.CREATE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    ad_cost = AdCost(
        campaign_name=payload.campaign_name.strip(),
        platform=payload.platform,
        cost=quantize_money(payload.cost),
        results=payload.results,
        cost_per_result=cost_per_result(payload.cost, payload.results),
        campaign_date=payload.campaign_date,
        notes=payload.notes,
        created_by=current_user.id,
    )
    db.add(ad_cost)
    db.commit()
    db.refresh(ad_cost)
    return ad_cost


@router.get("/{ad_cost_id}", response_model=AdCostOut)
def get_ad_cost(
    ad_cost_id: int,
    _: User = Depends(require_access(Resource.ADS_COSTS, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    return _get_ad_cost(db, ad_cost_id)


@router.put("/{ad_cost_id}", response_model=AdCostOut)
def update_ad_cost(
    ad_cost_id: int,
    payload: AdCostUpdate,
    _: User = Depends(require_access(Resource.ADS_COSTS, Action.UPDATE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    ad_cost = _get_ad_cost(db, ad_cost_id)
    changes = payload.model_dump(exclude_unset=True)
    for field_name, value in changes.items():
        if field_name == "notes" or value is not None:
            setattr(ad_cost, field_name, value)
    ad_cost.cost = quantize_money(ad_cost.cost)
    ad_cost.cost_per_result = cost_per_result(ad_cost.cost, ad_cost.results)
    db.commit()
    db.refresh(ad_cost)
    return ad_cost


@router.delete("/{ad_cost_id}", response_model=MessageOut)
def delete_ad_cost(
    ad_cost_id: int,
    _: User = Depends(require_access(Resource.ADS_COSTS, Action.DELETE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    db.delete(_get_ad_cost(db, ad_cost_id))
    db.commit()
    return MessageOut(message="Ad cost deleted successfully")
