from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopdesk.api.deps import require_access
from shopdesk.api.pagination import PageParams, page_meta, page_params, paginate_scalars
from shopdesk.core.errors import BadRequestError, NotFoundError
from shopdesk.core.permissions import ADMINS_ONLY, Action, Resource
from shopdesk.db.database import get_db
from shopdesk.models.finance import Charge, ChargeType
from shopdesk.models.user import User
from shopdesk.schemas.common import MessageOut
from shopdesk.schemas.finance import ChargeCreate, ChargeListOut, ChargeOut, ChargeTypeTotalOut, ChargeUpdate
from shopdesk.services.money import quantize_money

router = APIRouter(prefix="/api/charges", tags=["Charges"])


def _get_charge(db: Session, charge_id: int) -> Charge:
    charge = db.get(Charge, charge_id)
    if not charge:
        raise NotFoundError("Charge not found")
    return charge


@router.get("", response_model=ChargeListOut)
def list_charges(
    charge_type: ChargeType | None = Query(default=None, alias="type"),
    from_date: date | None = Query(default=None, alias="fromDate"),
    to_date: date | None = Query(default=None, alias="toDate"),
    params: PageParams = Depends(page_params),
    _: User = Depends(require_access(Resource.CHARGES, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    conditions = []
    if charge_type is not None:
        conditions.append(Charge.type == charge_type)
    if from_date is not None:
        conditions.append(Charge.charge_date >= from_date)
    if to_date is not None:
        conditions.append(Charge.charge_date <= to_date)

    query = select(Charge).where(*conditions).order_by(Charge.charge_date.desc(), Charge.id.desc())
    charges, total = paginate_scalars(db, query, params)

    by_type_rows = db.execute(
        select(Charge.type, func.coalesce(func.sum(Charge.amount), 0), func.count(Charge.id))
        .where(*conditions)
        .group_by(Charge.type)
    ).all()
    by_type = [
        ChargeTypeTotalOut(type=row_type, total=quantize_money(row_total), count=int(row_count))
        for row_type, row_total, row_count in by_type_rows
    ]
    total_amount = quantize_money(sum((item.total for item in by_type), quantize_money(0)))
    return ChargeListOut(
        charges=charges,
        total_amount=total_amount,
        by_type=by_type,
        **page_meta(total, params),
    )


@router.post("", response_model=ChargeOut, status_code=status.HTTP_201_CREATED)
def create_charge(
    payload: ChargeCreate,
    current_user: User = Depends(require_access(Resource.CHARGES, Action.CREATE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    charge = Charge(
        type=payload.type,
        custom_type=(payload.custom_type or "").strip() or None,
        amount=quantize_money(payload.amount),
        description=payload.description,
        charge_date=payload.charge_date,
        created_by=current_user.id,
    )
    db.add(charge)
    db.commit()
    db.refresh(charge)
    return charge


@router.get("/{charge_id}", response_model=ChargeOut)
def get_charge(
    charge_id: int,
    _: User = Depends(require_access(Resource.CHARGES, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    return _get_charge(db, charge_id)


@router.put("/{charge_id}", response_model=ChargeOut)
def update_charge(
    charge_id: int,
    payload: ChargeUpdate,
    _: User = Depends(require_access(Resource.CHARGES, Action.UPDATE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    charge = _get_charge(db, charge_id)
    changes = payload.model_dump(exclude_unset=True)
    for field_name, value in changes.items():
        if field_name in {"custom_type", "description"}:
            setattr(charge, field_name, value)
        elif value is not None:
            setattr(charge, field_name, value)
    if charge.type == ChargeType.OTHER and not (charge.custom_type or "").strip():
        raise BadRequestError("customType is required when type is OTHER")
    charge.amount = quantize_money(charge.amount)
    db.commit()
    db.refresh(charge)
    return charge


@router.delete("/{charge_id}", response_model=MessageOut)
def delete_charge(
    charge_id: int,
    _: User = Depends(require_access(Resource.CHARGES, Action.DELETE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    db.delete(_get_charge(db, charge_id))
    db.commit()
    return MessageOut(message="Charge deleted successfully")
