from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from shopdesk.api.deps import require_access
from shopdesk.api.pagination import PageParams, page_meta, page_params, paginate_scalars
from shopdesk.core.errors import NotFoundError
from shopdesk.core.permissions import ADMINS_ONLY, Action, Resource
from shopdesk.db.database import get_db
from shopdesk.models.finance import Salary
from shopdesk.models.user import User
from shopdesk.schemas.common import MessageOut
from shopdesk.schemas.finance import SalaryCreate, SalaryListOut, SalaryOut, SalaryStatsOut, SalaryUpdate
from shopdesk.services.money import quantize_money

router = APIRouter(prefix="/api/salaries", tags=["Salaries"])


def net_salary(base_amount: Decimal, bonus: Decimal, deductions: Decimal) -> Decimal:
    return quantize_money(Decimal(base_amount) + Decimal(bonus or 0) - Decimal(deductions or 0))


def _get_salary(db: Session, salary_id: int) -> Salary:
    salary = db.get(Salary, salary_id)
    if not salary:
        raise NotFoundError("Salary not found")
    return salary


@router.get("", response_model=SalaryListOut)
def list_salaries(
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2020, le=2100),
    params: PageParams = Depends(page_params),
    _: User = Depends(require_access(Resource.SALARIES, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    conditions = []
    if month is not None:
        conditions.append(Salary.month == month)
    if year is not None:
        conditions.append(Salary.year == year)

    query = select(Salary).where(*conditions).order_by(Salary.year.desc(), Salary.month.desc(), Salary.id.desc())
    salaries, total = paginate_scalars(db, query, params)

    paid = Salary.paid_at.is_not(None)
    totals = db.execute(
        select(
            func.coalesce(func.sum(case((paid, Salary.total_amount), else_=0)), 0),
            func.coalesce(func.sum(case((paid, 0), else_=Salary.total_amount)), 0),
            func.coalesce(func.sum(case((paid, 1), else_=0)), 0),
            func.coalesce(func.sum(case((paid, 0), else_=1)), 0),
        ).where(*conditions)
    ).one()
    stats = SalaryStatsOut(
        total_paid=quantize_money(totals[0]),
        total_pending=quantize_money(totals[1]),
        paid_count=int(totals[2]),
        pending_count=int(totals[3]),
    )
    return SalaryListOut(salaries=salaries, stats=stats, **page_meta(total, params))


@router.post("", response_model=SalaryOut, status_code=status.HTTP_201_CREATED)
def create_salary(
    payload: SalaryCreate,
    current_user: User = Depends(require_access(Resource.SALARIES, Action.CREATE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    salary = Salary(
        employee_name=payload.employee_name.strip(),
        position=payload.position,
        base_amount=quantize_money(payload.base_amount),
        bonus=quantize_money(payload.bonus),
        deductions=quantize_money(payload.deductions),
        total_amount=net_salary(payload.base_amount, payload.bonus, payload.deductions),
        month=payload.month,
        year=payload.year,
        notes=payload.notes,
        paid_at=payload.paid_at,
        created_by=current_user.id,
    )
    db.add(salary)
    db.commit()
    db.refresh(salary)
    return salary


@router.get("/{salary_id}", response_model=SalaryOut)
def get_salary(
    salary_id: int,
    _: User = Depends(require_access(Resource.SALARIES, Action.READ, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    return _get_salary(db, salary_id)


@router.put("/{salary_id}", response_model=SalaryOut)
def update_salary(
    salary_id: int,
    payload: SalaryUpdate,
    _: User = Depends(require_access(Resource.SALARIES, Action.UPDATE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    salary = _get_salary(db, salary_id)
    changes = payload.model_dump(exclude_unset=True)
    for field_name, value in changes.items():
        if field_name in {"paid_at", "position", "notes"}:
            setattr(salary, field_name, value)
        elif value is not None:
            setattr(salary, field_name, value)
    salary.total_amount = net_salary(salary.base_amount, salary.bonus, salary.deductions)
    db.commit()
    db.refresh(salary)
    return salary


@router.delete("/{salary_id}", response_model=MessageOut)
def delete_salary(
    salary_id: int,
    _: User = Depends(require_access(Resource.SALARIES, Action.DELETE, ADMINS_ONLY)),
    db: Session = Depends(get_db),
):
    db.delete(_get_salary(db, salary_id))
    db.commit()
    return MessageOut(message="Salary deleted successfully")
