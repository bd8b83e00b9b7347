from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, model_validator

from shopdesk.models.finance import AdPlatform, ChargeType
from shopdesk.schemas.common import ApiModel, PageOut


class SalaryCreate(ApiModel):
    employee_name: str = Field(min_length=1, max_length=255)
    position: str | None = Field(default=None, max_length=100)
    base_amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    bonus: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    deductions: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2020, le=2100)
    notes: str | None = None
    paid_at: datetime | None = None


class SalaryUpdate(ApiModel):
    employee_name: str | None = Field(default=None, min_length=1, max_length=255)
    position: str | None = Field(default=None, max_length=100)
    base_amount: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    bonus: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    deductions: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = Field(default=None, ge=2020, le=2100)
    notes: str | None = None
    paid_at: datetime | None = None


class SalaryOut(ApiModel):
    id: int
    employee_name: str
    position: str | None
    base_amount: Decimal
    bonus: Decimal
    deductions: Decimal
    total_amount: Decimal
    month: int
    year: int
    notes: str | None
    paid_at: datetime | None
    created_by: int | None
    created_at: datetime


class SalaryStatsOut(ApiModel):
    total_paid: Decimal
    total_pending: Decimal
    paid_count: int
    pending_count: int


class SalaryListOut(PageOut):
    salaries: list[SalaryOut]
    stats: SalaryStatsOut


class ChargeCreate(ApiModel):
    type: ChargeType
    custom_type: str | None = Field(default=None, max_length=100)
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    description: str | None = None
    charge_date: date

    @model_validator(mode="after")
    def require_custom_type(self):
        if self.type == ChargeType.OTHER and not (self.custom_type or "").strip():
            raise ValueError("customType is required when type is OTHER")
        return self


class ChargeUpdate(ApiModel):
    type: ChargeType | None = None
    custom_type: str | None = Field(default=None, max_length=100)
    amount: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    description: str | None = None
    charge_date: date | None = None


class ChargeOut(ApiModel):
    id: int
    type: ChargeType
    custom_type: str | None
    amount: Decimal
    description: str | None
    charge_date: date
    created_by: int | None
    created_at: datetime


class ChargeTypeTotalOut(ApiModel):
    type: ChargeType
    total: Decimal
    count: int


class ChargeListOut(PageOut):
    charges: list[ChargeOut]
    total_amount: Decimal
    by_type: list[ChargeTypeTotalOut]


class AdCostCreate(ApiModel):
    campaign_name: str = Field(min_length=1, max_length=255)
    platform: AdPlatform
    cost: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    results: int = Field(default=0, ge=0)
    campaign_date: date
    notes: str | None = None


class AdCostUpdate(ApiModel):
    campaign_name: str | None = Field(default=None, min_length=1, max_length=255)
    platform: AdPlatform | None = None
    cost: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    results: int | None = Field(default=None, ge=0)
    campaign_date: date | None = None
    notes: str | None = None


class AdCostOut(ApiModel):
    id: int
    campaign_name: str
    platform: AdPlatform
    cost: Decimal
    results: int
    cost_per_result: Decimal
    campaign_date: date
    notes: str | None
    created_by: int | None
    created_at: datetime


class PlatformSummaryOut(ApiModel):
    platform: AdPlatform
    total_cost: Decimal
    total_results: int
    campaigns: int


class AdCostSummaryOut(ApiModel):
    by_platform: list[PlatformSummaryOut]
    total_cost: Decimal
    total_results: int
    avg_cost_per_result: Decimal


class AdCostListOut(PageOut):
    ads_costs: list[AdCostOut]
    summary: AdCostSummaryOut
