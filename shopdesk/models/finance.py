from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shopdesk.db.database import Base


class ChargeType(str, Enum):
    WATER_BILL = "WATER_BILL"
    ELECTRICITY_BILL = "ELECTRICITY_BILL"
    RENT = "RENT"
    LAWYER = "LAWYER"
    BROKEN_PARTS = "BROKEN_PARTS"
    MAINTENANCE = "MAINTENANCE"
    OTHER = "OTHER"


class AdPlatform(str, Enum):
    FACEBOOK = "FACEBOOK"
    INSTAGRAM = "INSTAGRAM"
    GOOGLE = "GOOGLE"
    TIKTOK = "TIKTOK"
    SNAPCHAT = "SNAPCHAT"
    OTHER = "OTHER"


class Salary(Base):
    __tablename__ = "salaries"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    employee_name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    base_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    bonus: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    deductions: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    month: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    year: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class Charge(Base):
    __tablename__ = "charges"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    type: Mapped[ChargeType] = mapped_column(SQLEnum(ChargeType), index=True, nullable=False)
    custom_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    charge_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class AdCost(Base):
    __tablename__ = "ads_costs"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    campaign_name: Mapped[str] = mapped_column(String(255), nullable=False)
    platform: Mapped[AdPlatform] = mapped_column(SQLEnum(AdPlatform), index=True, nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    results: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cost_per_result: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    campaign_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
