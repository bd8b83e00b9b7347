from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field, field_validator

from shopdesk.schemas.common import ApiModel, PageOut

ProductSort = Literal["name", "sku", "sellingPrice", "createdAt"]
SortOrder = Literal["asc", "desc"]


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class ProductCreate(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    sku: str = Field(min_length=1, max_length=100)
    barcode: str | None = Field(default=None, max_length=100)
    selling_price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    cost_price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    description: str | None = None
    image_url: str | None = Field(default=None, max_length=500)
    initial_quantity: int = Field(default=0, ge=0)
    min_stock_level: int | None = Field(default=None, ge=0)
    warehouse_location: str | None = Field(default=None, max_length=100)

    @field_validator("name", "sku")
    @classmethod
    def strip_required(cls, value: str) -> str:
        return _strip_required(value)

    @field_validator("barcode", "image_url", "description", "warehouse_location")
    @classmethod
    def blank_optional(cls, value: str | None) -> str | None:
        return _blank_to_none(value)


class ProductUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    sku: str | None = Field(default=None, min_length=1, max_length=100)
    barcode: str | None = Field(default=None, max_length=100)
    selling_price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    cost_price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    description: str | None = None
    image_url: str | None = Field(default=None, max_length=500)
    is_active: bool | None = None

    @field_validator("name", "sku")
    @classmethod
    def strip_required(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _strip_required(value)


class ProductOut(ApiModel):
    id: int
    name: str
    sku: str
    barcode: str | None
    selling_price: Decimal
    cost_price: Decimal
    description: str | None
    image_url: str | None
    is_active: bool
    created_by: int | None
    created_at: datetime
    updated_at: datetime


class ProductWithStockOut(ProductOut):
    stock_quantity: int = 0
    min_stock_level: int = 0
    warehouse_location: str | None = None


class ProductListOut(PageOut):
    products: list[ProductWithStockOut]


class ImportedProductOut(ApiModel):
    sku: str
    name: str


class ImportRowErrorOut(ApiModel):
    row: int
    error: str


class ProductImportOut(ApiModel):
    imported: int
    products: list[ImportedProductOut]
    errors: list[ImportRowErrorOut]
