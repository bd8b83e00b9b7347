from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from shopdesk.api.deps import require_access
from shopdesk.api.pagination import PageParams, page_meta, page_params, paginate_rows
from shopdesk.core.errors import BadRequestError, NotFoundError
from shopdesk.core.permissions import Action, Resource
from shopdesk.db.database import get_db
from shopdesk.models.inventory import Product, Stock
from shopdesk.models.user import User, UserRole
from shopdesk.schemas.common import MessageOut
from shopdesk.schemas.product import (
    ProductCreate,
    ProductImportOut,
    ProductListOut,
    ProductSort,
    ProductUpdate,
    ProductWithStockOut,
    SortOrder,
)
from shopdesk.services.catalog import create_product, get_product, update_product
from shopdesk.services.product_import import import_products_csv

router = APIRouter(prefix="/api/products", tags=["Products"])

SORT_COLUMNS = {
    "name": Product.name,
    "sku": Product.sku,
    "sellingPrice": Product.selling_price,
    "createdAt": Product.created_at,
}


def _with_stock(product: Product, stock: Stock | None) -> ProductWithStockOut:
    out = ProductWithStockOut.model_validate(product)
    if stock is not None:
        out.stock_quantity = stock.quantity
        out.min_stock_level = stock.min_stock_level
        out.warehouse_location = stock.warehouse_location
    return out


def _load_with_stock(db: Session, product: Product) -> ProductWithStockOut:
    stock = db.scalar(select(Stock).where(Stock.product_id == product.id))
    return _with_stock(product, stock)


@router.get("", response_model=ProductListOut)
def list_products(
    search: str | None = None,
    sort: ProductSort = "createdAt",
    order: SortOrder = "desc",
    params: PageParams = Depends(page_params),
    _: User = Depends(require_access(Resource.PRODUCTS, Action.READ)),
    db: Session = Depends(get_db),
):
    query = (
        select(Product, Stock)
        .outerjoin(Stock, Stock.product_id == Product.id)
        .where(Product.is_active.is_(True))
    )
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.barcode.ilike(pattern),
            )
        )
    column = SORT_COLUMNS[sort]
    query = query.order_by(column.asc() if order == "asc" else column.desc(), Product.id.asc())
    rows, total = paginate_rows(db, query, params)
    return ProductListOut(
        products=[_with_stock(product, stock) for product, stock in rows],
        **page_meta(total, params),
    )


@router.post("", response_model=ProductWithStockOut, status_code=status.HTTP_201_CREATED)
def create_product_route(
    payload: ProductCreate,
    current_user: User = Depends(require_access(Resource.PRODUCTS, Action.CREATE)),
    db: Session = Depends(get_db),
):
    product = create_product(db, payload, actor_id=current_user.id)
    db.commit()
    db.refresh(product)
    return _load_with_stock(db, product)


@router.post("/import-csv", response_model=ProductImportOut)
def import_products(
    file: UploadFile | None = File(default=None),
    current_user: User = Depends(
        require_access(Resource.PRODUCTS, Action.CREATE, [UserRole.SUPER_ADMIN, UserRole.ADMIN])
    ),
    db: Session = Depends(get_db),
):
    if file is None:
        raise BadRequestError("No file provided")
    if not (file.filename or "").lower().endswith(".csv"):
        raise BadRequestError("File must be a CSV")
    raw = file.file.read()
    result = import_products_csv(db, raw, actor_id=current_user.id)
    db.commit()
    return ProductImportOut(imported=result.imported, products=result.products, errors=result.errors)


@router.get("/barcode/{barcode}", response_model=ProductWithStockOut)
def get_product_by_barcode(
    barcode: str,
    _: User = Depends(require_access(Resource.PRODUCTS, Action.READ)),
    db: Session = Depends(get_db),
):
    product = db.scalar(select(Product).where(Product.barcode == barcode.strip()))
    if not product:
        raise NotFoundError("Product not found")
    return _load_with_stock(db, product)


@router.get("/{product_id}", response_model=ProductWithStockOut)
def get_product_route(
    product_id: int,
    _: User = Depends(require_access(Resource.PRODUCTS, Action.READ)),
    db: Session = Depends(get_db),
):
    return _load_with_stock(db, get_product(db, product_id))


@router.put("/{product_id}", response_model=ProductWithStockOut)
def update_product_route(
    product_id: int,
    payload: ProductUpdate,
    _: User = Depends(require_access(Resource.PRODUCTS, Action.UPDATE)),
    db: Session = Depends(get_db),
):
    product = update_product(db, get_product(db, product_id), payload)
    db.commit()
    db.refresh(product)
    return _load_with_stock(db, product)


@router.delete("/{product_id}", response_model=MessageOut)
def delete_product(
    product_id: int,
    _: User = Depends(require_access(Resource.PRODUCTS, Action.DELETE, [UserRole.SUPER_ADMIN])),
    db: Session = Depends(get_db),
):
    product = get_product(db, product_id)
    product.is_active = False
    db.commit()
    return MessageOut(message="Product deleted successfully")

