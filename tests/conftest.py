"""
Pytest fixtures for the shopdesk API tests.

Every test gets a fresh in-memory SQLite schema, a TestClient wired to it and
factories for users and products.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["IDENTITY_FIELD"] = "phone"
os.environ["BOOTSTRAP_ADMIN_IDENTITY"] = ""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import shopdesk.models  # noqa: F401  registers every table on Base.metadata
from shopdesk.core.security import create_access_token, hash_password
from shopdesk.db.database import Base, get_db
from shopdesk.main import app
from shopdesk.models.user import User, UserRole
from shopdesk.schemas.product import ProductCreate
from shopdesk.services.accounts import login_rate_limiter
from shopdesk.services.catalog import create_product

PASSWORD = "secret123"


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    """Session for arranging data directly; objects stay readable after commit."""
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(engine):
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    login_rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    login_rate_limiter.reset()


@pytest.fixture(scope="function")
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(role=UserRole.ADMIN, *, phone=None, name=None, is_active=True, password=PASSWORD):
        counter["n"] += 1
        user = User(
            phone=phone or f"06000000{counter['n']:02d}",
            name=name or f"{role.value.title()} {counter['n']}",
            password_hash=hash_password(password),
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture(scope="function")
def super_admin(make_user):
    return make_user(UserRole.SUPER_ADMIN, phone="0611111111", name="Root")


@pytest.fixture(scope="function")
def admin(make_user):
    return make_user(UserRole.ADMIN, phone="0622222222", name="Amina")


@pytest.fixture(scope="function")
def shop_agent(make_user):
    return make_user(UserRole.SHOP_AGENT, phone="0633333333", name="Shop Agent")


@pytest.fixture(scope="function")
def warehouse_agent(make_user):
    return make_user(UserRole.WAREHOUSE_AGENT, phone="0644444444", name="Warehouse Agent")


@pytest.fixture(scope="function")
def confirmer(make_user):
    return make_user(UserRole.CONFIRMER, phone="0655555555", name="Confirmer")


def auth_headers(user: User) -> dict:
    token = create_access_token(subject=str(user.id), role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def make_product(db_session):
    def _make_product(
        sku="SKU-1",
        *,
        name=None,
        barcode=None,
        selling_price="100",
        cost_price="50",
        quantity=10,
        min_stock_level=None,
    ):
        payload = ProductCreate(
            name=name or f"Product {sku}",
            sku=sku,
            barcode=barcode,
            selling_price=Decimal(selling_price),
            cost_price=Decimal(cost_price),
            initial_quantity=quantity,
            min_stock_level=min_stock_level,
        )
        product = create_product(db_session, payload, actor_id=None)
        db_session.commit()
        return product

    return _make_product


@pytest.fixture(scope="function")
def headers():
    return auth_headers
