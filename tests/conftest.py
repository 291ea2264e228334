"""Pytest fixtures for storefront tests."""

import os

os.environ["SQLALCHEMY_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from storefront import models  # noqa: F401
from storefront.database import get_session
from storefront.models.product import Product
from storefront.models.user import User
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.orders_schemas import OrderItemCreate, PlaceOrderRequest
from storefront.schemas.settings_schemas import SiteConfig
from storefront.services.order_service import place_order
from storefront.utils.token import create_access_token

FIXED_NOW = datetime(2025, 1, 15, 6, 0, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    """Test client whose requests share the test engine."""
    from storefront.main import app

    def override_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def customer(session):
    user = User(email="aisha@example.com", full_name="Aisha Mir", role="customer")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def admin(session):
    user = User(email="ops@example.com", full_name="Ops Desk", role="admin")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_header(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(customer):
    return auth_header(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin)


@pytest.fixture
def attar(session):
    product = Product(
        name="Kashmiri Rose Attar",
        description="Steam-distilled rose oil, 12ml",
        price=Decimal("1500.00"),
        images=["https://cdn.example.com/rose-attar.jpg"],
        sku="ATR-ROSE-12",
        category_id=3,
        seller_id=7,
        stock=10,
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@pytest.fixture
def srinagar_address():
    return ShippingAddress(
        full_name="Aisha Mir",
        street_address="Residency Road",
        city="Srinagar",
        state="Jammu and Kashmir",
        country="India",
        postal_code="190001",
    )


@pytest.fixture
def mumbai_address():
    return ShippingAddress(
        city="Mumbai",
        state="Maharashtra",
        country="India",
        postal_code="400001",
    )


@pytest.fixture
def site_config():
    return SiteConfig()


@pytest.fixture
def placed_order(session, attar, customer, srinagar_address, site_config):
    """A pending order for one attar shipped to Srinagar."""
    payload = PlaceOrderRequest(
        items=[OrderItemCreate(product_id=attar.id, quantity=1)],
        shipping_address=srinagar_address,
        payment_method="razorpay",
    )
    return place_order(session, payload, site_config, user=customer, now=FIXED_NOW)
