"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database. The FastAPI app is wired to
it through a dependency override, so routes and services see the same data.
"""
import os
from datetime import date, timedelta
from decimal import Decimal

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SEED_DEMO_DATA", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from medbill import models  # noqa: F401 - register models
from medbill.api.deps import get_db
from medbill.core.security import get_password_hash
from medbill.db.base import Base
from medbill.db.session import build_engine
from medbill.main import app
from medbill.models import Category, Customer, Doctor, Medicine, User

PASSWORD = "secret123"


# ============================================================================
# DATABASE
# ============================================================================


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# HTTP CLIENTS
# ============================================================================


@pytest.fixture
def client(session_factory):
    """Anonymous client. Lifespan is not run, so no startup seeding happens."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db, username: str, role: str, name: str = None) -> User:
    user = User(
        username=username,
        hashed_password=get_password_hash(PASSWORD),
        name=name or username.title(),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db):
    return _make_user(db, "admin", "admin", "Administrator")


@pytest.fixture
def pharmacist_user(db):
    return _make_user(db, "pharma", "pharmacist")


def login(client: TestClient, username: str, password: str = PASSWORD):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp


@pytest.fixture
def admin_client(client, admin_user):
    login(client, admin_user.username)
    return client


@pytest.fixture
def pharmacist_client(client, pharmacist_user):
    login(client, pharmacist_user.username)
    return client


# ============================================================================
# CATALOGUE DATA
# ============================================================================


@pytest.fixture
def catalogue(db):
    """
    Two categories and three medicines:
    - paracetamol: plenty of stock, far expiry
    - cetirizine: below its low-stock threshold
    - amoxicillin: expires in 10 days
    """
    today = date.today()
    pain = Category(name="Pain Relief")
    antibiotics = Category(name="Antibiotics")
    db.add_all([pain, antibiotics])
    db.flush()

    medicines = {
        "paracetamol": Medicine(
            name="Paracetamol 500mg", description="Tablet (Strip of 10)", category_id=pain.id,
            form="tablet", batch_number="B2023056", expiry_date=today + timedelta(days=400),
            mrp=Decimal("25.00"), stock=100, low_stock_threshold=20, gst_rate=Decimal("18"),
        ),
        "cetirizine": Medicine(
            name="Cetirizine 10mg", description="Tablet (Strip of 10)", category_id=pain.id,
            form="tablet", batch_number="B2023089", expiry_date=today + timedelta(days=300),
            mrp=Decimal("30.00"), stock=3, low_stock_threshold=10, gst_rate=Decimal("12"),
        ),
        "amoxicillin": Medicine(
            name="Amoxicillin 250mg", description="Capsule (Strip of 10)", category_id=antibiotics.id,
            form="capsule", batch_number="B2023016", expiry_date=today + timedelta(days=10),
            mrp=Decimal("80.00"), stock=40, low_stock_threshold=15, gst_rate=Decimal("5"),
        ),
    }
    db.add_all(medicines.values())
    db.commit()
    for m in medicines.values():
        db.refresh(m)
    return {"categories": {"pain": pain, "antibiotics": antibiotics}, "medicines": medicines}


@pytest.fixture
def customer(db):
    c = Customer(name="Amit Kumar", phone="9876543220", email="amit@example.com", address="123 Main St, Delhi")
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


@pytest.fixture
def doctor(db):
    d = Doctor(name="Dr. Sharma", specialization="General Physician", phone="9876543210")
    db.add(d)
    db.commit()
    db.refresh(d)
    return d
