import os
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")

from electrotech.crud.payment_methods import create_payment_method
from electrotech.crud.products import StockMovement, adjust_stock
from electrotech.db.session import Base
from electrotech.services import categories as category_service
from electrotech.services import clients as client_service
from electrotech.services import employees as employee_service
from electrotech.services import products as product_service
from electrotech.services import suppliers as supplier_service

# Ensure models are imported so metadata is populated
from electrotech import models  # noqa: F401


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_category(db, name="Smartphones"):
    return category_service.create_category(db, {"name": name, "description": f"{name} line"})


def make_product(db, category, code="SM-001", name="Phone X", purchase="100.00", sale="150.00", stock=0, min_stock=5):
    product = product_service.create_product(
        db,
        {
            "code": code,
            "name": name,
            "category_id": category.id,
            "purchase_price": purchase,
            "sale_price": sale,
            "min_stock": min_stock,
        },
    )
    if stock:
        adjust_stock(db, product.id, stock, StockMovement.IN)
        db.refresh(product)
    return product


def make_client(db, document_number="12345678", first_name="Ana", last_name="Gomez"):
    return client_service.create_client(
        db,
        {
            "document_type": "DNI",
            "document_number": document_number,
            "first_name": first_name,
            "last_name": last_name,
            "email": "ana@example.com",
        },
    )


def make_employee(db, document_number="87654321", account=None):
    return employee_service.create_employee(
        db,
        {
            "document_type": "DNI",
            "document_number": document_number,
            "first_name": "Luis",
            "last_name": "Perez",
            "phone": "555-0100",
            "hired_on": date.today() - timedelta(days=365),
            "base_salary": Decimal("1500.00"),
        },
        account,
    )


def make_supplier(db, name="Tech Distribuciones"):
    return supplier_service.create_supplier(db, {"name": name, "email": "ventas@techdist.com"})


def make_payment_method(db, name="Efectivo"):
    return create_payment_method(db, {"name": name})


@pytest.fixture()
def shop(db_session):
    """A category, a stocked product, a client, a seller and a payment method."""

    category = make_category(db_session)
    return {
        "category": category,
        "product": make_product(db_session, category, stock=10),
        "client": make_client(db_session),
        "employee": make_employee(db_session),
        "payment_method": make_payment_method(db_session),
    }
