import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import make_client, make_employee, make_payment_method
from electrotech.db.init import ensure_admin_user
from electrotech.db.session import Base, get_db
from electrotech.main import app
from electrotech.services import auth as auth_service


@pytest.fixture()
def api():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    session = TestingSessionLocal()
    ensure_admin_user(session)
    try:
        yield TestClient(app), session
    finally:
        app.dependency_overrides.clear()
        session.close()


def _login(client, username="admin", password="Admin123"):
    resp = client.post("/api/v1/auth/token", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def test_health_is_open(api):
    client, _ = api
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_missing_token_returns_error_envelope(api):
    client, _ = api
    resp = client.get("/api/v1/products")
    assert resp.status_code == 401
    body = resp.json()
    assert body["code"] == "authentication_failed"
    assert body["message"] == "Authorization required"
    assert resp.headers.get("X-Request-ID")


def test_wrong_password_is_rejected(api):
    client, _ = api
    resp = client.post("/api/v1/auth/token", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid username or password"


def test_me_returns_logged_in_user(api):
    client, _ = api
    resp = client.get("/api/v1/auth/me", headers=_login(client))
    assert resp.status_code == 200
    assert resp.json()["username"] == "admin"
    assert resp.json()["level"] == 1


def test_sporadic_user_only_sees_reports(api):
    client, session = api
    auth_service.create_user(session, {"username": "viewer", "password": "secret1", "level": 3})
    headers = _login(client, "viewer", "secret1")

    denied = client.get("/api/v1/products", headers=headers)
    assert denied.status_code == 403
    assert denied.json()["code"] == "permission_denied"

    dashboard = client.get("/api/v1/reports/dashboard", headers=headers)
    assert dashboard.status_code == 200
    assert dashboard.json()["product_count"] == 0


def test_catalog_and_sale_flow(api):
    client, session = api
    headers = _login(client)

    category = client.post(
        "/api/v1/categories",
        json={"name": "Smartphones", "description": "Phones"},
        headers=headers,
    )
    assert category.status_code == 201, category.text
    product = client.post(
        "/api/v1/products",
        json={
            "code": "SM-001",
            "name": "Phone X",
            "category_id": category.json()["id"],
            "purchase_price": "100.00",
            "sale_price": "150.00",
            "min_stock": 1,
        },
        headers=headers,
    )
    assert product.status_code == 201, product.text
    product_id = product.json()["id"]

    stocked = client.post(
        f"/api/v1/products/{product_id}/stock",
        json={"quantity": 5, "movement": "in"},
        headers=headers,
    )
    assert stocked.status_code == 200, stocked.text

    buyer = make_client(session)
    seller = make_employee(session)
    method = make_payment_method(session)
    sale = client.post(
        "/api/v1/sales",
        json={
            "client_id": buyer.id,
            "employee_id": seller.id,
            "payment_method_id": method.id,
            "lines": [{"product_id": product_id, "quantity": 2}],
        },
        headers=headers,
    )
    assert sale.status_code == 201, sale.text
    body = sale.json()
    assert body["status"] == "completed"
    assert body["total"] == "312.00"

    invoice = client.get(f"/api/v1/sales/{body['id']}/invoice", headers=headers)
    assert invoice.status_code == 200
    assert invoice.headers["content-type"].startswith("text/plain")
    assert "FACTURA DE VENTA" in invoice.text
    assert body["invoice_number"] in invoice.text

    pdf = client.get(f"/api/v1/sales/{body['id']}/invoice.pdf", headers=headers)
    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")

    refreshed = client.get(f"/api/v1/products/{product_id}", headers=headers)
    assert refreshed.json()["stock"] == 3


def test_business_rule_violation_maps_to_422(api):
    client, _ = api
    headers = _login(client)
    resp = client.post("/api/v1/categories", json={"name": "  "}, headers=headers)
    assert resp.status_code == 422
    assert resp.json()["code"] == "business_rule_violation"


def test_unknown_resource_returns_not_found_envelope(api):
    client, _ = api
    resp = client.get("/api/v1/products/999", headers=_login(client))
    assert resp.status_code == 404
    assert resp.json() == {"code": "http_error", "message": "Not found"}


def test_wrong_current_password_is_a_field_error(api):
    client, _ = api
    resp = client.post(
        "/api/v1/auth/password",
        json={"current_password": "wrong-one", "new_password": "N3wPassword"},
        headers=_login(client),
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "business_rule_violation"
    assert resp.json()["details"] == {"field": "current_password"}
