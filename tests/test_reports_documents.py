from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from conftest import make_client, make_product, make_supplier
from electrotech.core.errors import ValidationFailed
from electrotech.services import documents, reports
from electrotech.services import purchases as purchase_service
from electrotech.services import sales as sale_service


def _sell(db, shop, product, quantity, client=None, sold_at=None):
    payload = {
        "client_id": (client or shop["client"]).id,
        "employee_id": shop["employee"].id,
        "payment_method_id": shop["payment_method"].id,
        "lines": [{"product_id": product.id, "quantity": quantity}],
    }
    if sold_at is not None:
        payload["sold_at"] = sold_at
    return sale_service.create_sale(db, payload)


def test_sales_report_compares_with_previous_period(db_session, shop):
    today = date.today()
    _sell(db_session, shop, shop["product"], 2)
    _sell(db_session, shop, shop["product"], 1, sold_at=datetime.now() - timedelta(days=1))

    report = reports.sales_report(db_session, today, today)

    assert report["sales_count"] == 1
    assert report["total_sales"] == Decimal("312.00")
    assert report["daily_average"] == Decimal("312.00")
    assert report["previous_total"] == Decimal("156.00")
    assert report["growth_pct"] == Decimal("100.00")
    assert report["top_products"][0]["quantity"] == 2


def test_growth_is_hundred_without_previous_sales(db_session, shop):
    _sell(db_session, shop, shop["product"], 1)
    report = reports.sales_report(db_session, date.today() - timedelta(days=1), date.today())

    assert report["growth_pct"] == Decimal("100")
    assert report["daily_average"] == Decimal("78.00")


def test_report_range_must_be_ordered(db_session):
    with pytest.raises(ValidationFailed):
        reports.sales_report(db_session, date.today(), date.today() - timedelta(days=1))


def test_top_products_and_category_filter(db_session, shop):
    cable = make_product(db_session, shop["category"], code="AC-1", name="Cable", purchase="2", sale="5", stock=50)
    _sell(db_session, shop, shop["product"], 3)
    _sell(db_session, shop, cable, 10)
    voided = _sell(db_session, shop, cable, 20)
    sale_service.void_sale(db_session, voided)

    rows = reports.top_products(db_session, date.today(), date.today())

    assert [(row["code"], row["quantity"]) for row in rows] == [("AC-1", 10), ("SM-001", 3)]
    assert rows[0]["revenue"] == Decimal("50.00")
    assert reports.top_products(db_session, date.today(), date.today(), category_id=999) == []


def test_top_clients_by_amount_and_count(db_session, shop):
    bruno = make_client(db_session, document_number="2", first_name="Bruno", last_name="Diaz")
    _sell(db_session, shop, shop["product"], 5)
    _sell(db_session, shop, shop["product"], 1, client=bruno)
    _sell(db_session, shop, shop["product"], 1, client=bruno)

    by_amount = reports.top_clients(db_session, date.today(), date.today())
    by_count = reports.top_clients(db_session, date.today(), date.today(), order_by="count")

    assert [row["name"] for row in by_amount] == ["Ana Gomez", "Bruno Diaz"]
    assert [row["name"] for row in by_count] == ["Bruno Diaz", "Ana Gomez"]
    assert by_count[0]["purchases"] == 2
    with pytest.raises(ValidationFailed):
        reports.top_clients(db_session, date.today(), date.today(), order_by="name")


def test_inventory_report(db_session, shop):
    idle = make_product(db_session, shop["category"], code="OLD-1", name="Old Phone", stock=3, min_stock=1)
    received = make_product(db_session, shop["category"], code="NEW-1", name="New Phone", min_stock=0)
    purchase_service.create_purchase(
        db_session,
        {
            "supplier_id": make_supplier(db_session).id,
            "status": "received",
            "lines": [{"product_id": received.id, "quantity": 2, "unit_price": "100.00"}],
        },
    )
    _sell(db_session, shop, shop["product"], 6)

    report = reports.inventory_report(db_session)

    assert report["active_products"] == 3
    assert report["total_units"] == 9
    assert report["total_value"] == Decimal("900.00")
    assert [p.code for p in report["below_minimum"]] == ["SM-001"]
    assert [p.code for p in report["stale_products"]] == [idle.code]


def test_dashboard_summary(db_session, shop):
    _sell(db_session, shop, shop["product"], 6)
    summary = reports.dashboard_summary(db_session)

    assert summary == {
        "product_count": 1,
        "low_stock_count": 1,
        "monthly_sales_total": Decimal("936.00"),
    }


def test_invoice_text_layout(db_session, shop):
    long_name = make_product(
        db_session, shop["category"], code="LG-1", name="Ultra Wide Curved Monitor 34in", stock=2
    )
    sale = sale_service.create_sale(
        db_session,
        {
            "client_id": shop["client"].id,
            "employee_id": shop["employee"].id,
            "payment_method_id": shop["payment_method"].id,
            "lines": [
                {"product_id": shop["product"].id, "quantity": 1},
                {"product_id": long_name.id, "quantity": 1},
            ],
        },
    )

    text = documents.render_invoice_text(sale)
    lines = text.splitlines()

    assert "FACTURA DE VENTA" in text
    assert f"Número de Factura: {sale.invoice_number}" in lines
    assert "Cliente: Ana Gomez" in lines
    assert "Método de Pago: Efectivo" in lines
    assert any(line.startswith("Ultra Wide Curved Mon...") for line in lines)
    assert any(line.startswith("TOTAL:") and line.endswith("$312.00") for line in lines)
    assert "Gracias por su compra!" in text


def test_invoice_pdf_is_rendered(db_session, shop):
    sale = _sell(db_session, shop, shop["product"], 1)
    pdf = documents.render_invoice_pdf(sale)

    assert isinstance(pdf, bytes)
    assert pdf.startswith(b"%PDF")


def test_invoice_pdf_prints_non_latin_names(db_session, shop):
    cable = make_product(db_session, shop["category"], code="USB-C1", name="Cable USB‑C – 1m €", stock=4)
    sale = _sell(db_session, shop, cable, 1)

    pdf = documents.render_invoice_pdf(sale)

    assert pdf.startswith(b"%PDF")
    assert b"DejaVu" in pdf
