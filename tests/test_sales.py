from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from conftest import make_product
from electrotech.core.errors import ConflictError, ValidationFailed
from electrotech.crud import products as product_repo
from electrotech.crud import sales as sale_repo
from electrotech.models.sale import SaleStatus
from electrotech.services import sales as sale_service


def _payload(shop, quantity=2, **extra):
    payload = {
        "client_id": shop["client"].id,
        "employee_id": shop["employee"].id,
        "payment_method_id": shop["payment_method"].id,
        "lines": [{"product_id": shop["product"].id, "quantity": quantity}],
    }
    payload.update(extra)
    return payload


def test_compute_totals_taxes_after_discount():
    totals = sale_service.compute_totals([{"subtotal": "100.00"}, {"subtotal": "50.00"}], discount="10.00")

    assert totals["subtotal"] == Decimal("150.00")
    assert totals["tax"] == Decimal("5.60")
    assert totals["total"] == Decimal("145.60")


def test_create_sale_moves_stock_and_books_commission(db_session, shop):
    sale = sale_service.create_sale(db_session, _payload(shop))

    assert sale.status == SaleStatus.COMPLETED.value
    assert sale.invoice_number == f"F-{date.today():%Y%m%d}-0001"
    assert sale.subtotal == Decimal("300.00")
    assert sale.tax == Decimal("12.00")
    assert sale.total == Decimal("312.00")
    assert sale.lines[0].unit_price == Decimal("150.00")
    assert sale.commission.amount == Decimal("6.24")
    assert product_repo.get_stock(db_session, shop["product"].id) == 8


def test_invoice_numbers_follow_the_day_sequence(db_session, shop):
    first = sale_service.create_sale(db_session, _payload(shop, quantity=1))
    second = sale_service.create_sale(db_session, _payload(shop, quantity=1))

    assert first.invoice_number.endswith("-0001")
    assert second.invoice_number.endswith("-0002")
    assert sale_repo.next_invoice_number(db_session).endswith("-0003")


def test_sale_beyond_stock_is_rejected_without_side_effects(db_session, shop):
    with pytest.raises(ValidationFailed, match="Not enough stock"):
        sale_service.create_sale(db_session, _payload(shop, quantity=11))

    assert product_repo.get_stock(db_session, shop["product"].id) == 10
    assert sale_repo.list_sales(db_session) == []


def test_discount_ceiling(db_session, shop):
    with pytest.raises(ValidationFailed, match="30%"):
        sale_service.create_sale(db_session, _payload(shop, discount="100.00"))

    sale = sale_service.create_sale(db_session, _payload(shop, discount="90.00"))
    assert sale.discount == Decimal("90.00")
    assert sale.total == Decimal("218.40")


def test_duplicate_invoice_number_is_a_conflict(db_session, shop):
    sale_service.create_sale(db_session, _payload(shop, quantity=1, invoice_number="F-MANUAL-1"))
    with pytest.raises(ConflictError):
        sale_service.create_sale(db_session, _payload(shop, quantity=1, invoice_number="F-MANUAL-1"))
    assert product_repo.get_stock(db_session, shop["product"].id) == 9


def test_update_pending_sale_moves_only_the_difference(db_session, shop):
    other = make_product(db_session, shop["category"], code="SM-002", name="Phone Y", stock=5)
    sale = sale_service.create_sale(db_session, _payload(shop, quantity=2, status="pending"))

    updated = sale_service.update_sale(
        db_session,
        sale,
        {
            "lines": [
                {"product_id": shop["product"].id, "quantity": 3},
                {"product_id": other.id, "quantity": 1},
            ]
        },
    )

    assert len(updated.lines) == 2
    assert updated.subtotal == Decimal("600.00")
    assert product_repo.get_stock(db_session, shop["product"].id) == 7
    assert product_repo.get_stock(db_session, other.id) == 4
    assert updated.commission.amount == Decimal("12.48")


def test_completed_sale_cannot_be_edited(db_session, shop):
    sale = sale_service.create_sale(db_session, _payload(shop))
    with pytest.raises(ConflictError, match="only pending"):
        sale_service.update_sale(db_session, sale, {"notes": "late change"})


def test_complete_pending_sale(db_session, shop):
    sale = sale_service.create_sale(db_session, _payload(shop, status="pending"))
    sale = sale_service.complete_sale(db_session, sale)

    assert sale.status == SaleStatus.COMPLETED.value
    with pytest.raises(ConflictError):
        sale_service.complete_sale(db_session, sale)


def test_void_restores_stock_and_drops_commission(db_session, shop):
    sale = sale_service.create_sale(db_session, _payload(shop, quantity=4))
    sale = sale_service.void_sale(db_session, sale)

    assert sale.status == SaleStatus.VOIDED.value
    assert sale.commission is None
    assert product_repo.get_stock(db_session, shop["product"].id) == 10
    with pytest.raises(ConflictError, match="already voided"):
        sale_service.void_sale(db_session, sale)


def test_monthly_total_counts_completed_sales_only(db_session, shop):
    sale_service.create_sale(db_session, _payload(shop, quantity=1))
    voided = sale_service.create_sale(db_session, _payload(shop, quantity=1))
    sale_service.void_sale(db_session, voided)
    sale_service.create_sale(db_session, _payload(shop, quantity=1, status="pending"))

    assert sale_service.monthly_sales_total(db_session) == Decimal("156.00")


def test_sales_queries(db_session, shop):
    last_week = datetime.now() - timedelta(days=7)
    old = sale_service.create_sale(db_session, _payload(shop, quantity=1, sold_at=last_week))
    recent = sale_service.create_sale(db_session, _payload(shop, quantity=1))

    assert [s.id for s in sale_repo.list_sales(db_session)] == [recent.id, old.id]
    in_range = sale_repo.list_sales_by_date_range(db_session, date.today(), date.today())
    assert [s.id for s in in_range] == [recent.id]
    assert len(sale_repo.list_sales_by_client(db_session, shop["client"].id)) == 2
    assert sale_repo.get_sale_by_invoice(db_session, old.invoice_number).id == old.id
    assert old.invoice_number.startswith(f"F-{last_week:%Y%m%d}")
