from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import make_category, make_product, make_supplier
from electrotech.core.errors import ConflictError, ValidationFailed
from electrotech.crud import products as product_repo
from electrotech.crud import purchases as purchase_repo
from electrotech.models.purchase import PurchaseStatus
from electrotech.services import purchases as purchase_service


@pytest.fixture()
def stockroom(db_session):
    category = make_category(db_session, "Componentes")
    return {
        "supplier": make_supplier(db_session),
        "ram": make_product(db_session, category, code="RAM-16", name="RAM 16GB", purchase="40.00", sale="60.00"),
        "ssd": make_product(db_session, category, code="SSD-1T", name="SSD 1TB", purchase="70.00", sale="95.00"),
    }


def _payload(stockroom, **extra):
    payload = {
        "supplier_id": stockroom["supplier"].id,
        "lines": [
            {"product_id": stockroom["ram"].id, "quantity": 10, "unit_price": "40.00"},
            {"product_id": stockroom["ssd"].id, "quantity": 5, "unit_price": "70.00"},
        ],
    }
    payload.update(extra)
    return payload


def test_next_order_number_format(db_session, stockroom):
    expected = f"CO{date.today():%Y%m%d}0001"
    assert purchase_service.next_order_number(db_session) == expected

    purchase = purchase_service.create_purchase(db_session, _payload(stockroom))
    assert purchase.order_number == expected
    assert purchase_repo.next_order_number(db_session).endswith("0002")


def test_pending_purchase_does_not_touch_stock(db_session, stockroom):
    purchase = purchase_service.create_purchase(db_session, _payload(stockroom, tax="20.00"))

    assert purchase.status == PurchaseStatus.PENDING.value
    assert purchase.subtotal == Decimal("750.00")
    assert purchase.total == Decimal("770.00")
    assert purchase.supplier_name == "Tech Distribuciones"
    assert product_repo.get_stock(db_session, stockroom["ram"].id) == 0


def test_receive_adds_stock_once(db_session, stockroom):
    purchase = purchase_service.create_purchase(db_session, _payload(stockroom))
    purchase = purchase_service.receive_purchase(db_session, purchase)

    assert purchase.status == PurchaseStatus.RECEIVED.value
    assert purchase.received_at is not None
    assert product_repo.get_stock(db_session, stockroom["ram"].id) == 10
    assert product_repo.get_stock(db_session, stockroom["ssd"].id) == 5

    with pytest.raises(ConflictError):
        purchase_service.receive_purchase(db_session, purchase)
    with pytest.raises(ConflictError):
        purchase_service.cancel_purchase(db_session, purchase)
    assert product_repo.get_stock(db_session, stockroom["ram"].id) == 10


def test_created_as_received_adds_stock(db_session, stockroom):
    purchase_service.create_purchase(db_session, _payload(stockroom, status="received"))
    assert product_repo.get_stock(db_session, stockroom["ssd"].id) == 5


def test_mismatched_totals_are_rejected(db_session, stockroom):
    with pytest.raises(ValidationFailed, match="does not equal subtotal"):
        purchase_service.create_purchase(db_session, _payload(stockroom, tax="10.00", total="700.00"))

    lines = [{"product_id": stockroom["ram"].id, "quantity": 2, "unit_price": "40.00", "subtotal": "90.00"}]
    with pytest.raises(ValidationFailed, match="subtotal"):
        purchase_service.create_purchase(db_session, _payload(stockroom, lines=lines))


def test_duplicate_order_number(db_session, stockroom):
    purchase_service.create_purchase(db_session, _payload(stockroom, order_number="CO-MANUAL"))
    with pytest.raises(ConflictError):
        purchase_service.create_purchase(db_session, _payload(stockroom, order_number="CO-MANUAL"))


def test_update_pending_replaces_lines_and_can_receive(db_session, stockroom):
    purchase = purchase_service.create_purchase(db_session, _payload(stockroom))
    updated = purchase_service.update_purchase(
        db_session,
        purchase,
        {
            "status": "received",
            "lines": [{"product_id": stockroom["ram"].id, "quantity": 3, "unit_price": "41.00"}],
        },
    )

    assert updated.status == PurchaseStatus.RECEIVED.value
    assert len(updated.lines) == 1
    assert updated.subtotal == Decimal("123.00")
    assert product_repo.get_stock(db_session, stockroom["ram"].id) == 3
    assert product_repo.get_stock(db_session, stockroom["ssd"].id) == 0


def test_cancelled_purchase_is_frozen(db_session, stockroom):
    purchase = purchase_service.create_purchase(db_session, _payload(stockroom))
    purchase = purchase_service.cancel_purchase(db_session, purchase)

    assert purchase.status == PurchaseStatus.CANCELLED.value
    with pytest.raises(ConflictError, match="only pending"):
        purchase_service.update_purchase(db_session, purchase, {"notes": "retry"})


def test_purchase_queries(db_session, stockroom):
    first = purchase_service.create_purchase(db_session, _payload(stockroom))
    second = purchase_service.create_purchase(db_session, _payload(stockroom, ordered_at=datetime(2024, 1, 5, 10, 0)))
    purchase_service.receive_purchase(db_session, first)

    assert purchase_repo.get_purchase_by_order_number(db_session, first.order_number).id == first.id
    by_status = purchase_repo.list_purchases_by_status(db_session, PurchaseStatus.RECEIVED)
    assert [p.id for p in by_status] == [first.id]
    january = purchase_repo.list_purchases_by_date_range(db_session, date(2024, 1, 1), date(2024, 1, 31))
    assert [p.id for p in january] == [second.id]
    assert len(purchase_repo.list_purchases_by_supplier(db_session, stockroom["supplier"].id)) == 2
