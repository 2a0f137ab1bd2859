from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from electrotech.core.errors import ConflictError, ValidationFailed
from electrotech.crud import products as product_repo
from electrotech.crud import returns as return_repo
from electrotech.models.sales_return import ReturnStatus
from electrotech.services import documents
from electrotech.services import returns as return_service
from electrotech.services import sales as sale_service


def _sell(db, shop, quantity=2, sold_at=None):
    payload = {
        "client_id": shop["client"].id,
        "employee_id": shop["employee"].id,
        "payment_method_id": shop["payment_method"].id,
        "lines": [{"product_id": shop["product"].id, "quantity": quantity}],
    }
    if sold_at is not None:
        payload["sold_at"] = sold_at
    return sale_service.create_sale(db, payload)


def test_create_return_starts_pending(db_session, shop):
    sale = _sell(db_session, shop)
    sales_return = return_service.create_return(
        db_session, {"sale_id": sale.id, "reason": "Pantalla defectuosa", "amount": "156.00"}
    )

    assert sales_return.status == ReturnStatus.PENDING.value
    assert sales_return.returned_on == date.today()
    assert sales_return.credit_note_number == "NC00001"
    assert return_repo.sale_has_return(db_session, sale.id) is True
    assert [s.id for s in return_repo.list_sales_with_returns(db_session)] == [sale.id]


def test_process_restores_stock(db_session, shop):
    sale = _sell(db_session, shop, quantity=3)
    sales_return = return_service.create_return(db_session, {"sale_id": sale.id, "reason": "No enciende", "amount": 100})
    assert product_repo.get_stock(db_session, shop["product"].id) == 7

    processed = return_service.process_return(db_session, sales_return)

    assert processed.status == ReturnStatus.PROCESSED.value
    assert processed.processed_at is not None
    assert product_repo.get_stock(db_session, shop["product"].id) == 10
    with pytest.raises(ConflictError):
        return_service.process_return(db_session, processed)
    with pytest.raises(ConflictError):
        return_service.update_return(db_session, processed, {"reason": "changed"})


def test_reject_leaves_stock_alone(db_session, shop):
    sale = _sell(db_session, shop)
    sales_return = return_service.create_return(db_session, {"sale_id": sale.id, "reason": "Arrepentido", "amount": 50})

    rejected = return_service.reject_return(db_session, sales_return)

    assert rejected.status == ReturnStatus.REJECTED.value
    assert product_repo.get_stock(db_session, shop["product"].id) == 8


def test_amount_cannot_exceed_sale_total(db_session, shop):
    sale = _sell(db_session, shop)
    with pytest.raises(ValidationFailed, match="cannot exceed the sale total"):
        return_service.create_return(db_session, {"sale_id": sale.id, "reason": "x", "amount": "500.00"})


def test_reason_is_required(db_session, shop):
    sale = _sell(db_session, shop)
    with pytest.raises(ValidationFailed, match="reason is required"):
        return_service.create_return(db_session, {"sale_id": sale.id, "reason": "", "amount": 10})


def test_return_window(db_session, shop):
    sale = _sell(db_session, shop, sold_at=datetime.now() - timedelta(days=45))
    with pytest.raises(ValidationFailed, match="30 days"):
        return_service.create_return(db_session, {"sale_id": sale.id, "reason": "Tarde", "amount": 10})


def test_return_date_bounds(db_session, shop):
    sale = _sell(db_session, shop, sold_at=datetime.now() - timedelta(days=5))
    payload = {"sale_id": sale.id, "reason": "Fecha", "amount": 10}

    with pytest.raises(ValidationFailed, match="earlier than the sale date"):
        return_service.create_return(db_session, {**payload, "returned_on": date.today() - timedelta(days=6)})
    with pytest.raises(ValidationFailed, match="future"):
        return_service.create_return(db_session, {**payload, "returned_on": date.today() + timedelta(days=1)})


def test_voided_sale_cannot_be_returned(db_session, shop):
    sale = sale_service.void_sale(db_session, _sell(db_session, shop))
    with pytest.raises(ValidationFailed, match="voided"):
        return_service.create_return(db_session, {"sale_id": sale.id, "reason": "x", "amount": 10})


def test_update_pending_return(db_session, shop):
    sale = _sell(db_session, shop)
    sales_return = return_service.create_return(db_session, {"sale_id": sale.id, "reason": "Golpe", "amount": 20})

    updated = return_service.update_return(db_session, sales_return, {"amount": "30.50"})

    assert updated.amount == Decimal("30.50")
    assert updated.reason == "Golpe"


def test_credit_note_text(db_session, shop):
    sale = _sell(db_session, shop)
    sales_return = return_service.create_return(
        db_session, {"sale_id": sale.id, "reason": "Pantalla defectuosa", "amount": "156.00"}
    )

    text = documents.render_credit_note_text(sales_return, issued_at=datetime(2025, 3, 1, 12, 0, 0))
    lines = text.splitlines()

    assert "NOTA DE CRÉDITO" in text
    assert "Número: NC00001" in lines
    assert f"Venta relacionada: {sale.invoice_number}" in lines
    assert "Nombre: Ana Gomez" in lines
    assert "Documento: DNI 12345678" in lines
    assert "Motivo: Pantalla defectuosa" in lines
    product_row = next(line for line in lines if line.startswith("SM-001"))
    expected_row = "SM-001".ljust(9) + "Phone X".ljust(28) + "2".rjust(5) + "   " + "150.00".rjust(10) + "   " + "300.00".rjust(10)
    assert product_row == expected_row
    total_row = next(line for line in lines if "IMPORTE TOTAL:" in line)
    assert total_row == " " * 40 + "IMPORTE TOTAL: " + "156.00".rjust(10)


def test_second_open_return_for_a_sale_is_refused(db_session, shop):
    sale = _sell(db_session, shop, quantity=3)
    first = return_service.create_return(db_session, {"sale_id": sale.id, "reason": "Falla", "amount": 100})
    return_service.process_return(db_session, first)

    with pytest.raises(ConflictError, match="already has a pending or processed return"):
        return_service.create_return(db_session, {"sale_id": sale.id, "reason": "Otra vez", "amount": 100})
    assert product_repo.get_stock(db_session, shop["product"].id) == 10


def test_rejected_return_allows_a_new_one(db_session, shop):
    sale = _sell(db_session, shop)
    rejected = return_service.create_return(db_session, {"sale_id": sale.id, "reason": "Sin caja", "amount": 20})
    return_service.reject_return(db_session, rejected)

    retry = return_service.create_return(db_session, {"sale_id": sale.id, "reason": "Falla real", "amount": 20})

    assert retry.status == ReturnStatus.PENDING.value
    assert return_service.update_return(db_session, retry, {"amount": 25}).amount == Decimal("25.00")


def test_sale_with_processed_return_cannot_be_voided(db_session, shop):
    sale = _sell(db_session, shop, quantity=3)
    return_service.process_return(
        db_session, return_service.create_return(db_session, {"sale_id": sale.id, "reason": "Falla", "amount": 50})
    )

    with pytest.raises(ConflictError, match="processed return"):
        sale_service.void_sale(db_session, sale)
    assert product_repo.get_stock(db_session, shop["product"].id) == 10


def test_pending_return_on_voided_sale_cannot_be_processed(db_session, shop):
    sale = _sell(db_session, shop, quantity=3)
    pending = return_service.create_return(db_session, {"sale_id": sale.id, "reason": "Falla", "amount": 50})
    sale_service.void_sale(db_session, sale)

    with pytest.raises(ConflictError, match="voided"):
        return_service.process_return(db_session, pending)
    assert product_repo.get_stock(db_session, shop["product"].id) == 10
