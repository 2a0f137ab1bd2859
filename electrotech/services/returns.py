from __future__ import annotations

import logging
from datetime import date, timedelta

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import ConflictError, ValidationFailed
from ..core.money import to_decimal
from ..crud import returns as repo
from ..crud.sales import get_sale
from ..models.sale import SaleStatus
from ..models.sales_return import ReturnStatus, SalesReturn
from . import fields

logger = logging.getLogger(__name__)

# A rejected return does not block a new one for the same sale.
OPEN_STATUSES = (ReturnStatus.PENDING, ReturnStatus.PROCESSED)


def validate_return(
    db: Session,
    data: dict,
    today: date | None = None,
    exclude_id: int | None = None,
) -> dict:
    """Check a return against its sale: one open return per sale, amount ceiling and the return window."""

    today = today or date.today()
    sale_id = fields.positive_id(data, "sale_id", label="sale")
    returned_on = fields.as_date(data.get("returned_on"), "returned_on")
    reason = fields.text(data, "reason", required=True, max_length=500)
    amount = fields.money(data, "amount", positive=True)

    sale = get_sale(db, sale_id)
    if sale is None:
        raise ValidationFailed(f"Sale {sale_id} does not exist")
    if sale.status == SaleStatus.VOIDED.value:
        raise ValidationFailed(f"Sale {sale.invoice_number} is voided and cannot be returned")
    if repo.sale_has_return(db, sale_id, statuses=OPEN_STATUSES, exclude_id=exclude_id):
        raise ConflictError(f"Sale {sale.invoice_number} already has a pending or processed return")
    if amount > to_decimal(sale.total):
        raise ValidationFailed(
            f"The returned amount ({amount}) cannot exceed the sale total ({sale.total})",
            details={"amount": str(amount), "sale_total": str(sale.total)},
        )
    sold_on = sale.sold_at.date()
    if returned_on < sold_on:
        raise ValidationFailed("The return date cannot be earlier than the sale date")
    if returned_on > today:
        raise ValidationFailed("The return date cannot be in the future")
    if returned_on > sold_on + timedelta(days=settings.RETURN_WINDOW_DAYS):
        raise ValidationFailed(
            f"Returns are accepted up to {settings.RETURN_WINDOW_DAYS} days after the sale",
            details={"sold_on": sold_on.isoformat(), "returned_on": returned_on.isoformat()},
        )
    return {"sale_id": sale_id, "returned_on": returned_on, "reason": reason, "amount": amount}


def create_return(db: Session, payload: dict) -> SalesReturn:
    data = dict(payload)
    data.setdefault("returned_on", date.today())
    sales_return = repo.create_return(db, validate_return(db, data))
    logger.info(
        "Return %s registered for sale %s: amount=%s",
        sales_return.credit_note_number,
        sales_return.invoice_number,
        sales_return.amount,
    )
    return sales_return


def update_return(db: Session, sales_return: SalesReturn, payload: dict) -> SalesReturn:
    repo.require_pending(sales_return, "edited")
    data = validate_return(db, fields.merged(sales_return, payload, repo.RETURN_FIELDS), exclude_id=sales_return.id)
    sales_return = repo.update_return(db, sales_return, data)
    logger.info("Return %s updated", sales_return.credit_note_number)
    return sales_return


def process_return(db: Session, sales_return: SalesReturn) -> SalesReturn:
    sales_return = repo.process_return(db, sales_return)
    logger.info("Return %s processed; stock restored", sales_return.credit_note_number)
    return sales_return


def reject_return(db: Session, sales_return: SalesReturn) -> SalesReturn:
    sales_return = repo.reject_return(db, sales_return)
    logger.info("Return %s rejected", sales_return.credit_note_number)
    return sales_return
