"""Sale persistence. Every write here moves stock in the same transaction."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, selectinload

from ..core.errors import ConflictError, ValidationFailed
from ..core.money import quantize_currency
from ..models.product import Product
from ..models.sale import Commission, Sale, SaleLine, SaleStatus
from ..models.sales_return import ReturnStatus
from .returns import sale_has_return
from .stock import available_quantity, decrease_stock, increase_stock

INVOICE_PREFIX = "F"
HEADER_FIELDS = (
    "invoice_number",
    "sold_at",
    "client_id",
    "employee_id",
    "payment_method_id",
    "subtotal",
    "discount",
    "tax",
    "total",
    "notes",
)


def _base_query():
    return select(Sale).options(selectinload(Sale.lines))


def _day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    return datetime.combine(start, time.min), datetime.combine(end + timedelta(days=1), time.min)


def list_sales(db: Session, limit: int = 200, offset: int = 0) -> list[Sale]:
    stmt = _base_query().order_by(desc(Sale.sold_at), desc(Sale.id)).limit(limit).offset(offset)
    return db.execute(stmt).scalars().all()


def get_sale(db: Session, sale_id: int) -> Sale | None:
    stmt = _base_query().where(Sale.id == sale_id)
    return db.execute(stmt).scalars().first()


def get_sale_by_invoice(db: Session, invoice_number: str) -> Sale | None:
    stmt = _base_query().where(Sale.invoice_number == invoice_number.strip())
    return db.execute(stmt).scalars().first()


def list_sales_by_date_range(db: Session, start: date, end: date) -> list[Sale]:
    lower, upper = _day_bounds(start, end)
    stmt = (
        _base_query()
        .where(Sale.sold_at >= lower, Sale.sold_at < upper)
        .order_by(desc(Sale.sold_at), desc(Sale.id))
    )
    return db.execute(stmt).scalars().all()


def list_sales_by_client(db: Session, client_id: int) -> list[Sale]:
    stmt = _base_query().where(Sale.client_id == client_id).order_by(desc(Sale.sold_at), desc(Sale.id))
    return db.execute(stmt).scalars().all()


def list_sales_by_status(db: Session, status: SaleStatus | str) -> list[Sale]:
    stmt = (
        _base_query()
        .where(Sale.status == SaleStatus(status).value)
        .order_by(desc(Sale.sold_at), desc(Sale.id))
    )
    return db.execute(stmt).scalars().all()


def sales_total(db: Session, start: date, end: date) -> Decimal:
    """Sum of completed sale totals between two dates, both inclusive."""

    lower, upper = _day_bounds(start, end)
    stmt = select(func.coalesce(func.sum(Sale.total), 0)).where(
        Sale.status == SaleStatus.COMPLETED.value,
        Sale.sold_at >= lower,
        Sale.sold_at < upper,
    )
    return quantize_currency(db.execute(stmt).scalar())


def next_invoice_number(db: Session, today: date | None = None) -> str:
    """``F-YYYYMMDD-NNNN`` where NNNN follows the highest number issued that day."""

    today = today or date.today()
    prefix = f"{INVOICE_PREFIX}-{today:%Y%m%d}-"
    stmt = select(Sale.invoice_number).where(Sale.invoice_number.like(f"{prefix}%"))
    highest = 0
    for number in db.execute(stmt).scalars():
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:04d}"


def invoice_taken(db: Session, invoice_number: str, exclude_id: int | None = None) -> bool:
    stmt = select(func.count(Sale.id)).where(Sale.invoice_number == invoice_number)
    if exclude_id is not None:
        stmt = stmt.where(Sale.id != exclude_id)
    return bool(db.execute(stmt).scalar())


def _quantities(pairs) -> Counter:
    """Total quantity per product from ``(product_id, quantity)`` pairs."""

    totals: Counter = Counter()
    for product_id, quantity in pairs:
        totals[product_id] += quantity
    return totals


def _require_sellable(db: Session, product_id: int, requested: int) -> Product:
    product = db.get(Product, product_id)
    if product is None or not product.active:
        raise ValidationFailed(f"Product {product_id} does not exist or is inactive")
    available = available_quantity(db, product_id)
    if available < requested:
        raise ValidationFailed(
            f"Not enough stock for product {product.name}. Available: {available}, requested: {requested}",
            details={"product_id": product_id, "available": available, "requested": requested},
        )
    return product


def _build_lines(lines: list[dict]) -> list[SaleLine]:
    return [
        SaleLine(
            product_id=line["product_id"],
            quantity=line["quantity"],
            unit_price=line["unit_price"],
            discount=line.get("discount", Decimal("0")),
            subtotal=line["subtotal"],
        )
        for line in lines
    ]


def create_sale(db: Session, data: dict) -> Sale:
    """Insert the header, lines, stock movements and commission together.

    ``data`` carries already validated header fields, ``lines`` and
    ``commission`` (the amount owed to the seller).
    """

    lines = data["lines"]
    try:
        if invoice_taken(db, data["invoice_number"]):
            raise ConflictError(f"Invoice number {data['invoice_number']} already exists")
        requested = _quantities((line["product_id"], line["quantity"]) for line in lines)
        for product_id, quantity in requested.items():
            _require_sellable(db, product_id, quantity)

        sale = Sale(**{key: data[key] for key in HEADER_FIELDS if key in data})
        sale.status = SaleStatus(data.get("status") or SaleStatus.COMPLETED).value
        sale.lines = _build_lines(lines)
        db.add(sale)
        db.flush()

        for line in lines:
            decrease_stock(db, line["product_id"], line["quantity"])
        sale.commission = Commission(
            employee_id=sale.employee_id,
            amount=data["commission"],
            created_at=datetime.now(),
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_sale(db, sale.id)


def require_status(sale: Sale, expected: SaleStatus, action: str) -> None:
    if sale.status != expected.value:
        raise ConflictError(f"Sale {sale.invoice_number} is {sale.status}; only {expected.value} sales can be {action}")


def update_sale(db: Session, sale: Sale, data: dict) -> Sale:
    """Rewrite a pending sale, moving only the stock difference per product."""

    require_status(sale, SaleStatus.PENDING, "edited")
    try:
        if "invoice_number" in data and invoice_taken(db, data["invoice_number"], exclude_id=sale.id):
            raise ConflictError(f"Invoice number {data['invoice_number']} already exists")
        old = _quantities((line.product_id, line.quantity) for line in sale.lines)
        new = _quantities((line["product_id"], line["quantity"]) for line in data["lines"])
        for product_id in sorted(set(old) | set(new)):
            delta = new.get(product_id, 0) - old.get(product_id, 0)
            if delta > 0:
                _require_sellable(db, product_id, delta)
                decrease_stock(db, product_id, delta)
            elif delta < 0:
                increase_stock(db, product_id, -delta)

        for key in HEADER_FIELDS:
            if key in data:
                setattr(sale, key, data[key])
        sale.lines.clear()
        db.flush()
        sale.lines.extend(_build_lines(data["lines"]))

        if sale.commission is None:
            sale.commission = Commission(
                employee_id=sale.employee_id,
                amount=data["commission"],
                created_at=datetime.now(),
            )
        else:
            sale.commission.employee_id = sale.employee_id
            sale.commission.amount = data["commission"]
        if data.get("status"):
            sale.status = SaleStatus(data["status"]).value
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_sale(db, sale.id)


def complete_sale(db: Session, sale: Sale) -> Sale:
    require_status(sale, SaleStatus.PENDING, "completed")
    sale.status = SaleStatus.COMPLETED.value
    db.commit()
    return get_sale(db, sale.id)


def void_sale(db: Session, sale: Sale) -> Sale:
    """Put every line back on the shelf and drop the seller's commission."""

    if sale.status == SaleStatus.VOIDED.value:
        raise ConflictError(f"Sale {sale.invoice_number} is already voided")
    if sale_has_return(db, sale.id, statuses=(ReturnStatus.PROCESSED,)):
        raise ConflictError(f"Sale {sale.invoice_number} has a processed return and cannot be voided")
    try:
        for line in sale.lines:
            increase_stock(db, line.product_id, line.quantity)
        sale.commission = None
        sale.status = SaleStatus.VOIDED.value
        db.commit()
    except Exception:
        db.rollback()
        raise
    return get_sale(db, sale.id)
