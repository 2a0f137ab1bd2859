from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import ValidationFailed
from ..core.money import quantize_currency, to_decimal
from ..crud import products as product_repo
from ..crud import sales as sale_repo
from ..models.category import Category
from ..models.client import Client
from ..models.product import Product
from ..models.purchase import Purchase, PurchaseLine, PurchaseStatus
from ..models.sale import Sale, SaleLine, SaleStatus
from .sales import monthly_sales_total

HUNDRED = Decimal("100")
CLIENT_ORDERINGS = ("amount", "count")


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise ValidationFailed("The end date cannot be earlier than the start date")


def _completed_between(start: date, end: date):
    return (
        Sale.status == SaleStatus.COMPLETED.value,
        Sale.sold_at >= datetime.combine(start, time.min),
        Sale.sold_at < datetime.combine(end + timedelta(days=1), time.min),
    )


def _growth_pct(current: Decimal, previous: Decimal) -> Decimal:
    if previous <= 0:
        return HUNDRED if current > 0 else Decimal("0.00")
    return quantize_currency((current - previous) / previous * HUNDRED)


def top_products(
    db: Session,
    start: date,
    end: date,
    category_id: Optional[int] = None,
    limit: int = 10,
) -> List[Dict[str, Any]]:
    """Best sellers by units over completed sales in the inclusive range."""

    _check_range(start, end)
    conditions = list(_completed_between(start, end))
    if category_id is not None:
        conditions.append(Product.category_id == category_id)
    quantity = func.sum(SaleLine.quantity).label("quantity")
    revenue = func.sum(SaleLine.subtotal).label("revenue")
    stmt = (
        select(Product.id, Product.code, Product.name, Category.name, quantity, revenue)
        .join(SaleLine, SaleLine.product_id == Product.id)
        .join(Sale, Sale.id == SaleLine.sale_id)
        .join(Category, Category.id == Product.category_id)
        .where(*conditions)
        .group_by(Product.id, Product.code, Product.name, Category.name)
        .order_by(desc(quantity), Product.name)
        .limit(limit)
    )
    return [
        {
            "product_id": product_id,
            "code": code,
            "name": name,
            "category": category,
            "quantity": int(units or 0),
            "revenue": quantize_currency(amount),
        }
        for product_id, code, name, category, units, amount in db.execute(stmt).all()
    ]


def top_clients(
    db: Session,
    start: date,
    end: date,
    order_by: str = "amount",
    limit: int = 10,
) -> List[Dict[str, Any]]:
    _check_range(start, end)
    if order_by not in CLIENT_ORDERINGS:
        raise ValidationFailed(f"order_by must be one of: {', '.join(CLIENT_ORDERINGS)}")
    amount = func.sum(Sale.total).label("amount")
    purchases = func.count(Sale.id).label("purchases")
    primary, secondary = (amount, purchases) if order_by == "amount" else (purchases, amount)
    stmt = (
        select(Client, purchases, amount)
        .join(Sale, Sale.client_id == Client.id)
        .where(*_completed_between(start, end))
        .group_by(Client.id)
        .order_by(desc(primary), desc(secondary), Client.last_name)
        .limit(limit)
    )
    return [
        {
            "client_id": client.id,
            "name": client.full_name,
            "document": client.document,
            "purchases": int(count or 0),
            "amount": quantize_currency(total),
        }
        for client, count, total in db.execute(stmt).all()
    ]


def sales_report(db: Session, start: date, end: date) -> Dict[str, Any]:
    """Totals for completed sales in the range, compared with the period before it."""

    _check_range(start, end)
    days = (end - start).days + 1
    total = sale_repo.sales_total(db, start, end)
    previous_end = start - timedelta(days=1)
    previous_total = sale_repo.sales_total(db, previous_end - timedelta(days=days - 1), previous_end)
    count_stmt = select(func.count(Sale.id)).where(*_completed_between(start, end))
    return {
        "start": start,
        "end": end,
        "sales_count": int(db.execute(count_stmt).scalar() or 0),
        "total_sales": total,
        "daily_average": quantize_currency(total / days),
        "previous_total": previous_total,
        "growth_pct": _growth_pct(total, previous_total),
        "top_products": top_products(db, start, end),
    }


def _recently_moved_ids(db: Session, since: datetime) -> set[int]:
    sold = (
        select(SaleLine.product_id)
        .join(Sale, Sale.id == SaleLine.sale_id)
        .where(Sale.status != SaleStatus.VOIDED.value, Sale.sold_at >= since)
    )
    received = (
        select(PurchaseLine.product_id)
        .join(Purchase, Purchase.id == PurchaseLine.purchase_id)
        .where(Purchase.status == PurchaseStatus.RECEIVED.value, Purchase.received_at >= since)
    )
    return set(db.execute(sold).scalars()) | set(db.execute(received).scalars())


def inventory_report(db: Session, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    products = product_repo.list_products(db)
    since = datetime.combine(today - timedelta(days=settings.STALE_STOCK_DAYS), time.min)
    moved = _recently_moved_ids(db, since)

    total_value = sum((to_decimal(product.inventory_value) for product in products), Decimal("0"))
    return {
        "active_products": len(products),
        "total_units": sum(product.stock for product in products),
        "total_value": quantize_currency(total_value),
        "below_minimum": [product for product in products if product.needs_restock],
        "stale_products": [
            product for product in products if product.stock > 0 and product.id not in moved
        ],
    }


def dashboard_summary(db: Session, today: Optional[date] = None) -> Dict[str, Any]:
    return {
        "product_count": product_repo.count_products(db),
        "low_stock_count": product_repo.count_low_stock(db),
        "monthly_sales_total": monthly_sales_total(db, today),
    }
