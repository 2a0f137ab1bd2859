from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..crud import suppliers as repo
from ..models.supplier import Supplier
from . import fields

logger = logging.getLogger(__name__)


def validate_supplier(data: dict) -> dict:
    cleaned = {
        "name": fields.text(data, "name", required=True, max_length=100),
        "address": fields.text(data, "address", max_length=200),
        "phone": fields.phone(data),
        "email": fields.email(data),
        "contact_name": fields.text(data, "contact_name", max_length=100),
        "payment_terms": fields.text(data, "payment_terms", max_length=100),
    }
    if data.get("active") is not None:
        cleaned["active"] = bool(data["active"])
    return cleaned


def create_supplier(db: Session, payload: dict) -> Supplier:
    supplier = repo.create_supplier(db, validate_supplier(payload))
    logger.info("Supplier created: %s (id=%s)", supplier.name, supplier.id)
    return supplier


def update_supplier(db: Session, supplier: Supplier, payload: dict) -> Supplier:
    data = validate_supplier(fields.merged(supplier, payload, repo.SUPPLIER_FIELDS))
    supplier = repo.update_supplier(db, supplier, data)
    logger.info("Supplier updated: %s (id=%s)", supplier.name, supplier.id)
    return supplier


def delete_supplier(db: Session, supplier: Supplier) -> Supplier:
    supplier = repo.delete_supplier(db, supplier)
    logger.info("Supplier deactivated: %s (id=%s)", supplier.name, supplier.id)
    return supplier
