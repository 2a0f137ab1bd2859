from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..crud import categories as repo
from ..models.category import Category
from . import fields

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200


def validate_category(data: dict) -> dict:
    cleaned = {
        "name": fields.text(data, "name", required=True, max_length=NAME_MAX_LENGTH),
        "description": fields.text(data, "description", max_length=DESCRIPTION_MAX_LENGTH),
    }
    if "active" in data and data["active"] is not None:
        cleaned["active"] = bool(data["active"])
    return cleaned


def create_category(db: Session, payload: dict) -> Category:
    category = repo.create_category(db, validate_category(payload))
    logger.info("Category created: %s (id=%s)", category.name, category.id)
    return category


def update_category(db: Session, category: Category, payload: dict) -> Category:
    data = validate_category(fields.merged(category, payload, ("name", "description", "active")))
    category = repo.update_category(db, category, data)
    logger.info("Category updated: %s (id=%s)", category.name, category.id)
    return category


def delete_category(db: Session, category: Category) -> Category:
    category = repo.delete_category(db, category)
    logger.info("Category deactivated: %s (id=%s)", category.name, category.id)
    return category
