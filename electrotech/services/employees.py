from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from ..core.errors import ValidationFailed
from ..core.permissions import UserLevel
from ..crud import employees as repo
from ..models.employee import Employee
from . import auth, fields

logger = logging.getLogger(__name__)


def initial_password(username: str, document_number: str) -> str:
    """Default password handed to a new employee's account."""

    return f"{username[:3]}{document_number[:3]}123"


def validate_employee(data: dict) -> dict:
    cleaned = {
        "first_name": fields.text(data, "first_name", required=True, max_length=50, label="first name"),
        "last_name": fields.text(data, "last_name", required=True, max_length=50, label="last name"),
        "document_type": fields.text(data, "document_type", required=True, max_length=3, label="document type"),
        "document_number": fields.text(
            data, "document_number", required=True, max_length=20, label="document number"
        ),
        "phone": fields.phone(data, required=True),
        "address": fields.text(data, "address", max_length=200),
        "hired_on": fields.as_date(data.get("hired_on"), "hired_on"),
        "base_salary": fields.money(data, "base_salary", positive=True),
    }
    cleaned["document_type"] = cleaned["document_type"].upper()
    if cleaned["hired_on"] > date.today():
        raise ValidationFailed("hired_on cannot be in the future", details={"field": "hired_on"})
    if data.get("active") is not None:
        cleaned["active"] = bool(data["active"])
    return cleaned


def _new_user_data(db: Session, employee_data: dict, user_payload: dict) -> dict:
    username = fields.text(user_payload, "username", required=True, max_length=50)
    payload = dict(user_payload)
    payload["username"] = username
    payload.setdefault("level", UserLevel.SPORADIC)
    payload["full_name"] = f"{employee_data['first_name']} {employee_data['last_name']}"
    if not payload.get("password"):
        payload["password"] = initial_password(username, employee_data["document_number"])
    return auth.prepare_user(db, payload)


def create_employee(db: Session, payload: dict, user_payload: dict | None = None) -> Employee:
    """Register an employee, optionally with a linked user account."""

    data = validate_employee(payload)
    user_data = _new_user_data(db, data, user_payload) if user_payload and user_payload.get("username") else None
    employee = repo.create_employee(db, data, user_data)
    logger.info(
        "Employee created: %s (id=%s, user=%s)",
        employee.full_name,
        employee.id,
        employee.username or "-",
    )
    return employee


def update_employee(db: Session, employee: Employee, payload: dict, user_payload: dict | None = None) -> Employee:
    data = validate_employee(fields.merged(employee, payload, repo.EMPLOYEE_FIELDS))
    user_data = None
    if user_payload:
        if employee.user is not None:
            changes = dict(user_payload)
            changes["full_name"] = f"{data['first_name']} {data['last_name']}"
            user_data = auth.prepare_user_changes(db, employee.user, changes)
        elif user_payload.get("username"):
            user_data = _new_user_data(db, data, user_payload)
    employee = repo.update_employee(db, employee, data, user_data)
    logger.info("Employee updated: %s (id=%s)", employee.full_name, employee.id)
    return employee


def delete_employee(db: Session, employee: Employee) -> Employee:
    """Soft-delete; the linked account goes through the same admin guard as a user edit."""

    user_data = None
    if employee.user is not None:
        user_data = auth.prepare_user_changes(db, employee.user, {"active": False})
    employee = repo.delete_employee(db, employee, user_data)
    logger.info("Employee deactivated: id=%s; linked user locked", employee.id)
    return employee
