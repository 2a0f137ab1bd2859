"""Employees and the optional user account linked to each of them."""

from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError
from ..models.employee import Employee
from .users import apply_user_changes, build_user

EMPLOYEE_FIELDS = (
    "document_type",
    "document_number",
    "first_name",
    "last_name",
    "address",
    "phone",
    "hired_on",
    "base_salary",
    "active",
)


def list_employees(db: Session, include_inactive: bool = False) -> list[Employee]:
    stmt = select(Employee)
    if not include_inactive:
        stmt = stmt.where(Employee.active.is_(True))
    return db.execute(stmt.order_by(Employee.last_name, Employee.first_name)).scalars().all()


def get_employee(db: Session, employee_id: int) -> Employee | None:
    return db.get(Employee, employee_id)


def get_employee_by_document(db: Session, document_type: str, document_number: str) -> Employee | None:
    stmt = select(Employee).where(
        func.upper(Employee.document_type) == document_type.strip().upper(),
        Employee.document_number == document_number.strip(),
    )
    return db.execute(stmt).scalars().first()


def get_employee_by_user(db: Session, user_id: int) -> Employee | None:
    stmt = select(Employee).where(Employee.user_id == user_id)
    return db.execute(stmt).scalars().first()


def search_employees(db: Session, term: str) -> list[Employee]:
    pattern = f"%{term.strip().lower()}%"
    stmt = (
        select(Employee)
        .where(
            Employee.active.is_(True),
            or_(
                func.lower(Employee.first_name).like(pattern),
                func.lower(Employee.last_name).like(pattern),
                func.lower(Employee.document_number).like(pattern),
                func.lower(Employee.phone).like(pattern),
            ),
        )
        .order_by(Employee.last_name, Employee.first_name)
    )
    return db.execute(stmt).scalars().all()


def _check_document(db: Session, document_type: str, document_number: str, exclude_id: int | None = None) -> None:
    owner = get_employee_by_document(db, document_type, document_number)
    if owner is not None and owner.id != exclude_id:
        raise ConflictError(f"An employee with document {document_type} {document_number} already exists")


def create_employee(db: Session, data: dict, user_data: dict | None = None) -> Employee:
    """Insert an employee and, when ``user_data`` is given, its user account."""

    try:
        _check_document(db, data["document_type"], data["document_number"])
        employee = Employee(**{key: data[key] for key in EMPLOYEE_FIELDS if key in data})
        if user_data:
            employee.user = build_user(db, user_data)
        db.add(employee)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(employee)
    return employee


def update_employee(db: Session, employee: Employee, data: dict, user_data: dict | None = None) -> Employee:
    try:
        if "document_type" in data or "document_number" in data:
            _check_document(
                db,
                data.get("document_type", employee.document_type),
                data.get("document_number", employee.document_number),
                exclude_id=employee.id,
            )
        for key in EMPLOYEE_FIELDS:
            if key in data:
                setattr(employee, key, data[key])
        if user_data:
            if employee.user is not None:
                apply_user_changes(db, employee.user, user_data)
            else:
                employee.user = build_user(db, user_data)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(employee)
    return employee


def delete_employee(db: Session, employee: Employee, user_data: dict | None = None) -> Employee:
    """Soft-delete the employee and apply ``user_data`` to its linked account."""

    try:
        employee.active = False
        if employee.user is not None and user_data:
            apply_user_changes(db, employee.user, user_data)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(employee)
    return employee
