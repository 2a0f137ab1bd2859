from datetime import date, timedelta

import pytest

from conftest import make_employee
from electrotech.core.errors import ConflictError, ValidationFailed
from electrotech.core.permissions import UserLevel
from electrotech.core.security import verify_password
from electrotech.crud import employees as employee_repo
from electrotech.crud import users as user_repo
from electrotech.db.init import ensure_admin_user
from electrotech.services import employees as employee_service


def test_initial_password():
    assert employee_service.initial_password("jperez", "87654321") == "jpe876123"


def test_employee_with_account_gets_default_password(db_session):
    employee = make_employee(db_session, account={"username": "jperez"})

    assert employee.username == "jperez"
    assert employee.user.level == UserLevel.SPORADIC
    assert employee.user.full_name == "Luis Perez"
    assert verify_password("jpe876123", employee.user.password_hash)
    assert employee_repo.get_employee_by_user(db_session, employee.user_id).id == employee.id


def test_employee_without_account(db_session):
    employee = make_employee(db_session)
    assert employee.user is None
    assert employee.username is None


def test_duplicate_document(db_session):
    make_employee(db_session, document_number="555")
    with pytest.raises(ConflictError):
        make_employee(db_session, document_number="555")


def test_hire_date_cannot_be_in_the_future(db_session):
    with pytest.raises(ValidationFailed, match="future"):
        employee_service.create_employee(
            db_session,
            {
                "document_type": "DNI",
                "document_number": "999",
                "first_name": "Sara",
                "last_name": "Lopez",
                "phone": "555",
                "hired_on": date.today() + timedelta(days=3),
                "base_salary": "900",
            },
        )


def test_salary_must_be_positive(db_session):
    with pytest.raises(ValidationFailed, match="base_salary"):
        employee_service.create_employee(
            db_session,
            {
                "document_type": "DNI",
                "document_number": "998",
                "first_name": "Sara",
                "last_name": "Lopez",
                "phone": "555",
                "hired_on": date.today(),
                "base_salary": "0",
            },
        )


def test_account_creation_failure_rolls_back_employee(db_session):
    make_employee(db_session, document_number="1", account={"username": "taken"})
    with pytest.raises(ConflictError):
        make_employee(db_session, document_number="2", account={"username": "taken"})
    assert employee_repo.get_employee_by_document(db_session, "DNI", "2") is None


def test_update_links_a_new_account(db_session):
    employee = make_employee(db_session)
    updated = employee_service.update_employee(
        db_session, employee, {"phone": "555-9999"}, {"username": "lperez", "password": "secret99"}
    )

    assert updated.phone == "555-9999"
    assert updated.username == "lperez"
    assert verify_password("secret99", updated.user.password_hash)


def test_delete_locks_linked_user(db_session):
    employee = make_employee(db_session, account={"username": "jperez"})
    employee_service.delete_employee(db_session, employee)

    stored = employee_repo.get_employee(db_session, employee.id)
    assert stored.active is False
    assert stored.user.active is False
    assert employee_repo.list_employees(db_session) == []


def test_delete_refuses_to_lock_the_only_admin(db_session):
    admin = ensure_admin_user(db_session)
    employee = employee_repo.get_employee_by_user(db_session, admin.id)

    with pytest.raises(ConflictError, match="only active administrator"):
        employee_service.delete_employee(db_session, employee)

    db_session.refresh(employee)
    assert employee.active is True
    assert user_repo.admin_exists(db_session) is True


def test_search_employees(db_session):
    employee = make_employee(db_session)
    assert [e.id for e in employee_repo.search_employees(db_session, "per")] == [employee.id]
