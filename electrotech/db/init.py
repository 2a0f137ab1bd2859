"""Schema creation, reference data and the bootstrap administrator."""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum

from sqlalchemy import func, inspect, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.config import settings
from ..core.permissions import UserLevel
from ..core.security import hash_password
from .session import Base, SessionLocal, engine

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (
    ("Computadoras", "Equipos de escritorio y portátiles"),
    ("Smartphones", "Teléfonos inteligentes"),
    ("Tablets", "Tabletas y lectores electrónicos"),
    ("Accesorios", "Cargadores, fundas, cables y periféricos"),
    ("Componentes", "Piezas y repuestos de hardware"),
)
DEFAULT_PAYMENT_METHODS = (
    ("Efectivo", "Pago en efectivo"),
    ("Tarjeta de Crédito", "Visa, MasterCard, American Express"),
    ("Tarjeta de Débito", "Tarjetas de débito bancarias"),
    ("Transferencia Bancaria", "Transferencia a cuenta de la empresa"),
)


class DatabaseStatus(str, Enum):
    OK = "ok"
    CONNECTION_ERROR = "connection_error"
    TABLES_MISSING = "tables_missing"
    ADMIN_MISSING = "admin_missing"


def check_database(bind: Engine = engine, session_factory: sessionmaker = SessionLocal) -> DatabaseStatus:
    """Connectivity first, then the mapped tables, then an active administrator."""

    from ..models import User

    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Database connection failed: %s", exc)
        return DatabaseStatus.CONNECTION_ERROR

    existing = set(inspect(bind).get_table_names())
    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        logger.info("Database tables missing: %s", ", ".join(missing))
        return DatabaseStatus.TABLES_MISSING

    with session_factory() as db:
        stmt = select(func.count(User.id)).where(User.level == int(UserLevel.ADMIN), User.active.is_(True))
        if not db.execute(stmt).scalar():
            return DatabaseStatus.ADMIN_MISSING
    return DatabaseStatus.OK


def create_schema(bind: Engine = engine) -> None:
    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def seed_reference_data(db: Session) -> int:
    """Insert the default categories and payment methods that are not there yet."""

    from ..models import Category, PaymentMethod

    added = 0
    for model, rows in ((Category, DEFAULT_CATEGORIES), (PaymentMethod, DEFAULT_PAYMENT_METHODS)):
        present = set(db.execute(select(model.name)).scalars())
        for name, description in rows:
            if name not in present:
                db.add(model(name=name, description=description, active=True))
                added += 1
    db.commit()
    if added:
        logger.info("Seeded %s reference rows", added)
    return added


def ensure_admin_user(db: Session):
    """Create the configured administrator and its employee record if no admin exists."""

    from ..crud import users as user_repo
    from ..models import Employee

    if user_repo.admin_exists(db):
        return None
    try:
        user = user_repo.build_user(
            db,
            {
                "username": settings.ADMIN_USERNAME,
                "password_hash": hash_password(settings.ADMIN_PASSWORD),
                "level": int(UserLevel.ADMIN),
                "full_name": "Administrador del Sistema",
                "email": None,
                "active": True,
            },
        )
        db.add(
            Employee(
                document_type="DNI",
                document_number="00000000",
                first_name="Administrador",
                last_name="Sistema",
                phone="0000000000",
                hired_on=date.today(),
                base_salary=1,
                user=user,
                active=True,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Bootstrap administrator %s created", user.username)
    return user


def initialize_database(bind: Engine = engine, session_factory: sessionmaker = SessionLocal) -> DatabaseStatus:
    status = check_database(bind, session_factory)
    if status is DatabaseStatus.CONNECTION_ERROR:
        return status
    if status is DatabaseStatus.TABLES_MISSING:
        create_schema(bind)
    with session_factory() as db:
        if settings.SEED_REFERENCE_DATA:
            seed_reference_data(db)
        ensure_admin_user(db)
    status = check_database(bind, session_factory)
    logger.info("Database initialised: %s", status.value)
    return status
