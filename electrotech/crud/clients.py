from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..core.errors import ConflictError
from ..models.client import Client

CLIENT_FIELDS = (
    "document_type",
    "document_number",
    "first_name",
    "last_name",
    "address",
    "phone",
    "email",
    "active",
)


def list_clients(db: Session, include_inactive: bool = False) -> list[Client]:
    stmt = select(Client)
    if not include_inactive:
        stmt = stmt.where(Client.active.is_(True))
    return db.execute(stmt.order_by(Client.last_name, Client.first_name)).scalars().all()


def get_client(db: Session, client_id: int) -> Client | None:
    return db.get(Client, client_id)


def get_client_by_document(db: Session, document_type: str, document_number: str) -> Client | None:
    stmt = select(Client).where(
        func.upper(Client.document_type) == document_type.strip().upper(),
        Client.document_number == document_number.strip(),
    )
    return db.execute(stmt).scalars().first()


def search_clients(db: Session, term: str) -> list[Client]:
    pattern = f"%{term.strip().lower()}%"
    stmt = (
        select(Client)
        .where(
            Client.active.is_(True),
            or_(
                func.lower(Client.first_name).like(pattern),
                func.lower(Client.last_name).like(pattern),
                func.lower(Client.document_number).like(pattern),
                func.lower(func.coalesce(Client.email, "")).like(pattern),
                func.lower(func.coalesce(Client.phone, "")).like(pattern),
            ),
        )
        .order_by(Client.last_name, Client.first_name)
    )
    return db.execute(stmt).scalars().all()


def _document_owner(db: Session, data: dict) -> Client | None:
    return get_client_by_document(db, data["document_type"], data["document_number"])


def create_client(db: Session, data: dict) -> Client:
    if _document_owner(db, data):
        raise ConflictError(
            f"A client with document {data['document_type']} {data['document_number']} already exists"
        )
    client = Client(**{key: data[key] for key in CLIENT_FIELDS if key in data})
    client.registered_at = datetime.now()
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


def update_client(db: Session, client: Client, data: dict) -> Client:
    if "document_type" in data or "document_number" in data:
        merged = {
            "document_type": data.get("document_type", client.document_type),
            "document_number": data.get("document_number", client.document_number),
        }
        owner = _document_owner(db, merged)
        if owner is not None and owner.id != client.id:
            raise ConflictError("Another client already uses that document")
    for key in CLIENT_FIELDS:
        if key in data:
            setattr(client, key, data[key])
    db.commit()
    db.refresh(client)
    return client


def delete_client(db: Session, client: Client) -> Client:
    client.active = False
    db.commit()
    db.refresh(client)
    return client
