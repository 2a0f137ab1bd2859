from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..crud import clients as repo
from ..models.client import Client
from . import fields

logger = logging.getLogger(__name__)


def validate_client(data: dict) -> dict:
    cleaned = {
        "document_type": fields.text(data, "document_type", required=True, max_length=3, label="document type"),
        "document_number": fields.text(
            data, "document_number", required=True, max_length=20, label="document number"
        ),
        "first_name": fields.text(data, "first_name", required=True, max_length=50, label="first name"),
        "last_name": fields.text(data, "last_name", required=True, max_length=50, label="last name"),
        "address": fields.text(data, "address", max_length=200),
        "phone": fields.phone(data),
        "email": fields.email(data),
    }
    cleaned["document_type"] = cleaned["document_type"].upper()
    if data.get("active") is not None:
        cleaned["active"] = bool(data["active"])
    return cleaned


def create_client(db: Session, payload: dict) -> Client:
    client = repo.create_client(db, validate_client(payload))
    logger.info("Client registered: %s (id=%s)", client.document, client.id)
    return client


def update_client(db: Session, client: Client, payload: dict) -> Client:
    data = validate_client(fields.merged(client, payload, repo.CLIENT_FIELDS))
    client = repo.update_client(db, client, data)
    logger.info("Client updated: id=%s", client.id)
    return client


def delete_client(db: Session, client: Client) -> Client:
    client = repo.delete_client(db, client)
    logger.info("Client deactivated: id=%s", client.id)
    return client
