"""JSON log records carry request context; the module entry point starts uvicorn."""

import json
import logging
from decimal import Decimal

from electrotech.core.logging import JsonLogFormatter
from electrotech.middlewares import principal_ctx_var, request_id_ctx_var


def _record(message="sale.created", **extra_data):
    record = logging.LogRecord("electrotech.services.sales", logging.INFO, __file__, 1, message, None, None)
    if extra_data:
        record.extra_data = extra_data
    return record


def test_formatter_includes_request_context_and_extra_data():
    id_token = request_id_ctx_var.set("req-1")
    principal_token = principal_ctx_var.set("user:admin")
    try:
        entry = json.loads(JsonLogFormatter().format(_record(total=Decimal("312.00"))))
    finally:
        principal_ctx_var.reset(principal_token)
        request_id_ctx_var.reset(id_token)

    assert entry["message"] == "sale.created"
    assert entry["level"] == "INFO"
    assert entry["request_id"] == "req-1"
    assert entry["principal"] == "user:admin"
    assert entry["total"] == "312.00"


def test_formatter_omits_unset_context():
    entry = json.loads(JsonLogFormatter().format(_record()))

    assert "request_id" not in entry
    assert "principal" not in entry
    assert entry["logger"] == "electrotech.services.sales"


def test_module_entry_serves_app_on_configured_address(monkeypatch):
    from electrotech import __main__ as entry
    from electrotech.core.config import settings

    calls = []
    monkeypatch.setattr(entry.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    entry.main()

    assert calls == [("electrotech.main:app", {"host": settings.HOST, "port": settings.PORT, "log_config": None})]
