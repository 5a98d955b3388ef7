"""Context fields and credential scrubbing on log records."""

import logging

from paybridge.common.config import settings
from paybridge.common.logging import ContextFilter, payment_kind_ctx, trace_id_ctx


def _record(msg, *args):
    return logging.LogRecord("paybridge", logging.WARNING, __file__, 1, msg, args, None)


def test_record_carries_payment_context(monkeypatch):
    monkeypatch.setattr(settings, "mercadopago_access_token", None)
    trace_token = trace_id_ctx.set("trace-1")
    kind_token = payment_kind_ctx.set("alternative")
    try:
        record = _record("payment_resolved")
        ContextFilter().filter(record)
    finally:
        payment_kind_ctx.reset(kind_token)
        trace_id_ctx.reset(trace_token)

    assert record.trace_id == "trace-1"
    assert record.payment_kind == "alternative"
    assert record.gateway_mode == "simulation-only"


def test_access_token_is_scrubbed(monkeypatch):
    """An upstream error echoing the credential is logged without it."""

    monkeypatch.setattr(settings, "mercadopago_access_token", "APP_USR-secret")
    record = _record("gateway_error error=%s", "bad header Bearer APP_USR-secret")
    ContextFilter().filter(record)

    assert "APP_USR-secret" not in record.getMessage()
    assert "Bearer <redacted>" in record.getMessage()
    assert record.gateway_mode == "live"
