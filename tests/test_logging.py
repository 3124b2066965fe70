"""Log context injection and startup redaction helpers."""

import logging

from simpay.common.logging import ContextFilter, operation_ctx, payment_id_ctx, trace_id_ctx
from simpay.common.startup import _safe_env, redact


def test_context_filter_injects_correlation_fields():
    record = logging.LogRecord("simpay", logging.INFO, __file__, 1, "msg", None, None)
    tokens = [trace_id_ctx.set("t-1"), operation_ctx.set("create_payment"), payment_id_ctx.set("pay_1")]
    try:
        assert ContextFilter().filter(record) is True
    finally:
        payment_id_ctx.reset(tokens[2])
        operation_ctx.reset(tokens[1])
        trace_id_ctx.reset(tokens[0])

    assert record.trace_id == "t-1"
    assert record.operation == "create_payment"
    assert record.payment_id == "pay_1"
    assert record.service_name


def test_redact_keeps_last_four():
    assert redact("test_key_123") == "********_123"
    assert redact("abc") == "<redacted>"


def test_safe_env_redacts_secret_names(monkeypatch):
    monkeypatch.setenv("PAYMENTS_API_KEY", "sk_live_secret")
    monkeypatch.setenv("PAYMENTS_MODE", "live")
    monkeypatch.delenv("PAYMENTS_DEBUG", raising=False)

    assert _safe_env("PAYMENTS_API_KEY") == "<redacted>"
    assert _safe_env("PAYMENTS_MODE") == "live"
    assert _safe_env("PAYMENTS_DEBUG") == "<unset>"
