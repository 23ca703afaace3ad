import json
import logging
import sys

from rma_portal.core.logging import JsonFormatter, configure_logging


def _record(msg="ticket created", exc_info=None, **extra):
    record = logging.LogRecord("rma_portal.services.tickets", logging.INFO, __file__, 1, msg, (), exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_carries_service_and_context():
    line = JsonFormatter("rma-portal-worker").format(_record(rma_number="RMA-2026-123456", source="scheduler"))
    payload = json.loads(line)

    assert payload["service"] == "rma-portal-worker"
    assert payload["msg"] == "ticket created"
    assert payload["rma_number"] == "RMA-2026-123456"
    assert payload["source"] == "scheduler"
    assert "customer_number" not in payload
    assert payload["time"].endswith("+00:00")


def test_json_formatter_includes_traceback():
    try:
        raise ValueError("bad row")
    except ValueError:
        record = _record("archive failed", exc_info=sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))
    assert payload["exc_type"] == "ValueError"
    assert "bad row" in payload["traceback"]


def test_configure_logging_writes_json_file(tmp_path):
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    log_file = tmp_path / "logs" / "portal.log"
    try:
        configure_logging("DEBUG", log_file=str(log_file))
        logging.getLogger("rma_portal.test").info("hello", extra={"step": "shipping"})
        for handler in root.handlers:
            handler.flush()
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])

    payload = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert payload["msg"] == "hello"
    assert payload["step"] == "shipping"
