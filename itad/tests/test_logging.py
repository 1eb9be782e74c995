import json
import logging
import sys

from itad.core.logging import JsonFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("itad.test", logging.INFO, __file__, 10, "Booking status updated", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_extra_fields():
    payload = json.loads(JsonFormatter(service="itad-test").format(_record(booking_id="b-1", to_status="collected")))

    assert payload["service"] == "itad-test"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "itad.test"
    assert payload["message"] == "Booking status updated"
    assert payload["extra"] == {"booking_id": "b-1", "to_status": "collected"}


def test_json_formatter_includes_traceback():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord("itad.test", logging.ERROR, __file__, 10, "Cascade step failed", None, sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))
    assert "RuntimeError: boom" in payload["exc_info"]
    assert "extra" not in payload
