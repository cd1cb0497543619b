import json
import logging

from ops.structured_logger import JsonFormatter, dest_hint
from utils.request_context import clear_request_id, set_request_id


def _record(msg="device_registered", extra=None):
    rec = logging.LogRecord("smsrelay.test", logging.INFO, __file__, 1, msg, None, None)
    if extra is not None:
        rec.extra = extra
    return rec


def test_json_formatter_fields():
    fmt = JsonFormatter(environment="staging", version="1.2.3")
    set_request_id("rid-1")
    try:
        out = json.loads(fmt.format(_record(extra={"event": "device_registered", "device_id": "dev1"})))
    finally:
        clear_request_id()

    assert out["message"] == "device_registered"
    assert out["severity"] == "INFO"
    assert out["environment"] == "staging"
    assert out["version"] == "1.2.3"
    assert out["request_id"] == "rid-1"
    assert out["device_id"] == "dev1"


def test_json_formatter_omits_empty_request_id():
    out = json.loads(JsonFormatter().format(_record()))
    assert "request_id" not in out


def test_dest_hint_masks_all_but_tail():
    assert dest_hint("-1001234567") == "...4567"
    assert dest_hint("123") == "123"
    assert dest_hint("") == ""
