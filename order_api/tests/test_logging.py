import json
import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient

from order_api.app.middlewares.logging import LoggingMiddleware, _redact
from order_api.app.middlewares.request_id import RequestIdMiddleware
from order_api.app.obs.logging import JsonFormatter, configure_logging


def _make_app():
    test_app = FastAPI()
    test_app.add_middleware(LoggingMiddleware)
    test_app.add_middleware(RequestIdMiddleware)

    @test_app.get("/health")
    async def health():
        return {"ok": True}

    @test_app.post("/echo")
    async def echo(data: dict):
        return data

    @test_app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    return test_app


def test_request_id_propagation(caplog):
    client = TestClient(_make_app())
    with caplog.at_level(logging.INFO, logger="api"):
        resp = client.get("/health", headers={"X-Request-ID": "abc"})
    assert resp.headers["X-Request-ID"] == "abc"
    data = json.loads(caplog.messages[1])
    assert data["req_id"] == "abc"
    assert data["status"] == 200


def test_request_id_generation(caplog):
    client = TestClient(_make_app())
    with caplog.at_level(logging.INFO, logger="api"):
        resp = client.get("/health")
    rid = resp.headers["X-Request-ID"]
    assert rid
    data = json.loads(caplog.messages[1])
    assert data["req_id"] == rid


def test_customer_email_redacted_from_body_and_query(caplog):
    client = TestClient(_make_app())
    payload = {
        "customerName": "Alice",
        "customerEmail": "alice@example.com",
        "nested": [{"email": "n@example.com"}],
    }
    with caplog.at_level(logging.INFO, logger="api"):
        client.post("/echo", json=payload, params={"customerEmail": "q@example.com"})
    inbound = json.loads(caplog.messages[0])
    assert inbound["body"]["customerName"] == "Alice"
    assert inbound["body"]["customerEmail"] == "***"
    assert inbound["body"]["nested"][0]["email"] == "***"
    assert inbound["query"]["customerEmail"] == "***"


def test_unhandled_error_becomes_500_envelope(caplog):
    client = TestClient(_make_app(), raise_server_exceptions=False)
    with caplog.at_level(logging.INFO, logger="api"):
        resp = client.get("/boom")
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Internal Server Error"
    assert body["path"] == "/boom"
    assert "kaboom" not in resp.text
    assert resp.headers["X-Request-ID"]


def test_redact_leaves_other_values():
    assert _redact({"status": "PENDING", "items": [1, 2]}) == {
        "status": "PENDING",
        "items": [1, 2],
    }


def test_json_logger_redaction():
    formatter = JsonFormatter()
    record = logging.LogRecord(
        "order_api",
        logging.INFO,
        __file__,
        0,
        "Creating order for foo@example.com and bar.baz+x@shop.co.uk",
        (),
        None,
    )
    data = json.loads(formatter.format(record))
    msg = data["msg"]
    assert "foo@example.com" not in msg
    assert "bar.baz+x@shop.co.uk" not in msg
    assert msg.count("***") == 2
    assert data["level"] == "INFO"
    assert data["logger"] == "order_api"


def test_unsafe_request_id_is_replaced(caplog):
    client = TestClient(_make_app())
    with caplog.at_level(logging.INFO, logger="api"):
        resp = client.get("/health", headers={"X-Request-ID": "not valid!"})
    rid = resp.headers["X-Request-ID"]
    assert rid != "not valid!"
    assert len(rid) == 32
    assert json.loads(caplog.messages[1])["req_id"] == rid


def test_json_logger_includes_extra_fields_when_set():
    record = logging.LogRecord("order_api", logging.INFO, __file__, 0, "moved", (), None)
    record.order_id = 12
    record.status = 200
    data = json.loads(JsonFormatter().format(record))
    assert data["order_id"] == 12
    assert data["status"] == 200
    assert "latency_ms" not in data


def test_configure_logging_is_idempotent():
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        configure_logging("DEBUG")
        configure_logging("INFO")
        ours = [h for h in root.handlers if isinstance(h.formatter, JsonFormatter)]
        assert len(ours) == 1
        assert root.level == logging.INFO
        assert logging.getLogger("aiosqlite").level == logging.WARNING
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
