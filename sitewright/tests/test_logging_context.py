import json
import logging

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from sitewright.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    latency_bucket_ms,
    log_event,
    request_id_ctx_var,
)
from sitewright.core.middleware.request_id import RequestIdMiddleware


def _make_app():
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware)

    @app.get("/")
    async def root(request: Request):
        return {"request_id": getattr(request.state, "request_id", None)}

    return app


def test_generates_request_id_when_missing():
    resp = TestClient(_make_app()).get("/")
    assert resp.status_code == 200
    assert resp.headers["x-request-id"] == resp.json()["request_id"]


def test_echoes_provided_request_id():
    resp = TestClient(_make_app()).get("/", headers={"X-Request-Id": "test-rid-123"})
    assert resp.headers["x-request-id"] == "test-rid-123"


def test_replaces_malformed_request_id():
    resp = TestClient(_make_app()).get("/", headers={"X-Request-Id": "bad id with spaces"})
    rid = resp.headers["x-request-id"]
    assert rid != "bad id with spaces"
    assert rid == resp.json()["request_id"]


def test_request_complete_logged_with_request_id(caplog):
    with caplog.at_level(logging.INFO, logger="sitewright"):
        TestClient(_make_app()).get("/", headers={"X-Request-Id": "rid-log-1"})
    record = next(r for r in caplog.records if r.getMessage() == "request.complete")
    assert record.request_id == "rid-log-1"
    assert record.status == "200"
    assert record.levelno == logging.INFO


def test_health_probes_stay_out_of_info_log(caplog):
    app = _make_app()

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    with caplog.at_level(logging.INFO, logger="sitewright"):
        TestClient(app).get("/healthz")
    assert not [r for r in caplog.records if r.getMessage() == "request.complete"]


def test_json_formatter_includes_request_id_and_fields():
    record = logging.LogRecord("sitewright", logging.INFO, __file__, 1, "website.created", None, None)
    record.website_id = "w1"
    record.event_type = "website.created"
    token = request_id_ctx_var.set("rid-1")
    try:
        RequestIdFilter().filter(record)
    finally:
        request_id_ctx_var.reset(token)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["request_id"] == "rid-1"
    assert payload["website_id"] == "w1"
    assert payload["event_type"] == "website.created"
    assert payload["level"] == "INFO"


def test_log_event_truncates_long_values(caplog):
    with caplog.at_level(logging.INFO, logger="sitewright"):
        log_event("info", "ai.unparsable_output", extra={"output": "x" * 2000})
    record = next(r for r in caplog.records if r.getMessage() == "ai.unparsable_output")
    assert record.output.endswith("...<truncated>")
    assert len(record.output) < 600


def test_latency_buckets():
    assert latency_bucket_ms(None) == "unknown"
    assert latency_bucket_ms(5) == "<10ms"
    assert latency_bucket_ms(250) == "100-500ms"
    assert latency_bucket_ms(20000) == ">=10s"
