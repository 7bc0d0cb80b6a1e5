from types import SimpleNamespace

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from starlette.requests import Request
from starlette.responses import Response

from app.branchstock.core.db_timing import add_query_time, begin_request_timing, end_request_timing, is_timing
from app.branchstock.core.errors import setup_exception_handlers
from app.branchstock.core.metrics import metrics
from app.branchstock.middleware.observability import build_request_log_payload


def test_build_request_log_payload():
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/transfers",
        "headers": [],
        "route": SimpleNamespace(path="/api/transfers"),
    }
    request = Request(scope)
    request.state.trace_id = "trace-1"
    request.state.user_id = "user-1"
    request.state.branch_id = "franko"
    request.state.error_code = None
    response = Response(status_code=200)

    payload = build_request_log_payload(
        request=request,
        response=response,
        latency_ms=12.3456,
        db_time_ms=4.5678,
    )

    assert payload["trace_id"] == "trace-1"
    assert payload["user_id"] == "user-1"
    assert payload["branch_id"] == "franko"
    assert payload["route"] == "/api/transfers"
    assert payload["method"] == "POST"
    assert payload["status_code"] == 200
    assert payload["latency_ms"] == 12.35
    assert payload["db_time_ms"] == 4.57


def test_lock_timeout_increments_metric():
    metrics.reset()
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/lock-timeout")
    def lock_timeout():
        raise OperationalError("SELECT 1", {}, Exception("lock timeout"))

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/lock-timeout")

    assert response.status_code == 409
    assert response.json()["code"] == "LOCK_TIMEOUT"

    content = metrics.render().content.decode("utf-8")
    if metrics.enabled:
        assert "lock_wait_timeout_total" in content
    else:
        assert "metrics_disabled" in content


def test_unhandled_error_is_generic():
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise RuntimeError("secret detail")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"] == "Internal server error"
    assert "secret detail" not in response.text


def test_metrics_endpoint_exposes_transfer_counters(client):
    response = client.get("/api/ops/metrics")

    assert response.status_code == 200
    if metrics.enabled:
        assert "transfers_completed_total" in response.text
        assert "http_requests_total" in response.text


def test_db_timing_accumulates_per_request():
    assert not is_timing()
    add_query_time(9.0)

    token = begin_request_timing()
    add_query_time(1.5)
    add_query_time(2.0)

    assert is_timing()
    assert end_request_timing(token) == 3.5
    assert not is_timing()
