"""
Tests for structured request logging.
"""

import json
import logging

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from pdv.main import app
from pdv.observability import configure_logging, level_for_status, mark_pdv_error, request_context
from pdv.routers.pdv import get_order_gateway
from pdv.settings import Settings, get_settings


class _JsonLines(logging.Handler):
    def __init__(self):
        super().__init__()
        self.lines = []

    def emit(self, record):
        self.lines.append(json.loads(record.getMessage()))


@pytest.fixture
def request_log():
    handler = _JsonLines()
    request_logger = logging.getLogger("pdv.request")
    request_logger.addHandler(handler)
    yield handler.lines
    request_logger.removeHandler(handler)


def _request(path_params=None, headers=()):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/pdv/orders/o1/cancel",
        "query_string": b"",
        "headers": [(name.encode(), value.encode()) for name, value in headers],
        "path_params": path_params or {},
    }
    return Request(scope)


class TestRequestContext:
    """Tests for request_context."""

    def test_order_and_operator_context(self):
        request = _request(
            {"order_id": "o1", "action": "cancel"},
            [("x-operator-id", "op-7"), ("x-tenant", "loja-1"), ("x-pdv-terminal", "caixa-2")],
        )
        mark_pdv_error(request, "STATUS_TRANSITION_DENIED")
        context = request_context(request)
        assert context["order_id"] == "o1"
        assert context["action"] == "cancel"
        assert "stage" not in context
        assert context["operator"] == "op-7"
        assert context["tenant"] == "loja-1"
        assert context["terminal"] == "caixa-2"
        assert context["error_code"] == "STATUS_TRANSITION_DENIED"

    def test_before_routing(self):
        context = request_context(_request())
        assert context["route"] is None
        assert context["error_code"] is None
        assert context["operator"] is None

    def test_level_for_status(self):
        assert level_for_status(200) == logging.INFO
        assert level_for_status(409) == logging.WARNING
        assert level_for_status(502) == logging.ERROR


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_level_applies_to_request_logger(self):
        configure_logging("debug")
        assert logging.getLogger("pdv").level == logging.DEBUG
        assert logging.getLogger("pdv.request").level == logging.DEBUG
        assert logging.getLogger("pdv.request").propagate is False
        configure_logging("nonsense")
        assert logging.getLogger("pdv.request").level == logging.INFO


class TestRequestLogging:
    """The middleware logs one JSON line per request with order context."""

    def test_denied_transition_is_logged_with_code(self, request_log, gateway):
        app.dependency_overrides[get_settings] = lambda: Settings(ORDERS_API_URL=None)
        app.dependency_overrides[get_order_gateway] = lambda: gateway
        try:
            with TestClient(app) as client:
                response = client.post(
                    "/pdv/orders/o1/cancel",
                    json={"order_status": "Entregue"},
                    headers={"X-Request-Id": "req-9", "X-Operator-Id": "op-7"},
                )
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 409
        line = request_log[-1]
        assert line["event"] == "pdv_request"
        assert line["request_id"] == "req-9"
        assert line["status"] == 409
        assert line["operator"] == "op-7"
        assert line["order_id"] == "o1"
        assert line["action"] == "cancel"
        assert line["route"] == "/pdv/orders/{order_id}/{action}"
        assert line["error_code"] == "STATUS_TRANSITION_DENIED"
