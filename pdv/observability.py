"""
Log estruturado das requisições do PDV.

Uma linha JSON por requisição, com o contexto do caixa (operador, terminal)
e do pedido (rota, order_id, etapa de validação, ação de status e código do
PdvError, quando houver), para seguir a jornada de um pedido entre chamadas.
"""
from __future__ import annotations

import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("pdv.request")

PDV_PATH_PARAMS = ("order_id", "stage", "action", "status")
CONTEXT_HEADERS = {
    "tenant": ("x-tenant-id", "x-tenant"),
    "operator": ("x-operator-id",),
    "terminal": ("x-pdv-terminal",),
}


def configure_logging(level: str = "INFO") -> None:
    """Aplica PDV_LOG_LEVEL aos loggers `pdv.*`; o de requests escreve só o JSON."""
    numeric = getattr(logging, (level or "INFO").upper(), logging.INFO)

    app_logger = logging.getLogger("pdv")
    if not app_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        app_logger.addHandler(handler)
    app_logger.setLevel(numeric)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    logger.propagate = False


def mark_pdv_error(request: Request, code: str) -> None:
    request.state.pdv_error_code = code


def _first_header(request: Request, names: tuple[str, ...]) -> str | None:
    return next((request.headers[name] for name in names if request.headers.get(name)), None)


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def request_context(request: Request) -> dict:
    """Contexto do pedido e do caixa; path params só existem depois do roteamento."""
    params = request.scope.get("path_params") or {}
    context = {name: params.get(name) for name in PDV_PATH_PARAMS if name in params}
    for key, names in CONTEXT_HEADERS.items():
        context[key] = _first_header(request, names)
    route = request.scope.get("route")
    context["route"] = getattr(route, "path", None)
    context["error_code"] = getattr(request.state, "pdv_error_code", None)
    return context


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(self._line(request, request_id, start, 500))
            raise

        status = response.status_code
        logger.log(level_for_status(status), self._line(request, request_id, start, status))
        response.headers["X-Request-Id"] = request_id
        return response

    @staticmethod
    def _line(request: Request, request_id: str, start: float, status: int) -> str:
        payload = {
            "event": "pdv_request",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": status,
            "duration_ms": int((time.perf_counter() - start) * 1000),
            "client_ip": _client_ip(request),
            **request_context(request),
        }
        return json.dumps(payload, ensure_ascii=True)
