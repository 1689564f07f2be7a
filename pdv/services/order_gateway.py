"""
Gateway para a API externa de pedidos (persistência).

Uma tentativa por chamada, sem retry: reenviar é decisão do operador.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from pdv.domain.core.money import money_to_json
from pdv.exceptions import PdvError
from pdv.settings import Settings

logger = logging.getLogger(__name__)


class OrderGateway(Protocol):
    async def create_order(self, payload: dict) -> dict: ...

    async def update_order(self, order_id: str, payload: dict) -> dict: ...

    async def update_status(self, order_id: str, payload: dict) -> dict: ...


def order_identity(data: dict) -> str | None:
    for key in ("identify", "uuid", "id"):
        value = data.get(key)
        if value:
            return str(value)
    return None


class HttpOrderGateway:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> "HttpOrderGateway":
        if not settings.orders_api_url:
            raise PdvError("GATEWAY_NOT_CONFIGURED")
        return cls(
            settings.orders_api_url,
            token=settings.orders_api_token,
            timeout=settings.orders_api_timeout_seconds,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _send(self, method: str, path: str, payload: dict) -> dict:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, json=money_to_json(payload), headers=self._headers())
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Orders API rejected %s %s status=%s body=%s",
                method,
                path,
                exc.response.status_code,
                exc.response.text,
            )
            raise PdvError(
                "GATEWAY_REQUEST_FAILED",
                status_code=exc.response.status_code,
                body=exc.response.text,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Orders API unreachable %s %s: %s", method, path, exc)
            raise PdvError("GATEWAY_REQUEST_FAILED", reason=str(exc)) from exc

        logger.info("Orders API %s %s status=%s", method, path, response.status_code)
        if not response.content:
            return {}
        body: Any = response.json()
        # A API responde {"success": true, "data": {...}}
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            return body["data"]
        return body if isinstance(body, dict) else {}

    async def create_order(self, payload: dict) -> dict:
        return await self._send("POST", "/orders", payload)

    async def update_order(self, order_id: str, payload: dict) -> dict:
        return await self._send("PUT", f"/orders/{order_id}", payload)

    async def update_status(self, order_id: str, payload: dict) -> dict:
        return await self._send("PATCH", f"/orders/{order_id}/status", payload)
