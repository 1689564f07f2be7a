"""
Erros do PDV.

Validações nunca levantam exceção (devolvem lista de ValidationIssue); estes
erros saem apenas da camada de serviço, quando uma submissão não pode seguir.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any


class PdvError(Exception):
    """
    Erro estruturado com `code` para tratamento programático.

    Usage:
        try:
            await session.finalize(gateway)
        except PdvError as e:
            if e.code == "ORDER_VALIDATION_FAILED":
                show(e.issues)
    """

    _default_messages = {
        "ORDER_VALIDATION_FAILED": "Pedido com pendências de validação",
        "ORDER_NOT_STARTED": "Nenhum pedido em andamento",
        "STATUS_TRANSITION_DENIED": "Transição de status não permitida",
        "GATEWAY_NOT_CONFIGURED": "API de pedidos não configurada",
        "GATEWAY_REQUEST_FAILED": "Falha ao enviar pedido para a API",
    }

    def __init__(self, code: str, message: str | None = None, **data: Any) -> None:
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    @property
    def issues(self) -> list:
        """Shortcut for data['issues']."""
        return self.data.get("issues", [])

    def as_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "data": {k: _jsonable(v) for k, v in self.data.items()},
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value
