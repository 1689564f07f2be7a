from __future__ import annotations

import unicodedata

from pdv.domain.core.enums import OrderStatus

FINAL_ORDER_STATUSES = frozenset(
    {
        OrderStatus.entregue,
        OrderStatus.cancelado,
        OrderStatus.concluido,
        OrderStatus.arquivado,
    }
)
FINALIZABLE_ORDER_STATUSES = (OrderStatus.pronto, OrderStatus.em_entrega)
FINALIZE_TARGET_STATUS = OrderStatus.entregue
CANCEL_TARGET_STATUS = OrderStatus.cancelado

STATUS_ALIAS_MAP = {
    "pendente": OrderStatus.pendente,
    "received": OrderStatus.pendente,
    "pending": OrderStatus.pendente,
    "preparando": OrderStatus.preparando,
    "preparing": OrderStatus.preparando,
    "pronto": OrderStatus.pronto,
    "ready": OrderStatus.pronto,
    "em_entrega": OrderStatus.em_entrega,
    "a_caminho": OrderStatus.em_entrega,
    "em_rota": OrderStatus.em_entrega,
    "on_route": OrderStatus.em_entrega,
    "entregue": OrderStatus.entregue,
    "delivered": OrderStatus.entregue,
    "concluido": OrderStatus.concluido,
    "completed": OrderStatus.concluido,
    "cancelado": OrderStatus.cancelado,
    "canceled": OrderStatus.cancelado,
    "cancelled": OrderStatus.cancelado,
    "arquivado": OrderStatus.arquivado,
    "archived": OrderStatus.arquivado,
}

STATUS_COLORS = {
    OrderStatus.pendente: "yellow",
    OrderStatus.preparando: "blue",
    OrderStatus.pronto: "green",
    OrderStatus.em_entrega: "purple",
    OrderStatus.entregue: "emerald",
    OrderStatus.concluido: "emerald",
    OrderStatus.cancelado: "red",
    OrderStatus.arquivado: "gray",
}

STATUS_DESCRIPTIONS = {
    OrderStatus.pendente: "Aguardando processamento",
    OrderStatus.preparando: "Em preparação",
    OrderStatus.pronto: "Pronto para entrega/retirada",
    OrderStatus.em_entrega: "Saiu para entrega",
    OrderStatus.entregue: "Pedido entregue",
    OrderStatus.concluido: "Pedido concluído",
    OrderStatus.cancelado: "Pedido cancelado",
    OrderStatus.arquivado: "Pedido arquivado",
}

StatusLike = OrderStatus | str | None


def _normalize_label(value: str) -> str:
    normalized = value.strip().lower()
    normalized = unicodedata.normalize("NFD", normalized)
    normalized = "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")
    normalized = normalized.replace("-", " ").replace("_", " ")
    normalized = "".join(
        ch
        for ch in normalized
        if ch.isalnum() or ch.isspace()
    ).strip()
    normalized = "_".join(normalized.split())
    return normalized


def parse_status(value: StatusLike) -> OrderStatus | None:
    """Status conhecido ou None (vazio ou desconhecido)."""
    if isinstance(value, OrderStatus):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    return STATUS_ALIAS_MAP.get(_normalize_label(value))


def _has_status(value: StatusLike) -> bool:
    if isinstance(value, OrderStatus):
        return True
    return isinstance(value, str) and bool(value.strip())


def is_final(status: StatusLike) -> bool:
    return parse_status(status) in FINAL_ORDER_STATUSES


def is_open(status: StatusLike) -> bool:
    # Arquivado também fecha a mesa
    return not is_final(status)


def can_edit(status: StatusLike) -> bool:
    return not is_final(status)


def can_advance(status: StatusLike) -> bool:
    if not _has_status(status):
        return False
    parsed = parse_status(status)
    if parsed in FINAL_ORDER_STATUSES or parsed is OrderStatus.entregue:
        return False
    return True


def can_finalize(status: StatusLike) -> bool:
    parsed = parse_status(status)
    return parsed in FINALIZABLE_ORDER_STATUSES and parsed not in FINAL_ORDER_STATUSES


def can_cancel(status: StatusLike) -> bool:
    """Cancelar um pedido já cancelado é permitido (reabertura pelo operador)."""
    if not _has_status(status):
        return True
    parsed = parse_status(status)
    return parsed not in FINAL_ORDER_STATUSES or parsed is OrderStatus.cancelado


def next_status(status: StatusLike, is_delivery: bool = False) -> OrderStatus | None:
    parsed = parse_status(status)
    if parsed is None or parsed in FINAL_ORDER_STATUSES:
        return None
    flow = {
        OrderStatus.pendente: OrderStatus.preparando,
        OrderStatus.preparando: OrderStatus.pronto,
        OrderStatus.pronto: OrderStatus.em_entrega if is_delivery else OrderStatus.entregue,
        OrderStatus.em_entrega: OrderStatus.entregue,
    }
    return flow.get(parsed)


def next_status_name(status: StatusLike, is_delivery: bool = False) -> str | None:
    target = next_status(status, is_delivery)
    return target.value if target else None


def status_label(status: StatusLike) -> str | None:
    parsed = parse_status(status)
    if parsed is not None:
        return parsed.value
    if isinstance(status, str) and status.strip():
        return status.strip()
    return None


def status_color(status: StatusLike) -> str:
    parsed = parse_status(status)
    return STATUS_COLORS.get(parsed, "default") if parsed else "default"


def status_description(status: StatusLike) -> str:
    parsed = parse_status(status)
    if parsed is not None:
        return STATUS_DESCRIPTIONS[parsed]
    return status_label(status) or "Status desconhecido"


# Pedidos de transição: corpo enviado à API de pedidos ou None quando proibido.


def advance_request(status: StatusLike, is_delivery: bool = False) -> dict | None:
    if not can_advance(status):
        return None
    target = next_status(status, is_delivery)
    if target is None:
        return None
    return {"status": target.value}


def finalize_request(status: StatusLike) -> dict | None:
    if not can_finalize(status):
        return None
    return {"status": FINALIZE_TARGET_STATUS.value}


def cancel_request(status: StatusLike) -> dict | None:
    if not can_cancel(status):
        return None
    return {"status": CANCEL_TARGET_STATUS.value}
