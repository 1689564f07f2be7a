"""
Checagem otimista de mesa ocupada.

Compara a mesa escolhida com um retrato dos pedidos abertos recebido do
chamador. Não reserva a mesa: a API de pedidos continua sendo a autoridade.
"""
from __future__ import annotations

from typing import Iterable

from pdv import schemas
from pdv.domain.core.enums import Severity
from pdv.domain.order.statuses import is_open


def _open_orders(snapshot: Iterable[schemas.OpenOrderRef]) -> list[schemas.OpenOrderRef]:
    return [order for order in snapshot if order.table_id and is_open(order.status)]


def tables_with_open_orders(snapshot: Iterable[schemas.OpenOrderRef]) -> set[str]:
    return {order.table_id for order in _open_orders(snapshot) if order.table_id}


def other_open_orders(
    table_id: str | None,
    snapshot: Iterable[schemas.OpenOrderRef],
    current_order_id: str | None = None,
) -> list[schemas.OpenOrderRef]:
    if not table_id:
        return []
    return [
        order
        for order in _open_orders(snapshot)
        if order.table_id == table_id and order.order_id != current_order_id
    ]


def check_table_occupancy(
    table_id: str | None,
    snapshot: Iterable[schemas.OpenOrderRef],
    current_order_id: str | None = None,
) -> schemas.ValidationIssue | None:
    others = other_open_orders(table_id, snapshot, current_order_id)
    if not others:
        return None
    return schemas.ValidationIssue(
        field="table",
        message=f"Mesa ocupada: {len(others)} pedido(s) em aberto",
        severity=Severity.info,
    )
