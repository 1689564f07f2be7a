from __future__ import annotations

from typing import Iterable

from pdv import schemas
from pdv.domain.core.money import parse_price
from pdv.domain.order.pricing import unit_price


def compose_comment(
    lines: Iterable[schemas.CartLine],
    notes: str | None = None,
    customer: schemas.CustomerInfo | None = None,
) -> str | None:
    parts: list[str] = []
    if notes and notes.strip():
        parts.append(notes.strip())
    if customer and (customer.name or customer.phone):
        parts.append(f"Cliente: {customer.name or 'N/A'} {customer.phone or ''}".strip())
    for line in lines:
        observation = (line.observation or "").strip()
        if observation:
            parts.append(f"{line.product.name}: {observation}")
    return " | ".join(parts) or None


def _product_payload(line: schemas.CartLine) -> dict:
    variation = line.selected_variation
    return {
        "identify": line.product.key,
        "qty": line.quantity,
        "price": unit_price(line),
        "variation": (
            {"id": variation.key, "name": variation.name, "price": parse_price(variation.price)}
            if variation
            else None
        ),
        "optionals": [
            {
                "id": optional.key,
                "name": optional.name,
                "price": parse_price(optional.price),
                "quantity": optional.quantity,
            }
            for optional in line.selected_optionals
        ],
        "observation": line.observation or None,
    }


def build_order_payload(
    lines: Iterable[schemas.CartLine],
    destination: schemas.OrderDestination,
    payment_payload: dict | None = None,
    notes: str | None = None,
    customer: schemas.CustomerInfo | None = None,
) -> dict:
    """Corpo de criação/atualização de pedido para a API de pedidos."""
    lines = list(lines)
    address = destination.delivery_address if destination.is_delivery else None
    payload: dict = {
        "comment": compose_comment(lines, notes, customer),
        "products": [_product_payload(line) for line in lines],
        "table_id": None if destination.is_delivery else destination.table_id,
        "is_delivery": destination.is_delivery,
        "delivery_address": address.address if address else None,
        "delivery_number": address.number if address else None,
        "delivery_complement": address.complement if address else None,
        "delivery_neighborhood": address.neighborhood if address else None,
        "delivery_city": address.city if address else None,
        "delivery_state": address.state if address else None,
        "delivery_zip_code": address.zip_code if address else None,
        "delivery_notes": notes if destination.is_delivery else None,
    }
    payload.update(payment_payload or {})
    return payload
