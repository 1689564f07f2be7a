"""
Composição de pagamentos do PDV: forma única ou dividida (split).

Os construtores de payload assumem que a validação já garantiu carrinho não
vazio e pagamento escolhido; não repetem essas checagens.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

from pdv import schemas
from pdv.domain.core.enums import PaymentMode
from pdv.domain.core.money import ZERO, calculate_change, parse_amount, to_decimal
from pdv.domain.payment.methods import find_payment_method, is_cash_like


def _mode(value: PaymentMode | str | bool) -> PaymentMode:
    if isinstance(value, PaymentMode):
        return value
    if isinstance(value, bool):
        return PaymentMode.split if value else PaymentMode.single
    try:
        return PaymentMode(str(value).strip().lower())
    except ValueError:
        return PaymentMode.single


def _paid_items(split_items: Iterable[schemas.SplitPaymentItem]) -> list[schemas.SplitPaymentItem]:
    return [item for item in split_items if item.amount is not None and item.amount > ZERO]


def total_paid(split_items: Iterable[schemas.SplitPaymentItem]) -> Decimal:
    return sum((item.amount or ZERO for item in split_items), ZERO)


def is_complete(
    total: Any,
    mode: PaymentMode | str | bool,
    split_items: Iterable[schemas.SplitPaymentItem] = (),
    single_method_id: str | None = None,
) -> bool:
    """Split: soma paga cobre o total. Única: basta ter forma escolhida."""
    if _mode(mode) is PaymentMode.split:
        return total_paid(split_items) >= (to_decimal(total) or ZERO)
    return bool(single_method_id)


def change_due(total: Any, split_items: Iterable[schemas.SplitPaymentItem]) -> Decimal:
    return calculate_change(total_paid(split_items), total)


def single_change_due(total: Any, received_amount: Any, needs_change: bool) -> Decimal:
    received = parse_amount(received_amount)
    if not needs_change or received is None:
        return ZERO
    return calculate_change(received, total)


def build_confirmation_breakdown(
    mode: PaymentMode | str | bool,
    single_method_id: str | None,
    split_items: Iterable[schemas.SplitPaymentItem],
    catalog: Iterable[schemas.PaymentMethod],
    total: Any,
    received_amount: Any = None,
    needs_change: bool = False,
) -> list[schemas.PaymentConfirmationItem]:
    if _mode(mode) is PaymentMode.split:
        return [
            schemas.PaymentConfirmationItem(method=item.method, amount=item.amount)
            for item in _paid_items(split_items)
        ]
    method = find_payment_method(catalog, single_method_id)
    if method is None:
        return []
    received = parse_amount(received_amount)
    amount = received if needs_change and received else (to_decimal(total) or ZERO)
    return [schemas.PaymentConfirmationItem(method=method, amount=amount)]


def build_payment_payload(
    mode: PaymentMode | str | bool,
    single_method_id: str | None,
    split_items: Iterable[schemas.SplitPaymentItem],
    needs_change: bool = False,
    received_amount: Any = None,
) -> dict:
    split_items = list(split_items)
    payload: dict = {}
    if _mode(mode) is PaymentMode.single:
        if single_method_id:
            received = parse_amount(received_amount)
            payload["payment_method_id"] = single_method_id
            payload["precisa_troco"] = bool(needs_change)
            payload["valor_recebido"] = received if needs_change and received else None
        return payload
    if split_items:
        payload["split_payments"] = [
            {
                "payment_method_id": item.method.id,
                "amount": item.amount,
                "needs_change": is_cash_like(item.method),
            }
            for item in _paid_items(split_items)
        ]
    return payload
