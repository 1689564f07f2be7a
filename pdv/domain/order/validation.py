"""
Validações de pedido do PDV.

Cada checagem devolve um ValidationIssue ou None. Os pipelines acumulam todas
as falhas aplicáveis (sem interromper na primeira) para a interface mostrar
tudo de uma vez. Nada aqui levanta exceção.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable, Sequence

from pdv import schemas
from pdv.domain.core.enums import PaymentMode, Severity
from pdv.domain.core.money import ZERO, format_currency, parse_amount, to_decimal
from pdv.domain.order import statuses
from pdv.domain.payment import composer

logger = logging.getLogger(__name__)


@dataclass
class OrderValidationContext:
    cart: Sequence[schemas.CartLine] = ()
    order_total: Decimal = ZERO
    selected_table: str | None = None
    is_delivery: bool = False
    payment_mode: PaymentMode = PaymentMode.single
    selected_payment_method: str | None = None
    split_items: list[schemas.SplitPaymentItem] = field(default_factory=list)
    order_status: statuses.StatusLike = None
    needs_change: bool = False
    received_amount: Decimal | None = None

    @property
    def use_split_payment(self) -> bool:
        return self.payment_mode is PaymentMode.split


def _error(message: str, field_name: str | None = None) -> schemas.ValidationIssue:
    return schemas.ValidationIssue(field=field_name, message=message, severity=Severity.error)


def has_blocking(issues: Iterable[schemas.ValidationIssue]) -> bool:
    return any(issue.severity is Severity.error for issue in issues)


# --- checagens independentes ---


def validate_cart_not_empty(cart: Sequence[schemas.CartLine]) -> schemas.ValidationIssue | None:
    if not cart:
        return _error("Adicione pelo menos um item ao pedido")
    return None


def validate_table_selected(is_delivery: bool, selected_table: str | None) -> schemas.ValidationIssue | None:
    if not is_delivery and not (selected_table or "").strip():
        return _error("Selecione uma mesa para o pedido", "table")
    return None


def validate_payment_method(
    selected_payment_method: str | None,
    use_split_payment: bool = False,
    split_items: Sequence[schemas.SplitPaymentItem] = (),
) -> schemas.ValidationIssue | None:
    if not use_split_payment and not selected_payment_method:
        return _error("Selecione uma forma de pagamento", "payment")
    if use_split_payment and not split_items:
        return _error("Adicione pelo menos um método de pagamento", "payment")
    return None


def validate_payment_complete(
    order_total: Any,
    use_split_payment: bool,
    split_items: Sequence[schemas.SplitPaymentItem],
) -> schemas.ValidationIssue | None:
    if not use_split_payment:
        return None
    total = to_decimal(order_total) or ZERO
    paid = composer.total_paid(split_items)
    if paid < total:
        return _error(
            f"O valor pago ({format_currency(paid)}) é menor que o total do pedido ({format_currency(total)})",
            "payment",
        )
    return None


def validate_order_editable(order_status: statuses.StatusLike) -> schemas.ValidationIssue | None:
    if statuses.is_final(order_status):
        label = statuses.status_label(order_status)
        return _error(f"Este pedido possui status final ({label}) e não pode ser editado")
    return None


def validate_order_can_be_finalized(order_status: statuses.StatusLike) -> schemas.ValidationIssue | None:
    label = statuses.status_label(order_status)
    if label is None:
        return _error("Status do pedido não identificado")
    if statuses.is_final(order_status):
        return _error(f"Pedido já está finalizado ({label})")
    if not statuses.can_finalize(order_status):
        return _error(f'Pedido deve estar em "Pronto" ou "Em Entrega" para ser finalizado. Status atual: {label}')
    return None


def validate_received_amount(
    received_amount: Any,
    order_total: Any,
    needs_change: bool,
) -> schemas.ValidationIssue | None:
    if not needs_change:
        return None
    received = parse_amount(received_amount)
    if received is None:
        return _error("Informe o valor recebido", "receivedAmount")
    if received <= ZERO:
        return _error("O valor recebido deve ser maior que zero", "receivedAmount")
    total = to_decimal(order_total) or ZERO
    if received < total:
        return _error(
            f"O valor recebido deve ser maior ou igual ao total ({format_currency(total)})",
            "receivedAmount",
        )
    return None


# --- pipelines ---


def _collect(*results: schemas.ValidationIssue | None) -> list[schemas.ValidationIssue]:
    return [issue for issue in results if issue is not None]


def _payment_checks(context: OrderValidationContext) -> list[schemas.ValidationIssue | None]:
    checks = [
        validate_payment_method(
            context.selected_payment_method,
            context.use_split_payment,
            context.split_items,
        )
    ]
    if context.use_split_payment:
        checks.append(validate_payment_complete(context.order_total, True, context.split_items))
    return checks


def validate_order_before_start(context: OrderValidationContext) -> list[schemas.ValidationIssue]:
    issues = _collect(
        validate_cart_not_empty(context.cart),
        validate_table_selected(context.is_delivery, context.selected_table),
        *_payment_checks(context),
    )
    logger.info("validate before_start issues=%s", len(issues))
    return issues


def validate_order_before_update(context: OrderValidationContext) -> list[schemas.ValidationIssue]:
    issues = _collect(
        validate_order_editable(context.order_status),
        validate_cart_not_empty(context.cart),
    )
    logger.info("validate before_update issues=%s", len(issues))
    return issues


def validate_order_before_finalize(context: OrderValidationContext) -> list[schemas.ValidationIssue]:
    issues = _collect(
        validate_order_editable(context.order_status),
        validate_order_can_be_finalized(context.order_status),
        validate_cart_not_empty(context.cart),
        *_payment_checks(context),
    )
    logger.info("validate before_finalize issues=%s", len(issues))
    return issues


PIPELINES = {
    "start": validate_order_before_start,
    "update": validate_order_before_update,
    "finalize": validate_order_before_finalize,
}
