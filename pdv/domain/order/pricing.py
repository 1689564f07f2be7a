"""
Cálculo de preços do carrinho do PDV.

Preço unitário = preço da variação (quando informado) ou preço base do produto,
somado a preço x quantidade de cada opcional. Funções puras: nada aqui altera
as linhas recebidas nem levanta exceção por causa de preço malformado.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

from pdv import schemas
from pdv.domain.core.money import ZERO, parse_price, to_decimal

HUNDRED = Decimal("100")


def _variation_price(variation: schemas.VariationIn | None) -> Decimal | None:
    if variation is None:
        return None
    raw = variation.price
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if to_decimal(raw, default=None) is None:
        return None
    return parse_price(raw)


def optionals_price(optionals: Iterable[schemas.OptionalIn]) -> Decimal:
    total = ZERO
    for optional in optionals:
        quantity = max(int(optional.quantity or 0), 0)
        total += parse_price(optional.price) * quantity
    return total


def unit_price(line: schemas.CartLine) -> Decimal:
    base = _variation_price(line.selected_variation)
    if base is None:
        base = parse_price(line.product.price)
    return base + optionals_price(line.selected_optionals)


def line_total(line: schemas.CartLine) -> Decimal:
    return unit_price(line) * max(int(line.quantity or 0), 0)


def subtotal(lines: Iterable[schemas.CartLine]) -> Decimal:
    return sum((line_total(line) for line in lines), ZERO)


def calculate_taxes(subtotal_value: Decimal, tax_rate_percent: Any = 0) -> Decimal:
    return subtotal_value * ((to_decimal(tax_rate_percent) or ZERO) / HUNDRED)


def calculate_discounts(subtotal_value: Decimal, discount_amount: Any = 0, discount_percent: Any = 0) -> Decimal:
    amount = to_decimal(discount_amount) or ZERO
    percent = subtotal_value * ((to_decimal(discount_percent) or ZERO) / HUNDRED)
    return amount + percent


def compute_totals(
    lines: Iterable[schemas.CartLine],
    tax_rate_percent: Any = 0,
    discount_amount: Any = 0,
    discount_percent: Any = 0,
) -> schemas.OrderTotals:
    """Subtotal, impostos, descontos e total (nunca negativo)."""
    sub = subtotal(lines)
    taxes = calculate_taxes(sub, tax_rate_percent)
    discounts = calculate_discounts(sub, discount_amount, discount_percent)
    total = max(sub + taxes - discounts, ZERO)
    return schemas.OrderTotals(subtotal=sub, taxes=taxes, discounts=discounts, total=total)


def line_summary(line: schemas.CartLine) -> schemas.LineTotalOut:
    return schemas.LineTotalOut(
        signature=line.signature,
        name=line.product.name,
        quantity=line.quantity,
        unit_price=unit_price(line),
        line_total=line_total(line),
    )
