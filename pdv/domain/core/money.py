"""
Coerção e formatação de valores monetários.

Todo valor monetário do PDV circula como Decimal. Entradas vindas do catálogo
ou digitadas pelo operador podem chegar como número, texto com separadores
("1.234,56", "R$ 35,00") ou vazias; nenhuma destas funções levanta exceção.
"""
from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

ZERO = Decimal("0")
CENTS = Decimal("0.01")
DEFAULT_CURRENCY_SYMBOL = "R$"

_NON_NUMERIC = re.compile(r"[^\d,.\-]")


def _normalize_separators(raw: str) -> str:
    cleaned = _NON_NUMERIC.sub("", raw)
    if not cleaned:
        return ""
    last_comma = cleaned.rfind(",")
    last_dot = cleaned.rfind(".")
    if last_comma != -1 and last_dot != -1:
        # o separador que aparece por último é o decimal
        if last_comma > last_dot:
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif last_comma != -1:
        if cleaned.count(",") > 1:
            cleaned = cleaned.replace(",", "")
        else:
            cleaned = cleaned.replace(",", ".")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")
    return cleaned


def to_decimal(value: Any, default: Decimal | None = ZERO) -> Decimal | None:
    """Converte número/texto em Decimal; retorna `default` quando não for possível."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        return Decimal(str(value))
    if isinstance(value, str):
        normalized = _normalize_separators(value.strip())
        if not normalized:
            return default
        try:
            parsed = Decimal(normalized)
        except InvalidOperation:
            return default
        return parsed if parsed.is_finite() else default
    return default


def parse_price(value: Any) -> Decimal:
    """Preço de catálogo: ausente, inválido ou negativo vira zero."""
    parsed = to_decimal(value)
    if parsed is None or parsed < ZERO:
        return ZERO
    return parsed


def parse_amount(value: Any) -> Decimal | None:
    """Valor digitado pelo operador; None quando não informado ou ilegível."""
    return to_decimal(value, default=None)


def calculate_change(received: Any, total: Any) -> Decimal:
    return max(ZERO, (to_decimal(received) or ZERO) - (to_decimal(total) or ZERO))


def format_currency(value: Any, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    amount = to_decimal(value) or ZERO
    with localcontext() as ctx:
        # quantize exige precisão >= dígitos inteiros + 2
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    s = f"{abs(amount):,.2f}"
    s = s.replace(",", "X").replace(".", ",").replace("X", ".")
    sign = "-" if amount < ZERO else ""
    return f"{sign}{symbol} {s}"


def money_to_json(value: Any) -> Any:
    """Troca Decimal por float recursivamente para envio em JSON."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: money_to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [money_to_json(v) for v in value]
    return value
