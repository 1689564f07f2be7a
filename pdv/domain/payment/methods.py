from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from pydantic import ValidationError

from pdv import schemas
from pdv.domain.core.enums import PaymentKind

logger = logging.getLogger(__name__)


def normalize_payment_methods(entries: Iterable[Any]) -> list[schemas.PaymentMethod]:
    """Normaliza o catálogo externo: ignora entradas inválidas e ids repetidos."""
    result: list[schemas.PaymentMethod] = []
    seen: set[str] = set()
    for item in entries:
        if isinstance(item, schemas.PaymentMethod):
            method = item
        else:
            try:
                method = schemas.PaymentMethod.model_validate(item)
            except ValidationError:
                logger.warning("Payment method skipped: invalid catalog entry %r", item)
                continue
        method_id = method.id.strip()
        if not method_id or not method.name.strip() or method_id in seen:
            continue
        seen.add(method_id)
        result.append(method)
    return result


def load_payment_methods(raw: str | None) -> list[schemas.PaymentMethod]:
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return []
    if not isinstance(data, list):
        return []
    return normalize_payment_methods(data)


def find_payment_method(
    catalog: Iterable[schemas.PaymentMethod], method_id: str | None
) -> schemas.PaymentMethod | None:
    if not method_id:
        return None
    return next((method for method in catalog if method.id == method_id), None)


def is_cash_like(method: schemas.PaymentMethod | None) -> bool:
    return method is not None and method.kind is PaymentKind.cash
