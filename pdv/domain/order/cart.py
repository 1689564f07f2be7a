"""
Carrinho em memória do PDV.

Cada linha é identificada por uma CartKey (produto, variação, opcionais com
quantidade). Adicionar uma linha com chave já existente incrementa a
quantidade em vez de duplicar. Nenhuma operação levanta exceção: chaves
desconhecidas são ignoradas.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, NamedTuple

from pdv import schemas
from pdv.domain.core.enums import CartEvent
from pdv.domain.order import pricing

logger = logging.getLogger(__name__)

CartListener = Callable[[CartEvent, "schemas.CartLine | None"], None]


class CartKey(NamedTuple):
    product_id: str
    variation_id: str | None
    optionals: tuple[tuple[str, int], ...]

    @property
    def signature(self) -> str:
        variation_key = self.variation_id or "base"
        optionals_key = "|".join(f"{oid}:{qty}" for oid, qty in self.optionals) or "none"
        return f"{self.product_id}__{variation_key}__{optionals_key}"

    def __str__(self) -> str:
        return self.signature


def make_cart_key(
    product_id: str,
    variation_id: str | None = None,
    optionals: Iterable[tuple[str, int]] | None = None,
) -> CartKey:
    normalized = sorted(
        (str(oid or "opt"), int(qty))
        for oid, qty in (optionals or [])
        if int(qty or 0) > 0
    )
    return CartKey(str(product_id), variation_id or None, tuple(normalized))


def _positive_optionals(line: schemas.CartLine) -> list[schemas.OptionalIn]:
    return [opt for opt in line.selected_optionals if opt.quantity > 0]


def cart_key_for(line: schemas.CartLine) -> CartKey:
    variation = line.selected_variation
    return make_cart_key(
        line.product.key,
        variation.key if variation else None,
        [(opt.key, opt.quantity) for opt in line.selected_optionals],
    )


class CartStore:
    def __init__(self, listeners: Iterable[CartListener] | None = None) -> None:
        self._lines: dict[CartKey, schemas.CartLine] = {}
        self._listeners: list[CartListener] = list(listeners or [])

    # --- observers ---

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, event: CartEvent, line: schemas.CartLine | None) -> None:
        logger.debug("cart %s signature=%s", event.value, line.signature if line else None)
        for listener in list(self._listeners):
            listener(event, line)

    # --- reads ---

    def _resolve(self, key: CartKey | str) -> CartKey | None:
        if isinstance(key, CartKey):
            return key if key in self._lines else None
        for existing in self._lines:
            if existing.signature == key:
                return existing
        return None

    def get(self, key: CartKey | str) -> schemas.CartLine | None:
        resolved = self._resolve(key)
        return self._lines[resolved] if resolved else None

    @property
    def lines(self) -> list[schemas.CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[schemas.CartLine]:
        return iter(self.lines)

    def totals(
        self,
        tax_rate_percent: Any = 0,
        discount_amount: Any = 0,
        discount_percent: Any = 0,
    ) -> schemas.OrderTotals:
        return pricing.compute_totals(self.lines, tax_rate_percent, discount_amount, discount_percent)

    # --- writes ---

    def add_item(self, line: schemas.CartLine, key: CartKey | None = None) -> schemas.CartLine:
        """Adiciona a linha ou, se a chave já existir, soma 1 à quantidade."""
        key = key or cart_key_for(line)
        existing = self._lines.get(key)
        if existing is not None:
            updated = existing.model_copy(update={"quantity": existing.quantity + 1})
            self._lines[key] = updated
            self._emit(CartEvent.updated, updated)
            return updated

        selected_optionals = _positive_optionals(line)
        new_line = line.model_copy(
            update={
                "signature": key.signature,
                "quantity": max(line.quantity, 1),
                "selected_optionals": selected_optionals,
            }
        )
        self._lines[key] = new_line
        self._emit(CartEvent.added, new_line)
        return new_line

    def remove_item(self, key: CartKey | str) -> None:
        resolved = self._resolve(key)
        if resolved is None:
            return
        removed = self._lines.pop(resolved)
        self._emit(CartEvent.removed, removed)

    def update_item_quantity(self, key: CartKey | str, delta: int) -> None:
        resolved = self._resolve(key)
        if resolved is None:
            return
        line = self._lines[resolved]
        quantity = max(0, line.quantity + int(delta))
        if quantity == 0:
            self._lines.pop(resolved)
            self._emit(CartEvent.removed, line)
            return
        updated = line.model_copy(update={"quantity": quantity})
        self._lines[resolved] = updated
        self._emit(CartEvent.updated, updated)

    def update_item_observation(self, key: CartKey | str, observation: str | None) -> None:
        resolved = self._resolve(key)
        if resolved is None:
            return
        updated = self._lines[resolved].model_copy(update={"observation": observation or ""})
        self._lines[resolved] = updated
        self._emit(CartEvent.updated, updated)

    def clear(self) -> None:
        self._lines.clear()
        self._emit(CartEvent.cleared, None)

    def load(self, lines: Iterable[schemas.CartLine]) -> None:
        """Recarrega o carrinho a partir de um pedido salvo, mesclando repetidos."""
        self._lines.clear()
        for line in lines:
            if line.quantity <= 0:
                continue
            key = cart_key_for(line)
            existing = self._lines.get(key)
            if existing is not None:
                self._lines[key] = existing.model_copy(update={"quantity": existing.quantity + line.quantity})
            else:
                self._lines[key] = line.model_copy(
                    update={"signature": key.signature, "selected_optionals": _positive_optionals(line)}
                )
        logger.debug("cart loaded lines=%s", len(self._lines))
