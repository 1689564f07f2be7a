from __future__ import annotations

import unicodedata

from pdv.domain.core.enums import PaymentKind

# Ordem importa: "Cartão Mercado Pago" é cartão, não carteira.
PAYMENT_KIND_SYNONYMS: tuple[tuple[PaymentKind, tuple[str, ...]], ...] = (
    (PaymentKind.cash, ("dinheiro", "cash", "money", "especie")),
    (PaymentKind.card, ("cartao", "card", "credito", "debito", "credit", "debit", "voucher", "vale refeicao")),
    (PaymentKind.wallet, ("carteira", "wallet", "picpay", "mercado pago", "apple pay", "google pay", "samsung pay")),
    (PaymentKind.transfer, ("pix", "transferencia", "transfer", "boleto", "deposito")),
)


def _fold(value: str) -> str:
    normalized = unicodedata.normalize("NFD", value.strip().lower())
    return "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")


def classify_payment_kind(name: str | None, description: str | None = None) -> PaymentKind:
    """Deduz o tipo a partir do nome; usado só na carga do catálogo."""
    for text in (name, description):
        folded = _fold(text or "")
        if not folded:
            continue
        for kind, synonyms in PAYMENT_KIND_SYNONYMS:
            if any(word in folded for word in synonyms):
                return kind
    return PaymentKind.other


def coerce_payment_kind(value: object) -> PaymentKind | None:
    if isinstance(value, PaymentKind):
        return value
    raw = _fold(str(value or ""))
    if not raw:
        return None
    try:
        return PaymentKind(raw)
    except ValueError:
        return None
