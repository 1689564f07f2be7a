"""
Pytest fixtures for PDV tests.
"""

from decimal import Decimal

import pytest

from pdv import schemas


class FakeOrderGateway:
    """In-memory stand-in for the orders API."""

    def __init__(self, order_id: str = "order-1", status: str | None = "Pendente"):
        self.order_id = order_id
        self.status = status
        self.calls: list[tuple] = []

    async def create_order(self, payload: dict) -> dict:
        self.calls.append(("create", None, payload))
        return {"identify": self.order_id, "status": self.status}

    async def update_order(self, order_id: str, payload: dict) -> dict:
        self.calls.append(("update", order_id, payload))
        return {"identify": order_id, "status": payload.get("status")}

    async def update_status(self, order_id: str, payload: dict) -> dict:
        self.calls.append(("status", order_id, payload))
        return {"identify": order_id, "status": payload["status"]}


@pytest.fixture
def gateway():
    return FakeOrderGateway()


@pytest.fixture
def pizza():
    """Product with base price 35.00, a size variation and two optionals."""
    return schemas.ProductIn(
        id="pizza",
        name="Pizza Margherita",
        price="35.00",
        variations=[schemas.VariationIn(id="grande", name="Grande", price="45.00")],
        optionals=[
            schemas.OptionalIn(id="borda", name="Borda recheada", price="5.00"),
            schemas.OptionalIn(id="bacon", name="Bacon extra", price="12.00"),
        ],
    )


@pytest.fixture
def optionals():
    return [
        schemas.OptionalIn(id="borda", name="Borda recheada", price="5.00", quantity=2),
        schemas.OptionalIn(id="bacon", name="Bacon extra", price=12, quantity=1),
    ]


@pytest.fixture
def make_line(pizza):
    """Factory for cart lines of the pizza product."""

    def _make(quantity=1, variation=None, optionals=None, observation="", product=None):
        return schemas.CartLine(
            product=product or pizza,
            quantity=quantity,
            observation=observation,
            selected_variation=variation,
            selected_optionals=optionals or [],
        )

    return _make


@pytest.fixture
def cash():
    return schemas.PaymentMethod(id="pm-cash", name="Dinheiro")


@pytest.fixture
def credit_card():
    return schemas.PaymentMethod(id="pm-card", name="Cartão de Crédito")


@pytest.fixture
def pix():
    return schemas.PaymentMethod(id="pm-pix", name="Pix")


@pytest.fixture
def catalog(cash, credit_card, pix):
    return [cash, credit_card, pix]


@pytest.fixture
def split(cash, credit_card):
    """Factory for split items: split(50, 30) -> cash 50, card 30."""

    def _split(*amounts):
        methods = [cash, credit_card]
        return [
            schemas.SplitPaymentItem(method=methods[i % 2], amount=None if a is None else Decimal(str(a)))
            for i, a in enumerate(amounts)
        ]

    return _split
