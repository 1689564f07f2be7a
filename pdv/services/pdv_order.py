"""
Sessão de pedido do PDV: carrinho, destino, pagamento e ciclo de status de um
único operador. Orquestra o núcleo (preço, validação, pagamento, status) e
entrega os payloads ao gateway da API de pedidos.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from pdv import schemas
from pdv.domain.core.enums import OrderStatus, PaymentMode
from pdv.domain.core.money import ZERO, parse_amount
from pdv.domain.order import statuses, validation
from pdv.domain.order.cart import CartStore
from pdv.domain.order.payload import build_order_payload
from pdv.domain.payment import composer
from pdv.domain.payment.methods import find_payment_method, is_cash_like, normalize_payment_methods
from pdv.domain.tables.occupancy import check_table_occupancy
from pdv.exceptions import PdvError
from pdv.services.order_gateway import OrderGateway, order_identity
from pdv.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class PdvOrderSession:
    catalog: list[schemas.PaymentMethod] = field(default_factory=list)
    tax_rate_percent: Decimal = field(default_factory=lambda: settings.tax_rate_percent)
    discount_amount: Decimal = ZERO
    discount_percent: Decimal = field(default_factory=lambda: settings.discount_percent)
    cart: CartStore = field(default_factory=CartStore)
    destination: schemas.OrderDestination = field(default_factory=schemas.OrderDestination)
    payment_mode: PaymentMode = PaymentMode.single
    payment_method_id: str | None = None
    split_items: list[schemas.SplitPaymentItem] = field(default_factory=list)
    needs_change: bool = False
    received_amount: Decimal | None = None
    notes: str | None = None
    customer: schemas.CustomerInfo | None = None
    order_id: str | None = None
    order_status: statuses.StatusLike = None

    def __post_init__(self) -> None:
        self.catalog = normalize_payment_methods(self.catalog)

    # --- destino ---

    def select_table(self, table_id: str | None) -> None:
        self.destination = schemas.OrderDestination(table_id=table_id, is_delivery=False)

    def set_delivery(self, address: schemas.DeliveryAddress | None = None) -> None:
        self.destination = schemas.OrderDestination(is_delivery=True, delivery_address=address)

    def table_occupancy(self, open_orders: Iterable[schemas.OpenOrderRef]) -> schemas.ValidationIssue | None:
        if self.destination.is_delivery:
            return None
        return check_table_occupancy(self.destination.table_id, open_orders, self.order_id)

    # --- pagamento ---

    def select_payment_method(self, method_id: str | None) -> None:
        self.payment_mode = PaymentMode.single
        self.payment_method_id = method_id
        self.split_items = []
        if not is_cash_like(find_payment_method(self.catalog, method_id)):
            self.needs_change = False
            self.received_amount = None

    def set_change(self, needs_change: bool, received_amount: Any = None) -> None:
        self.needs_change = needs_change
        self.received_amount = parse_amount(received_amount) if needs_change else None

    def use_split_payment(self, items: Iterable[schemas.SplitPaymentItem] = ()) -> None:
        self.payment_mode = PaymentMode.split
        self.payment_method_id = None
        self.needs_change = False
        self.received_amount = None
        self.split_items = list(items)

    def add_split_payment(self, method_id: str, amount: Any = None) -> None:
        method = find_payment_method(self.catalog, method_id)
        if method is None or any(item.method.id == method_id for item in self.split_items):
            return
        self.split_items.append(schemas.SplitPaymentItem(method=method, amount=parse_amount(amount)))

    def set_split_amount(self, method_id: str, amount: Any) -> None:
        self.split_items = [
            item.model_copy(update={"amount": parse_amount(amount)}) if item.method.id == method_id else item
            for item in self.split_items
        ]

    def remove_split_payment(self, method_id: str) -> None:
        self.split_items = [item for item in self.split_items if item.method.id != method_id]

    # --- leituras derivadas ---

    def totals(self) -> schemas.OrderTotals:
        return self.cart.totals(self.tax_rate_percent, self.discount_amount, self.discount_percent)

    @property
    def order_total(self) -> Decimal:
        return self.totals().total

    def confirmation_breakdown(self) -> list[schemas.PaymentConfirmationItem]:
        return composer.build_confirmation_breakdown(
            self.payment_mode,
            self.payment_method_id,
            self.split_items,
            self.catalog,
            self.order_total,
            self.received_amount,
            self.needs_change,
        )

    def payment_payload(self) -> dict:
        return composer.build_payment_payload(
            self.payment_mode,
            self.payment_method_id,
            self.split_items,
            self.needs_change,
            self.received_amount,
        )

    def change_due(self) -> Decimal:
        if self.payment_mode is PaymentMode.split:
            return composer.change_due(self.order_total, self.split_items)
        return composer.single_change_due(self.order_total, self.received_amount, self.needs_change)

    def is_payment_complete(self) -> bool:
        return composer.is_complete(self.order_total, self.payment_mode, self.split_items, self.payment_method_id)

    def order_payload(self) -> dict:
        return build_order_payload(
            self.cart.lines,
            self.destination,
            self.payment_payload(),
            notes=self.notes,
            customer=self.customer,
        )

    # --- validação ---

    def validation_context(self) -> validation.OrderValidationContext:
        return validation.OrderValidationContext(
            cart=self.cart.lines,
            order_total=self.order_total,
            selected_table=self.destination.table_id,
            is_delivery=self.destination.is_delivery,
            payment_mode=self.payment_mode,
            selected_payment_method=self.payment_method_id,
            split_items=list(self.split_items),
            order_status=self.order_status,
            needs_change=self.needs_change,
            received_amount=self.received_amount,
        )

    def _with_received_check(
        self, context: validation.OrderValidationContext, issues: list[schemas.ValidationIssue]
    ) -> list[schemas.ValidationIssue]:
        if context.payment_mode is PaymentMode.single:
            received_issue = validation.validate_received_amount(
                context.received_amount, context.order_total, context.needs_change
            )
            if received_issue:
                issues.append(received_issue)
        return issues

    def validate_start(self) -> list[schemas.ValidationIssue]:
        context = self.validation_context()
        return self._with_received_check(context, validation.validate_order_before_start(context))

    def validate_update(self) -> list[schemas.ValidationIssue]:
        return validation.validate_order_before_update(self.validation_context())

    def validate_finalize(self) -> list[schemas.ValidationIssue]:
        context = self.validation_context()
        return self._with_received_check(context, validation.validate_order_before_finalize(context))

    @staticmethod
    def _ensure_valid(issues: list[schemas.ValidationIssue]) -> None:
        if validation.has_blocking(issues):
            raise PdvError("ORDER_VALIDATION_FAILED", issues=issues)

    def _require_order(self) -> str:
        if not self.order_id:
            raise PdvError("ORDER_NOT_STARTED")
        return self.order_id

    # --- submissões ---

    async def start(self, gateway: OrderGateway) -> dict:
        self._ensure_valid(self.validate_start())
        result = await gateway.create_order(self.order_payload())
        self.order_id = order_identity(result) or self.order_id
        self.order_status = statuses.parse_status(result.get("status")) or OrderStatus.pendente
        logger.info("Order started id=%s status=%s", self.order_id, statuses.status_label(self.order_status))
        return result

    async def update(self, gateway: OrderGateway) -> dict:
        order_id = self._require_order()
        self._ensure_valid(self.validate_update())
        result = await gateway.update_order(order_id, self.order_payload())
        logger.info("Order updated id=%s", order_id)
        return result

    async def advance(self, gateway: OrderGateway) -> dict:
        order_id = self._require_order()
        request = statuses.advance_request(self.order_status, self.destination.is_delivery)
        if request is None:
            raise PdvError(
                "STATUS_TRANSITION_DENIED",
                status=statuses.status_label(self.order_status),
            )
        result = await gateway.update_status(order_id, request)
        self.order_status = statuses.parse_status(request["status"])
        logger.info("Order advanced id=%s status=%s", order_id, request["status"])
        return result

    async def finalize(self, gateway: OrderGateway) -> dict:
        order_id = self._require_order()
        self._ensure_valid(self.validate_finalize())
        request = statuses.finalize_request(self.order_status) or {}
        payload = {**self.order_payload(), **request}
        result = await gateway.update_order(order_id, payload)
        logger.info("Order finalized id=%s", order_id)
        self.reset()
        return result

    async def cancel(self, gateway: OrderGateway) -> dict:
        order_id = self._require_order()
        request = statuses.cancel_request(self.order_status)
        if request is None:
            raise PdvError(
                "STATUS_TRANSITION_DENIED",
                status=statuses.status_label(self.order_status),
            )
        result = await gateway.update_status(order_id, request)
        self.order_status = statuses.parse_status(request["status"])
        logger.info("Order canceled id=%s", order_id)
        return result

    def reset(self) -> None:
        self.cart.clear()
        self.destination = schemas.OrderDestination()
        self.payment_mode = PaymentMode.single
        self.payment_method_id = None
        self.split_items = []
        self.needs_change = False
        self.received_amount = None
        self.notes = None
        self.customer = None
        self.order_id = None
        self.order_status = None
