"""
Router do PDV: adaptador HTTP fino sobre o núcleo.
Toda regra de preço, validação, pagamento e status fica em pdv.domain e pdv.services;
cada request carrega o rascunho do pedido que interessa (sem estado no servidor).
"""
import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query

from pdv import schemas
from pdv.domain.core.enums import PaymentMode
from pdv.domain.core.money import ZERO, format_currency
from pdv.domain.order import pricing, statuses, validation
from pdv.domain.order.cart import CartStore
from pdv.domain.payment import composer
from pdv.domain.tables.occupancy import check_table_occupancy, tables_with_open_orders
from pdv.services.order_gateway import HttpOrderGateway, OrderGateway
from pdv.services.pdv_order import PdvOrderSession
from pdv.settings import Settings, get_settings

router = APIRouter(prefix="/pdv", tags=["pdv"])
logger = logging.getLogger(__name__)


def get_order_gateway(cfg: Settings = Depends(get_settings)) -> OrderGateway:
    return HttpOrderGateway.from_settings(cfg)


def _session_from_draft(draft: schemas.OrderDraftIn, cfg: Settings, order_id: str | None = None) -> PdvOrderSession:
    session = PdvOrderSession(
        catalog=[*draft.catalog, *(item.method for item in draft.payment.split_items)],
        tax_rate_percent=draft.tax_rate_percent if draft.tax_rate_percent is not None else cfg.tax_rate_percent,
        discount_amount=draft.discount_amount,
        discount_percent=draft.discount_percent if draft.discount_percent is not None else cfg.discount_percent,
        destination=draft.destination,
        payment_mode=draft.payment.mode,
        payment_method_id=draft.payment.payment_method_id,
        split_items=list(draft.payment.split_items),
        needs_change=draft.payment.needs_change,
        received_amount=draft.payment.received_amount,
        notes=draft.notes,
        customer=draft.customer,
        order_id=order_id,
        order_status=draft.order_status,
    )
    session.cart.load(draft.items)
    return session


def _submission_out(session: PdvOrderSession, order_id: str | None, data: dict) -> schemas.OrderSubmissionOut:
    return schemas.OrderSubmissionOut(
        order_id=session.order_id or order_id,
        status=statuses.status_label(session.order_status),
        data=data,
    )


@router.post("/preview", response_model=schemas.PreviewOut)
def preview(payload: schemas.PreviewIn, cfg: Settings = Depends(get_settings)):
    cart = CartStore()
    cart.load(payload.items)
    totals = cart.totals(
        payload.tax_rate_percent if payload.tax_rate_percent is not None else cfg.tax_rate_percent,
        payload.discount_amount,
        payload.discount_percent if payload.discount_percent is not None else cfg.discount_percent,
    )
    return schemas.PreviewOut(
        lines=[pricing.line_summary(line) for line in cart.lines],
        totals=totals,
        item_count=cart.item_count,
        formatted_total=format_currency(totals.total, cfg.currency_symbol),
    )


@router.post("/validate/{stage}", response_model=schemas.ValidationOut)
def validate(stage: schemas.ValidationStage, draft: schemas.OrderDraftIn, cfg: Settings = Depends(get_settings)):
    session = _session_from_draft(draft, cfg)
    if stage == "start":
        issues = session.validate_start()
    elif stage == "update":
        issues = session.validate_update()
    else:
        issues = session.validate_finalize()
    return schemas.ValidationOut(ok=not validation.has_blocking(issues), issues=issues)


@router.post("/payments/confirmation", response_model=schemas.ConfirmationOut)
def payment_confirmation(payload: schemas.ConfirmationIn):
    payment = payload.payment
    items = composer.build_confirmation_breakdown(
        payment.mode,
        payment.payment_method_id,
        payment.split_items,
        payload.catalog,
        payload.total,
        payment.received_amount,
        payment.needs_change,
    )
    if payment.mode is PaymentMode.split:
        change = composer.change_due(payload.total, payment.split_items)
    else:
        change = composer.single_change_due(payload.total, payment.received_amount, payment.needs_change)
    return schemas.ConfirmationOut(
        items=items,
        total_paid=sum((item.amount for item in items), ZERO),
        change_due=change,
        complete=composer.is_complete(payload.total, payment.mode, payment.split_items, payment.payment_method_id),
    )


@router.post(
    "/payments/payload",
    response_model=schemas.PaymentPayloadOut,
    response_model_exclude_none=True,
)
def payment_payload(payment: schemas.PaymentDraftIn):
    return composer.build_payment_payload(
        payment.mode,
        payment.payment_method_id,
        payment.split_items,
        payment.needs_change,
        payment.received_amount,
    )


@router.get("/statuses/{status}", response_model=schemas.StatusInfoOut)
def status_info(status: str, is_delivery: bool = Query(default=False)):
    return schemas.StatusInfoOut(
        status=statuses.status_label(status) or status,
        known=statuses.parse_status(status) is not None,
        is_final=statuses.is_final(status),
        can_edit=statuses.can_edit(status),
        can_advance=statuses.can_advance(status),
        can_finalize=statuses.can_finalize(status),
        can_cancel=statuses.can_cancel(status),
        next_status=statuses.next_status_name(status, is_delivery),
        color=statuses.status_color(status),
        description=statuses.status_description(status),
    )


@router.post("/tables/occupancy", response_model=schemas.OccupancyOut)
def table_occupancy(payload: schemas.OccupancyIn):
    issue = check_table_occupancy(payload.table_id, payload.open_orders, payload.current_order_id)
    return schemas.OccupancyOut(
        occupied=issue is not None,
        issue=issue,
        tables_with_open_orders=sorted(tables_with_open_orders(payload.open_orders)),
    )


@router.post("/orders", response_model=schemas.OrderSubmissionOut)
async def create_order(
    draft: schemas.OrderDraftIn,
    cfg: Settings = Depends(get_settings),
    gateway: OrderGateway = Depends(get_order_gateway),
):
    session = _session_from_draft(draft, cfg)
    data = await session.start(gateway)
    return _submission_out(session, None, data)


@router.post("/orders/{order_id}/finalize", response_model=schemas.OrderSubmissionOut)
async def finalize_order(
    order_id: str,
    draft: schemas.OrderDraftIn,
    cfg: Settings = Depends(get_settings),
    gateway: OrderGateway = Depends(get_order_gateway),
):
    session = _session_from_draft(draft, cfg, order_id=order_id)
    data = await session.finalize(gateway)
    return schemas.OrderSubmissionOut(order_id=order_id, status=statuses.FINALIZE_TARGET_STATUS.value, data=data)


@router.post("/orders/{order_id}/{action}", response_model=schemas.OrderSubmissionOut)
async def change_order_status(
    order_id: str,
    action: Literal["advance", "cancel"],
    payload: schemas.StatusActionIn,
    gateway: OrderGateway = Depends(get_order_gateway),
):
    session = PdvOrderSession(order_id=order_id, order_status=payload.order_status)
    if payload.is_delivery:
        session.set_delivery()
    if action == "advance":
        data = await session.advance(gateway)
    else:
        data = await session.cancel(gateway)
    return _submission_out(session, order_id, data)
