from decimal import Decimal
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, BeforeValidator, Field, model_validator

from pdv.domain.core.enums import PaymentKind, PaymentMode, Severity
from pdv.domain.core.money import ZERO, parse_amount, to_decimal
from pdv.domain.payment.kinds import classify_payment_kind, coerce_payment_kind

# Preços do catálogo chegam como número, texto ou vazio; a conversão fica para o cálculo.
PriceValue = Union[Decimal, int, float, str, None]
Amount = Annotated[Decimal, BeforeValidator(lambda v: to_decimal(v))]
OptionalAmount = Annotated[Optional[Decimal], BeforeValidator(parse_amount)]

ValidationStage = Literal["start", "update", "finalize"]


def _identity_field() -> Any:
    return Field(default=None, validation_alias=AliasChoices("id", "uuid", "identify"))


# Catalog


class VariationIn(BaseModel):
    id: Optional[str] = _identity_field()
    name: str = ""
    price: PriceValue = None

    @property
    def key(self) -> str:
        return self.id or self.name


class OptionalIn(BaseModel):
    id: Optional[str] = _identity_field()
    name: str = ""
    price: PriceValue = None
    quantity: int = 1

    @property
    def key(self) -> str:
        return self.id or self.name or "opt"


class ProductIn(BaseModel):
    id: Optional[str] = _identity_field()
    name: str = ""
    price: PriceValue = None
    category_id: Optional[str] = None
    variations: List[VariationIn] = Field(default_factory=list)
    optionals: List[OptionalIn] = Field(default_factory=list)

    @property
    def key(self) -> str:
        return self.id or self.name


# Cart


class CartLine(BaseModel):
    signature: str = ""
    product: ProductIn
    quantity: int = Field(default=1, ge=0)
    observation: str = ""
    selected_variation: Optional[VariationIn] = None
    selected_optionals: List[OptionalIn] = Field(default_factory=list)


class LineTotalOut(BaseModel):
    signature: str
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class OrderTotals(BaseModel):
    subtotal: Decimal = ZERO
    taxes: Decimal = ZERO
    discounts: Decimal = ZERO
    total: Decimal = ZERO


# Payments


class PaymentMethod(BaseModel):
    id: str = Field(validation_alias=AliasChoices("id", "uuid", "identify"))
    name: str
    description: Optional[str] = None
    kind: PaymentKind = PaymentKind.other

    @model_validator(mode="before")
    @classmethod
    def _fill_kind(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        kind = coerce_payment_kind(data.get("kind"))
        if kind is None:
            kind = classify_payment_kind(data.get("name"), data.get("description"))
        return {**data, "kind": kind}


class SplitPaymentItem(BaseModel):
    method: PaymentMethod
    amount: OptionalAmount = None


class PaymentConfirmationItem(BaseModel):
    method: PaymentMethod
    amount: Decimal


class PaymentDraftIn(BaseModel):
    mode: PaymentMode = PaymentMode.single
    payment_method_id: Optional[str] = None
    split_items: List[SplitPaymentItem] = Field(default_factory=list)
    needs_change: bool = False
    received_amount: OptionalAmount = None


# Destination


class DeliveryAddress(BaseModel):
    address: Optional[str] = None
    number: Optional[str] = None
    complement: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class OrderDestination(BaseModel):
    table_id: Optional[str] = None
    is_delivery: bool = False
    delivery_address: Optional[DeliveryAddress] = None


class CustomerInfo(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None


class OpenOrderRef(BaseModel):
    order_id: str = Field(validation_alias=AliasChoices("order_id", "id", "uuid", "identify"))
    table_id: Optional[str] = None
    status: Optional[str] = None


# Validation


class ValidationIssue(BaseModel):
    field: Optional[str] = None
    message: str
    severity: Severity = Severity.error


class ValidationOut(BaseModel):
    ok: bool
    issues: List[ValidationIssue]


# HTTP bodies


class PreviewIn(BaseModel):
    items: List[CartLine]
    tax_rate_percent: OptionalAmount = None
    discount_amount: Amount = ZERO
    discount_percent: OptionalAmount = None


class PreviewOut(BaseModel):
    lines: List[LineTotalOut]
    totals: OrderTotals
    item_count: int
    formatted_total: str


class OrderDraftIn(BaseModel):
    items: List[CartLine] = Field(default_factory=list)
    catalog: List[PaymentMethod] = Field(default_factory=list)
    destination: OrderDestination = Field(default_factory=OrderDestination)
    payment: PaymentDraftIn = Field(default_factory=PaymentDraftIn)
    order_status: Optional[str] = None
    notes: Optional[str] = None
    customer: Optional[CustomerInfo] = None
    tax_rate_percent: OptionalAmount = None
    discount_amount: Amount = ZERO
    discount_percent: OptionalAmount = None


class ConfirmationIn(BaseModel):
    payment: PaymentDraftIn
    catalog: List[PaymentMethod] = Field(default_factory=list)
    total: Amount = ZERO


class ConfirmationOut(BaseModel):
    items: List[PaymentConfirmationItem]
    total_paid: Decimal
    change_due: Decimal
    complete: bool


class PaymentPayloadOut(BaseModel):
    payment_method_id: Optional[str] = None
    precisa_troco: Optional[bool] = None
    valor_recebido: Optional[Decimal] = None
    split_payments: Optional[List[dict]] = None


class StatusInfoOut(BaseModel):
    status: str
    known: bool
    is_final: bool
    can_edit: bool
    can_advance: bool
    can_finalize: bool
    can_cancel: bool
    next_status: Optional[str] = None
    color: str
    description: str


class OccupancyIn(BaseModel):
    table_id: Optional[str] = None
    current_order_id: Optional[str] = None
    open_orders: List[OpenOrderRef] = Field(default_factory=list)


class OccupancyOut(BaseModel):
    occupied: bool
    issue: Optional[ValidationIssue] = None
    tables_with_open_orders: List[str]


class StatusActionIn(BaseModel):
    order_status: Optional[str] = None
    is_delivery: bool = False


class OrderSubmissionOut(BaseModel):
    order_id: Optional[str] = None
    status: Optional[str] = None
    data: dict = Field(default_factory=dict)
