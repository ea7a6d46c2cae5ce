from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    WALLET = "wallet"
    ONLINE = "online"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class CancelledBy(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class ReturnType(str, Enum):
    RETURN = "return"
    EXCHANGE = "exchange"


class ReturnStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class _Record(BaseModel):
    model_config = ConfigDict(extra="forbid")


class DeliveryDetails(_Record):
    name: str
    phone: str = Field(pattern=r"^\d{10}$")
    address: str
    city: str
    pincode: str = Field(pattern=r"^\d{6}$")
    landmark: Optional[str] = None
    instructions: Optional[str] = None


class CashOnDeliveryDetails(_Record):
    method: Literal["cash_on_delivery"] = "cash_on_delivery"
    amount_payable: Decimal = Field(ge=0)


class WalletPaymentDetails(_Record):
    method: Literal["wallet"] = "wallet"
    amount_deducted: Decimal = Field(ge=0)
    resulting_balance: Decimal = Field(ge=0)


class OnlinePaymentDetails(_Record):
    method: Literal["online"] = "online"
    app: str
    transaction_id: str


PaymentDetails = Annotated[
    Union[CashOnDeliveryDetails, WalletPaymentDetails, OnlinePaymentDetails],
    Field(discriminator="method"),
]


class ReturnRequest(_Record):
    type: ReturnType
    reason: str
    status: ReturnStatus = ReturnStatus.PENDING
    requested_at: datetime
    resolved_at: Optional[datetime] = None


class Order(_Record):
    id: str
    user_id: str
    product_id: str
    product_title: str # snapshot at purchase time
    quantity: int = Field(ge=1, le=10)
    unit_price: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0) # unit_price * quantity, never recomputed
    delivery_details: DeliveryDetails
    payment_method: PaymentMethod
    payment_details: PaymentDetails
    payment_status: PaymentStatus
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime
    updated_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[CancelledBy] = None
    return_request: Optional[ReturnRequest] = None

    @model_validator(mode="after")
    def check_invariants(self) -> "Order":
        if self.total_price != self.unit_price * self.quantity:
            raise ValueError("total_price must equal unit_price * quantity")
        if self.payment_details.method != self.payment_method.value:
            raise ValueError("payment_details do not match payment_method")

        cancellation = (self.cancellation_reason, self.cancelled_at, self.cancelled_by)
        if self.status == OrderStatus.CANCELLED:
            if any(v is None for v in cancellation):
                raise ValueError("cancelled orders need reason, time and canceller")
        elif any(v is not None for v in cancellation):
            raise ValueError("cancellation fields are only allowed on cancelled orders")

        if self.return_request is not None and self.status != OrderStatus.DELIVERED:
            raise ValueError("return requests are only allowed on delivered orders")
        return self
