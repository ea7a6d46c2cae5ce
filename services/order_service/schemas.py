from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .models import CancelledBy, OrderStatus, PaymentMethod, PaymentStatus, ReturnStatus, ReturnType

class StatusUpdate(BaseModel):
    status: OrderStatus

class CancelRequest(BaseModel):
    reason: str = ""

class ReturnCreate(BaseModel):
    type: ReturnType
    reason: str = ""

class ReturnResolve(BaseModel):
    decision: ReturnStatus

class DeliveryDetailsResponse(BaseModel):
    name: str
    phone: str
    address: str
    city: str
    pincode: str
    landmark: Optional[str] = None
    instructions: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class PaymentDetailsResponse(BaseModel):
    method: PaymentMethod
    # cash on delivery
    amount_payable: Optional[float] = None
    # wallet
    amount_deducted: Optional[float] = None
    resulting_balance: Optional[float] = None
    # online
    app: Optional[str] = None
    transaction_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class ReturnRequestResponse(BaseModel):
    type: ReturnType
    reason: str
    status: ReturnStatus
    requested_at: datetime
    resolved_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class OrderResponse(BaseModel):
    id: str
    user_id: str
    product_id: str
    product_title: str
    quantity: int
    unit_price: float
    total_price: float
    delivery_details: DeliveryDetailsResponse
    payment_method: PaymentMethod
    payment_details: PaymentDetailsResponse
    payment_status: PaymentStatus
    status: OrderStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[CancelledBy] = None
    return_request: Optional[ReturnRequestResponse] = None

    model_config = ConfigDict(from_attributes=True)
