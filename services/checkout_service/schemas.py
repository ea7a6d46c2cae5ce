from typing import Optional

from pydantic import BaseModel

# Shapes are checked by the checkout validation, which reports the failing field
class DeliveryDetailsIn(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    pincode: str = ""
    landmark: Optional[str] = None
    instructions: Optional[str] = None

class OrderCreate(BaseModel):
    product_id: str
    quantity: int
    delivery_details: DeliveryDetailsIn
    payment_method: str
    payment_app: Optional[str] = None # required for online payments: paytm, phonepe, googlepay
