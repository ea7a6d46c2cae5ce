import re
from typing import Optional

from shared.errors import MissingPaymentAppError, ProductUnavailableError, ValidationError
from services.catalog_service.models import Product, ProductStatus
from services.order_service.models import DeliveryDetails, PaymentMethod
from .schemas import DeliveryDetailsIn

MIN_QUANTITY = 1
MAX_QUANTITY = 10

ONLINE_PAYMENT_APPS = ("paytm", "phonepe", "googlepay")

_PHONE = re.compile(r"^\d{10}$")
_PINCODE = re.compile(r"^\d{6}$")


def validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity", f"Quantity must be a whole number, got {quantity!r}")
    if not MIN_QUANTITY <= quantity <= MAX_QUANTITY:
        raise ValidationError(
            "quantity", f"Quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY}, got {quantity}"
        )
    return quantity


def validate_delivery_details(details: DeliveryDetailsIn) -> DeliveryDetails:
    name = details.name.strip()
    address = details.address.strip()
    city = details.city.strip()
    phone = details.phone.strip()
    pincode = details.pincode.strip()

    for field, value in (("name", name), ("address", address), ("city", city)):
        if not value:
            raise ValidationError(field, f"Delivery {field} is required")
    if not _PHONE.match(phone):
        raise ValidationError("phone", "Phone number must be exactly 10 digits")
    if not _PINCODE.match(pincode):
        raise ValidationError("pincode", "Pincode must be exactly 6 digits")

    return DeliveryDetails(
        name=name,
        phone=phone,
        address=address,
        city=city,
        pincode=pincode,
        landmark=(details.landmark or "").strip() or None,
        instructions=(details.instructions or "").strip() or None,
    )


def check_product_available(product: Product) -> None:
    if product.status == ProductStatus.HOLD:
        raise ProductUnavailableError(product.id)


def parse_payment_method(method) -> PaymentMethod:
    try:
        return PaymentMethod(method)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(
            "payment_method", f"Unknown payment method {method!r}, expected one of {allowed}"
        ) from None


def validate_payment_app(app: Optional[str]) -> str:
    app = (app or "").strip().lower()
    if not app:
        raise MissingPaymentAppError()
    if app not in ONLINE_PAYMENT_APPS:
        raise ValidationError(
            "payment_app", f"Unknown payment app {app!r}, expected one of {', '.join(ONLINE_PAYMENT_APPS)}"
        )
    return app
