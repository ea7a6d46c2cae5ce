import time
from contextlib import nullcontext
from decimal import Decimal
from typing import Optional

import structlog

from shared.config.settings import PAYMENT_TIMEOUT_SECONDS
from shared.errors import StorefrontError, ValidationError
from shared.observability import ecomm_checkout_duration_seconds, ecomm_checkout_total
from shared.storage import KeyValueStore
from services.catalog_service.models import Product
from services.order_service.models import Order, PaymentMethod
from services.wallet_service.service import wallet_locks
from .checkout_saga import build_checkout_saga
from .payment_gateway import SimulatedPaymentGateway
from .schemas import DeliveryDetailsIn
from . import validation

logger = structlog.get_logger(__name__)

PAYMENT_METHOD_LABELS = frozenset(m.value for m in PaymentMethod)


class CheckoutService:

    @staticmethod
    async def place_order(
        store: KeyValueStore,
        gateway: SimulatedPaymentGateway,
        user_id: str,
        product: Product,
        quantity: int,
        delivery_details: DeliveryDetailsIn,
        payment_method: str,
        payment_app: Optional[str] = None,
        timeout: float = PAYMENT_TIMEOUT_SECONDS,
    ) -> Order:
        """Validate a one-product cart, settle its payment and persist the order.

        Nothing is written unless every check passes. A wallet checkout holds
        the wallet's lock and commits the debit and the order in one store
        transaction. An online charge is refunded if the order cannot be stored.
        """
        started = time.perf_counter()
        # Only known methods become metric labels, so request input cannot add series
        method_label = payment_method if payment_method in PAYMENT_METHOD_LABELS else "invalid"
        try:
            if not user_id or not user_id.strip():
                raise ValidationError("user_id", "A customer is required to place an order")
            quantity = validation.validate_quantity(quantity)
            details = validation.validate_delivery_details(delivery_details)
            validation.check_product_available(product)
            method = validation.parse_payment_method(payment_method)
            method_label = method.value
            app = validation.validate_payment_app(payment_app) if method == PaymentMethod.ONLINE else None

            ctx = {
                "store": store,
                "gateway": gateway,
                "timeout": timeout,
                "user_id": user_id,
                "product": product,
                "quantity": quantity,
                "total_price": Decimal(product.price) * quantity,
                "delivery_details": details,
                "payment_method": method,
                "payment_app": app,
            }
            lock = wallet_locks.hold(user_id) if method == PaymentMethod.WALLET else nullcontext()
            async with lock:
                await build_checkout_saga(method).execute(ctx)
        except StorefrontError as e:
            ecomm_checkout_total.labels(payment_method=method_label, status=e.code).inc()
            logger.warning("checkout_rejected", user_id=user_id, payment_method=method_label, error_type=e.code, detail=e.message)
            raise
        finally:
            ecomm_checkout_duration_seconds.labels(payment_method=method_label).observe(time.perf_counter() - started)

        order = ctx["order"]
        ecomm_checkout_total.labels(payment_method=method.value, status="success").inc()
        logger.info(
            "checkout_completed",
            order_id=order.id,
            user_id=user_id,
            payment_method=method.value,
            payment_status=order.payment_status.value,
            total=str(order.total_price),
        )
        return order
