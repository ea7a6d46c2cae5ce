import asyncio
import uuid
from datetime import datetime, timezone

from shared.errors import ConflictError, PaymentTimeoutError
from shared.storage import VersionConflictError, Write
from services.order_service.models import (
    CashOnDeliveryDetails,
    OnlinePaymentDetails,
    Order,
    PaymentMethod,
    PaymentStatus,
    WalletPaymentDetails,
)
from services.order_service.service import OrderService
from services.wallet_service.models import Wallet
from services.wallet_service.service import WalletService
from .saga import SagaOrchestrator


def build_order(ctx: dict, order_id: str) -> Order:
    product = ctx["product"]
    return Order(
        id=order_id,
        user_id=ctx["user_id"],
        product_id=product.id,
        product_title=product.title,
        quantity=ctx["quantity"],
        unit_price=product.price,
        total_price=ctx["total_price"],
        delivery_details=ctx["delivery_details"],
        payment_method=ctx["payment_method"],
        payment_details=ctx["payment_details"],
        payment_status=ctx["payment_status"],
        created_at=datetime.now(timezone.utc),
    )

def new_order_id() -> str:
    return f"order-{uuid.uuid4().hex}"

# --- ACTIONS ---

async def debit_wallet_and_create_order(ctx: dict):
    """Debit and order insert commit in one store transaction, so no compensation exists."""
    store, user_id, amount = ctx["store"], ctx["user_id"], ctx["total_price"]
    order_id = new_order_id()

    def insert_order(wallet: Wallet) -> list[Write]:
        ctx["payment_details"] = WalletPaymentDetails(
            amount_deducted=amount, resulting_balance=wallet.balance
        )
        ctx["payment_status"] = PaymentStatus.PAID
        ctx["order"] = build_order(ctx, order_id)
        return [OrderService.insert_write(ctx["order"])]

    try:
        await WalletService.debit(store, user_id, amount, also=insert_order)
    except VersionConflictError as e:
        # wallet conflicts are retried inside the debit, so this is the order key
        raise ConflictError(f"Order id already exists: {order_id}") from e

async def settle_online_payment(ctx: dict):
    gateway, app, amount, timeout = ctx["gateway"], ctx["payment_app"], ctx["total_price"], ctx["timeout"]
    try:
        transaction_id = await asyncio.wait_for(gateway.charge(app, amount), timeout=timeout)
    except asyncio.TimeoutError:
        raise PaymentTimeoutError(timeout) from None
    ctx["payment_details"] = OnlinePaymentDetails(app=app, transaction_id=transaction_id)
    ctx["payment_status"] = PaymentStatus.PAID

async def collect_on_delivery(ctx: dict):
    ctx["payment_details"] = CashOnDeliveryDetails(amount_payable=ctx["total_price"])
    ctx["payment_status"] = PaymentStatus.PENDING

async def create_order(ctx: dict):
    ctx["order"] = await OrderService.create_order(ctx["store"], build_order(ctx, new_order_id()))


# --- COMPENSATIONS (Rollbacks) ---

async def refund_online_payment(ctx: dict):
    details = ctx.get("payment_details")
    if details is not None:
        await ctx["gateway"].refund(details.transaction_id, ctx["total_price"])


# --- BUILDER FACTORY ---

def build_checkout_saga(payment_method: PaymentMethod) -> SagaOrchestrator:
    saga = SagaOrchestrator()
    if payment_method == PaymentMethod.WALLET:
        saga.add_step("debit_wallet_and_create_order", debit_wallet_and_create_order, None)
        return saga
    if payment_method == PaymentMethod.ONLINE:
        saga.add_step("settle_online_payment", settle_online_payment, refund_online_payment)
    else:
        saga.add_step("collect_on_delivery", collect_on_delivery, None) # nothing taken yet
    saga.add_step("create_order", create_order, None) # last step, nothing after it can fail
    return saga
