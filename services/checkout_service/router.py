from fastapi import APIRouter, Depends, Request, status

from shared.config.settings import CHECKOUT_RATE_LIMIT
from shared.security import get_current_user, limiter
from shared.storage import KeyValueStore, get_store
from services.catalog_service.service import CatalogService
from services.order_service.schemas import OrderResponse
from .payment_gateway import SimulatedPaymentGateway, get_payment_gateway
from .schemas import OrderCreate
from .service import CheckoutService

router = APIRouter()

@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def place_order(
    request: Request,                          # REQUIRED: slowapi needs this to check IP/Headers
    payload: OrderCreate,
    user_id: str = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store),
    gateway: SimulatedPaymentGateway = Depends(get_payment_gateway),
):
    product = await CatalogService.get_product(store, payload.product_id)
    return await CheckoutService.place_order(
        store,
        gateway,
        user_id=user_id,
        product=product,
        quantity=payload.quantity,
        delivery_details=payload.delivery_details,
        payment_method=payload.payment_method,
        payment_app=payload.payment_app,
    )
