from fastapi import APIRouter, Depends, Query

from shared.security.dependencies import get_current_user, verify_internal_api_key
from shared.storage import KeyValueStore, get_store
from .models import CancelledBy
from .schemas import CancelRequest, OrderResponse, ReturnCreate, ReturnResolve, StatusUpdate
from .service import OrderService

# Customer routes act on the caller's own orders only
router = APIRouter()
# Admin routes, mounted under /orders next to the customer ones
admin_router = APIRouter(dependencies=[Depends(verify_internal_api_key)])
# Admin-only listings and actions, mounted under /admin/orders
admin_panel_router = APIRouter(dependencies=[Depends(verify_internal_api_key)])

@router.get("", response_model=list[OrderResponse])
async def list_my_orders(
    user_id: str = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store)
):
    return await OrderService.list_by_user(store, user_id)

@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    user_id: str = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store)
):
    return await OrderService.get_order_for_user(store, order_id, user_id)

@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    payload: CancelRequest,
    user_id: str = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store)
):
    await OrderService.get_order_for_user(store, order_id, user_id)
    return await OrderService.cancel_order(store, order_id, payload.reason, CancelledBy.CUSTOMER)

@router.post("/{order_id}/return", response_model=OrderResponse)
async def request_return(
    order_id: str,
    payload: ReturnCreate,
    user_id: str = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store)
):
    await OrderService.get_order_for_user(store, order_id, user_id)
    return await OrderService.request_return(store, order_id, payload.type, payload.reason)

@admin_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    payload: StatusUpdate,
    store: KeyValueStore = Depends(get_store)
):
    return await OrderService.update_status(store, order_id, payload.status)

@admin_router.post("/{order_id}/return/resolve", response_model=OrderResponse)
async def resolve_return(
    order_id: str,
    payload: ReturnResolve,
    store: KeyValueStore = Depends(get_store)
):
    return await OrderService.resolve_return(store, order_id, payload.decision)

@admin_panel_router.get("", response_model=list[OrderResponse])
async def list_orders(
    user_id: str | None = Query(default=None),
    store: KeyValueStore = Depends(get_store)
):
    if user_id:
        return await OrderService.list_by_user(store, user_id)
    return await OrderService.list_all(store)

@admin_panel_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def admin_cancel_order(
    order_id: str,
    payload: CancelRequest,
    store: KeyValueStore = Depends(get_store)
):
    return await OrderService.cancel_order(store, order_id, payload.reason, CancelledBy.ADMIN)
