from fastapi import APIRouter, Depends

from shared.security.dependencies import get_current_user
from shared.storage import KeyValueStore, get_store
from .schemas import RechargeRequest, WalletResponse
from .service import WalletService

router = APIRouter()

@router.get("", response_model=WalletResponse)
async def get_wallet(
    user_id: str = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store)
):
    return await WalletService.get_wallet(store, user_id)

@router.post("/recharge", response_model=WalletResponse)
async def recharge_wallet(
    payload: RechargeRequest,
    user_id: str = Depends(get_current_user),
    store: KeyValueStore = Depends(get_store)
):
    return await WalletService.recharge(store, user_id, payload.amount)
