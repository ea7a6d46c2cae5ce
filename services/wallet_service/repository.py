from typing import Callable, Optional

from pydantic import ValidationError as SchemaError

from shared.concurrency import compare_and_swap
from shared.errors import CorruptRecordError
from shared.storage import KeyValueStore, Write
from .models import Wallet

NAMESPACE = "wallets"

class WalletRepository:

    @staticmethod
    def _load(user_id: str, raw: Optional[str]) -> Wallet:
        if raw is None:
            return Wallet(user_id=user_id)
        try:
            return Wallet.model_validate_json(raw)
        except SchemaError as e:
            raise CorruptRecordError(NAMESPACE, user_id, str(e)) from e

    @staticmethod
    async def get_wallet(store: KeyValueStore, user_id: str) -> Wallet:
        current = await store.get(NAMESPACE, user_id)
        return WalletRepository._load(user_id, current.value if current else None)

    @staticmethod
    async def update_wallet(
        store: KeyValueStore,
        user_id: str,
        mutate: Callable[[Wallet], Wallet],
        also: Optional[Callable[[Wallet], list[Write]]] = None,
    ) -> Wallet:
        """Compare-and-swap update; a missing wallet starts at zero.

        Writes built by ``also`` commit in the same transaction as the wallet.
        """
        return await compare_and_swap(
            store,
            NAMESPACE,
            user_id,
            lambda raw: mutate(WalletRepository._load(user_id, raw)),
            also=also,
        )
