from decimal import Decimal
from typing import Callable, Optional

import structlog

from shared.concurrency import KeyedLock
from shared.errors import InsufficientBalanceError, ValidationError
from shared.observability import ecomm_wallet_operations_total
from shared.storage import KeyValueStore, Write
from .models import Wallet
from .repository import WalletRepository

logger = structlog.get_logger(__name__)

# Smallest top-up the storefront accepts
MIN_RECHARGE_AMOUNT = Decimal("1")

# Serializes writers of the same wallet within this process
wallet_locks = KeyedLock()


def _positive(amount: Decimal) -> Decimal:
    amount = Decimal(str(amount))
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("amount", f"Amount must be greater than zero, got {amount}")
    return amount


class WalletService:
    """Per-user prepaid balance. Unknown users read as a zero balance."""

    @staticmethod
    async def get_wallet(store: KeyValueStore, user_id: str) -> Wallet:
        return await WalletRepository.get_wallet(store, user_id)

    @staticmethod
    async def get_balance(store: KeyValueStore, user_id: str) -> Decimal:
        wallet = await WalletRepository.get_wallet(store, user_id)
        return wallet.balance

    @staticmethod
    async def credit(store: KeyValueStore, user_id: str, amount: Decimal) -> Wallet:
        amount = _positive(amount)
        async with wallet_locks.hold(user_id):
            wallet = await WalletService._add(store, user_id, amount)
        ecomm_wallet_operations_total.labels(operation="credit").inc()
        logger.info("wallet_credited", user_id=user_id, amount=str(amount), balance=str(wallet.balance))
        return wallet

    @staticmethod
    async def recharge(store: KeyValueStore, user_id: str, amount: Decimal) -> Wallet:
        amount = Decimal(str(amount))
        if not amount.is_finite() or amount < MIN_RECHARGE_AMOUNT:
            raise ValidationError(
                "amount", f"Recharge amount must be at least {MIN_RECHARGE_AMOUNT}, got {amount}"
            )
        return await WalletService.credit(store, user_id, amount)

    @staticmethod
    async def debit(
        store: KeyValueStore,
        user_id: str,
        amount: Decimal,
        also: Optional[Callable[[Wallet], list[Write]]] = None,
    ) -> Wallet:
        """Take ``amount`` out of the wallet or fail without touching it.

        Only checkout calls this, holding ``wallet_locks`` for the user. It
        passes the new order as ``also`` so the debit and the order insert
        commit as one transaction: either both are stored or neither is.
        """
        amount = _positive(amount)

        def take(wallet: Wallet) -> Wallet:
            if wallet.balance < amount:
                raise InsufficientBalanceError(wallet.balance, amount)
            return wallet.model_copy(update={"balance": wallet.balance - amount})

        wallet = await WalletRepository.update_wallet(store, user_id, take, also=also)
        ecomm_wallet_operations_total.labels(operation="debit").inc()
        logger.info("wallet_debited", user_id=user_id, amount=str(amount), balance=str(wallet.balance))
        return wallet

    @staticmethod
    async def _add(store: KeyValueStore, user_id: str, amount: Decimal) -> Wallet:
        return await WalletRepository.update_wallet(
            store, user_id, lambda w: w.model_copy(update={"balance": w.balance + amount})
        )
