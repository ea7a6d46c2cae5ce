"""Simulated online payment provider.

There is no real gateway: a charge waits for a fixed delay, standing in for
the provider round-trip, and then always succeeds with a fresh transaction id.
Refunds move no money either; they are only recorded on the gateway.
"""
import asyncio
import uuid
from collections import deque
from decimal import Decimal

import structlog

from shared.config.settings import ONLINE_PAYMENT_DELAY_SECONDS

logger = structlog.get_logger(__name__)


def new_transaction_id() -> str:
    return f"TXN{uuid.uuid4().hex[:20].upper()}"


class SimulatedPaymentGateway:
    def __init__(self, delay: float = ONLINE_PAYMENT_DELAY_SECONDS):
        self.delay = delay
        # (transaction_id, amount) of the most recent refunds
        self.refunds: deque[tuple[str, Decimal]] = deque(maxlen=1000)

    async def charge(self, app: str, amount: Decimal) -> str:
        """Returns the transaction id once the provider settles."""
        await asyncio.sleep(self.delay)
        transaction_id = new_transaction_id()
        logger.info("online_payment_settled", app=app, amount=str(amount), transaction_id=transaction_id)
        return transaction_id

    async def refund(self, transaction_id: str, amount: Decimal) -> None:
        self.refunds.append((transaction_id, amount))
        logger.info(
            "online_refund_simulated", transaction_id=transaction_id, amount=str(amount), simulated=True
        )


payment_gateway = SimulatedPaymentGateway()


def get_payment_gateway() -> SimulatedPaymentGateway:
    return payment_gateway
