from typing import Callable, Optional

from pydantic import ValidationError as SchemaError

from shared.concurrency import compare_and_swap
from shared.errors import ConflictError, CorruptRecordError, NotFoundError
from shared.storage import KeyValueStore, VersionConflictError, Write
from .models import Order

NAMESPACE = "orders"

class OrderRepository:

    @staticmethod
    def _load(key: str, raw: str) -> Order:
        try:
            return Order.model_validate_json(raw)
        except SchemaError as e:
            raise CorruptRecordError(NAMESPACE, key, str(e)) from e

    @staticmethod
    def insert_write(order: Order) -> Write:
        """Insert-if-absent write for a new order, for batches committed with other records."""
        return Write(NAMESPACE, order.id, order.model_dump_json(), expected_version=0)

    @staticmethod
    async def create_order(store: KeyValueStore, order: Order) -> Order:
        try:
            await store.set(*OrderRepository.insert_write(order))
        except VersionConflictError as e:
            raise ConflictError(f"Order id already exists: {order.id}") from e
        return order

    @staticmethod
    async def get_order(store: KeyValueStore, order_id: str) -> Optional[Order]:
        current = await store.get(NAMESPACE, order_id)
        if not current:
            return None
        return OrderRepository._load(order_id, current.value)

    @staticmethod
    async def get_all_orders(store: KeyValueStore) -> list[Order]:
        return [OrderRepository._load("(scan)", v.value) for v in await store.scan(NAMESPACE)]

    @staticmethod
    async def update_order(
        store: KeyValueStore, order_id: str, mutate: Callable[[Order], Order]
    ) -> Order:
        def apply(raw: Optional[str]) -> Order:
            if raw is None:
                raise NotFoundError("Order", order_id)
            return mutate(OrderRepository._load(order_id, raw))

        return await compare_and_swap(store, NAMESPACE, order_id, apply)
