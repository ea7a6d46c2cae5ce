from datetime import datetime, timezone

import structlog

from shared.concurrency import KeyedLock
from shared.errors import NotFoundError, ValidationError
from shared.observability import ecomm_order_transitions_total
from shared.storage import KeyValueStore, Write
from . import transitions
from .models import CancelledBy, Order, OrderStatus, ReturnRequest, ReturnStatus, ReturnType
from .repository import OrderRepository

logger = structlog.get_logger(__name__)

# Serializes writers of the same order within this process
order_locks = KeyedLock()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _revalidate(order: Order, **changes) -> Order:
    """Apply changes and run the record's invariants again."""
    return Order.model_validate({**order.model_dump(), **changes})


def _required_text(field: str, value: str | None) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(field, f"{field} is required")
    return value


class OrderService:

    @staticmethod
    async def create_order(store: KeyValueStore, order: Order) -> Order:
        order = await OrderRepository.create_order(store, order)
        logger.info("order_created", order_id=order.id, user_id=order.user_id, total=str(order.total_price))
        return order

    @staticmethod
    def insert_write(order: Order) -> Write:
        """The insert of a new order, for callers that commit it together with other records."""
        return OrderRepository.insert_write(order)

    @staticmethod
    async def get_order(store: KeyValueStore, order_id: str) -> Order:
        order = await OrderRepository.get_order(store, order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    @staticmethod
    async def get_order_for_user(store: KeyValueStore, order_id: str, user_id: str) -> Order:
        """Same as get_order, but another customer's order reads as missing."""
        order = await OrderService.get_order(store, order_id)
        if order.user_id != user_id:
            raise NotFoundError("Order", order_id)
        return order

    @staticmethod
    async def list_by_user(store: KeyValueStore, user_id: str) -> list[Order]:
        orders = await OrderRepository.get_all_orders(store)
        return sorted(
            (o for o in orders if o.user_id == user_id), key=lambda o: o.created_at, reverse=True
        )

    @staticmethod
    async def list_all(store: KeyValueStore) -> list[Order]:
        orders = await OrderRepository.get_all_orders(store)
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    @staticmethod
    async def update_status(store: KeyValueStore, order_id: str, new_status: OrderStatus) -> Order:
        def mutate(order: Order) -> Order:
            transitions.check_status_change(order, new_status)
            now = _now()
            changes = {"status": new_status, "updated_at": now}
            if new_status == OrderStatus.DELIVERED and order.delivered_at is None:
                changes["delivered_at"] = now
            return _revalidate(order, **changes)

        async with order_locks.hold(order_id):
            order = await OrderRepository.update_order(store, order_id, mutate)
        ecomm_order_transitions_total.labels(status=new_status.value).inc()
        logger.info("order_status_updated", order_id=order_id, status=new_status.value)
        return order

    @staticmethod
    async def cancel_order(
        store: KeyValueStore, order_id: str, reason: str, cancelled_by: CancelledBy
    ) -> Order:
        reason = _required_text("reason", reason)

        def mutate(order: Order) -> Order:
            transitions.check_cancel(order)
            now = _now()
            return _revalidate(
                order,
                status=OrderStatus.CANCELLED,
                cancellation_reason=reason,
                cancelled_at=now,
                cancelled_by=cancelled_by,
                updated_at=now,
            )

        async with order_locks.hold(order_id):
            order = await OrderRepository.update_order(store, order_id, mutate)
        ecomm_order_transitions_total.labels(status=OrderStatus.CANCELLED.value).inc()
        logger.info("order_cancelled", order_id=order_id, cancelled_by=cancelled_by.value, reason=reason)
        return order

    @staticmethod
    async def request_return(
        store: KeyValueStore, order_id: str, request_type: ReturnType, reason: str
    ) -> Order:
        reason = _required_text("reason", reason)

        def mutate(order: Order) -> Order:
            transitions.check_return_request(order)
            now = _now()
            request = ReturnRequest(type=request_type, reason=reason, requested_at=now)
            return _revalidate(order, return_request=request.model_dump(), updated_at=now)

        async with order_locks.hold(order_id):
            order = await OrderRepository.update_order(store, order_id, mutate)
        ecomm_order_transitions_total.labels(status="return_requested").inc()
        logger.info("return_requested", order_id=order_id, type=request_type.value, reason=reason)
        return order

    @staticmethod
    async def resolve_return(store: KeyValueStore, order_id: str, decision: ReturnStatus) -> Order:
        if decision == ReturnStatus.PENDING:
            raise ValidationError("decision", "decision must be approved or rejected")

        def mutate(order: Order) -> Order:
            transitions.check_return_resolution(order)
            now = _now()
            request = order.return_request.model_dump()
            request.update(status=decision, resolved_at=now)
            return _revalidate(order, return_request=request, updated_at=now)

        async with order_locks.hold(order_id):
            order = await OrderRepository.update_order(store, order_id, mutate)
        ecomm_order_transitions_total.labels(status=f"return_{decision.value}").inc()
        logger.info("return_resolved", order_id=order_id, decision=decision.value)
        return order
