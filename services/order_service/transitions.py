"""Rules for moving an order through its fulfillment states.

    pending -> confirmed -> shipped -> delivered
    pending | confirmed | shipped --cancel--> cancelled

Forward jumps (pending -> delivered) are allowed, backward moves are not.
``cancelled`` is terminal. A delivered order may carry one return request,
which is resolved once (pending -> approved | rejected).
"""
from shared.errors import InvalidTransitionError
from .models import Order, OrderStatus, ReturnStatus

FULFILLMENT_SEQUENCE = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.SHIPPED})


def check_status_change(order: Order, new_status: OrderStatus) -> None:
    if order.status == OrderStatus.CANCELLED:
        raise InvalidTransitionError(order.id, "cancelled orders cannot change status")
    if new_status == OrderStatus.CANCELLED:
        raise InvalidTransitionError(order.id, "use cancel to cancel an order")
    if FULFILLMENT_SEQUENCE.index(new_status) < FULFILLMENT_SEQUENCE.index(order.status):
        raise InvalidTransitionError(
            order.id, f"cannot move back from {order.status.value} to {new_status.value}"
        )


def check_cancel(order: Order) -> None:
    if order.status not in CANCELLABLE:
        raise InvalidTransitionError(order.id, f"{order.status.value} orders cannot be cancelled")


def check_return_request(order: Order) -> None:
    if order.status != OrderStatus.DELIVERED:
        raise InvalidTransitionError(
            order.id, f"returns need a delivered order, this one is {order.status.value}"
        )
    if order.return_request is not None:
        raise InvalidTransitionError(order.id, "a return or exchange was already requested")


def check_return_resolution(order: Order) -> None:
    if order.return_request is None:
        raise InvalidTransitionError(order.id, "no return or exchange was requested")
    if order.return_request.status != ReturnStatus.PENDING:
        raise InvalidTransitionError(
            order.id, f"return request is already {order.return_request.status.value}"
        )
