"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so outer layers (CLI, any HTTP wrapper) can catch them uniformly.  Each
subclass carries a stable ``code`` that transports map to their own error
representation; the message is for humans.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    code = "VALIDATION_ERROR"


class ConfigurationError(DomainException):
    """A setting could not be parsed."""

    code = "CONFIGURATION_ERROR"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "NOT_FOUND"


class ProductNotFoundError(EntityNotFoundError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' not found")


class OrderNotFoundError(EntityNotFoundError):
    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id: int) -> None:
        self.order_id = order_id
        super().__init__(f"Order #{order_id} not found")


class CustomerNotFoundError(EntityNotFoundError):
    code = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str) -> None:
        self.customer_id = customer_id
        super().__init__(f"Customer '{customer_id}' not found")


class CustomerIneligibleError(DomainException):
    """The customer's status does not allow purchases."""

    code = "CUSTOMER_INELIGIBLE"

    def __init__(self, customer_id: str, status: str) -> None:
        self.customer_id = customer_id
        self.status = status
        super().__init__(
            f"Customer '{customer_id}' is not allowed to make purchases "
            f"(status={status})"
        )


class InsufficientStockError(DomainException):
    """Reservation or decrement exceeds available stock."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_name: str, requested: int, available: int) -> None:
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name} "
            f"(need {requested}, have {available} available)"
        )


class InvalidTransitionError(DomainException):
    """The order cannot move to the requested status from its current one."""

    code = "INVALID_TRANSITION"

    def __init__(self, current: str, target: str, reason: str | None = None) -> None:
        self.current = current
        self.target = target
        msg = f"Cannot transition order from {current} to {target}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class ReservationStateError(DomainException):
    """A reservation claim was retired twice."""

    code = "RESERVATION_STATE"


class ConcurrencyConflictError(DomainException):
    """A record changed between read and commit.

    The only error kind callers are expected to retry.
    """

    code = "CONCURRENCY_CONFLICT"

    def __init__(self, collection: str, key: str) -> None:
        self.collection = collection
        self.key = key
        super().__init__(
            f"Concurrent modification of {collection} record '{key}'"
        )
