class OrderServiceError(Exception):
    """Base class for every failure raised by the order store."""


class InvalidInput(OrderServiceError):
    """A required field is missing or structurally invalid."""


class NotFound(OrderServiceError):
    """The targeted order does not exist."""

    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class StoreError(OrderServiceError):
    """The database failed while running a statement or transaction."""
