"""
Order Store: every mutation of the ``orders`` and ``items`` relations.

Each operation runs inside exactly one transaction, so an order and its
item set are always written, replaced or removed together.
"""
import logging

from sqlalchemy import delete, func, select

from .database import read_session, transaction
from .errors import InvalidInput, NotFound
from .models import Item, Order
from .reader import read_orders

logger = logging.getLogger(__name__)


class OrderStore:
    """
    Persists order aggregates through an injected SQLAlchemy session factory.

    ``publisher`` is optional; when given, it receives an ``order.*`` event
    after each successful commit.
    """

    def __init__(self, session_factory, publisher=None):
        self.session_factory = session_factory
        self.publisher = publisher

    def create_order(self, customer_name, ordered_at, items):
        """Insert an order and its items; returns the new order id."""
        _check_order_fields(customer_name, items)

        with transaction(self.session_factory) as session:
            order = Order(customer_name=customer_name, ordered_at=ordered_at)
            session.add(order)
            session.flush() # Assigns order.order_id
            order_id = order.order_id
            _insert_items(session, order_id, items)

        logger.info("Created order %s with %d items", order_id, len(items))
        self._publish("order.created", order_id)
        return order_id

    def list_orders(self):
        """Return every order with its items, ascending by order id."""
        with read_session(self.session_factory) as session:
            return read_orders(session)

    def replace_order(self, order_id, customer_name, ordered_at, items):
        """Overwrite an order's fields and swap its entire item set."""
        _check_order_fields(customer_name, items)

        with transaction(self.session_factory) as session:
            order = session.get(Order, order_id)
            if order is None:
                raise NotFound(order_id)

            order.customer_name = customer_name
            order.ordered_at = ordered_at
            session.execute(delete(Item).where(Item.order_id == order_id))
            _insert_items(session, order_id, items)

        logger.info("Replaced order %s with %d items", order_id, len(items))
        self._publish("order.updated", order_id)

    def delete_order(self, order_id):
        """Remove an order together with all of its items."""
        with transaction(self.session_factory) as session:
            count = session.scalar(
                select(func.count()).select_from(Order).where(Order.order_id == order_id)
            )
            if count == 0:
                raise NotFound(order_id)

            # Items go first so no row ever references a missing order.
            session.execute(delete(Item).where(Item.order_id == order_id))
            session.execute(delete(Order).where(Order.order_id == order_id))

        logger.info("Deleted order %s", order_id)
        self._publish("order.deleted", order_id)

    def _publish(self, routing_key, order_id):
        if self.publisher is None:
            return
        try:
            self.publisher.publish(routing_key, {"order_id": order_id})
        except Exception:
            # The change is already committed; a lost event must not undo it.
            logger.exception("Failed to publish %s for order %s", routing_key, order_id)


def _check_order_fields(customer_name, items):
    if customer_name is None:
        raise InvalidInput("customerName is required")
    if items is None:
        raise InvalidInput("items must be a list, not null")
    for position, item in enumerate(items):
        for field in ("item_code", "description", "quantity"):
            if getattr(item, field, None) is None:
                raise InvalidInput(f"items[{position}].{field} is required")


def _insert_items(session, order_id, items):
    for item in items:
        session.add(
            Item(
                item_code=item.item_code,
                description=item.description,
                quantity=item.quantity,
                order_id=order_id,
            )
        )
    # Flush inside the transaction so constraint failures surface here.
    session.flush()
