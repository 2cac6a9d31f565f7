"""
Reads order aggregates back out of the database.

A single LEFT OUTER JOIN returns one row per order, repeated once per item,
with null item columns for an order that has no items. ``fold_rows`` turns
that flat stream into nested ``OrderRead`` values.
"""
import logging

from sqlalchemy import select

from .models import Item, Order
from .schemas import ItemRead, OrderRead

logger = logging.getLogger(__name__)


def build_orders_query():
    """SELECT every order joined to its items, ascending by order then item id."""
    return (
        select(
            Order.order_id,
            Order.customer_name,
            Order.ordered_at,
            Item.item_id,
            Item.item_code,
            Item.description,
            Item.quantity,
        )
        .select_from(Order)
        .outerjoin(Item, Item.order_id == Order.order_id)
        .order_by(Order.order_id, Item.item_id)
    )


def fold_rows(rows):
    """
    Fold joined rows into orders, emitted in the order each id first appears.

    Rows must already be sorted by order id; nothing is re-sorted here.
    """
    orders = {}
    seen = []
    for row in rows:
        order = orders.get(row.order_id)
        if order is None:
            order = OrderRead(
                order_id=row.order_id,
                customer_name=row.customer_name,
                ordered_at=row.ordered_at,
                items=[],
            )
            orders[row.order_id] = order
            seen.append(row.order_id)

        # A null item_id marks the outer-join filler row of an order without items.
        if row.item_id is not None:
            order.items.append(
                ItemRead(
                    item_id=row.item_id,
                    item_code=row.item_code,
                    description=row.description,
                    quantity=row.quantity,
                )
            )

    return [orders[order_id] for order_id in seen]


def read_orders(session):
    """Execute the joined query on ``session`` and return the folded orders."""
    result = session.execute(build_orders_query())
    orders = fold_rows(result)
    logger.debug("Read %d orders", len(orders))
    return orders
