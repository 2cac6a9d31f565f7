from datetime import timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.types import TypeDecorator
from .database import Base # Import the Base class from our database setup


def _as_utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Timestamps are stored and returned in UTC; naive values are taken as UTC.
# SQLite keeps no offset of its own, so it is applied on the way in and out.
class UTCDateTime(TypeDecorator):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return _as_utc(value)

    def process_result_value(self, value, dialect):
        return _as_utc(value)


# Defines the ORM model for an 'Order' stored in the database.
class Order(Base):
    # The name of the database table.
    __tablename__ = "orders"

    # Define the table columns.
    order_id = Column(Integer, primary_key=True, autoincrement=True) # Store-assigned identifier.
    customer_name = Column(String, nullable=False)
    ordered_at = Column(UTCDateTime())

    def __repr__(self):
        return f"<Order(order_id={self.order_id}, customer_name='{self.customer_name}')>"


# Defines the ORM model for a line 'Item' owned by exactly one order.
class Item(Base):
    __tablename__ = "items"

    item_id = Column(Integer, primary_key=True, autoincrement=True)
    item_code = Column(String)
    description = Column(String)
    quantity = Column(Integer)
    # Every item must reference an existing order.
    order_id = Column(Integer, ForeignKey("orders.order_id"), nullable=False, index=True)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="check_quantity_nonnegative"),
    )

    def __repr__(self):
        return f"<Item(item_id={self.item_id}, order_id={self.order_id}, item_code='{self.item_code}')>"
