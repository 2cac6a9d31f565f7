from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON field names (orderId, itemCode, ...)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Request Models ---
class ItemCreate(CamelModel):
    """A line item supplied when creating or replacing an order."""
    item_code: str
    description: str
    quantity: int = Field(ge=0)


class OrderCreate(CamelModel):
    """Body of a create or replace request."""
    customer_name: str
    ordered_at: datetime
    items: List[ItemCreate] = Field(default_factory=list)


# --- Response Models ---
class ItemRead(CamelModel):
    item_id: int
    item_code: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = None


class OrderRead(CamelModel):
    """An order together with every item currently referencing it."""
    order_id: int
    customer_name: str
    ordered_at: Optional[datetime] = None
    items: List[ItemRead] = Field(default_factory=list)
