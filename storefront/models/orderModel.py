from datetime import datetime
from typing import Optional, List
from beanie import Document, PydanticObjectId
from pydantic import BaseModel, Field, ConfigDict
from pymongo import IndexModel


class OrderLine(BaseModel):
    """Snapshot of one purchased product at the price paid"""
    product: PydanticObjectId
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0)


class Order(Document):
    """
    Order recorded once a checkout session is confirmed paid.

    Orders are written once and never updated; total_amount is the amount
    the payment provider confirmed, not a local recomputation.
    """
    id: Optional[PydanticObjectId] = Field(None, alias="_id")
    user_id: PydanticObjectId

    products: List[OrderLine]
    total_amount: float = Field(..., ge=0)

    # Stripe reference
    stripe_session_id: str

    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "orders"
        indexes = [
            [("user_id", 1)],
            [("created_at", -1)],
            IndexModel("stripe_session_id", unique=True),  # One order per paid session
        ]

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
    )
