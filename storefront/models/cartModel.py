from beanie import PydanticObjectId
from pydantic import BaseModel, Field

DEFAULT_SIZE = "Standard"


class CartItem(BaseModel):
    """Individual item in a user's cart, keyed by (product_id, size)"""
    product_id: PydanticObjectId
    size: str = DEFAULT_SIZE
    quantity: int = Field(default=1, gt=0)

    def matches(self, product_id: PydanticObjectId, size: str) -> bool:
        return self.product_id == product_id and self.size == size
