from typing import List, Optional

from beanie import PydanticObjectId
from pydantic import BaseModel, Field, ConfigDict

from storefront.models.cartModel import DEFAULT_SIZE


# ============= CART REQUEST SCHEMAS =============
class CartAddItemRequest(BaseModel):
    """Request schema for adding to cart"""
    product_id: PydanticObjectId = Field(..., alias="productId")
    size: str = Field(default=DEFAULT_SIZE, min_length=1)
    quantity: int = Field(default=1, gt=0)

    model_config = ConfigDict(populate_by_name=True)


class CartRemoveItemRequest(BaseModel):
    """Request schema for removing a cart entry"""
    product_id: PydanticObjectId = Field(..., alias="productId")
    size: str = DEFAULT_SIZE

    model_config = ConfigDict(populate_by_name=True)


class CartUpdateItemRequest(BaseModel):
    """Request schema for updating cart item; quantity <= 0 removes the entry"""
    quantity: int
    size: str = DEFAULT_SIZE


# ============= CART RESPONSE SCHEMAS =============
class CartItemRead(BaseModel):
    """Cart entry joined with the current product details (for frontend)"""
    id: PydanticObjectId = Field(..., alias="_id")
    name: str
    price: float
    image: str = ""
    stock: int
    selected_size: str = Field(..., alias="selectedSize")
    quantity: int
    in_stock: bool = Field(..., alias="inStock")

    model_config = ConfigDict(populate_by_name=True)


class CartSummaryRead(BaseModel):
    items: List[CartItemRead]
    total_items: int = Field(..., alias="totalItems")
    subtotal: float
    total: float

    model_config = ConfigDict(populate_by_name=True)


class StockIssue(BaseModel):
    product_id: PydanticObjectId = Field(..., alias="productId")
    name: str
    requested: int
    available: int
    size: str

    model_config = ConfigDict(populate_by_name=True)


class StockValidationRead(BaseModel):
    valid: bool
    invalid_items: Optional[List[StockIssue]] = Field(None, alias="invalidItems")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    message: str
