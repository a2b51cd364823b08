from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import List, Optional
from datetime import datetime
from beanie import PydanticObjectId

from storefront.commonUtils.enumUtils import CheckoutStatus


class CheckOutProduct(BaseModel):
    """One product line as the browser sends it; the id may arrive as `_id` or `productId`"""
    id: Optional[PydanticObjectId] = Field(None, alias="_id")
    product_id: Optional[PydanticObjectId] = Field(None, alias="productId")
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    image: Optional[str] = None
    quantity: int = Field(default=1, gt=0)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def require_product_reference(self):
        if self.id is None and self.product_id is None:
            raise ValueError("Each product needs an _id or productId")
        return self

    @property
    def reference(self) -> PydanticObjectId:
        return self.id if self.id is not None else self.product_id


class CheckOutSessionRequest(BaseModel):
    """Request to create a checkout session"""
    products: Optional[List[CheckOutProduct]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "products": [
                    {
                        "_id": "665f1c2e9b1e8a3d4c5b6a70",
                        "name": "Arabica Coffee",
                        "price": 10.0,
                        "image": "https://cdn.example.com/coffee.png",
                        "quantity": 2
                    }
                ]
            }
        }


class CheckOutSessionResponse(BaseModel):
    session_id: str = Field(..., alias="sessionId")
    total_amount: float = Field(..., alias="totalAmount")

    model_config = ConfigDict(populate_by_name=True)


class CheckOutSuccessRequest(BaseModel):
    session_id: str = Field(..., alias="sessionId", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class CheckOutSuccessResponse(BaseModel):
    success: bool
    status: CheckoutStatus
    message: str
    order_id: Optional[PydanticObjectId] = Field(None, alias="orderId")

    model_config = ConfigDict(populate_by_name=True)


class StripeConfigResponse(BaseModel):
    public_key: str = Field(..., alias="publicKey")

    model_config = ConfigDict(populate_by_name=True)


class OrderLineRead(BaseModel):
    product: PydanticObjectId
    quantity: int
    price: float


class OrderRead(BaseModel):
    """Order response schema"""
    id: PydanticObjectId = Field(..., alias="_id")
    user_id: PydanticObjectId = Field(..., alias="user")
    products: List[OrderLineRead]
    total_amount: float = Field(..., alias="totalAmount")
    stripe_session_id: str = Field(..., alias="stripeSessionId")
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)
