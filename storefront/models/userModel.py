from datetime import datetime

from beanie import Document
from typing import List, Optional
from pydantic import Field
from pymongo import IndexModel
from pymongo.collation import Collation
from fastapi_users_db_beanie import BeanieBaseUser, BeanieUserDatabase

from storefront.commonUtils.enumUtils import UserRole
from storefront.models.cartModel import CartItem


class User(BeanieBaseUser, Document):
    name: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER
    # The cart lives on the user document; it has no collection of its own
    cart_items: List[CartItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
        email_collation = Collation("en", strength=2)  # Case-insensitive collation for email queries
        indexes = [
            IndexModel("email", unique=True),
            [("role", 1)],  # Index for admin lookups
        ]

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane.doe@example.com",
                "hashed_password": "supersecretpassword",
                "name": "Jane Doe",
                "role": "customer",
                "cart_items": [
                    {"product_id": "665f1c2e9b1e8a3d4c5b6a70", "size": "Standard", "quantity": 2}
                ]
            }
        }


async def get_user_db():
    yield BeanieUserDatabase(User)
