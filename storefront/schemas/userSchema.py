from datetime import datetime
from typing import Optional

from beanie import PydanticObjectId
from fastapi_users import schemas

from storefront.commonUtils.enumUtils import UserRole


class UserRead(schemas.BaseUser[PydanticObjectId]):
    name: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER
    created_at: datetime

    class Config:
        from_attributes = True  # Pydantic v2 style for ORMs


class UserCreate(schemas.BaseUserCreate):
    name: Optional[str] = None


class UserUpdate(schemas.BaseUserUpdate):
    name: Optional[str] = None
