from fastapi import APIRouter, Depends, Query
from beanie import PydanticObjectId
from typing import List

from storefront.config.settings import settings
from storefront.models.userModel import User
from storefront.schemas.checkOutSchema import (
    CheckOutSessionRequest,
    CheckOutSessionResponse,
    CheckOutSuccessRequest,
    CheckOutSuccessResponse,
    StripeConfigResponse,
    OrderRead,
)
from storefront.crud.userService import current_active_user
from storefront.crud.checkOutService import CheckOutService

router = APIRouter()


@router.get("/payments/config", response_model=StripeConfigResponse, tags=["checkout"])
def get_publishable_key():
    return {"publicKey": settings.stripe_keys["publishable_key"]}


@router.post(
    "/payments/create-checkout-session",
    response_model=CheckOutSessionResponse,
    tags=["checkout"]
)
async def create_checkout_session(
        request: CheckOutSessionRequest,
        current_user: User = Depends(current_active_user)
):
    """
    Create a Stripe checkout session for the given products.
    Returns the session id for the redirect and the computed total.
    """
    return await CheckOutService.create_checkout_session(current_user.id, request.products)


@router.post(
    "/payments/checkout-success",
    response_model=CheckOutSuccessResponse,
    tags=["checkout"]
)
async def checkout_success(
        request: CheckOutSuccessRequest,
        current_user: User = Depends(current_active_user)
):
    """
    Confirm a checkout session after the Stripe redirect.
    An order is recorded only when Stripe reports the session as paid.
    """
    return await CheckOutService.handle_checkout_success(current_user.id, request.session_id)


@router.get(
    "/orders",
    response_model=List[OrderRead],
    tags=["checkout", "orders"]
)
async def get_user_orders(
        limit: int = Query(50, ge=1, le=100),
        skip: int = Query(0, ge=0),
        current_user: User = Depends(current_active_user)
):
    """Get all orders for the current user"""
    return await CheckOutService.get_user_orders(
        user_id=current_user.id,
        limit=limit,
        skip=skip
    )


@router.get(
    "/orders/{order_id}",
    response_model=OrderRead,
    tags=["checkout", "orders"]
)
async def get_order(
        order_id: PydanticObjectId,
        current_user: User = Depends(current_active_user)
):
    """Get a specific order by ID"""
    return await CheckOutService.get_order_for_user(order_id, current_user.id)
