from fastapi import APIRouter, Depends, status
from beanie import PydanticObjectId
from typing import List

from storefront.models.userModel import User
from storefront.schemas.cartSchema import (
    CartAddItemRequest, CartRemoveItemRequest, CartUpdateItemRequest,
    CartItemRead, CartSummaryRead, StockValidationRead, MessageResponse,
)
from storefront.crud.userService import current_active_user
from storefront.crud.cartService import CartService

router = APIRouter()


# ============= CART ROUTES =============
@router.get("/cart", response_model=List[CartItemRead], tags=["cart"])
async def get_cart(current_user: User = Depends(current_active_user)):
    """Get current user's cart items joined with product details"""
    return await CartService.get_cart_items(current_user.id)


@router.get("/cart/summary", response_model=CartSummaryRead, tags=["cart"])
async def get_cart_summary(current_user: User = Depends(current_active_user)):
    """Cart items plus derived totals"""
    return await CartService.get_cart_summary(current_user.id)


@router.get(
    "/cart/validate-stock",
    response_model=StockValidationRead,
    response_model_exclude_none=True,
    tags=["cart"]
)
async def validate_cart_stock(current_user: User = Depends(current_active_user)):
    """Check every cart entry against current stock before checkout"""
    return await CartService.validate_stock(current_user.id)


@router.post("/cart", response_model=MessageResponse, status_code=status.HTTP_201_CREATED, tags=["cart"])
async def add_to_cart(
        item: CartAddItemRequest,
        current_user: User = Depends(current_active_user)
):
    """Add item to cart"""
    await CartService.add_item(
        current_user.id,
        item.product_id,
        size=item.size,
        quantity=item.quantity
    )
    return {"message": "Item added to cart"}


@router.delete("/cart", response_model=MessageResponse, tags=["cart"])
async def remove_from_cart(
        item: CartRemoveItemRequest,
        current_user: User = Depends(current_active_user)
):
    """Remove item from cart"""
    await CartService.remove_item(current_user.id, item.product_id, size=item.size)
    return {"message": "Item removed from cart"}


@router.delete("/cart/clear", response_model=MessageResponse, tags=["cart"])
async def clear_cart(current_user: User = Depends(current_active_user)):
    """Clear entire cart"""
    await CartService.clear_cart(current_user.id)
    return {"message": "Cart cleared successfully"}


@router.put("/cart/{product_id}", response_model=MessageResponse, tags=["cart"])
async def update_cart_item(
        product_id: PydanticObjectId,
        update: CartUpdateItemRequest,
        current_user: User = Depends(current_active_user)
):
    """Update quantity of item in cart"""
    await CartService.update_item_quantity(
        current_user.id,
        product_id,
        update.quantity,
        size=update.size
    )
    return {"message": "Cart updated successfully"}
