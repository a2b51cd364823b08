from fastapi import APIRouter, Depends, status
from beanie import PydanticObjectId
from typing import List

from storefront.models.userModel import User
from storefront.schemas.productSchema import ProductCreate, ProductUpdate, ProductRead
from storefront.schemas.cartSchema import MessageResponse
from storefront.crud.userService import current_admin_user
from storefront.crud.productService import ProductService

router = APIRouter()


# ============= PRODUCTS ROUTES =============
@router.get("/products", response_model=List[ProductRead], tags=["products"])
async def list_products(admin: User = Depends(current_admin_user)):
    """Get every product (admin only)"""
    return await ProductService.list_products()


@router.get("/products/featured", response_model=List[ProductRead], tags=["products"])
async def list_featured_products():
    return await ProductService.list_featured_products()


@router.get("/products/search", response_model=List[ProductRead], tags=["products"])
async def search_products(q: str = ""):
    """Search products by name, description or category"""
    return await ProductService.search_products(q)


@router.get("/products/category/{category}", response_model=List[ProductRead], tags=["products"])
async def list_products_by_category(category: str):
    return await ProductService.list_products_by_category(category)


@router.get("/products/{product_id}", response_model=ProductRead, tags=["products"])
async def get_product(product_id: PydanticObjectId):
    """Get a specific product"""
    return await ProductService.get_product(product_id)


@router.post("/products", response_model=ProductRead, status_code=status.HTTP_201_CREATED, tags=["products"])
async def create_product(
        product_data: ProductCreate,
        admin: User = Depends(current_admin_user)
):
    """Create a new product (admin only)"""
    return await ProductService.create_product(product_data)


@router.patch("/products/{product_id}", response_model=ProductRead, tags=["products"])
async def update_product(
        product_id: PydanticObjectId,
        product_data: ProductUpdate,
        admin: User = Depends(current_admin_user)
):
    """Update a product (admin only)"""
    return await ProductService.update_product(product_id, product_data)


@router.patch("/products/{product_id}/toggle-featured", response_model=ProductRead, tags=["products"])
async def toggle_featured_product(
        product_id: PydanticObjectId,
        admin: User = Depends(current_admin_user)
):
    return await ProductService.toggle_featured(product_id)


@router.delete("/products/{product_id}", response_model=MessageResponse, tags=["products"])
async def delete_product(
        product_id: PydanticObjectId,
        admin: User = Depends(current_admin_user)
):
    """Delete a product (admin only)"""
    await ProductService.delete_product(product_id)
    return {"message": "Product deleted successfully"}
