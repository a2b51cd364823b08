import logging
import re
from datetime import datetime
from typing import List

from beanie import PydanticObjectId

from storefront.commonUtils.exceptions import NotFoundError
from storefront.models.productModel import Product
from storefront.schemas.productSchema import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """Service layer for product operations"""

    @staticmethod
    async def create_product(product_data: ProductCreate) -> Product:
        product = Product(**product_data.model_dump())
        await product.insert()
        logger.info(f"Product {product.id} ({product.name}) created with stock {product.stock}")
        return product

    @staticmethod
    async def list_products() -> List[Product]:
        return await Product.find_all().sort(("created_at", -1)).to_list()

    @staticmethod
    async def list_featured_products() -> List[Product]:
        return await Product.find({"is_featured": True}).sort(("created_at", -1)).to_list()

    @staticmethod
    async def list_products_by_category(category: str) -> List[Product]:
        """Case-insensitive exact category match"""
        pattern = f"^{re.escape(category.strip())}$"
        return await (
            Product.find({"category": {"$regex": pattern, "$options": "i"}})
            .sort(("created_at", -1))
            .to_list()
        )

    @staticmethod
    async def search_products(query: str) -> List[Product]:
        """Substring search over name, description and category"""
        query = (query or "").strip()
        if not query:
            return []

        regex = {"$regex": re.escape(query), "$options": "i"}
        return await Product.find(
            {"$or": [{"name": regex}, {"description": regex}, {"category": regex}]}
        ).to_list()

    @staticmethod
    async def get_product(product_id: PydanticObjectId) -> Product:
        product = await Product.get(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    @staticmethod
    async def update_product(product_id: PydanticObjectId, product_data: ProductUpdate) -> Product:
        product = await ProductService.get_product(product_id)

        update_data = product_data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in update_data.items():
            setattr(product, field, value)

        product.updated_at = datetime.utcnow()
        await product.save()
        return product

    @staticmethod
    async def toggle_featured(product_id: PydanticObjectId) -> Product:
        product = await ProductService.get_product(product_id)
        product.is_featured = not product.is_featured
        product.updated_at = datetime.utcnow()
        await product.save()
        return product

    @staticmethod
    async def delete_product(product_id: PydanticObjectId) -> None:
        """Delete a product; cart entries pointing at it become inert"""
        product = await ProductService.get_product(product_id)
        await product.delete()
        logger.info(f"Product {product_id} deleted")
