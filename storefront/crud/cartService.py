import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Dict, Iterable, List, Any
from weakref import WeakValueDictionary

from beanie import PydanticObjectId

from storefront.commonUtils.exceptions import NotFoundError, InsufficientStockError, BadRequestError
from storefront.commonUtils.moneyUtil import to_minor_units, from_minor_units
from storefront.models.cartModel import CartItem, DEFAULT_SIZE
from storefront.models.productModel import Product
from storefront.models.userModel import User

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT_NAME = "Unknown Product"


class CartService:
    """Service layer for cart operations"""

    # One lock per user cart; entries disappear once no request holds them
    _cart_locks: "WeakValueDictionary[PydanticObjectId, asyncio.Lock]" = WeakValueDictionary()

    @staticmethod
    async def get_user(user_id: PydanticObjectId) -> User:
        user = await User.get(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    @asynccontextmanager
    async def locked_cart(user_id: PydanticObjectId) -> AsyncIterator[User]:
        """
        Serialise cart mutations for one user.

        The user document is re-read after the lock is taken, so the stock
        check and the write that follows it see the latest cart.
        """
        lock = CartService._cart_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            CartService._cart_locks[user_id] = lock

        async with lock:
            yield await CartService.get_user(user_id)

    @staticmethod
    async def get_products_map(product_ids: Iterable[PydanticObjectId]) -> Dict[PydanticObjectId, Product]:
        """Fetch the products referenced by a cart in one query"""
        ids = list(set(product_ids))
        if not ids:
            return {}
        products = await Product.find({"_id": {"$in": ids}}).to_list()
        return {p.id: p for p in products}

    @staticmethod
    def find_item(user: User, product_id: PydanticObjectId, size: str):
        return next(
            (item for item in user.cart_items if item.matches(product_id, size)),
            None
        )

    @staticmethod
    async def prune_missing_products(user: User) -> int:
        """Drop entries whose product has been deleted; the caller saves"""
        products_map = await CartService.get_products_map(item.product_id for item in user.cart_items)
        kept = [item for item in user.cart_items if item.product_id in products_map]
        dropped = len(user.cart_items) - len(kept)
        if dropped:
            logger.info(f"Pruning {dropped} stale cart entr{'y' if dropped == 1 else 'ies'} for user {user.id}")
            user.cart_items = kept
        return dropped

    @staticmethod
    async def save_cart(user: User) -> None:
        user.updated_at = datetime.utcnow()
        await user.save()

    @staticmethod
    async def get_cart_items(user_id: PydanticObjectId) -> List[Dict[str, Any]]:
        """Cart entries joined with current product details; deleted products are skipped"""
        user = await CartService.get_user(user_id)
        if not user.cart_items:
            return []

        products_map = await CartService.get_products_map(item.product_id for item in user.cart_items)

        items = []
        for item in user.cart_items:
            product = products_map.get(item.product_id)
            if not product:
                continue

            items.append({
                "_id": product.id,
                "name": product.name,
                "price": product.price,
                "image": product.image,
                "stock": product.stock,
                "selectedSize": item.size,
                "quantity": item.quantity,
                "inStock": product.stock >= item.quantity,
            })

        return items

    @staticmethod
    def compute_cart_totals(items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Derived totals for a list of joined cart items. Pure, no I/O.

        Unit prices are rounded to minor units before summing, the same way
        checkout prices each line, so the summary matches the amount charged.
        """
        subtotal = sum(to_minor_units(item["price"]) * item["quantity"] for item in items)
        total_items = sum(item["quantity"] for item in items)
        return {
            "totalItems": total_items,
            "subtotal": from_minor_units(subtotal),
            "total": from_minor_units(subtotal),
        }

    @staticmethod
    async def get_cart_summary(user_id: PydanticObjectId) -> Dict[str, Any]:
        items = await CartService.get_cart_items(user_id)
        return {"items": items, **CartService.compute_cart_totals(items)}

    @staticmethod
    async def add_item(
            user_id: PydanticObjectId,
            product_id: PydanticObjectId,
            size: str = DEFAULT_SIZE,
            quantity: int = 1
    ) -> User:
        """Add item to cart, or merge into the existing (product, size) entry"""
        if quantity < 1:
            raise BadRequestError("Quantity must be at least 1")

        async with CartService.locked_cart(user_id) as user:
            product = await Product.get(product_id)
            if not product:
                raise NotFoundError("Product not found")

            if product.stock < quantity:
                logger.warning(
                    f"Add rejected for user {user_id}: {product_id} ({size}) "
                    f"requested {quantity}, stock {product.stock}"
                )
                raise InsufficientStockError(
                    "Not enough stock available",
                    product_id=product_id, size=size,
                    requested=quantity, available=product.stock
                )

            await CartService.prune_missing_products(user)

            existing_item = CartService.find_item(user, product_id, size)

            if existing_item:
                new_quantity = existing_item.quantity + quantity
                if product.stock < new_quantity:
                    logger.warning(
                        f"Merge rejected for user {user_id}: {product_id} ({size}) "
                        f"would reach {new_quantity}, stock {product.stock}"
                    )
                    raise InsufficientStockError(
                        "Adding this quantity exceeds available stock",
                        product_id=product_id, size=size,
                        requested=new_quantity, available=product.stock
                    )
                existing_item.quantity = new_quantity
            else:
                user.cart_items.append(CartItem(product_id=product_id, size=size, quantity=quantity))

            await CartService.save_cart(user)
            logger.info(f"User {user_id} added {quantity} x {product_id} ({size}) to cart")
            return user

    @staticmethod
    async def remove_item(
            user_id: PydanticObjectId,
            product_id: PydanticObjectId,
            size: str = DEFAULT_SIZE
    ) -> User:
        """Remove an entry from the cart; a missing entry is not an error"""
        async with CartService.locked_cart(user_id) as user:
            kept = [item for item in user.cart_items if not item.matches(product_id, size)]
            if len(kept) != len(user.cart_items):
                user.cart_items = kept
                await CartService.save_cart(user)
            return user

    @staticmethod
    async def update_item_quantity(
            user_id: PydanticObjectId,
            product_id: PydanticObjectId,
            quantity: int,
            size: str = DEFAULT_SIZE
    ) -> User:
        """Overwrite the quantity of an entry; quantity <= 0 removes it"""
        async with CartService.locked_cart(user_id) as user:
            item = CartService.find_item(user, product_id, size)
            if not item:
                raise NotFoundError("Product not found in cart")

            if quantity <= 0:
                user.cart_items = [i for i in user.cart_items if i is not item]
                await CartService.save_cart(user)
                return user

            product = await Product.get(product_id)
            if not product:
                raise NotFoundError("Product not found")

            if product.stock < quantity:
                raise InsufficientStockError(
                    "Not enough stock available",
                    product_id=product_id, size=size,
                    requested=quantity, available=product.stock
                )

            item.quantity = quantity
            await CartService.prune_missing_products(user)
            await CartService.save_cart(user)
            return user

    @staticmethod
    async def clear_cart(user_id: PydanticObjectId) -> User:
        """Clear all items from cart"""
        async with CartService.locked_cart(user_id) as user:
            user.cart_items = []
            await CartService.save_cart(user)
            return user

    @staticmethod
    async def validate_stock(user_id: PydanticObjectId) -> Dict[str, Any]:
        """
        Re-check every cart entry against current stock without touching the cart.

        Entries whose product no longer exists are reported with zero stock.
        """
        user = await CartService.get_user(user_id)
        if not user.cart_items:
            return {"valid": True}

        products_map = await CartService.get_products_map(item.product_id for item in user.cart_items)

        invalid_items = []
        for item in user.cart_items:
            product = products_map.get(item.product_id)
            available = product.stock if product else 0
            if available < item.quantity:
                invalid_items.append({
                    "productId": item.product_id,
                    "name": product.name if product else UNKNOWN_PRODUCT_NAME,
                    "requested": item.quantity,
                    "available": available,
                    "size": item.size,
                })

        if invalid_items:
            return {"valid": False, "invalidItems": invalid_items}

        return {"valid": True}
