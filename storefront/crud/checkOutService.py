import json
import logging
from typing import List, Dict, Any, Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from storefront.config.settings import settings
from storefront.commonUtils.enumUtils import CheckoutStatus, StripePaymentStatus, StripeSessionStatus
from storefront.commonUtils.exceptions import (
    BadRequestError, NotFoundError, PermissionDeniedError, UpstreamError
)
from storefront.commonUtils.moneyUtil import to_minor_units, from_minor_units
from storefront.crud.stripeCheckoutService import StripeCheckoutService
from storefront.models.orderModel import Order, OrderLine
from storefront.schemas.checkOutSchema import CheckOutProduct

logger = logging.getLogger(__name__)

# Stripe rejects metadata values longer than this
STRIPE_METADATA_VALUE_LIMIT = 500
# Stripe allows 50 metadata keys per session; one is taken by userId
MAX_PRODUCT_METADATA_KEYS = 49
PRODUCTS_METADATA_PREFIX = "products_"

stripe_service = StripeCheckoutService()


class CheckOutService:
    """Service layer for checkout operations with Stripe Checkout"""

    @staticmethod
    def success_url() -> str:
        # {CHECKOUT_SESSION_ID} is substituted by Stripe on redirect
        return f"{settings.CLIENT_URL}/purchase-success?session_id={{CHECKOUT_SESSION_ID}}"

    @staticmethod
    def cancel_url() -> str:
        return f"{settings.CLIENT_URL}/purchase-cancel"

    @staticmethod
    def serialize_products(products: List[CheckOutProduct]) -> Dict[str, str]:
        """
        Compact copy of (id, quantity, price) per line, carried in session metadata.

        Stripe caps each metadata value at 500 characters, so the JSON is split
        across `products_0`, `products_1`, ... and joined back on confirmation.
        """
        serialized = json.dumps(
            [{"id": str(p.reference), "quantity": p.quantity, "price": p.price} for p in products],
            separators=(",", ":"),
        )
        chunks = [
            serialized[i:i + STRIPE_METADATA_VALUE_LIMIT]
            for i in range(0, len(serialized), STRIPE_METADATA_VALUE_LIMIT)
        ]
        if len(chunks) > MAX_PRODUCT_METADATA_KEYS:
            raise BadRequestError(
                "Too many products for a single checkout session",
                detail={"maxKeys": MAX_PRODUCT_METADATA_KEYS, "keysNeeded": len(chunks)}
            )
        return {f"{PRODUCTS_METADATA_PREFIX}{i}": chunk for i, chunk in enumerate(chunks)}

    @staticmethod
    def deserialize_products(metadata: Dict[str, Any]) -> List[OrderLine]:
        chunks = []
        while f"{PRODUCTS_METADATA_PREFIX}{len(chunks)}" in metadata:
            chunks.append(metadata[f"{PRODUCTS_METADATA_PREFIX}{len(chunks)}"])

        try:
            return [
                OrderLine(product=PydanticObjectId(p["id"]), quantity=p["quantity"], price=p["price"])
                for p in json.loads("".join(chunks))
            ]
        except (TypeError, KeyError, ValueError, InvalidId) as e:
            raise UpstreamError(f"Checkout session metadata is malformed: {e}")

    @staticmethod
    async def create_checkout_session(
            user_id: PydanticObjectId,
            products: Optional[List[CheckOutProduct]]
    ) -> Dict[str, Any]:
        """
        Create a Stripe Checkout Session for the products the browser sends.

        Nothing is stored locally: the user id and the purchased lines ride
        along in the session metadata until the payment is confirmed.

        Returns:
            Dict with the session id and the total in major units
        """
        if not products:
            raise BadRequestError("Invalid or empty products array")

        line_items = []
        total_amount = 0  # minor units

        for product in products:
            unit_amount = to_minor_units(product.price)
            total_amount += unit_amount * product.quantity
            line_items.append(
                stripe_service.build_line_item(
                    name=product.name,
                    image=product.image,
                    unit_amount=unit_amount,
                    quantity=product.quantity,
                )
            )

        product_metadata = CheckOutService.serialize_products(products)

        session = stripe_service.create_checkout_session(
            line_items=line_items,
            metadata={
                "userId": str(user_id),
                **product_metadata,
            },
            success_url=CheckOutService.success_url(),
            cancel_url=CheckOutService.cancel_url(),
        )

        logger.info(
            f"Checkout session {session.id} created for user {user_id}: "
            f"{len(line_items)} line(s), {total_amount} minor units"
        )

        return {
            "sessionId": session.id,
            "totalAmount": from_minor_units(total_amount),
        }

    @staticmethod
    def already_recorded(order: Order, user_id: PydanticObjectId) -> Dict[str, Any]:
        if order.user_id != user_id:
            raise PermissionDeniedError("This checkout session belongs to another user")
        return {
            "success": True,
            "status": CheckoutStatus.PAID,
            "message": "Payment already confirmed, order exists.",
            "orderId": order.id,
        }

    @staticmethod
    async def handle_checkout_success(user_id: PydanticObjectId, session_id: str) -> Dict[str, Any]:
        """
        Confirm a checkout session and record its Order when Stripe reports it paid.

        Unpaid sessions produce an explicit pending/failed answer and no Order.
        Confirming the same session twice returns the order recorded the first time.
        """
        existing = await Order.find_one(Order.stripe_session_id == session_id)
        if existing:
            return CheckOutService.already_recorded(existing, user_id)

        session = stripe_service.retrieve_checkout_session(session_id)

        metadata = getattr(session, "metadata", None) or {}
        if metadata.get("userId") != str(user_id):
            raise PermissionDeniedError("This checkout session belongs to another user")

        payment_status = getattr(session, "payment_status", None)
        if payment_status != StripePaymentStatus.PAID.value:
            session_status = getattr(session, "status", None)
            status = (
                CheckoutStatus.FAILED
                if session_status == StripeSessionStatus.EXPIRED.value
                else CheckoutStatus.PENDING
            )
            logger.warning(
                f"Checkout session {session_id} not paid "
                f"(payment_status={payment_status}, status={session_status}); no order created"
            )
            return {
                "success": False,
                "status": status,
                "message": (
                    "Checkout session expired without payment."
                    if status == CheckoutStatus.FAILED
                    else "Payment has not been completed yet."
                ),
                "orderId": None,
            }

        amount_total = getattr(session, "amount_total", None)
        if amount_total is None:
            raise UpstreamError("Stripe session is paid but carries no amount_total")

        order = Order(
            user_id=user_id,
            products=CheckOutService.deserialize_products(metadata),
            total_amount=from_minor_units(amount_total),
            stripe_session_id=session_id,
        )

        try:
            await order.insert()
        except DuplicateKeyError:
            # A concurrent confirmation recorded it first
            existing = await Order.find_one(Order.stripe_session_id == session_id)
            return CheckOutService.already_recorded(existing, user_id)

        logger.info(
            f"Order {order.id} created for user {user_id} from session {session_id}, "
            f"total {order.total_amount}"
        )

        return {
            "success": True,
            "status": CheckoutStatus.PAID,
            "message": "Payment successful, order created.",
            "orderId": order.id,
        }

    @staticmethod
    async def get_order_for_user(order_id: PydanticObjectId, user_id: PydanticObjectId) -> Order:
        order = await Order.get(order_id)
        if not order:
            raise NotFoundError("Order not found")

        # Ensure user owns this order
        if order.user_id != user_id:
            raise PermissionDeniedError("Not authorized to view this order")

        return order

    @staticmethod
    async def get_user_orders(
            user_id: PydanticObjectId,
            limit: int = 50,
            skip: int = 0
    ) -> List[Order]:
        """Get all orders for a user"""
        orders = await Order.find(
            Order.user_id == user_id
        ).sort(-Order.created_at).skip(skip).limit(limit).to_list()
        return orders
