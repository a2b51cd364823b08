import logging
from typing import Dict, List, Any

import stripe

from storefront.config.settings import settings
from storefront.commonUtils.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class StripeCheckoutService:

    def __init__(self):
        """
        Initializes the Stripe API key using the platform's secret key.
        This key is used for all API calls on behalf of the platform.
        """
        self.api_key = settings.stripe_keys["secret_key"]
        self.currency = settings.stripe_keys["currency"]
        stripe.api_key = self.api_key

    # ------------------------------------------------------------------------------------------------------#
    #                                       create_checkout_session                                         #
    # ------------------------------------------------------------------------------------------------------#

    def build_line_item(self, name: str, image: str, unit_amount: int, quantity: int) -> Dict[str, Any]:
        product_data: Dict[str, Any] = {"name": name}
        if image:
            product_data["images"] = [image]

        return {
            "price_data": {
                "currency": self.currency,
                "product_data": product_data,
                "unit_amount": unit_amount,
            },
            "quantity": quantity,
        }

    def create_checkout_session(
            self,
            line_items: List[Dict[str, Any]],
            metadata: Dict[str, str],
            success_url: str,
            cancel_url: str,
    ):
        """
        Creates a one-off card payment Checkout Session.
        The metadata travels with the session and comes back on retrieve.
        """
        try:
            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                line_items=line_items,
                mode="payment",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe Error creating checkout session: {e}", exc_info=True)
            raise UpstreamError(f"Stripe error: {str(e)}")

        if not getattr(session, "id", None):
            raise UpstreamError("Stripe returned a checkout session without an id")

        return session

    # ------------------------------------------------------------------------------------------------------#
    #                                      retrieve_checkout_session                                        #
    # ------------------------------------------------------------------------------------------------------#

    def retrieve_checkout_session(self, session_id: str):
        try:
            return stripe.checkout.Session.retrieve(session_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe Error retrieving checkout session {session_id}: {e}", exc_info=True)
            raise UpstreamError(f"Stripe error: {str(e)}")
