from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class CheckoutStatus(str, Enum):
    """
    Outcome of confirming a checkout session, as seen by this service.

    Flow:
    1. Session created → provider owns it, nothing stored locally
    2. PENDING → provider has not reported the session as paid yet
    3. PAID → an Order was (or already had been) recorded
    4. FAILED → the provider session expired without payment
    """
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class StripePaymentStatus(str, Enum):
    # Values of checkout.Session.payment_status
    PAID = "paid"
    UNPAID = "unpaid"
    NO_PAYMENT_REQUIRED = "no_payment_required"


class StripeSessionStatus(str, Enum):
    # Values of checkout.Session.status
    OPEN = "open"
    COMPLETE = "complete"
    EXPIRED = "expired"
