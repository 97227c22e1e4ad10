import logging
from typing import Any, Dict, List, Optional

import stripe

from app.models.cart import CheckoutSession, LineItem

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    pass


def to_stripe_line_item(item: LineItem, currency: str) -> Dict[str, Any]:
    return {
        "price_data": {
            "currency": currency,
            "product_data": {"name": item.name, "images": list(item.images)},
            "unit_amount": item.unit_amount,
        },
        "quantity": item.quantity,
    }


class StripePaymentService:
    """
    Hosted Stripe Checkout sessions.
    Returns: CheckoutSession(url, id) exactly as Stripe reports them.
    """

    def __init__(self, api_key: Optional[str], currency: str = "usd"):
        self.api_key = api_key
        self.currency = currency
        if not api_key:
            logger.error("STRIPE_SECRET_KEY is missing; checkout sessions will fail")

    def create_session(
        self,
        line_items: List[LineItem],
        customer_email: Optional[str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        if not self.api_key:
            raise PaymentError("Payment processor is not configured")

        params: Dict[str, Any] = {
            "payment_method_types": ["card"],
            "line_items": [to_stripe_line_item(it, self.currency) for it in line_items],
            "mode": "payment",
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            session = stripe.checkout.Session.create(api_key=self.api_key, **params)
        except stripe.StripeError as e:
            raise PaymentError(str(e) or "Stripe request failed") from e
        return CheckoutSession(url=session.url, id=session.id)
