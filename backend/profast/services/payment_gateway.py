"""
ProFast Parcel API — Payment Gateway Client (Stripe)
======================================================

What:  Creates Stripe PaymentIntents and returns their client secret.
How:   `stripe.StripeClient` with the httpx transport, called through the
       async service methods so the request never blocks the event loop.
Who:   Built once in the lifespan; used by POST /create-payment-intent.

The client-side checkout confirms the intent with the returned secret and
then calls POST /payments with the resulting transaction id.
"""

import logging
from typing import Any, Optional

import stripe
from fastapi import Request

from profast.config import Settings
from profast.exceptions import PaymentGatewayError, ServiceUnavailableError

logger = logging.getLogger(__name__)


class StripePaymentGateway:
    """Card-only payment intents in a single configured currency."""

    def __init__(self, api_key: str, currency: str = "usd", client: Optional[Any] = None):
        self.currency = currency
        self._client = client or stripe.StripeClient(api_key, http_client=stripe.HTTPXClient())

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripePaymentGateway":
        return cls(settings.payment_gateway_key, currency=settings.payment_currency)

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        """
        Create a PaymentIntent for `amount_in_cents` and return its client secret.

        Raises:
            PaymentGatewayError: Stripe rejected the request or was unreachable.
                The message is Stripe's own, safe to show at checkout.
        """
        try:
            intent = await self._client.payment_intents.create_async(
                params={
                    "amount": amount_in_cents,
                    "currency": self.currency,
                    "payment_method_types": ["card"],
                }
            )
        except stripe.StripeError as exc:
            message = exc.user_message or str(exc) or "Payment gateway request failed"
            logger.error(
                "Stripe PaymentIntent creation failed (amount=%d %s): %s",
                amount_in_cents,
                self.currency,
                exc,
            )
            raise PaymentGatewayError(
                message=message,
                context={"amount": amount_in_cents, "stripe_code": getattr(exc, "code", None)},
            ) from exc

        logger.info("Created PaymentIntent %s for %d %s", intent.id, amount_in_cents, self.currency)
        return intent.client_secret


def get_payment_gateway(request: Request) -> StripePaymentGateway:
    gateway = getattr(request.app.state, "payment_gateway", None)
    if gateway is None:
        raise ServiceUnavailableError(service="payment gateway")
    return gateway
