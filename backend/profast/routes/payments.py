"""
ProFast Parcel API — Payment Route Handlers
=============================================

What:  Payment history, payment recording and Stripe payment intents.

Checkout sequence (client side):
    1. POST /create-payment-intent {amountInCents} → {clientSecret}
    2. Stripe.js confirms the card payment with the client secret
    3. POST /payments {parcelId, email, amount, paymentMethod, transactionId}
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from profast.database import MongoGateway, get_gateway
from profast.schemas.common import ErrorResponse
from profast.schemas.payment import (
    PaymentCreate,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PaymentRecorded,
)
from profast.security import Identity, get_identity
from profast.services.payment_gateway import StripePaymentGateway, get_payment_gateway
from profast.services.payment_service import payment_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])


@router.get(
    "/payments",
    response_model=List[Dict[str, Any]],
    responses={
        401: {"description": "Missing bearer token", "model": ErrorResponse},
        403: {"description": "Invalid token or another user's email", "model": ErrorResponse},
    },
    summary="Payment history of the caller",
)
async def list_payments(
    email: Optional[str] = Query(default=None, description="Must equal the caller's email"),
    identity: Identity = Depends(get_identity),
    gateway: MongoGateway = Depends(get_gateway),
) -> List[Dict[str, Any]]:
    """Newest first by `paid_at`."""
    return await payment_service.list_payments(gateway, identity, email)


@router.post(
    "/payments",
    status_code=201,
    response_model=PaymentRecorded,
    responses={
        400: {"description": "Malformed parcel id", "model": ErrorResponse},
        404: {"description": "Parcel not found or already paid", "model": ErrorResponse},
    },
    summary="Record a confirmed payment and mark the parcel paid",
)
async def record_payment(
    payment: PaymentCreate,
    gateway: MongoGateway = Depends(get_gateway),
) -> PaymentRecorded:
    return await payment_service.record_payment(gateway, payment)


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentResponse,
    responses={500: {"description": "Payment gateway error", "model": ErrorResponse}},
    summary="Create a Stripe PaymentIntent",
)
async def create_payment_intent(
    payload: PaymentIntentRequest,
    payment_gateway: StripePaymentGateway = Depends(get_payment_gateway),
) -> PaymentIntentResponse:
    client_secret = await payment_service.create_payment_intent(
        payment_gateway, payload.amount_in_cents
    )
    return PaymentIntentResponse(client_secret=client_secret)
