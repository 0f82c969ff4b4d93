"""
ProFast Parcel API — Payment Service
======================================

What:  Records confirmed payments, lists a caller's payment history and
       creates payment intents.

Recording flow (POST /payments):
    ┌────────────────────────┐    ┌─────────────────────────┐
    │ 1. parcel unpaid→paid  │───▶│ 2. insert payment log    │
    │    (conditional update)│    │    paid_at + ISO string  │
    └────────────────────────┘    └─────────────────────────┘
    Step 1 matching nothing (unknown parcel or already paid) → 404, no insert.

    The two writes are independent. If step 2 fails the parcel stays paid
    without a log entry; that state is logged at ERROR level with the parcel
    and transaction ids for reconciliation. Replaying the same request cannot
    double-insert because step 1 no longer matches a paid parcel.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from profast.database import MongoGateway, to_object_id
from profast.exceptions import AuthorizationError, DatabaseError, NotFoundError
from profast.schemas.payment import PaymentCreate, PaymentRecorded
from profast.security import Identity
from profast.services.payment_gateway import StripePaymentGateway

logger = logging.getLogger(__name__)

PAID = "paid"


class PaymentService:

    async def record_payment(self, gateway: MongoGateway, payment: PaymentCreate) -> PaymentRecorded:
        parcel_oid = to_object_id(payment.parcel_id, "parcel id")

        # ── Step 1: mark the parcel paid ──────────────────────────────────
        outcome = await gateway.parcels.update_one(
            {"_id": parcel_oid, "payment_status": {"$ne": PAID}},
            {"$set": {"payment_status": PAID}},
        )
        if outcome.modified_count == 0:
            raise NotFoundError(
                resource="parcel",
                message="Parcel not found or already paid",
                context={"parcel_id": payment.parcel_id},
            )

        # ── Step 2: append the payment log ────────────────────────────────
        paid_at = datetime.now(timezone.utc)
        entry = {
            "parcelId": payment.parcel_id,
            "email": payment.email,
            "amount": payment.amount,
            "paymentMethod": payment.payment_method,
            "transactionId": payment.transaction_id,
            "paid_at_string": paid_at.isoformat(),
            "paid_at": paid_at,
        }
        try:
            inserted = await gateway.payments.insert_one(entry)
        except DatabaseError:
            logger.error(
                "Parcel %s marked paid but payment log insert failed (transaction %s); "
                "needs reconciliation",
                payment.parcel_id,
                payment.transaction_id,
            )
            raise

        logger.info(
            "Payment %s recorded for parcel %s (transaction %s)",
            inserted.inserted_id,
            payment.parcel_id,
            payment.transaction_id,
        )
        return PaymentRecorded(
            message="Payment recorded and parcel marked as paid",
            inserted_id=inserted.inserted_id,
        )

    async def list_payments(
        self,
        gateway: MongoGateway,
        identity: Identity,
        email: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Payment history of the caller, newest first.

        Raises:
            AuthorizationError: `email` names somebody other than the caller.
        """
        if email is None:
            email = identity.email
        if email != identity.email:
            logger.warning("User %s asked for payments of %s", identity.email, email)
            raise AuthorizationError(message="Forbidden access")

        return await gateway.payments.find_many({"email": email}, sort=[("paid_at", -1)])

    async def create_payment_intent(
        self, payment_gateway: StripePaymentGateway, amount_in_cents: int
    ) -> str:
        return await payment_gateway.create_payment_intent(amount_in_cents)


payment_service = PaymentService()
