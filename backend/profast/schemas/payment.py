"""
ProFast Parcel API — Payment Schemas
======================================

Wire format is camelCase (`parcelId`, `transactionId`, `amountInCents`,
`clientSecret`) to match the checkout client; the models accept either
spelling on input.
"""

from pydantic import BaseModel, ConfigDict, Field


class PaymentCreate(BaseModel):
    """Payment confirmed client-side, recorded against its parcel."""

    model_config = ConfigDict(populate_by_name=True)

    parcel_id: str = Field(alias="parcelId", description="Id of the parcel being paid")
    email: str = Field(min_length=1, description="Payer's email")
    amount: float = Field(ge=0, description="Amount in major currency units")
    payment_method: str = Field(alias="paymentMethod", description="e.g. card")
    transaction_id: str = Field(
        alias="transactionId", min_length=1, description="Gateway transaction id"
    )


class PaymentRecorded(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    inserted_id: str = Field(alias="insertedId")


class PaymentIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount_in_cents: int = Field(
        alias="amountInCents", gt=0, description="Amount in the smallest currency unit"
    )


class PaymentIntentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(alias="clientSecret")
