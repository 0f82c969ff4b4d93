"""
ProFast Parcel API — Application Package
==========================================

What: REST backend for a parcel-delivery marketplace (parcels, users, riders,
      payments, tracking events) on top of MongoDB.

Architecture Note:
    ┌─────────────────────────────────────┐
    │      Routes (API Layer)             │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  ← payment flow, rider activation
    ├─────────────────────────────────────┤
    │      Schemas (API contracts)        │  ← Pydantic request/response models
    ├─────────────────────────────────────┤
    │      Gateways (Persistence, Stripe, │  ← MongoDB, payment intents,
    │      Firebase identity)             │    bearer-token verification
    └─────────────────────────────────────┘

    Gateways are built once in the application lifespan, kept on ``app.state``
    and handed to routes through FastAPI dependencies.
"""

__version__ = "1.0.0"
