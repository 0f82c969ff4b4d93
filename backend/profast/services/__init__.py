# Services package init
"""
ProFast Parcel API — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the gateways (MongoDB, Stripe).
How:   Stateless service objects; every call receives the gateway it uses,
       so tests hand in doubles without patching module globals.

Service Inventory:
    - ParcelService:        list / get / create / delete parcels
    - UserService:          search, role lookup, idempotent signup, role changes
    - RiderService:         applications, status transitions, rider activation
    - PaymentService:       payment recording, payment history, payment intents
    - TrackingService:      append-only tracking events
    - StripePaymentGateway: PaymentIntent creation against Stripe
"""
