# Routes package init
"""
ProFast Parcel API — API Routes Package
=========================================

Route Inventory:
    - parcels.py:   GET/POST /parcels, GET/DELETE /parcels/{id}
    - users.py:     GET /users/search, GET /users/{email}/role,
                    POST /users, PATCH /users/{id}/role
    - riders.py:    POST /riders, GET /riders/pending, GET /riders/active,
                    PATCH /riders/{id}/status
    - tracking.py:  POST /tracking
    - payments.py:  GET/POST /payments, POST /create-payment-intent
    - health.py:    GET /, GET /health

Routes are thin: extract the request data, call a service, pick the status
code. Authentication is applied by the route policy table in security.py,
and errors are translated by the handlers in main.py.
"""
