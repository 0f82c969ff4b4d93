# Middleware package init
"""
ProFast Parcel API — Middleware Package
=========================================

Middleware Chain (request order):
    Request → [Request ID] → [Access Logging] → [GZip] → [CORS]
            → [Unhandled Error] → Route

    1. Request ID: correlation id for every log line of the request
    2. Access Logging: method, path, status and duration, tagged with the id
    3. GZip / CORS: Starlette/FastAPI built-ins configured in main.py
    4. Unhandled Error: 500 body for exceptions no handler claimed, inside
       the layers above so it keeps the request id and CORS headers

Authentication is not middleware: it is the route-policy dependency in
security.py, which needs the matched route to pick a policy.
"""
