"""
ProFast Parcel API — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, the route-policy dependency,
       exception handlers and routers; lifespan() builds the gateways.
Who:   uvicorn (`uvicorn profast.main:app`) or `python -m profast.main`.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware:  Request ID → Access Log → GZip → CORS  │
    │               → Unhandled Error                      │
    │                                                      │
    │  App-wide dependency: enforce_route_policy           │
    │                                                      │
    │  Routers: parcels │ users │ riders │ tracking │      │
    │           payments │ health                          │
    │                                                      │
    │  app.state: gateway (MongoDB) │ identity_verifier    │
    │             (Firebase) │ payment_gateway (Stripe)    │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Report missing configuration (logged, not fatal)
    3. Connect to MongoDB (on failure, routes answer 503 until a retried ping succeeds)
    4. Initialize Firebase Admin and the Stripe client when configured

    Shutdown:
    1. Close the MongoDB client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from profast import __version__
from profast.config import Settings, settings as default_settings
from profast.database import MongoGateway
from profast.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    NotFoundError,
    PaymentGatewayError,
    ProFastError,
    ServiceUnavailableError,
    ValidationError,
)
from profast.middleware.errors import UnhandledErrorMiddleware, error_response
from profast.middleware.logging import RequestLoggingMiddleware
from profast.middleware.request_id import RequestIDMiddleware, request_id_var
from profast.routes import health, parcels, payments, riders, tracking, users
from profast.security import FirebaseIdentityVerifier, enforce_route_policy
from profast.services.payment_gateway import StripePaymentGateway

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure the root logger once, before any other initialization.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every operation at DEBUG/INFO
    for noisy in ("uvicorn.access", "pymongo", "httpx", "httpcore", "stripe"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

def _build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # ── Startup ───────────────────────────────────────────────────────
        setup_logging(settings.log_level)
        logger.info("=" * 60)
        logger.info("ProFast Parcel API starting up...")

        try:
            settings.validate_required_for_production()
        except ValueError as e:
            logger.error("Configuration error: %s", str(e))

        gateway = MongoGateway.from_settings(settings)
        await gateway.connect()
        app.state.gateway = gateway

        try:
            app.state.identity_verifier = FirebaseIdentityVerifier.from_settings(settings)
            logger.info("Firebase identity verifier initialized")
        except (ValueError, OSError) as e:
            app.state.identity_verifier = None
            logger.error("Firebase initialization failed, authenticated routes disabled: %s", e)

        if settings.payment_gateway_key:
            app.state.payment_gateway = StripePaymentGateway.from_settings(settings)
        else:
            app.state.payment_gateway = None
            logger.error("PAYMENT_GATEWAY_KEY missing, payment intents disabled")

        logger.info("Server ready on port %d", settings.port)
        logger.info("=" * 60)

        yield

        # ── Shutdown ──────────────────────────────────────────────────────
        logger.info("ProFast Parcel API shutting down...")
        await gateway.close()
        logger.info("Shutdown complete.")

    return lifespan


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error body.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        AuthenticationError                      → 401
        AuthorizationError                       → 403
        NotFoundError                            → 404
        DatabaseError                            → 500 (generic message)
        PaymentGatewayError                      → 500 (gateway message)
        ServiceUnavailableError                  → 503
        ProFastError (base)                      → 500 (generic message)
        any other Exception                      → 500, converted by UnhandledErrorMiddleware

    Internal details (driver errors, stack traces) are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return error_response(
            400, "validation_error", "Request validation failed", details={"errors": errors}
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return error_response(
            401, "unauthorized", exc.message, headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        return error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(PaymentGatewayError)
    async def handle_payment_gateway_error(request: Request, exc: PaymentGatewayError):
        logger.error(
            "[%s] Payment gateway error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return error_response(500, "payment_gateway_error", exc.message)

    @app.exception_handler(ServiceUnavailableError)
    async def handle_service_unavailable(request: Request, exc: ServiceUnavailableError):
        logger.error("[%s] %s unavailable", request_id_var.get(""), exc.service)
        return error_response(503, "service_unavailable", exc.message)

    @app.exception_handler(ProFastError)
    async def handle_app_error(request: Request, exc: ProFastError):
        logger.error(
            "[%s] Unhandled application error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return error_response(500, "server_error", "An internal error occurred. Please try again later.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application.

    Tests call this directly and populate `app.state` with doubles; the
    lifespan (and therefore real MongoDB/Firebase/Stripe clients) only runs
    under a server.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="ProFast Parcel API",
        description=(
            "Parcel-delivery marketplace backend: parcels, users, rider applications, "
            "payments and tracking events."
        ),
        version=__version__,
        lifespan=_build_lifespan(settings),
        dependencies=[Depends(enforce_route_policy)],
    )

    # ── Register Middleware (last added executes first) ───────────────────
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(parcels.router)
    app.include_router(users.router)
    app.include_router(riders.router)
    app.include_router(tracking.router)
    app.include_router(payments.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
