"""
ProFast Parcel API — Identity Verification & Route Policies
=============================================================

What:  Verifies Firebase ID tokens sent as `Authorization: Bearer <token>` and
       decides, per route, whether a verified identity is required.
How:   `ROUTE_POLICIES` declares the policy of every (method, path template)
       pair. `enforce_route_policy` is installed as an app-wide dependency: it
       looks up the matched route, and for AUTHENTICATED routes parses the
       header, verifies the token and stores the Identity on request.state.

Status codes:
    401  header missing, not a Bearer header, or empty token
    403  token rejected (expired, revoked, malformed, bad signature, no email)
    503  identity provider not initialized or its certificates unreachable
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import firebase_admin
from fastapi import Request
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError
from starlette.concurrency import run_in_threadpool

from profast.config import Settings
from profast.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "profast"


@dataclass(frozen=True)
class Identity:
    """Decoded claims of a verified caller."""

    uid: str
    email: str
    claims: Dict[str, Any] = field(default_factory=dict)


# ══════════════════════════════════════════════════════════════════════════
# Identity Verifier
# ══════════════════════════════════════════════════════════════════════════

def parse_bearer_token(header: Optional[str]) -> str:
    """
    Extract the token from an Authorization header value.

    Raises:
        AuthenticationError: header absent, wrong scheme, or empty token.
    """
    if not header:
        raise AuthenticationError(message="Unauthorized access: missing Authorization header")

    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError(message="Unauthorized access: expected a Bearer token")
    return token


class FirebaseIdentityVerifier:
    """
    Verifies Firebase ID tokens against the project's public keys.

    `auth.verify_id_token` is synchronous and may fetch certificates over the
    network, so it runs in Starlette's threadpool.
    """

    def __init__(self, app: Any):
        self._app = app

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseIdentityVerifier":
        """
        Initialize the Firebase Admin app from the service-account file.

        Raises:
            ValueError / OSError: the credentials file is missing or invalid.
        """
        try:
            app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            cert = credentials.Certificate(settings.firebase_credentials_path)
            app = firebase_admin.initialize_app(cert, name=FIREBASE_APP_NAME)
        return cls(app)

    async def verify(self, token: str) -> Identity:
        try:
            claims = await run_in_threadpool(auth.verify_id_token, token, app=self._app)
        except auth.CertificateFetchError as exc:
            logger.error("Could not fetch identity provider certificates: %s", exc)
            raise ServiceUnavailableError(
                service="identity provider", context={"error": str(exc)}
            ) from exc
        except (ValueError, FirebaseError) as exc:
            logger.info("Rejected bearer token: %s", exc)
            raise AuthorizationError(context={"reason": str(exc)}) from exc

        email = claims.get("email")
        if not email:
            raise AuthorizationError(message="Forbidden access: token has no email claim")

        return Identity(uid=claims.get("uid") or claims.get("sub", ""), email=email, claims=claims)


def get_identity_verifier(request: Request) -> FirebaseIdentityVerifier:
    verifier = getattr(request.app.state, "identity_verifier", None)
    if verifier is None:
        raise ServiceUnavailableError(service="identity provider")
    return verifier


# ══════════════════════════════════════════════════════════════════════════
# Route Policies
# ══════════════════════════════════════════════════════════════════════════

class AuthPolicy(str, Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"


# Every route the API serves. Paths are FastAPI path templates.
ROUTE_POLICIES: Dict[Tuple[str, str], AuthPolicy] = {
    ("GET", "/"): AuthPolicy.PUBLIC,
    ("GET", "/health"): AuthPolicy.PUBLIC,
    # Parcels
    ("GET", "/parcels"): AuthPolicy.AUTHENTICATED,
    ("GET", "/parcels/{parcel_id}"): AuthPolicy.PUBLIC,
    ("POST", "/parcels"): AuthPolicy.PUBLIC,
    ("DELETE", "/parcels/{parcel_id}"): AuthPolicy.PUBLIC,
    # Users
    ("GET", "/users/search"): AuthPolicy.PUBLIC,
    ("GET", "/users/{email}/role"): AuthPolicy.PUBLIC,
    ("POST", "/users"): AuthPolicy.PUBLIC,
    ("PATCH", "/users/{user_id}/role"): AuthPolicy.AUTHENTICATED,
    # Riders
    ("POST", "/riders"): AuthPolicy.PUBLIC,
    ("GET", "/riders/pending"): AuthPolicy.PUBLIC,
    ("GET", "/riders/active"): AuthPolicy.PUBLIC,
    ("PATCH", "/riders/{rider_id}/status"): AuthPolicy.PUBLIC,
    # Tracking
    ("POST", "/tracking"): AuthPolicy.PUBLIC,
    # Payments
    ("GET", "/payments"): AuthPolicy.AUTHENTICATED,
    ("POST", "/payments"): AuthPolicy.PUBLIC,
    ("POST", "/create-payment-intent"): AuthPolicy.PUBLIC,
}


def policy_for(method: str, path: str) -> AuthPolicy:
    """Undeclared routes require authentication."""
    return ROUTE_POLICIES.get((method.upper(), path), AuthPolicy.AUTHENTICATED)


async def enforce_route_policy(request: Request) -> None:
    """
    App-wide dependency applying ROUTE_POLICIES to the matched route.

    On success for an AUTHENTICATED route, `request.state.identity` holds the
    caller's Identity.
    """
    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    if policy_for(request.method, path) is AuthPolicy.PUBLIC:
        return

    token = parse_bearer_token(request.headers.get("Authorization"))
    verifier = get_identity_verifier(request)
    request.state.identity = await verifier.verify(token)


def get_identity(request: Request) -> Identity:
    """Dependency for handlers that read the verified caller."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise AuthenticationError()
    return identity
