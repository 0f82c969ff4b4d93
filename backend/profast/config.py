"""
ProFast Parcel API — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads environment variables (or a .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py when building the gateways in the lifespan.

Environment expected in production:
    DB_USER / DB_PASS / DB_HOST      (or a full MONGODB_URI)
    PORT
    PAYMENT_GATEWAY_KEY              Stripe secret key
    FIREBASE_CREDENTIALS_PATH        service-account JSON for token verification
"""

from pathlib import Path
from typing import List
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments must
    provide database credentials, the Stripe key and the Firebase
    service-account file.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # A full connection string wins over the individual fields below.
    mongodb_uri: str = Field(default="", description="Complete MongoDB connection string")
    db_user: str = Field(default="")
    db_pass: str = Field(default="")
    db_host: str = Field(default="localhost:27017", description="Host[:port] or SRV cluster host")
    db_use_srv: bool = Field(default=False, description="Use the mongodb+srv:// scheme (Atlas)")
    db_name: str = Field(default="ParcelDB")
    db_app_name: str = Field(default="ProFast")

    # Fail the startup ping quickly instead of hanging the lifespan
    db_server_selection_timeout_ms: int = Field(default=5000, ge=500, le=60000)

    @property
    def mongodb_url(self) -> str:
        """Connection string for the MongoDB client."""
        if self.mongodb_uri:
            return self.mongodb_uri

        scheme = "mongodb+srv" if self.db_use_srv else "mongodb"
        credentials = ""
        if self.db_user and self.db_pass:
            credentials = f"{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}@"
        return (
            f"{scheme}://{credentials}{self.db_host}/"
            f"?retryWrites=true&w=majority&appName={self.db_app_name}"
        )

    # ── Payment gateway (Stripe) ──────────────────────────────────────────
    payment_gateway_key: str = Field(default="", description="Stripe secret key")
    payment_currency: str = Field(default="usd", min_length=3, max_length=3)

    # ── Identity provider (Firebase Authentication) ───────────────────────
    firebase_credentials_path: str = Field(
        default="firebase-admin-key.json",
        description="Path to the Firebase service-account JSON file",
    )

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated origins; "*" allows any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("payment_currency")
    @classmethod
    def lowercase_currency(cls, v: str) -> str:
        return v.lower()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every missing setting and raises one ValueError listing them.
        """
        errors = []
        if not self.mongodb_uri and not (self.db_user and self.db_pass):
            errors.append(
                "Database credentials are not set. "
                "Provide MONGODB_URI or DB_USER and DB_PASS."
            )
        if not self.payment_gateway_key:
            errors.append("PAYMENT_GATEWAY_KEY is not set. Payment intents will fail.")
        if not Path(self.firebase_credentials_path).is_file():
            errors.append(
                f"Firebase credentials file '{self.firebase_credentials_path}' was not found. "
                "Authenticated routes will answer 503."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


settings = Settings()
