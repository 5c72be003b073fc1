"""
Centralized configuration for the nostr.build client.

Pydantic v2 settings management: values are read from NBCMD_* environment
variables (or a local .env file), validated once, and frozen. The signing
secret is held as a SecretStr so it never appears in logs or reprs.

The core (MediaClient, build_auth_event) never reads these settings
implicitly; callers pass them in. Only the CLI and the module-level
convenience functions resolve them from the environment.
"""

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
from typing import Annotated, Optional
from urllib.parse import urlsplit

from pydantic import AnyHttpUrl, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# -------------------------------------------------------------------------
# Reusable Type Aliases
# -------------------------------------------------------------------------

SensitiveEnv = Annotated[
    Optional[SecretStr],
    Field(
        default=None,
        description="Nostr secret key (nsec or hex), redacted from logs",
    ),
]


# -------------------------------------------------------------------------
# Settings Model
# -------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Client settings parsed from the environment.

    A missing secret is not a configuration error at load time: the
    signer reports it when a signature is actually requested, so
    unauthenticated calls remain possible.
    """

    # ---------------------------------------------------------------------
    # Identity
    # ---------------------------------------------------------------------

    nsec: SensitiveEnv

    # ---------------------------------------------------------------------
    # Remote service
    # ---------------------------------------------------------------------

    service_url: Annotated[
        AnyHttpUrl,
        Field(
            default="https://nostr.build",
            description="Base URL of the media hosting service",
        ),
    ]

    # ---------------------------------------------------------------------
    # Operational Boundaries
    # ---------------------------------------------------------------------

    request_timeout_seconds: Annotated[
        float,
        Field(
            default=60.0,
            gt=0,
            le=600,
            description="Upper bound for a single upload or delete call",
        ),
    ]

    log_level: Annotated[
        str,
        Field(
            default="WARNING",
            description="Root log level used by the command line tool",
        ),
    ]

    model_config = SettingsConfigDict(
        env_prefix="NBCMD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(
                f"Unsupported log level '{v}'. "
                f"Allowed values: {sorted(allowed)}"
            )
        return level

    @property
    def base_url(self) -> str:
        return str(self.service_url).rstrip("/")

    @property
    def service_host(self) -> str:
        return urlsplit(self.base_url).netloc


# -------------------------------------------------------------------------
# Providers
# -------------------------------------------------------------------------

def get_app_version() -> str:
    """
    Resolve the installed package version.

    Falls back to the source version when running from a checkout.
    """
    try:
        return version("nostrbuild")
    except PackageNotFoundError:
        return "0.1.0"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Process-wide settings singleton for the command line entry points.
    """
    return Settings()
