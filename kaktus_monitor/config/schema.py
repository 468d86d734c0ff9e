"""Pydantic schema for the secrets/configuration file.

Example (YAML, or the equivalent JSON):

    portal:
      username: "777123456"
      password: "secret"
    router:
      host: 192.168.88.1
      username: admin
      password: secret
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..const import (
    DEFAULT_POLL_ATTEMPTS,
    DEFAULT_POLL_DELAY,
    DEFAULT_ROUTER_PORT,
    DEFAULT_ROUTER_TIMEOUT,
    DEFAULT_TIMEOUT,
    PORTAL_BASE_URL,
)


class PortalConfig(BaseModel):
    """Kaktus customer portal credentials and polling behaviour."""

    model_config = ConfigDict(extra="forbid")

    base_url: str = Field(default=PORTAL_BASE_URL, description="Portal base URL without trailing slash")
    username: str = Field(description="Portal login (phone number)")
    password: str = Field(description="Portal password")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Per-request timeout in seconds")
    poll_attempts: int = Field(
        default=DEFAULT_POLL_ATTEMPTS,
        ge=1,
        description="Maximum follow-up requests per dashboard island",
    )
    poll_delay: float = Field(
        default=DEFAULT_POLL_DELAY,
        ge=0,
        description="Seconds to wait before re-polling a pending island",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("username", "password", mode="before")
    @classmethod
    def numbers_as_text(cls, v: object) -> object:
        # Phone-number logins come out of YAML as ints
        return str(v) if isinstance(v, int) and not isinstance(v, bool) else v


class RouterConfig(BaseModel):
    """MikroTik RouterOS API connection."""

    model_config = ConfigDict(extra="forbid")

    host: str = Field(description="Router address")
    port: int = Field(default=DEFAULT_ROUTER_PORT, description="RouterOS API port")
    username: str = Field(description="RouterOS user")
    password: str = Field(description="RouterOS password")
    timeout: float = Field(default=DEFAULT_ROUTER_TIMEOUT, gt=0, description="Socket timeout in seconds")


class AppConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(extra="forbid")

    portal: PortalConfig
    router: RouterConfig | None = None
