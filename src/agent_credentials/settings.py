"""
agent_credentials.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the directory, token and secret layers.
- Hide secrets from repr/logging (static client secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Enterprise pattern:
    - Strict env-driven configuration
    - Defaults safe for local dev
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="AGENT_CREDS_", case_sensitive=False)

    # Environment selects the workload-identity strategy (dev/test -> local chain, prod -> MI).
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "agent-credentials"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Managed application registration
    tenant_id: str = ""
    client_id: str = ""
    # Static override: when set, no per-principal secret is minted.
    client_secret: str = Field(default="", repr=False)

    # Host-assigned identity; required when env=prod.
    managed_identity_client_id: str = ""

    # Upstream services
    graph_base_url: str = "https://graph.microsoft.com/v1.0"
    authority_host: str = "https://login.microsoftonline.com"
    http_timeout_seconds: float = 10.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Components never read this module's cache directly; the composition root passes
# field values into constructors so tests can substitute configuration freely.
