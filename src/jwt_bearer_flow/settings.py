"""
jwt_bearer_flow.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for every stage of the flow.
- Hide secrets from repr/logging (keystore password).
- Offer a cached settings instance for the CLI entrypoint.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Explicit configuration for a single assertion-build-and-exchange cycle.
    Every stage receives the values it needs from here; nothing is read from globals.
    """

    model_config = SettingsConfigDict(
        env_prefix="JBF_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    service_name: str = "jwt-bearer-flow"
    log_level: str = "INFO"

    # Key material
    keystore_path: str = "./keystore.p12"
    keystore_password: str = Field(default="", repr=False)
    key_alias: str = "certalias"
    signing_alg: str = "RS256"

    # Assertion claims
    client_id: str = ""
    username: str = ""
    audience: str = "https://login.salesforce.com"
    assertion_ttl_seconds: int = Field(default=300, gt=0)
    # Salesforce does not require jti; other providers reject assertions without one.
    include_jti: bool = False

    # Endpoints
    token_url: str = "https://login.salesforce.com/services/oauth2/token"
    # Relative paths are resolved against the instance_url returned by the token endpoint.
    resource_url: str = "/services/data/v37.0/sobjects/Account/"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests construct `Settings(...)` directly instead of going through the cached getter.
