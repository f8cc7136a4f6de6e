"""
jwt_bearer_flow.mock_idp.config

Configuration for the mock identity provider.

Responsibilities:
- Env-driven settings (`JBF_MOCK_*`) for running it as a process.
- A resolved, immutable config (public key object loaded) consumed by the app factory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True, slots=True)
class MockIdpConfig:
    public_key: Any = field(repr=False)
    audience: str = "https://login.salesforce.com"
    instance_url: str = "http://127.0.0.1:8090"
    # Empty means any issuer is accepted.
    allowed_client_ids: frozenset[str] = frozenset()
    algorithms: tuple[str, ...] = ("RS256",)
    require_jti: bool = False
    scope: str = "api"


class MockIdpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="JBF_MOCK_", extra="ignore", case_sensitive=False)

    service_name: str = "jwt-bearer-mock-idp"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8090

    # PEM public key or certificate (the same certificate uploaded to the connected app).
    public_key_path: str = ""
    audience: str = "https://login.salesforce.com"
    instance_url: str = "http://127.0.0.1:8090"
    allowed_client_ids: list[str] = []
    algorithms: list[str] = ["RS256"]
    require_jti: bool = False

    def to_config(self) -> MockIdpConfig:
        if not self.public_key_path:
            raise ValueError("JBF_MOCK_PUBLIC_KEY_PATH is required")
        return MockIdpConfig(
            public_key=load_public_key(Path(self.public_key_path)),
            audience=self.audience,
            instance_url=self.instance_url,
            allowed_client_ids=frozenset(self.allowed_client_ids),
            algorithms=tuple(self.algorithms),
            require_jti=self.require_jti,
        )


def load_public_key(path: Path) -> Any:
    with path.open("rb") as fh:
        data = fh.read()
    if b"BEGIN CERTIFICATE" in data:
        return x509.load_pem_x509_certificate(data).public_key()
    return serialization.load_pem_public_key(data)
