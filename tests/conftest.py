"""
tests.conftest

Shared fixtures: generated key material, key stores, and the mock identity provider.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID
from fastapi.testclient import TestClient

from jwt_bearer_flow.auth.keystore import SigningKey
from jwt_bearer_flow.mock_idp.app import create_app
from jwt_bearer_flow.mock_idp.config import MockIdpConfig
from jwt_bearer_flow.settings import Settings

KEYSTORE_PASSWORD = "password"
KEY_ALIAS = "certalias"
CLIENT_ID = "3MVG99OxTyEMCQ3gNp2PjkqeZKxnmAiG1xV4oHh9AKL_rSK.BoSVPGZHQukXnVjzRgSuQqGn75NL7yfkQcyy7"
USERNAME = "my@email.com"
AUDIENCE = "https://login.salesforce.com"
MOCK_BASE_URL = "http://testserver"


def _self_signed(key: rsa.RSAPrivateKey) -> x509.Certificate:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "jwt-bearer-flow-test")])
    now = datetime.now(tz=UTC)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def certificate(rsa_key: rsa.RSAPrivateKey) -> x509.Certificate:
    return _self_signed(rsa_key)


@pytest.fixture(scope="session")
def keystore_path(tmp_path_factory: pytest.TempPathFactory, rsa_key, certificate) -> Path:
    path = tmp_path_factory.mktemp("keys") / "keystore.p12"
    path.write_bytes(
        pkcs12.serialize_key_and_certificates(
            name=KEY_ALIAS.encode(),
            key=rsa_key,
            cert=certificate,
            cas=None,
            encryption_algorithm=serialization.BestAvailableEncryption(KEYSTORE_PASSWORD.encode()),
        )
    )
    return path


@pytest.fixture(scope="session")
def encrypted_pem_path(tmp_path_factory: pytest.TempPathFactory, rsa_key) -> Path:
    path = tmp_path_factory.mktemp("pem") / "private.pem"
    path.write_bytes(
        rsa_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.BestAvailableEncryption(KEYSTORE_PASSWORD.encode()),
        )
    )
    return path


@pytest.fixture(scope="session")
def ec_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def signing_key(rsa_key) -> SigningKey:
    return SigningKey(private_key=rsa_key, alg="RS256", alias=KEY_ALIAS)


@pytest.fixture
def settings(keystore_path: Path) -> Settings:
    return Settings(
        keystore_path=str(keystore_path),
        keystore_password=KEYSTORE_PASSWORD,
        key_alias=KEY_ALIAS,
        client_id=CLIENT_ID,
        username=USERNAME,
        audience=AUDIENCE,
        token_url=f"{MOCK_BASE_URL}/services/oauth2/token",
        resource_url="/services/data/v37.0/sobjects/Account/",
    )


@pytest.fixture
def mock_idp_config(rsa_key) -> MockIdpConfig:
    return MockIdpConfig(
        public_key=rsa_key.public_key(),
        audience=AUDIENCE,
        instance_url=MOCK_BASE_URL,
        allowed_client_ids=frozenset({CLIENT_ID}),
    )


@pytest.fixture
def idp_client(mock_idp_config: MockIdpConfig) -> TestClient:
    # TestClient is an httpx.Client, so it can be handed straight to the flow stages.
    return TestClient(create_app(config=mock_idp_config), base_url=MOCK_BASE_URL)


# --- Module Notes -----------------------------------------------------------
# Key generation is session-scoped; RSA-2048 generation dominates suite runtime otherwise.
