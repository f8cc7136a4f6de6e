"""
jwt_bearer_flow.auth.keystore

Key material loader.

Responsibilities:
- Read a password-protected key store (PKCS#12, or an optionally encrypted PEM key).
- Select the private key stored under a keytool-style alias.
- Translate every store/password/alias problem into `KeyAccessError`.

Note:
- Java keytool writes PKCS#12 by default; a legacy JKS store can be converted with
  `keytool -importkeystore -srcstoretype JKS -deststoretype PKCS12`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes, PublicKeyTypes
from cryptography.hazmat.primitives.serialization import pkcs12

from jwt_bearer_flow.errors import KeyAccessError
from jwt_bearer_flow.observability.logging import get_logger

log = get_logger(__name__)

PEM_SUFFIXES = frozenset({".pem", ".key"})
# Leading magic of Java-proprietary stores that cryptography cannot parse.
JAVA_STORE_MAGIC = {b"\xfe\xed\xfe\xed": "JKS", b"\xce\xce\xce\xce": "JCEKS"}


@dataclass(frozen=True, slots=True)
class SigningKey:
    """
    Private key plus the JWS algorithm it signs with.
    Key material is excluded from repr so it never lands in logs or tracebacks.
    """

    private_key: PrivateKeyTypes = field(repr=False)
    alg: str
    alias: str
    certificate: x509.Certificate | None = field(default=None, repr=False)

    def public_key(self) -> PublicKeyTypes:
        return self.private_key.public_key()


def load_signing_key(
    *,
    path: str | Path,
    password: str,
    alias: str,
    alg: str = "RS256",
) -> SigningKey:
    store_path = Path(path)
    secret = password.encode("utf-8") if password else None

    try:
        with store_path.open("rb") as fh:
            data = fh.read()
    except OSError as e:
        raise KeyAccessError(f"cannot read key store {store_path}: {e.strerror or e}") from e

    if store_path.suffix.lower() in PEM_SUFFIXES:
        key, cert = _load_pem(data, secret, store_path)
    else:
        key, cert = _load_pkcs12(data, secret, store_path, alias)

    log.info("signing_key_loaded", path=str(store_path), alias=alias, alg=alg, key_type=type(key).__name__)
    return SigningKey(private_key=key, alg=alg, alias=alias, certificate=cert)


def _load_pkcs12(
    data: bytes,
    secret: bytes | None,
    store_path: Path,
    alias: str,
) -> tuple[PrivateKeyTypes, x509.Certificate | None]:
    store_type = JAVA_STORE_MAGIC.get(data[:4])
    if store_type is not None:
        raise KeyAccessError(
            f"key store {store_path} is {store_type}; convert it with "
            f"`keytool -importkeystore -srckeystore {store_path.name} -srcstoretype {store_type} "
            f"-destkeystore keystore.p12 -deststoretype PKCS12`"
        )

    try:
        bundle = pkcs12.load_pkcs12(data, secret)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        # cryptography reports a bad password and corrupt data with the same ValueError.
        raise KeyAccessError(f"cannot open key store {store_path}: wrong password or unreadable data") from e

    if bundle.key is None:
        raise KeyAccessError(f"key store {store_path} holds no private key")

    entry = bundle.cert
    friendly = entry.friendly_name.decode("utf-8", "replace") if entry and entry.friendly_name else None
    # keytool aliases are case-insensitive.
    if friendly is None or friendly.lower() != alias.lower():
        others = {c.friendly_name.decode("utf-8", "replace").lower() for c in bundle.additional_certs if c.friendly_name}
        if alias.lower() in others:
            raise KeyAccessError(
                f"alias {alias!r} in key store {store_path} is not the first key entry; "
                "multi-key PKCS#12 stores are unsupported, export the entry to its own store"
            )
        raise KeyAccessError(f"alias {alias!r} not found in key store {store_path}")

    return bundle.key, entry.certificate


def _load_pem(
    data: bytes,
    secret: bytes | None,
    store_path: Path,
) -> tuple[PrivateKeyTypes, None]:
    try:
        key = serialization.load_pem_private_key(data, password=secret)
    except TypeError as e:
        # Raised for "encrypted but no password" and "password given but not encrypted".
        raise KeyAccessError(f"cannot open key file {store_path}: {e}") from e
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyAccessError(f"cannot open key file {store_path}: wrong password or unreadable data") from e
    return key, None


# --- Module Notes -----------------------------------------------------------
# A PEM file holds a single key, so the alias is only recorded on the SigningKey there.
# cryptography exposes only the first key of a PKCS#12 store; other entries surface
# as additional certificates and can only be reported, not loaded.
