"""
jwt_bearer_flow.auth.assertion

JWT bearer assertion builder.

Responsibilities:
- Marshal header and claims records to canonical compact JSON.
- Encode segments with unpadded base64url and sign `header.claims` with the key's algorithm.
- Verify a compact assertion against a public key (used by tests).
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from jwt.algorithms import get_default_algorithms
from jwt.exceptions import PyJWTError
from jwt.utils import base64url_decode, base64url_encode

from jwt_bearer_flow.auth.keystore import SigningKey
from jwt_bearer_flow.errors import SigningError
from jwt_bearer_flow.observability.logging import get_logger

log = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300

# Only asymmetric algorithms: the token endpoint verifies with the uploaded certificate.
SUPPORTED_ALGS = frozenset(
    {"RS256", "RS384", "RS512", "PS256", "PS384", "PS512", "ES256", "ES384", "ES512", "EdDSA"}
)


def _compact(obj: dict[str, Any]) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class AssertionHeader:
    alg: str

    def to_json(self) -> str:
        return _compact({"alg": self.alg})


@dataclass(frozen=True, slots=True)
class AssertionClaims:
    iss: str
    sub: str
    aud: str
    exp: int
    jti: str | None = None

    def to_dict(self) -> dict[str, Any]:
        # Field order is part of the canonical form: iss, sub, aud, exp[, jti].
        out: dict[str, Any] = {"iss": self.iss, "sub": self.sub, "aud": self.aud, "exp": self.exp}
        if self.jti is not None:
            out["jti"] = self.jti
        return out

    def to_json(self) -> str:
        return _compact(self.to_dict())


@dataclass(frozen=True, slots=True)
class Assertion:
    """
    Signed, time-bounded bearer assertion. Built once per token exchange attempt.
    """

    header: AssertionHeader
    claims: AssertionClaims
    signing_input: str
    signature: str
    token: str

    @property
    def segments(self) -> tuple[str, str, str]:
        head, body, sig = self.token.split(".")
        return head, body, sig

    def is_expired(self, now: datetime | None = None) -> bool:
        current = _aware(now or datetime.now(tz=UTC))
        return int(current.timestamp()) >= self.claims.exp


def _aware(moment: datetime) -> datetime:
    # Naive datetimes are taken as UTC, never local time.
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=UTC)


def _algorithm(alg: str):
    if alg not in SUPPORTED_ALGS:
        raise SigningError(f"unsupported signing algorithm {alg!r}")
    algorithms = get_default_algorithms()
    if alg not in algorithms:
        # PyJWT omits the asymmetric algorithms when `cryptography` is not installed.
        raise SigningError(f"signing algorithm {alg!r} is not available in this environment")
    return algorithms[alg]


def _b64(data: bytes) -> str:
    return base64url_encode(data).decode("ascii")


def build_assertion(
    *,
    issuer: str,
    subject: str,
    audience: str,
    key: SigningKey,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
    include_jti: bool = False,
    now: datetime | None = None,
) -> Assertion:
    if not issuer or not subject or not audience:
        raise ValueError("issuer, subject and audience are all required")
    if ttl_seconds <= 0:
        raise ValueError("ttl_seconds must be positive")

    issued_at = _aware(now or datetime.now(tz=UTC))
    # Expiry is fixed here; no clock skew allowance is added.
    header = AssertionHeader(alg=key.alg)
    claims = AssertionClaims(
        iss=issuer,
        sub=subject,
        aud=audience,
        exp=int(issued_at.timestamp()) + ttl_seconds,
        jti=str(uuid.uuid4()) if include_jti else None,
    )

    signing_input = f"{_b64(header.to_json().encode('utf-8'))}.{_b64(claims.to_json().encode('utf-8'))}"

    algorithm = _algorithm(key.alg)
    try:
        prepared = algorithm.prepare_key(key.private_key)
        raw_signature = algorithm.sign(signing_input.encode("ascii"), prepared)
    except (PyJWTError, ValueError, TypeError) as e:
        raise SigningError(f"failed to sign assertion with {key.alg}: {e}") from e

    signature = _b64(raw_signature)
    log.info("assertion_built", alg=key.alg, iss=issuer, sub=subject, aud=audience, exp=claims.exp)
    return Assertion(
        header=header,
        claims=claims,
        signing_input=signing_input,
        signature=signature,
        token=f"{signing_input}.{signature}",
    )


def verify_assertion(token: str, public_key: Any, alg: str) -> bool:
    parts = token.split(".")
    if len(parts) != 3:
        return False
    return verify_signature(f"{parts[0]}.{parts[1]}".encode("ascii", "replace"), parts[2], public_key, alg)


def verify_signature(signing_input: bytes, signature: str, public_key: Any, alg: str) -> bool:
    algorithm = _algorithm(alg)
    try:
        raw = base64url_decode(signature)
        return bool(algorithm.verify(signing_input, algorithm.prepare_key(public_key), raw))
    except (PyJWTError, ValueError, TypeError):
        return False


def decode_segment(segment: str) -> dict[str, Any]:
    return json.loads(base64url_decode(segment))


# --- Module Notes -----------------------------------------------------------
# The mock IdP verifies with PyJWT's full `jwt.decode`, which checks the same bytes
# this module signs; `verify_assertion` is the signature-only check.
