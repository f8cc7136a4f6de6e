"""
jwt_bearer_flow.auth.token_exchange

Token endpoint client for the JWT Bearer grant (RFC 7523).

Responsibilities:
- POST the assertion as a form-encoded body with the bearer-assertion grant type.
- Map non-2xx/transport failures to `TokenExchangeError`, malformed bodies to `ResponseParseError`.
- Parse the access token and instance (API base) URL into a typed record.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx

from jwt_bearer_flow.auth.assertion import Assertion
from jwt_bearer_flow.errors import ResponseParseError, TokenExchangeError
from jwt_bearer_flow.observability.logging import get_logger, redact

log = get_logger(__name__)

GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
REQUIRED_FIELDS = ("access_token", "instance_url")


@dataclass(frozen=True, slots=True)
class TokenResponse:
    access_token: str = field(repr=False)
    instance_url: str
    token_type: str | None = None
    scope: str | None = None
    id: str | None = None
    issued_at: str | None = None
    raw: str = field(default="", repr=False, compare=False)

    @classmethod
    def from_body(cls, body: str) -> TokenResponse:
        try:
            payload: Any = json.loads(body)
        except json.JSONDecodeError as e:
            raise ResponseParseError(f"token response is not valid JSON: {e.msg}", body=body) from e
        if not isinstance(payload, dict):
            raise ResponseParseError("token response is not a JSON object", body=body)

        missing = [name for name in REQUIRED_FIELDS if not isinstance(payload.get(name), str) or not payload[name]]
        if missing:
            raise ResponseParseError(f"token response missing field(s): {', '.join(missing)}", body=body)

        def _opt(name: str) -> str | None:
            value = payload.get(name)
            return None if value is None else str(value)

        return cls(
            access_token=payload["access_token"],
            instance_url=payload["instance_url"],
            token_type=_opt("token_type"),
            scope=_opt("scope"),
            id=_opt("id"),
            issued_at=_opt("issued_at"),
            raw=body,
        )


class TokenExchanger:
    """
    Single-shot exchange: one POST, no retry, transport default timeouts.
    """

    def __init__(self, *, http: httpx.Client, token_url: str) -> None:
        self._http = http
        self._token_url = token_url

    def exchange(self, assertion: Assertion) -> TokenResponse:
        if assertion.is_expired():
            # The endpoint is the authority on expiry; it will reject the grant.
            log.warning("assertion_already_expired", exp=assertion.claims.exp)

        try:
            r = self._http.post(
                self._token_url,
                data={"grant_type": GRANT_TYPE, "assertion": assertion.token},
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"token request to {self._token_url} failed: {e}") from e

        body = r.text
        if not r.is_success:
            log.warning("token_exchange_rejected", status=r.status_code, url=self._token_url)
            raise TokenExchangeError(
                _rejection_message(r.status_code, body),
                status_code=r.status_code,
                body=body,
            )

        token = TokenResponse.from_body(body)
        log.info(
            "token_exchanged",
            instance_url=token.instance_url,
            token_type=token.token_type,
            access_token=redact(token.access_token),
        )
        return token


def _rejection_message(status_code: int, body: str) -> str:
    message = f"token endpoint returned HTTP {status_code}"
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        return message
    if isinstance(payload, dict) and payload.get("error"):
        # OAuth2 error responses: {"error": "invalid_grant", "error_description": "..."}
        detail = payload.get("error_description")
        message += f": {payload['error']}" + (f" ({detail})" if detail else "")
    return message


# --- Module Notes -----------------------------------------------------------
# Salesforce answers invalid_grant for expired assertions, unknown users and apps that
# were never authorized via the web flow; all of them surface as TokenExchangeError.
