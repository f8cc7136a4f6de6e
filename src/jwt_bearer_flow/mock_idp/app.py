"""
jwt_bearer_flow.mock_idp.app

FastAPI app factory for the mock identity provider.

Responsibilities:
- `POST /services/oauth2/token`: JWT bearer grant with strict signature/aud/exp checks.
- `GET /services/data/{version}/sobjects/{sobject}/`: bearer-protected describe stub.
- `GET /healthz`: liveness probe.
"""

from __future__ import annotations

import secrets
import time
from typing import Any

import jwt
from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import InvalidTokenError
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_401_UNAUTHORIZED

from jwt_bearer_flow.auth.token_exchange import GRANT_TYPE
from jwt_bearer_flow.mock_idp.config import MockIdpConfig
from jwt_bearer_flow.observability.logging import get_logger, redact
from jwt_bearer_flow.observability.middleware import AccessLogMiddleware

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def _oauth_error(error: str, description: str) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"error": error, "error_description": description},
    )


def create_app(*, config: MockIdpConfig) -> FastAPI:
    app = FastAPI(title="Mock JWT Bearer Identity Provider", version="0.1.0")
    app.add_middleware(AccessLogMiddleware)

    # Issued access tokens -> subject; seen jti values for replay detection.
    app.state.issued_tokens = {}
    app.state.seen_jti = set()

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/services/oauth2/token")
    async def token(
        request: Request,
        grant_type: str = Form(default=""),
        assertion: str = Form(default=""),
    ) -> Any:
        if grant_type != GRANT_TYPE:
            return _oauth_error("unsupported_grant_type", "grant type not supported")
        if not assertion:
            return _oauth_error("invalid_request", "assertion is required")

        try:
            claims = jwt.decode(
                assertion,
                config.public_key,
                algorithms=list(config.algorithms),
                audience=config.audience,
                leeway=0,
                options={"require": ["iss", "sub", "aud", "exp"]},
            )
        except InvalidTokenError as e:
            log.info("assertion_rejected", reason=str(e))
            return _oauth_error("invalid_grant", str(e))

        if config.allowed_client_ids and claims["iss"] not in config.allowed_client_ids:
            return _oauth_error("invalid_client_id", "client identifier invalid")

        if config.require_jti:
            jti = claims.get("jti")
            if not jti:
                return _oauth_error("invalid_grant", "jti claim is required")
            if jti in request.app.state.seen_jti:
                return _oauth_error("invalid_grant", "assertion replayed")
            request.app.state.seen_jti.add(jti)

        access_token = f"00D!{secrets.token_urlsafe(32)}"
        request.app.state.issued_tokens[access_token] = claims["sub"]
        log.info("token_issued", sub=claims["sub"], access_token=redact(access_token))
        return {
            "access_token": access_token,
            "scope": config.scope,
            "instance_url": config.instance_url,
            "id": f"{config.instance_url}/id/{claims['iss']}/{claims['sub']}",
            "token_type": "Bearer",
            "issued_at": str(int(time.time() * 1000)),
        }

    def _subject(
        request: Request,
        creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    ) -> str:
        if creds is None or not creds.credentials:
            raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
        subject = request.app.state.issued_tokens.get(creds.credentials)
        if subject is None:
            raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Session expired or invalid")
        return subject

    @app.get("/services/data/{version}/sobjects/{sobject}/")
    async def describe_sobject(version: str, sobject: str, subject: str = Depends(_subject)) -> dict[str, Any]:
        return {
            "objectDescribe": {
                "name": sobject,
                "label": sobject,
                "queryable": True,
                "urls": {"sobject": f"/services/data/{version}/sobjects/{sobject}"},
            },
            "recentItems": [],
        }

    return app


# --- Module Notes -----------------------------------------------------------
# State lives on app.state and dies with the process; this is a test double, not a store.
