"""
jwt_bearer_flow.errors

Error taxonomy for the JWT Bearer flow.

Responsibilities:
- One exception type per failure class, each tagged with the stage that raised it.
- Carry diagnostic context (HTTP status, response body) for the CLI to report.

All errors are terminal: nothing in the pipeline catches and recovers from them.
"""

from __future__ import annotations

from jwt_bearer_flow.orchestrator.stages import FlowStage


class FlowError(Exception):
    # Set by every concrete subclass; the base is never raised directly.
    stage: FlowStage

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class KeyAccessError(FlowError):
    """Key store missing or unreadable, wrong password, or alias not found."""

    stage = FlowStage.LOAD_KEY


class SigningError(FlowError):
    """Malformed key, unsupported algorithm, or failed signature operation."""

    stage = FlowStage.BUILD_ASSERTION


class _HttpFlowError(FlowError):
    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TokenExchangeError(_HttpFlowError):
    """Token endpoint answered non-2xx, or the request never got a response."""

    stage = FlowStage.EXCHANGE_TOKEN


class ResponseParseError(FlowError):
    """Token endpoint answered 2xx but the body is not the expected JSON object."""

    stage = FlowStage.EXCHANGE_TOKEN

    def __init__(self, message: str, *, body: str = "") -> None:
        super().__init__(message)
        self.body = body


class RequestError(_HttpFlowError):
    """Resource endpoint answered non-2xx, or the request never got a response."""

    stage = FlowStage.ISSUE_REQUEST


# --- Module Notes -----------------------------------------------------------
# Library exceptions (cryptography, jwt, httpx, json) are wrapped at the stage boundary
# with `raise ... from e` so the original cause stays on the traceback.
