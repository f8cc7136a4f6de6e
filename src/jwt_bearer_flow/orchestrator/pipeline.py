"""
jwt_bearer_flow.orchestrator.pipeline

Fail-fast runner for LoadKey -> BuildAssertion -> ExchangeToken -> IssueRequest -> Done.

Responsibilities:
- Feed each stage's output into the next with no shared mutable state.
- Bind the current stage into structlog contextvars for every log event.
- Let stage errors propagate unchanged so callers know which stage failed.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

import httpx
import structlog

from jwt_bearer_flow.auth.assertion import Assertion, build_assertion
from jwt_bearer_flow.auth.keystore import load_signing_key
from jwt_bearer_flow.auth.token_exchange import TokenExchanger, TokenResponse
from jwt_bearer_flow.clients.resource import ResourceClient, resolve_resource_url
from jwt_bearer_flow.errors import FlowError
from jwt_bearer_flow.observability.logging import get_logger
from jwt_bearer_flow.orchestrator.stages import FlowStage
from jwt_bearer_flow.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FlowResult:
    assertion: Assertion
    token: TokenResponse
    resource_url: str
    resource_body: str


@contextmanager
def _stage(stage: FlowStage) -> Iterator[None]:
    with structlog.contextvars.bound_contextvars(stage=stage.value):
        log.debug("stage_started")
        try:
            yield
        except FlowError as e:
            log.error("stage_failed", error=type(e).__name__, detail=e.message)
            raise
        log.debug("stage_completed")


def run_flow(*, settings: Settings, http: httpx.Client, now: datetime | None = None) -> FlowResult:
    with _stage(FlowStage.LOAD_KEY):
        key = load_signing_key(
            path=settings.keystore_path,
            password=settings.keystore_password,
            alias=settings.key_alias,
            alg=settings.signing_alg,
        )

    with _stage(FlowStage.BUILD_ASSERTION):
        assertion = build_assertion(
            issuer=settings.client_id,
            subject=settings.username,
            audience=settings.audience,
            key=key,
            ttl_seconds=settings.assertion_ttl_seconds,
            include_jti=settings.include_jti,
            now=now,
        )
    # The key is only needed for signing.
    del key

    with _stage(FlowStage.EXCHANGE_TOKEN):
        token = TokenExchanger(http=http, token_url=settings.token_url).exchange(assertion)

    with _stage(FlowStage.ISSUE_REQUEST):
        resource_url = resolve_resource_url(settings.resource_url, token.instance_url)
        body = ResourceClient(http=http).get(resource_url, access_token=token.access_token)

    log.info("flow_completed", stage=FlowStage.DONE.value, resource_url=resource_url)
    return FlowResult(assertion=assertion, token=token, resource_url=resource_url, resource_body=body)


# --- Module Notes -----------------------------------------------------------
# A new assertion is built on every call; an assertion is never reused across runs.
