"""
jwt_bearer_flow.__main__

Entrypoint for running one JWT Bearer flow via `python -m jwt_bearer_flow`.

Responsibilities:
- Load settings and configure logging.
- Run the pipeline with a single HTTP client.
- Print the assertion, token response, access token and resource body to stdout.
- Exit non-zero on any failure, naming the stage that failed.
"""

from __future__ import annotations

import sys
from typing import TextIO

import httpx
from pydantic import ValidationError

from jwt_bearer_flow.errors import FlowError
from jwt_bearer_flow.observability.logging import configure_logging, get_logger
from jwt_bearer_flow.orchestrator.pipeline import FlowResult, run_flow
from jwt_bearer_flow.settings import Settings, get_settings

log = get_logger(__name__)

EXIT_FLOW_FAILED = 1
EXIT_BAD_CONFIG = 2


def render(result: FlowResult, out: TextIO) -> None:
    print(f"JWT Token: {result.assertion.token}", file=out)
    print(f"Response Body: {result.token.raw}", file=out)
    print(f"Access Token: {result.token.access_token}", file=out)
    print(f"Instance URL: {result.token.instance_url}", file=out)
    print(f"Resource Body: {result.resource_body}", file=out)


def run(
    *,
    settings: Settings,
    http: httpx.Client,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    try:
        result = run_flow(settings=settings, http=http)
    except FlowError as e:
        status = getattr(e, "status_code", None)
        body = getattr(e, "body", None)
        log.error("flow_failed", stage=e.stage.value, error=type(e).__name__, status=status)
        print(f"Error [{e.stage.value}]: {e.message}", file=err)
        if body:
            print(f"Response Body: {body}", file=err)
        return EXIT_FLOW_FAILED
    except ValueError as e:
        # Missing issuer/subject/audience or a non-positive lifetime.
        print(f"Invalid configuration: {e}", file=err)
        return EXIT_BAD_CONFIG

    render(result, out)
    return 0


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(EXIT_BAD_CONFIG)

    configure_logging(service_name=settings.service_name, level=settings.log_level)

    with httpx.Client() as http:
        code = run(settings=settings, http=http)
    sys.exit(code)


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# Logs go to stderr; stdout only carries the flow output so it can be piped.
