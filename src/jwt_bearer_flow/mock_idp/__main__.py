"""
jwt_bearer_flow.mock_idp.__main__

Entrypoint for running the mock identity provider via `python -m jwt_bearer_flow.mock_idp`.
"""

from __future__ import annotations

import uvicorn

from jwt_bearer_flow.mock_idp.app import create_app
from jwt_bearer_flow.mock_idp.config import MockIdpSettings
from jwt_bearer_flow.observability.logging import configure_logging


def main() -> None:
    settings = MockIdpSettings()
    configure_logging(service_name=settings.service_name, level=settings.log_level)
    app = create_app(config=settings.to_config())

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
