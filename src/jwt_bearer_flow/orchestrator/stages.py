"""
jwt_bearer_flow.orchestrator.stages

Stage identifiers for the linear pipeline.
"""

from __future__ import annotations

import enum


class FlowStage(str, enum.Enum):
    LOAD_KEY = "load_key"
    BUILD_ASSERTION = "build_assertion"
    EXCHANGE_TOKEN = "exchange_token"
    ISSUE_REQUEST = "issue_request"
    DONE = "done"

