"""
jwt_bearer_flow.orchestrator

Linear pipeline that drives the four stages of the JWT Bearer flow.

Responsibilities:
- Stage identifiers and the result record.
- The fail-fast runner.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Call sites should use `run_flow`; stages are also usable on their own from `auth`/`clients`.
