"""
jwt_bearer_flow.mock_idp

Local stand-in for a Salesforce-style identity provider.

Responsibilities:
- Token endpoint that strictly validates JWT bearer assertions.
- A protected data endpoint that only accepts tokens it issued.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Used by the end-to-end tests and for trying the CLI without a real org.
