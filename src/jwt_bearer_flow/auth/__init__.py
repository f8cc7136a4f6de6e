"""
jwt_bearer_flow.auth

Credential side of the flow.

Responsibilities:
- Load signing key material from a protected key store.
- Build signed JWT bearer assertions.
- Exchange an assertion for an access token.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing here holds state between calls; each function/class is used once per run.
