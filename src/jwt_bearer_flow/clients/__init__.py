"""
jwt_bearer_flow.clients

HTTP clients for protected resource endpoints.
"""

# Package marker.
