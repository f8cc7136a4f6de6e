"""
jwt_bearer_flow.observability

Logging configuration.
"""

# Package marker.
