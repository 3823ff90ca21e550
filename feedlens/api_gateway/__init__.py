"""
API Gateway component.

Serves the feedback API and dashboard over HTTP.
"""

from feedlens.api_gateway.gateway import app, create_app, run_gateway

__all__ = [
    "app",
    "create_app",
    "run_gateway"
]
