"""
apigen introspection utilities - build API descriptions from FastAPI apps
"""

# Main introspection functions
from .routes import introspect_app, route_to_endpoints


__all__ = [
    'introspect_app',
    'route_to_endpoints',
]
