"""
Add Missing Headers

ASGI middleware that injects configured request and response headers only
when they are missing.
"""

from missing_headers.config import HeadersConfig, create_config
from missing_headers.middleware import AddMissingHeadersMiddleware

__all__ = ["AddMissingHeadersMiddleware", "HeadersConfig", "create_config"]
