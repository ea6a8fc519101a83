"""
Middleware Package

Contains the header injection middleware and its response interceptor.
"""

from missing_headers.middleware.add_missing_headers import AddMissingHeadersMiddleware
from missing_headers.middleware.interceptor import (
    ASGIResponseSink,
    Flusher,
    Hijacker,
    MessageSink,
    ResponseCommitState,
    ResponseInterceptor,
    ResponseSink,
)

__all__ = [
    "AddMissingHeadersMiddleware",
    "ASGIResponseSink",
    "Flusher",
    "Hijacker",
    "MessageSink",
    "ResponseCommitState",
    "ResponseInterceptor",
    "ResponseSink",
]
