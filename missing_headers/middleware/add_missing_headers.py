"""
Add Missing Headers Middleware Module

ASGI middleware that fills in configured request and response headers when
they are missing, unless the request matches a bypass rule.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Receive, Scope, Send

from missing_headers.config import HeadersConfig, create_config
from missing_headers.headers.rules import CheckMode, add_missing_headers, should_bypass
from missing_headers.middleware.interceptor import ASGIResponseSink, ResponseInterceptor

logger = logging.getLogger(__name__)

# request.state attribute holding the interceptor of the current response
INTERCEPTOR_STATE_KEY = "response_interceptor"


class AddMissingHeadersMiddleware:
    """
    Add Missing Headers Middleware

    Per HTTP request:
    1. Requests matching a bypass rule are forwarded untouched
    2. Missing request headers are set before the next app runs
    3. Responses are wrapped in a ResponseInterceptor only when response
       headers are configured
    """

    def __init__(
        self,
        app: ASGIApp,
        config: Optional[Union[HeadersConfig, Mapping[str, Any]]] = None,
        name: str = "add-missing-headers",
    ) -> None:
        """
        Initialize middleware

        Args:
            app: Next ASGI application in the chain
            config: Header configuration; a mapping is validated into HeadersConfig
            name: Instance name used in log messages
        """
        if config is None:
            config = create_config()
        elif not isinstance(config, HeadersConfig):
            config = HeadersConfig.model_validate(config)

        self.app = app
        self.name = name
        self.request_headers = dict(config.request_headers)
        self.response_headers = dict(config.response_headers)
        self.bypass_headers = dict(config.bypass_headers)
        self.disable_explicit_flush = config.disable_explicit_flush
        self.check_mode = CheckMode.from_strict(config.strict_header_check)

        logger.info(
            f"Middleware {self.name} initialized: request_headers={len(self.request_headers)}, "
            f"response_headers={len(self.response_headers)}, bypass_headers={len(self.bypass_headers)}, "
            f"check_mode={self.check_mode.value}, disable_explicit_flush={self.disable_explicit_flush}"
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if should_bypass(Headers(scope=scope), self.bypass_headers):
            logger.debug(f"Middleware {self.name} bypassed for {scope.get('path', '')}")
            await self.app(scope, receive, send)
            return

        add_missing_headers(MutableHeaders(scope=scope), self.request_headers, self.check_mode)

        if not self.response_headers:
            await self.app(scope, receive, send)
            return

        interceptor = ResponseInterceptor(
            ASGIResponseSink(send),
            self.response_headers,
            self.check_mode,
            disable_explicit_flush=self.disable_explicit_flush,
        )
        scope.setdefault("state", {})[INTERCEPTOR_STATE_KEY] = interceptor
        await self.app(scope, receive, interceptor.send)
