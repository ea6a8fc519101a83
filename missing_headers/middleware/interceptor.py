"""
Response Interceptor Module

Wraps an outbound response stream and injects missing response headers at the
moment the status line and headers are committed, exactly once. Body writes,
flushing and connection hijacking are proxied to the wrapped sink according to
the optional capabilities it supports.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import anyio.lowlevel
from starlette.datastructures import MutableHeaders
from starlette.types import Message, Send

from missing_headers.common.errors import CapabilityUnsupportedError
from missing_headers.headers.rules import CheckMode, add_missing_headers

logger = logging.getLogger(__name__)


@runtime_checkable
class ResponseSink(Protocol):
    """Outbound response stream: live headers, status commit and body writes."""

    @property
    def headers(self) -> MutableHeaders: ...

    async def write_header(self, status_code: int) -> None: ...

    async def write(self, data: bytes, more_body: bool = True) -> None: ...


@runtime_checkable
class Flusher(Protocol):
    """Sink that can push buffered data to the client."""

    async def flush(self) -> None: ...


@runtime_checkable
class Hijacker(Protocol):
    """Sink that can hand over the underlying connection."""

    async def hijack(self) -> Any: ...


@runtime_checkable
class MessageSink(Protocol):
    """Sink that accepts raw ASGI response messages."""

    def stage(self, message: Message) -> None: ...

    async def send(self, message: Message) -> None: ...


@dataclass
class ResponseCommitState:
    """Per-response commit tracking."""

    headers_sent: bool = False
    # Used when the body is written without an explicit status
    status_code: int = 200


class ASGIResponseSink:
    """
    ASGI Response Sink

    Adapts an ASGI ``send`` callable to ``ResponseSink``. Headers are collected
    in a pending list until ``write_header`` sends ``http.response.start``.
    """

    def __init__(self, send: Send) -> None:
        self.send = send
        self.trailers = False
        self._raw_headers: list[tuple[bytes, bytes]] = []
        self._headers = MutableHeaders(raw=self._raw_headers)

    @property
    def headers(self) -> MutableHeaders:
        return self._headers

    def stage(self, message: Message) -> None:
        """Merge the headers of an app-produced ``http.response.start`` message."""
        for key, value in message.get("headers", []):
            self._headers.append(key.decode("latin-1"), value.decode("latin-1"))
        self.trailers = message.get("trailers", False)

    async def write_header(self, status_code: int) -> None:
        message: Message = {
            "type": "http.response.start",
            "status": status_code,
            "headers": self._raw_headers,
        }
        if self.trailers:
            message["trailers"] = True
        await self.send(message)

    async def write(self, data: bytes, more_body: bool = True) -> None:
        await self.send({"type": "http.response.body", "body": data, "more_body": more_body})

    async def flush(self) -> None:
        # Each send is handed to the server immediately; yielding lets it drain
        await anyio.lowlevel.checkpoint()


class ResponseInterceptor:
    """
    Response Interceptor

    State machine with two states: pending and committed. The first status
    write, or the first body write (which commits with status 200 unless a
    status was set), injects the configured response headers that are missing
    from the live header collection and commits. Status writes after the
    commit are dropped.
    """

    def __init__(
        self,
        sink: ResponseSink,
        response_headers: Mapping[str, str],
        check_mode: CheckMode,
        disable_explicit_flush: bool = False,
    ) -> None:
        """
        Initialize interceptor

        Args:
            sink: Wrapped response stream
            response_headers: Headers to inject when missing
            check_mode: Presence check mode
            disable_explicit_flush: Suppress the flush after every write
        """
        self._sink = sink
        self._response_headers = response_headers
        self._check_mode = check_mode
        self._disable_explicit_flush = disable_explicit_flush
        self._flusher = sink if isinstance(sink, Flusher) else None
        self._hijacker = sink if isinstance(sink, Hijacker) else None
        self._message_sink = sink if isinstance(sink, MessageSink) else None
        self.state = ResponseCommitState()

    @property
    def headers(self) -> MutableHeaders:
        return self._sink.headers

    @property
    def committed(self) -> bool:
        return self.state.headers_sent

    @property
    def can_flush(self) -> bool:
        return self._flusher is not None

    @property
    def can_hijack(self) -> bool:
        return self._hijacker is not None

    async def write_header(self, status_code: int) -> None:
        """Commit the status and headers; no-op once committed."""
        if self.state.headers_sent:
            logger.debug(
                f"Dropping status {status_code}: status {self.state.status_code} already sent"
            )
            return

        add_missing_headers(self._sink.headers, self._response_headers, self._check_mode)
        await self._sink.write_header(status_code)

        self.state.status_code = status_code
        self.state.headers_sent = True

    async def write(self, data: bytes, more_body: bool = True) -> None:
        """Write body data, committing first if needed."""
        await self.write_header(self.state.status_code)

        await self._sink.write(data, more_body=more_body)

        if not self._disable_explicit_flush and self._flusher is not None:
            await self._flusher.flush()

    async def flush(self) -> None:
        """Flush the sink if it supports flushing."""
        if self._flusher is not None:
            await self._flusher.flush()

    async def hijack(self) -> Any:
        """
        Take over the underlying connection.

        Raises:
            CapabilityUnsupportedError: If the wrapped sink cannot be hijacked
        """
        if self._hijacker is None:
            sink_type = type(self._sink).__name__
            logger.warning(f"Hijack attempted on non-hijackable response sink {sink_type}")
            raise CapabilityUnsupportedError("hijacking", sink_type)
        return await self._hijacker.hijack()

    async def send(self, message: Message) -> None:
        """
        ASGI ``send`` replacement.

        Requires a ``MessageSink`` such as ``ASGIResponseSink``. Response start
        and body messages go through the commit logic; other message types
        pass straight through.

        Raises:
            CapabilityUnsupportedError: If the wrapped sink cannot take ASGI messages
        """
        if self._message_sink is None:
            raise CapabilityUnsupportedError("ASGI messages", type(self._sink).__name__)

        message_type = message["type"]
        if message_type == "http.response.start":
            if not self.state.headers_sent:
                self._message_sink.stage(message)
            await self.write_header(message["status"])
        elif message_type == "http.response.body":
            await self.write(message.get("body", b""), more_body=message.get("more_body", False))
        else:
            await self._message_sink.send(message)
