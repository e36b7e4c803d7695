"""
mockwire Mock Server

FastAPI-based programmable HTTP test double. Test scripts define
request/response mappings with ``when()``/``response()`` and the server
answers matching requests, including simulated latency and timeouts.

Features:
- Ordered mappings, first match wins, 404 for unknown endpoints
- Substring-or-regex matching on url and body
- Delayed responses and simulated timeouts
- Redirection of intercepted outbound requests (see mockwire.intercept)
- Read-only admin API with mappings and metrics
"""

from __future__ import annotations  # Enable forward references for type hints

import asyncio
import logging
import socket
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.types import Receive, Scope, Send
from uvicorn.config import LOG_LEVELS

from .matcher import RequestDescriptor, find_match
from .models import RequestPattern, ResponsePlan
from .store import MappingStore
from .synthesizer import ResponseSynthesizer, Timeout
from ..common.url_utils import request_target
from ..common.utils import read_text_file
from ..errors import BindError, InvalidPortError, ServerStartError
from ..intercept.bridge import InterceptionBridge


MIN_PORT = 1025
MAX_PORT = 49151

# Headers that the ASGI server sets itself
HEADERS_TO_SKIP = {'content-length', 'transfer-encoding', 'connection'}


class CatchAllEndpoint:
    """ASGI endpoint that passes requests of any method to ``handler``."""

    def __init__(self, handler: Callable[[Request], Awaitable[Response]]):
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await self.handler(Request(scope, receive))
        await response(scope, receive, send)


class ServerState(str, Enum):
    """Lifecycle states of the mock server."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


@dataclass
class ServerConfig:
    """Configuration for mock server behavior."""

    # Listener
    host: str = "127.0.0.1"
    redirect_host: str = "127.0.0.1"  # Where intercepted requests are sent
    startup_timeout: float = 5.0  # Seconds to wait for the listener to come up
    shutdown_timeout: float = 1.0  # Seconds before in-flight requests are cancelled

    # Logging
    log_level: str = "info"
    access_log: bool = False

    # Admin API
    admin_enabled: bool = False
    admin_prefix: str = "/__admin__"

    def __post_init__(self):
        if str(self.log_level).lower() not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{self.log_level}', expected one of: {', '.join(LOG_LEVELS)}"
            )
        self.log_level = str(self.log_level).lower()


@dataclass
class MockMetrics:
    """Track mock server metrics."""

    total_requests: int = 0
    matched_requests: int = 0
    unmatched_requests: int = 0
    timeouts: int = 0
    start_time: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        uptime_seconds = (datetime.now() - datetime.fromisoformat(self.start_time)).total_seconds()
        return {
            'total_requests': self.total_requests,
            'matched_requests': self.matched_requests,
            'unmatched_requests': self.unmatched_requests,
            'timeouts': self.timeouts,
            'match_rate': round((self.matched_requests / self.total_requests * 100) if self.total_requests > 0 else 0, 2),
            'uptime_seconds': round(uptime_seconds, 2),
            'start_time': self.start_time
        }


def validate_port(port: Union[int, str]) -> int:
    """
    Parse and range-check a port.

    Args:
        port: Port as int or numeric string

    Returns:
        Port as int

    Raises:
        InvalidPortError: If the port is not an integer in [1025, 49151]
    """
    if isinstance(port, bool):
        raise InvalidPortError(port, MIN_PORT, MAX_PORT)

    if isinstance(port, int):
        value = port
    elif isinstance(port, str) and port.strip().isdigit():
        value = int(port.strip())
    else:
        raise InvalidPortError(port, MIN_PORT, MAX_PORT)

    if not MIN_PORT <= value <= MAX_PORT:
        raise InvalidPortError(port, MIN_PORT, MAX_PORT)

    return value


class MockServer:
    """
    Programmable mock HTTP server.

    Example:
        server = MockServer().start(9001)

        # GET whose url contains 'ajax_info_1' returns 'Mock Response 1'
        server.when({'url': 'ajax_info_1', 'method': 'GET'}) \\
              .response({'status': 200, 'responseText': 'Mock Response 1'})

        # POST with 'member_id=1' in the body, answered after 5 seconds
        server.when({'url': 'ajax_info_2', 'method': 'POST', 'data': 'member_id=1'}) \\
              .response({'status': 200, 'responseTime': 5000, 'responseText': 'Mock Response 2'})

        # Never answer
        server.when({'url': 'slow'}).response({'isTimeout': True})

        server.reset()
        server.close()
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        file_reader: Callable[[str], str] = read_text_file,
        interception_host: Optional[Any] = None
    ):
        """
        Initialize mock server.

        Args:
            config: Optional ServerConfig for server behavior
            file_reader: Reads responseFile contents, returns text
            interception_host: Object exposing the on_resource_requested hook
                slot (e.g. MitmInterceptionHost), or None
        """
        self.config = config or ServerConfig()
        self.metrics = MockMetrics()

        self.logger = logging.getLogger("mockwire.mock")

        self.store = MappingStore(
            on_change=self._on_mappings_changed,
            on_reset=self._on_mappings_reset
        )
        self.synthesizer = ResponseSynthesizer(file_reader)
        self.bridge = InterceptionBridge(
            self.store,
            host=interception_host,
            redirect_host=self.config.redirect_host
        )

        self.state = ServerState.STOPPED
        self.port = 0
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._socket: Optional[socket.socket] = None

        self.app = self._create_app()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, port: Union[int, str]) -> MockServer:
        """
        Start listening on the given port.

        Starting again on the same port only clears the mappings. Starting
        on another port closes the running listener first.

        Args:
            port: Port as int or numeric string, in [1025, 49151]

        Returns:
            self, for chaining

        Raises:
            InvalidPortError: If the port is invalid
            BindError: If the port cannot be bound
            ServerStartError: If the listener does not come up in time
        """
        port = validate_port(port)

        if self.state == ServerState.RUNNING:
            if port == self.port:
                self.logger.info(f"Mock server has started already on port {port}, no need to restart")
                self.reset()
                return self
            self.logger.info(f"Moving mock server from port {self.port} to {port}")
            self.close()

        self.state = ServerState.STARTING
        try:
            sock = self._bind(port)
        except OSError as e:
            self.state = ServerState.STOPPED
            self.logger.error(f"Mock server is NOT started successfully: {e}")
            raise BindError(self.config.host, port, e) from e

        server = uvicorn.Server(uvicorn.Config(
            self.app,
            log_level=self.config.log_level,
            access_log=self.config.access_log,
            lifespan="off",
            timeout_graceful_shutdown=self.config.shutdown_timeout
        ))
        thread = threading.Thread(
            target=server.run,
            kwargs={'sockets': [sock]},
            name=f"mockwire-{port}",
            daemon=True
        )
        thread.start()

        deadline = time.monotonic() + self.config.startup_timeout
        while not server.started and thread.is_alive() and time.monotonic() < deadline:
            time.sleep(0.01)

        if not server.started:
            server.should_exit = True
            thread.join(timeout=self.config.startup_timeout)
            sock.close()
            self.state = ServerState.STOPPED
            self.logger.error("Mock server is NOT started successfully")
            raise ServerStartError(f"Mock server did not start on {self.config.host}:{port}")

        self._server, self._thread, self._socket = server, thread, sock
        self.port = port
        self.state = ServerState.RUNNING
        self.metrics = MockMetrics()

        if self.bridge.install(port):
            self.logger.info(f"Interception enabled, matching requests go to port {port}")

        self.logger.info(f"Mock server is up on http://{self.config.host}:{port}")
        return self

    def close(self) -> MockServer:
        """
        Clear the mappings and stop listening. Closing a stopped server is a no-op.

        Returns:
            self, for chaining
        """
        self.reset()

        if self._server is not None:
            self._server.should_exit = True
            if self._thread is not None:
                self._thread.join(timeout=self.config.shutdown_timeout + 5)
            if self._socket is not None:
                self._socket.close()
            self.logger.info(f"Mock server on port {self.port} is closed")

        self._server = None
        self._thread = None
        self._socket = None
        self.port = 0
        self.state = ServerState.STOPPED
        return self

    def is_server_up(self) -> bool:
        """True while the listener is running."""
        return self.state == ServerState.RUNNING

    def _bind(self, port: int) -> socket.socket:
        """Bind the listener socket; raises OSError on failure."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.config.host, port))
            sock.listen(128)
        except OSError:
            sock.close()
            raise
        return sock

    def __enter__(self) -> MockServer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Mappings
    # ------------------------------------------------------------------

    def when(self, pattern: Union[RequestPattern, Dict[str, Any], None]) -> MockServer:
        """
        Define the request pattern of the next mapping.

        Args:
            pattern: RequestPattern or dict with method/url/data

        Returns:
            self, for chaining
        """
        self.store.define_pattern(pattern)
        return self

    def response(self, plan: Union[ResponsePlan, Dict[str, Any], None]) -> MockServer:
        """
        Define the response for the pattern given to the last ``when()``.

        Args:
            plan: ResponsePlan or dict (status, headers, responseTime,
                isTimeout, responseText, responseFile)

        Returns:
            self, for chaining

        Raises:
            UnmatchedPatternError: If ``when()`` was not called first
        """
        self.store.attach_response(plan)
        return self

    def reset(self) -> MockServer:
        """Clear all mappings and release request interception."""
        self.store.reset()
        return self

    def _on_mappings_changed(self, store: MappingStore) -> None:
        if self.state == ServerState.RUNNING:
            self.bridge.install(self.port)

    def _on_mappings_reset(self, store: MappingStore) -> None:
        self.bridge.release()

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes."""
        app = FastAPI(
            title="mockwire",
            description="Programmable mock HTTP server",
            version="1.0.0",
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )

        # Admin API routes
        if self.config.admin_enabled:
            @app.get(f"{self.config.admin_prefix}/mappings")
            async def get_mappings():
                """List mappings and the pending pattern."""
                return JSONResponse(content=self.store.to_dict())

            @app.get(f"{self.config.admin_prefix}/metrics")
            async def get_metrics():
                """Get server metrics."""
                return JSONResponse(content=self.metrics.to_dict())

        # Main catch-all route for mocking, open to every HTTP method
        app.add_route("/{path:path}", CatchAllEndpoint(self._handle_request), include_in_schema=False)

        return app

    async def _handle_request(self, request: Request) -> Response:
        """
        Match an incoming request and serve its mapped response.

        Args:
            request: FastAPI Request object

        Returns:
            Mapped response, or an empty 404 when nothing matches
        """
        self.metrics.total_requests += 1

        url = request_target(request.url.path, request.url.query)
        body = await request.body()
        descriptor = RequestDescriptor.from_raw(request.method, url, body)

        self.logger.debug(f"Incoming: {descriptor.method} {url}")

        if self.store.pending is not None:
            self.logger.warning(
                "You have .when() been called, but NO .response() following to define the expected response."
            )

        result = find_match(self.store.entries, descriptor)
        if not result.matched:
            self.metrics.unmatched_requests += 1
            self.logger.warning(f"{url}: NO match found")
            return Response(status_code=404)

        self.metrics.matched_requests += 1
        entry = result.entry
        self.logger.info(f"{url} is matched with {entry.request.to_dict()}")

        outcome = self.synthesizer.synthesize(entry.response)
        if isinstance(outcome, Timeout):
            self.metrics.timeouts += 1
            self.logger.warning(f"Simulate a timeout for {url}")
            return await self._hang()

        if outcome.delay_ms > 0:
            await asyncio.sleep(outcome.delay_seconds)

        headers = {
            k: v for k, v in outcome.headers.items()
            if k.lower() not in HEADERS_TO_SKIP
        }

        self.logger.info(
            f"{url} is served in {outcome.delay_ms} ms: "
            f"[status: {outcome.status}][response: {outcome.body}][headers: {headers}]"
        )

        return Response(
            content=outcome.body,
            status_code=outcome.status,
            headers=headers
        )

    async def _hang(self) -> Response:
        """Wait forever; only server shutdown cancels this."""
        return await asyncio.get_running_loop().create_future()

    def get_app(self) -> FastAPI:
        """
        Get the FastAPI app instance for testing or custom deployment.

        Returns:
            FastAPI application instance
        """
        return self.app


def create_mock_server(
    port: Optional[Union[int, str]] = None,
    host: str = "127.0.0.1",
    log_level: str = "info",
    admin_enabled: bool = False,
    file_reader: Callable[[str], str] = read_text_file,
    interception_host: Optional[Any] = None
) -> MockServer:
    """
    Convenience function to create a mock server, started when a port is given.

    Args:
        port: Port to start on, or None to leave the server stopped
        host: Host to bind to
        log_level: Logging level (debug, info, warning, error)
        admin_enabled: Enable the read-only admin API
        file_reader: Reads responseFile contents
        interception_host: Optional interception host

    Returns:
        Configured MockServer instance

    Example:
        server = create_mock_server(9001)
        server.when({'url': 'dummy.js', 'method': 'GET'}).response({
            'status': 200,
            'responseText': "alert('this is alert');",
            'headers': {'Content-Type': 'application/x-javascript'}
        })
    """
    config = ServerConfig(
        host=host,
        log_level=log_level,
        admin_enabled=admin_enabled
    )

    server = MockServer(config, file_reader=file_reader, interception_host=interception_host)
    if port is not None:
        server.start(port)
    return server
