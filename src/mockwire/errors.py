"""
mockwire Errors

Configuration-time errors (bad port, response without a pattern) propagate to
the calling test script. Per-request errors such as an unreadable response
file are contained by the server and never reach the listener loop.
"""

from typing import Any, Optional


class MockServerError(Exception):
    """Base class for all mockwire errors."""


class InvalidPortError(MockServerError, ValueError):
    """Port is not an integer within the allowed range."""

    def __init__(self, port: Any, min_port: int, max_port: int):
        self.port = port
        super().__init__(
            f"Invalid port {port!r}: expected an integer between {min_port} and {max_port}"
        )


class ServerStartError(MockServerError):
    """The listener could not be started."""


class BindError(ServerStartError):
    """The listener socket could not be bound."""

    def __init__(self, host: str, port: int, cause: Optional[BaseException] = None):
        self.host = host
        self.port = port
        message = f"Could not bind mock server to {host}:{port}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class UnmatchedPatternError(MockServerError):
    """A response plan was given without a pending request pattern."""

    def __init__(self, message: str = "Please call .when() to set the request pattern first"):
        super().__init__(message)


class FileReadError(MockServerError):
    """A responseFile could not be read."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        message = f"Could not read response file {path!r}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
