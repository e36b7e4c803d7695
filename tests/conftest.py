"""
Shared fixtures for mockwire tests.
"""

import random
import socket

import pytest

from mockwire.mock.server import MockServer, ServerConfig


def _port_is_free(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind(('127.0.0.1', port))
        except OSError:
            return False
    return True


@pytest.fixture
def free_port():
    """A currently unused port inside the allowed range."""
    for _ in range(100):
        port = random.randint(20000, 40000)
        if _port_is_free(port):
            return port
    pytest.skip("No free port available")


@pytest.fixture
def server():
    """Stopped mock server, closed after the test."""
    mock_server = MockServer(ServerConfig(log_level='debug', shutdown_timeout=0.5))
    yield mock_server
    mock_server.close()
