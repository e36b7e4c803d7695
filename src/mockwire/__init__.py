"""
mockwire - programmable HTTP test double.

Example:
    from mockwire import MockServer

    server = MockServer().start(9001)
    server.when({'url': 'ajax_info_1', 'method': 'GET'}) \\
          .response({'status': 200, 'responseText': 'Mock Response 1'})
"""

from .errors import (
    MockServerError,
    InvalidPortError,
    ServerStartError,
    BindError,
    UnmatchedPatternError,
    FileReadError,
)
from .mock import (
    MockServer,
    ServerConfig,
    ServerState,
    RequestPattern,
    ResponsePlan,
    MappingEntry,
    MappingStore,
    create_mock_server,
)
from .intercept import InterceptionBridge

__all__ = [
    'MockServer',
    'ServerConfig',
    'ServerState',
    'RequestPattern',
    'ResponsePlan',
    'MappingEntry',
    'MappingStore',
    'InterceptionBridge',
    'create_mock_server',
    'MockServerError',
    'InvalidPortError',
    'ServerStartError',
    'BindError',
    'UnmatchedPatternError',
    'FileReadError',
]

__version__ = '1.0.0'
