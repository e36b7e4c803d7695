"""
mockwire Mock Server Module

Programmable mock HTTP server for test scripts.

This module provides:
- FastAPI-based mock server with start/close lifecycle
- Ordered mapping store (when/response/reset)
- First-match-wins request matcher
- Response synthesis with delays and simulated timeouts
- JSON/YAML mapping files
"""

from .server import (
    MockServer,
    ServerConfig,
    ServerState,
    MockMetrics,
    create_mock_server,
    validate_port,
)
from .models import RequestPattern, ResponsePlan, MappingEntry
from .store import MappingStore
from .matcher import RequestDescriptor, MatchResult, find_match, match, pattern_matches
from .synthesizer import ResponseSynthesizer, Timed, Timeout
from .mapping_file import load_mappings, parse_mappings, apply_mappings

__all__ = [
    # Server
    'MockServer',
    'ServerConfig',
    'ServerState',
    'MockMetrics',
    'create_mock_server',
    'validate_port',

    # Models
    'RequestPattern',
    'ResponsePlan',
    'MappingEntry',
    'MappingStore',

    # Matcher
    'RequestDescriptor',
    'MatchResult',
    'find_match',
    'match',
    'pattern_matches',

    # Synthesizer
    'ResponseSynthesizer',
    'Timed',
    'Timeout',

    # Mapping files
    'load_mappings',
    'parse_mappings',
    'apply_mappings',
]
