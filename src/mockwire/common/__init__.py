"""
mockwire Common Utilities

Shared utilities and helpers used across mockwire modules.
"""

from .utils import (
    serialize_body,
    escape_json_quotes,
    parse_flag,
    is_number,
    read_text_file,
)
from .url_utils import redirect_url, request_target

__all__ = [
    'serialize_body',
    'escape_json_quotes',
    'parse_flag',
    'is_number',
    'read_text_file',
    'redirect_url',
    'request_target',
]
