"""
mockwire Common Utilities

Small helpers shared by the mock server, the matcher and the interception
bridge: body serialization, quote escaping, flag parsing and file access.
"""

import json
from pathlib import Path
from typing import Any, Optional

from ..errors import FileReadError


def serialize_body(body: Any) -> Optional[str]:
    """
    Serialize a request body into the text that body patterns are searched in.

    The body is rendered as a JSON string literal, so embedded quotes show up
    escaped (``\\"``). Body patterns are escaped the same way when they are
    defined (see :func:`escape_json_quotes`), which keeps substring checks
    consistent between the two.

    Args:
        body: Raw body as bytes, str, or None

    Returns:
        Serialized body, or None when the request carries no body

    Example:
        serialize_body(b'member_id=1')      # '"member_id=1"'
        serialize_body(b'{"id": 1}')        # '"{\\"id\\": 1}"'
    """
    if body is None:
        return None

    if isinstance(body, (bytes, bytearray)):
        body = bytes(body).decode('utf-8', errors='replace')
    elif not isinstance(body, str):
        body = str(body)

    if not body:
        return None

    return json.dumps(body, ensure_ascii=False)


def escape_json_quotes(text: str) -> str:
    """
    Escape double quotes the way :func:`serialize_body` renders them.

    Only quotes are escaped; backslashes are left alone so a body pattern can
    still be used as a regular expression.
    """
    return text.replace('"', '\\"')


def parse_flag(value: Any) -> bool:
    """
    Interpret a boolean-or-string flag.

    ``True`` and any casing of the string ``"true"`` are truthy; everything
    else (including ``None``, ``"false"`` and numbers) is false.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == 'true'
    return False


def is_number(value: Any) -> bool:
    """Return True for int/float values (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def read_text_file(path: str) -> str:
    """
    Read a response file as UTF-8 text.

    Args:
        path: Path of the file to read

    Returns:
        File contents

    Raises:
        FileReadError: If the file is missing or cannot be decoded
    """
    try:
        return Path(path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(path, e) from e
