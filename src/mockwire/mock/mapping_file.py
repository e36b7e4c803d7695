"""
mockwire Mapping Files

Load request/response mappings from JSON or YAML files.

Accepted formats:
- Format 1: {"mappings": [{"request": {...}, "response": {...}}, ...]}
- Format 2: [{"request": {...}, "response": {...}}, ...]
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .models import MappingEntry, RequestPattern, ResponsePlan
from ..errors import UnmatchedPatternError


YAML_SUFFIXES = {'.yml', '.yaml'}


def load_mappings(file_path: str) -> List[MappingEntry]:
    """
    Load mappings from a JSON or YAML file.

    Args:
        file_path: Path to the mapping file

    Returns:
        Mapping entries in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file format is unrecognized
        UnmatchedPatternError: If an item lacks its request or response
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Mapping file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    return parse_mappings(data, source=str(path))


def parse_mappings(data: Any, source: str = '<data>') -> List[MappingEntry]:
    """
    Build mapping entries from already-parsed data.

    Args:
        data: List of mappings, or dict with a 'mappings' list
        source: Name used in error messages

    Returns:
        Mapping entries
    """
    if isinstance(data, dict):
        if 'mappings' not in data:
            raise ValueError(
                f"Unexpected format in {source}. "
                f"Expected dict with 'mappings' key or a list of mappings. "
                f"Found keys: {list(data.keys())}"
            )
        items = data['mappings'] or []
    elif isinstance(data, list):
        items = data
    elif data is None:
        items = []
    else:
        raise ValueError(
            f"Unexpected format in {source}. "
            f"Expected dict or list, got {type(data).__name__}"
        )

    entries = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or 'request' not in item:
            raise UnmatchedPatternError(f"Mapping #{index} in {source} has no 'request' pattern")
        if 'response' not in item:
            raise UnmatchedPatternError(f"Mapping #{index} in {source} has no 'response' plan")

        entries.append(MappingEntry(
            request=RequestPattern.coerce(item['request']),
            response=ResponsePlan.coerce(item['response'])
        ))

    return entries


def apply_mappings(server, entries: List[MappingEntry]):
    """
    Register entries on a server through ``when()``/``response()``.

    Args:
        server: MockServer (or anything with when/response)
        entries: Entries to register, in order

    Returns:
        The server, for chaining
    """
    for entry in entries:
        server.when(entry.request).response(entry.response)
    return server


def entries_to_dict(entries: List[MappingEntry]) -> Dict[str, Any]:
    """Serialize entries in Format 1."""
    return {'mappings': [entry.to_dict() for entry in entries]}
