"""
mockwire Mapping Models

Data model of the mapping engine: what to match (RequestPattern), how to
respond (ResponsePlan) and the pair stored by the mapping store
(MappingEntry).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


def _blank_to_none(value: Any) -> Optional[str]:
    """Treat missing and empty values as 'match anything'."""
    if value is None or value == '':
        return None
    return str(value)


@dataclass(frozen=True)
class RequestPattern:
    """
    Request pattern of a mapping.

    Every field is optional; an absent field matches any request on that
    dimension, so ``RequestPattern()`` matches every request.

    Attributes:
        method: HTTP method, compared case-insensitively
        url: Substring of, or regular expression searched in, the request URL
        data: Substring of, or regular expression searched in, the serialized body
    """

    method: Optional[str] = None
    url: Optional[str] = None
    data: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RequestPattern':
        """Create RequestPattern from dictionary."""
        return cls(
            method=_blank_to_none(data.get('method')),
            url=_blank_to_none(data.get('url')),
            data=_blank_to_none(data.get('data'))
        )

    @classmethod
    def coerce(cls, value: Union['RequestPattern', Dict[str, Any], None]) -> 'RequestPattern':
        """Accept a RequestPattern, a dict or None."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls()
        if isinstance(value, dict):
            return cls.from_dict(value)
        raise TypeError(f"Expected RequestPattern or dict, got {type(value).__name__}")

    @property
    def is_wildcard(self) -> bool:
        """True if the pattern matches every request."""
        return self.method is None and self.url is None and self.data is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, leaving out absent fields."""
        return {
            key: value
            for key, value in (('method', self.method), ('url', self.url), ('data', self.data))
            if value is not None
        }


@dataclass(frozen=True)
class ResponsePlan:
    """
    Response plan of a mapping.

    Values are kept as given; the response synthesizer applies the defaults
    (status 200, no headers, no delay, empty body) when it builds the reply.

    Attributes:
        status: HTTP status code
        headers: Response headers
        response_time: Delay before the response is written, in milliseconds
        is_timeout: True or "true" to never answer the request
        response_text: Literal response body, wins over response_file
        response_file: Path of a file holding the response body
    """

    status: Any = None
    headers: Optional[Dict[str, str]] = None
    response_time: Any = None
    is_timeout: Any = False
    response_text: Any = None
    response_file: Optional[str] = None

    # Accepted spellings for each field in dictionaries
    _ALIASES = {
        'status': ('status',),
        'headers': ('headers',),
        'response_time': ('responseTime', 'response_time'),
        'is_timeout': ('isTimeout', 'is_timeout'),
        'response_text': ('responseText', 'response_text'),
        'response_file': ('responseFile', 'response_file'),
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResponsePlan':
        """Create ResponsePlan from a dictionary with camelCase or snake_case keys."""
        values = {}
        for name, keys in cls._ALIASES.items():
            for key in keys:
                if key in data:
                    values[name] = data[key]
                    break
        return cls(**values)

    @classmethod
    def coerce(cls, value: Union['ResponsePlan', Dict[str, Any], None]) -> 'ResponsePlan':
        """Accept a ResponsePlan, a dict or None."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls()
        if isinstance(value, dict):
            return cls.from_dict(value)
        raise TypeError(f"Expected ResponsePlan or dict, got {type(value).__name__}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using the camelCase wire names."""
        data = {
            'status': self.status,
            'headers': self.headers,
            'responseTime': self.response_time,
            'isTimeout': self.is_timeout,
            'responseText': self.response_text,
            'responseFile': self.response_file,
        }
        return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class MappingEntry:
    """One request-pattern/response-plan pair."""

    request: RequestPattern
    response: ResponsePlan = field(default_factory=ResponsePlan)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'request': self.request.to_dict(),
            'response': self.response.to_dict()
        }
