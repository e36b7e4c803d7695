"""
mockwire Request Matcher

First-match-wins matching of incoming requests against the ordered mapping
list. The same pattern check is used by the listener and by the interception
bridge, so the two delivery paths always agree on what a pattern matches.

Each pattern field becomes a small field matcher:
- AnyValue: the field was absent, anything matches
- MethodEquals: case-insensitive HTTP method comparison
- Contains: substring check
- Regex: regular expression search
- AnyOf: substring first, regular expression as fallback
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Optional, Pattern, Sequence, Tuple, Union

from .models import MappingEntry, RequestPattern
from ..common.utils import serialize_body


@dataclass(frozen=True)
class AnyValue:
    """Matches everything, including a missing value."""

    def matches(self, value: Optional[str]) -> bool:
        return True


@dataclass(frozen=True)
class MethodEquals:
    """Case-insensitive method comparison."""

    method: str

    def matches(self, value: Optional[str]) -> bool:
        return value is not None and value.upper() == self.method.upper()


@dataclass(frozen=True)
class Contains:
    """Substring check."""

    needle: str

    def matches(self, value: Optional[str]) -> bool:
        return value is not None and self.needle in value


@dataclass(frozen=True)
class Regex:
    """Regular expression search."""

    pattern: Pattern

    def matches(self, value: Optional[str]) -> bool:
        return value is not None and self.pattern.search(value) is not None


@dataclass(frozen=True)
class AnyOf:
    """Matches when any option matches, tried in order."""

    options: Tuple[Any, ...]

    def matches(self, value: Optional[str]) -> bool:
        return any(option.matches(value) for option in self.options)


FieldMatcher = Union[AnyValue, MethodEquals, Contains, Regex, AnyOf]


@lru_cache(maxsize=512)
def text_matcher(text: Optional[str]) -> FieldMatcher:
    """
    Build the substring-or-regex matcher for a url or data pattern.

    A pattern that is not a valid regular expression only matches as a
    substring.

    Args:
        text: Pattern text, or None for 'match anything'

    Returns:
        Field matcher
    """
    if text is None:
        return AnyValue()

    contains = Contains(text)
    try:
        compiled = re.compile(text)
    except re.error:
        return contains
    return AnyOf((contains, Regex(compiled)))


@lru_cache(maxsize=64)
def method_matcher(method: Optional[str]) -> FieldMatcher:
    """Build the matcher for the method field."""
    if method is None:
        return AnyValue()
    return MethodEquals(method)


@dataclass(frozen=True)
class RequestDescriptor:
    """
    The parts of a request that patterns are matched against.

    Attributes:
        method: Uppercase HTTP method
        url: Request URL (path and query on the listener, full URL on the
            interception path)
        body: Serialized body, None when the request has no body
    """

    method: str
    url: str
    body: Optional[str] = None

    @classmethod
    def from_raw(cls, method: str, url: str, body: Any = None) -> 'RequestDescriptor':
        """
        Build a descriptor from raw request parts.

        Args:
            method: HTTP method (any case)
            url: Request URL
            body: Raw body as bytes or str

        Returns:
            RequestDescriptor with a serialized body
        """
        return cls(
            method=(method or 'GET').upper(),
            url=url or '',
            body=serialize_body(body)
        )


def pattern_matches(pattern: RequestPattern, request: RequestDescriptor) -> bool:
    """
    Check a single pattern against a request.

    All three fields must match. A data pattern never matches a request
    without a body.
    """
    if not method_matcher(pattern.method).matches(request.method):
        return False

    if not text_matcher(pattern.url).matches(request.url):
        return False

    if pattern.data is not None and request.body is None:
        return False

    return text_matcher(pattern.data).matches(request.body)


@dataclass
class MatchResult:
    """Result of matching a request."""

    matched: bool
    entry: Optional[MappingEntry] = None
    index: int = -1
    reason: str = ""


def find_match(entries: Sequence[MappingEntry], request: RequestDescriptor) -> MatchResult:
    """
    Find the first mapping entry whose pattern matches the request.

    Args:
        entries: Mapping entries in priority order
        request: Incoming request

    Returns:
        MatchResult for the first match, or an unmatched result
    """
    for index, entry in enumerate(entries):
        if pattern_matches(entry.request, request):
            return MatchResult(
                matched=True,
                entry=entry,
                index=index,
                reason=f"Matched mapping #{index}"
            )

    return MatchResult(
        matched=False,
        reason=f"No mapping matches {request.method} {request.url}"
    )


def match(entries: Sequence[MappingEntry], request: RequestDescriptor) -> Optional[MappingEntry]:
    """Return the first matching entry, or None."""
    return find_match(entries, request).entry


def matching_patterns(
    patterns: Iterable[RequestPattern],
    request: RequestDescriptor
) -> Iterable[RequestPattern]:
    """Yield every pattern that matches the request, in order."""
    for pattern in patterns:
        if pattern_matches(pattern, request):
            yield pattern
