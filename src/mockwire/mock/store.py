"""
mockwire Mapping Store

Ordered request/response mappings plus the single pending pattern slot that
``when()`` fills and ``response()`` consumes.
"""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .models import MappingEntry, RequestPattern, ResponsePlan
from ..common.utils import escape_json_quotes
from ..errors import UnmatchedPatternError


logger = logging.getLogger("mockwire.mock")


class MappingStore:
    """
    Ordered collection of mapping entries.

    Insertion order is match priority. Mutations replace the entry tuple as a
    whole, so readers on the listener thread always see a fully committed
    list.

    Example:
        store = MappingStore()
        store.define_pattern({'url': 'ajax_info_1', 'method': 'GET'})
        store.attach_response({'status': 200, 'responseText': 'Mock Response 1'})
        len(store)  # 1
    """

    def __init__(
        self,
        on_change: Optional[Callable[['MappingStore'], Any]] = None,
        on_reset: Optional[Callable[['MappingStore'], Any]] = None
    ):
        """
        Initialize mapping store.

        Args:
            on_change: Called after an entry has been appended
            on_reset: Called after the store has been cleared
        """
        self._entries: Tuple[MappingEntry, ...] = ()
        self._pending: Optional[RequestPattern] = None
        self.on_change = on_change
        self.on_reset = on_reset

    @property
    def entries(self) -> Tuple[MappingEntry, ...]:
        """Snapshot of the stored entries."""
        return self._entries

    @property
    def pending(self) -> Optional[RequestPattern]:
        """Pattern waiting for its response plan, if any."""
        return self._pending

    def __len__(self) -> int:
        return len(self._entries)

    def define_pattern(self, pattern: Union[RequestPattern, Dict[str, Any], None]) -> 'MappingStore':
        """
        Set the pending request pattern.

        Quotes in the data pattern are escaped so the pattern can be found in
        the serialized request body.

        Args:
            pattern: RequestPattern or dict with method/url/data

        Returns:
            self, for chaining
        """
        pattern = RequestPattern.coerce(pattern)
        if pattern.data is not None:
            pattern = replace(pattern, data=escape_json_quotes(pattern.data))

        if self._pending is not None:
            logger.warning(
                f"Pattern {self._pending.to_dict()} never received a .response() "
                f"and is replaced by {pattern.to_dict()}"
            )

        self._pending = pattern
        return self

    def attach_response(self, plan: Union[ResponsePlan, Dict[str, Any], None]) -> 'MappingStore':
        """
        Pair the pending pattern with a response plan.

        Args:
            plan: ResponsePlan or dict with the plan fields

        Returns:
            self, for chaining

        Raises:
            UnmatchedPatternError: If no pattern is pending
        """
        if self._pending is None:
            raise UnmatchedPatternError()

        entry = MappingEntry(request=self._pending, response=ResponsePlan.coerce(plan))
        self._entries = self._entries + (entry,)
        self._pending = None

        if self.on_change is not None:
            self.on_change(self)

        return self

    def reset(self) -> 'MappingStore':
        """Remove all entries and the pending pattern."""
        self._entries = ()
        self._pending = None

        if self.on_reset is not None:
            self.on_reset(self)

        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'total': len(self._entries),
            'mappings': [entry.to_dict() for entry in self._entries],
            'pending': self._pending.to_dict() if self._pending is not None else None
        }
