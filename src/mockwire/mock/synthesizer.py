"""
mockwire Response Synthesizer

Turns a matched response plan into what the listener has to do: write a
response after a delay (Timed) or never answer at all (Timeout).
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Union

from .models import ResponsePlan
from ..common.utils import is_number, parse_flag, read_text_file


logger = logging.getLogger("mockwire.mock")


@dataclass(frozen=True)
class Timed:
    """Write this response after ``delay_ms`` milliseconds."""

    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    delay_ms: float = 0

    @property
    def delay_seconds(self) -> float:
        """Delay in seconds, as asyncio.sleep expects it."""
        return self.delay_ms / 1000


@dataclass(frozen=True)
class Timeout:
    """Never write a response and leave the connection open."""


Outcome = Union[Timed, Timeout]


class ResponseSynthesizer:
    """
    Resolve response plans into concrete outcomes.

    Example:
        synthesizer = ResponseSynthesizer()
        outcome = synthesizer.synthesize(ResponsePlan(response_text='ok', response_time=50))
        # Timed(status=200, headers={}, body='ok', delay_ms=50)
    """

    def __init__(self, file_reader: Callable[[str], str] = read_text_file):
        """
        Initialize response synthesizer.

        Args:
            file_reader: Reads a response file and returns its text
        """
        self.file_reader = file_reader

    def synthesize(self, plan: ResponsePlan) -> Outcome:
        """
        Build the outcome for a response plan.

        Args:
            plan: Matched response plan

        Returns:
            Timeout when the plan simulates a timeout, otherwise Timed
        """
        if parse_flag(plan.is_timeout):
            return Timeout()

        return Timed(
            status=self._resolve_status(plan),
            headers=self._resolve_headers(plan),
            body=self._resolve_body(plan),
            delay_ms=self._resolve_delay(plan)
        )

    def _resolve_status(self, plan: ResponsePlan) -> int:
        if plan.status is None or plan.status == '':
            return 200
        try:
            return int(plan.status)
        except (TypeError, ValueError):
            logger.warning(f"Invalid status {plan.status!r}, using 200")
            return 200

    def _resolve_headers(self, plan: ResponsePlan) -> Dict[str, str]:
        # Mapping files may carry numbers or booleans as header values
        return {str(name): str(value) for name, value in (plan.headers or {}).items()}

    def _resolve_delay(self, plan: ResponsePlan) -> float:
        delay = plan.response_time
        if not is_number(delay) or delay < 0:
            return 0
        return delay

    def _resolve_body(self, plan: ResponsePlan) -> str:
        """responseText first, then responseFile, else empty."""
        if isinstance(plan.response_text, str):
            return plan.response_text

        if plan.response_file:
            try:
                text = self.file_reader(plan.response_file)
            except Exception as e:
                logger.error(f"Cannot read response file '{plan.response_file}': {e}; serving an empty body")
                return ""
            if isinstance(text, str):
                return text
            logger.error(
                f"Reading response file '{plan.response_file}' returned {type(text).__name__}, not text; "
                f"serving an empty body"
            )

        return ""
