"""Response handler for administration API responses."""
import json
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from ..errors import DsAPIError, ERROR_TRANSPORT


class _Missing:
    """Sentinel returned by extractors when an expected field is absent."""

    def __repr__(self) -> str:
        return 'MISSING'


MISSING = _Missing()


@dataclass(frozen=True)
class Outcome:
    """
    Result of one remote call.

    `error` is None on success, otherwise the integer error code.
    Unpacks as a pair: ``error, payload = await client.list()``.
    """
    error: Optional[int] = None
    payload: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> Any:
        """Return the payload, or raise DsAPIError for a failed call."""
        if self.error is not None:
            raise DsAPIError(self.error)
        return self.payload

    def __iter__(self) -> Iterator[Any]:
        yield self.error
        yield self.payload


class ResponseHandler:
    """Maps HTTP outcomes to error codes."""

    @staticmethod
    def status_error(status: Optional[int]) -> Optional[int]:
        """Error code for a response status; None for 200."""
        if status == 200:
            return None
        return status if status else ERROR_TRANSPORT

    @staticmethod
    def parse_response(text: str) -> Any:
        """Parses JSON response; raises ValueError when it is not JSON."""
        return json.loads(text)

    @staticmethod
    def process_response(
        status: Optional[int],
        text: Optional[str],
        expect_json: bool = False,
        parse_error_code: int = ERROR_TRANSPORT,
        extract: Optional[Callable[[Any], Any]] = None
    ) -> Outcome:
        """Turns a completed response into an Outcome."""
        error = ResponseHandler.status_error(status)
        if error is not None:
            return Outcome(error)

        if not expect_json:
            return Outcome()

        try:
            payload = ResponseHandler.parse_response(text if text is not None else '')
        except ValueError:
            return Outcome(parse_error_code)

        if extract is not None:
            payload = extract(payload)
            if payload is MISSING:
                return Outcome(ERROR_TRANSPORT)

        return Outcome(None, payload)

    @staticmethod
    def deliver(
        outcome: Outcome,
        callback: Optional[Callable[..., Any]] = None,
        with_payload: bool = False
    ) -> Outcome:
        """Invokes the optional completion callback once and returns the outcome."""
        if callback is not None:
            if with_payload:
                callback(outcome.error, outcome.payload)
            else:
                callback(outcome.error)
        return outcome
