"""Operator scan session: last-scan-wins lookup sequencing.

Rapid rescans or overlapping manual submissions can start several lookups
at once. Each submission takes a generation-tagged ticket; when its lookup
finishes the ticket is compared with the session's current generation and a
stale result is dropped without touching state or surfacing an error.
In-flight requests are not aborted.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from stockscan.core.errors import StockLookupError
from stockscan.schemas.stock import StockResult

logger = logging.getLogger(__name__)

LookupFn = Callable[[str], Awaitable[StockResult]]

GENERIC_FAILURE_MESSAGE = "SAP lookup failed."


@dataclass(frozen=True)
class LookupTicket:
    generation: int


class ScanNotifier:
    """Feedback emitted when a scan resolves (the scanner's beep).

    This base class is a no-op; subclass it to drive a speaker or UI cue.
    Owned by the session that receives it and released by ``close()``.
    """

    def notify_success(self, result: StockResult) -> None:
        pass

    def close(self) -> None:
        pass


class ScanSession:
    """Display state for one operator's scanner screen."""

    def __init__(
        self,
        lookup: LookupFn,
        barcode_length: int = 13,
        notifier: Optional[ScanNotifier] = None,
    ):
        self._lookup = lookup
        self._generation = 0
        self.barcode_length = barcode_length
        self.notifier = notifier or ScanNotifier()

        self.status = "idle"
        self.barcode: Optional[str] = None
        self.result: Optional[StockResult] = None
        self.error: Optional[str] = None
        self.is_loading = False

    def issue_ticket(self) -> LookupTicket:
        self._generation += 1
        return LookupTicket(self._generation)

    def is_current(self, ticket: LookupTicket) -> bool:
        return ticket.generation == self._generation

    async def submit(self, code: str) -> Optional[StockResult]:
        """Look up a scanned or typed barcode.

        Returns the committed result, or None when the input was rejected,
        the lookup failed, or a newer scan superseded this one.
        """
        barcode = (code or "").strip()
        if not barcode:
            return None
        if len(barcode) != self.barcode_length:
            self.status = "error"
            self.error = f"Barcode must be exactly {self.barcode_length} characters."
            return None

        self.barcode = barcode
        ticket = self.issue_ticket()
        self.is_loading = True
        self.error = None
        self.result = None

        try:
            result = await self._lookup(barcode)
        except StockLookupError as e:
            if self.is_current(ticket):
                self._fail(e.message)
            else:
                logger.debug(f"Dropping stale failure for {barcode} (generation {ticket.generation})")
            return None
        except Exception as e:
            if not self.is_current(ticket):
                return None
            logger.exception(f"Unexpected error looking up {barcode}")
            self._fail(str(e) or GENERIC_FAILURE_MESSAGE)
            return None

        if not self.is_current(ticket):
            logger.debug(f"Dropping stale result for {barcode} (generation {ticket.generation})")
            return None

        self.result = result
        self.status = "scanned"
        self.is_loading = False
        self._notify(result)
        return result

    def _fail(self, message: str) -> None:
        self.status = "error"
        self.error = message or GENERIC_FAILURE_MESSAGE
        self.is_loading = False

    def _notify(self, result: StockResult) -> None:
        try:
            self.notifier.notify_success(result)
        except Exception as e:
            logger.warning(f"Scan notifier failed: {e}")

    def reset(self) -> None:
        """Rescan: invalidate any in-flight lookup and clear the display."""
        self.issue_ticket()
        self.barcode = None
        self.result = None
        self.error = None
        self.status = "scanning"
        self.is_loading = False

    def close(self) -> None:
        self.issue_ticket()
        self.notifier.close()
