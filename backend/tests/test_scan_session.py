"""Tests for scanner session sequencing (last scan wins)."""

import asyncio

import pytest

from stockscan.core.errors import ProductNotFoundError
from stockscan.schemas.stock import StockResult
from stockscan.services.scan_session import LookupTicket, ScanNotifier, ScanSession


def make_result(barcode: str, stock: float = 1) -> StockResult:
    return StockResult(barcode=barcode, product_id=f"P-{barcode}", total_base_quantity=stock)


class ControlledLookup:
    """Lookup whose completion order is decided by the test."""

    def __init__(self):
        self.calls = []
        self.gates = {}

    def release(self, barcode: str) -> None:
        self.gates[barcode].set()

    async def __call__(self, barcode: str) -> StockResult:
        self.calls.append(barcode)
        gate = self.gates.setdefault(barcode, asyncio.Event())
        await gate.wait()
        return make_result(barcode)


class RecordingNotifier(ScanNotifier):

    def __init__(self):
        self.notified = []
        self.closed = False

    def notify_success(self, result):
        self.notified.append(result.barcode)

    def close(self):
        self.closed = True


A = "1111111111111"
B = "2222222222222"


class TestPreflight:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["123", "12345678901234", "ABCDEFGHIJKL"])
    async def test_wrong_length_never_calls_lookup(self, code):
        lookup = ControlledLookup()
        session = ScanSession(lookup)

        assert await session.submit(code) is None

        assert lookup.calls == []
        assert session.status == "error"
        assert session.error == "Barcode must be exactly 13 characters."

    @pytest.mark.asyncio
    async def test_blank_input_ignored(self):
        lookup = ControlledLookup()
        session = ScanSession(lookup)
        assert await session.submit("   ") is None
        assert lookup.calls == []
        assert session.status == "idle"

    @pytest.mark.asyncio
    async def test_input_trimmed(self):
        async def lookup(barcode):
            return make_result(barcode)

        session = ScanSession(lookup)
        result = await session.submit(f"  {A} ")
        assert result.barcode == A
        assert session.barcode == A


class TestSequencing:

    @pytest.mark.asyncio
    async def test_stale_result_dropped(self):
        lookup = ControlledLookup()
        notifier = RecordingNotifier()
        session = ScanSession(lookup, notifier=notifier)

        task_a = asyncio.create_task(session.submit(A))
        await asyncio.sleep(0)
        task_b = asyncio.create_task(session.submit(B))
        await asyncio.sleep(0)

        lookup.release(B)
        assert (await task_b).barcode == B
        lookup.release(A)
        assert await task_a is None

        assert session.result.barcode == B
        assert session.status == "scanned"
        assert session.is_loading is False
        assert notifier.notified == [B]

    @pytest.mark.asyncio
    async def test_stale_failure_dropped(self):
        order = []

        async def lookup(barcode):
            order.append(barcode)
            if barcode == A:
                await asyncio.sleep(0.01)
                raise ProductNotFoundError("No product found.")
            return make_result(barcode)

        session = ScanSession(lookup)
        task_a = asyncio.create_task(session.submit(A))
        await asyncio.sleep(0)
        await session.submit(B)
        await task_a

        assert order == [A, B]
        assert session.status == "scanned"
        assert session.error is None
        assert session.result.barcode == B

    @pytest.mark.asyncio
    async def test_reset_invalidates_in_flight_lookup(self):
        lookup = ControlledLookup()
        session = ScanSession(lookup)

        task = asyncio.create_task(session.submit(A))
        await asyncio.sleep(0)
        session.reset()
        lookup.release(A)

        assert await task is None
        assert session.result is None
        assert session.status == "scanning"

    def test_tickets_increase(self):
        session = ScanSession(ControlledLookup())
        first = session.issue_ticket()
        second = session.issue_ticket()
        assert second.generation > first.generation
        assert not session.is_current(first)
        assert session.is_current(second)
        assert session.is_current(LookupTicket(second.generation))


class TestOutcome:

    @pytest.mark.asyncio
    async def test_lookup_error_surfaces_message(self):
        async def lookup(barcode):
            raise ProductNotFoundError("No product found for barcode 1111111111111.")

        session = ScanSession(lookup)
        assert await session.submit(A) is None
        assert session.status == "error"
        assert session.error == "No product found for barcode 1111111111111."
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_unexpected_error_surfaces_generic_message(self):
        async def lookup(barcode):
            raise RuntimeError("")

        session = ScanSession(lookup)
        await session.submit(A)
        assert session.error == "SAP lookup failed."

    @pytest.mark.asyncio
    async def test_notifier_failure_does_not_break_scan(self):
        class BrokenNotifier(ScanNotifier):
            def notify_success(self, result):
                raise OSError("audio device busy")

        async def lookup(barcode):
            return make_result(barcode)

        session = ScanSession(lookup, notifier=BrokenNotifier())
        result = await session.submit(A)
        assert result.barcode == A
        assert session.status == "scanned"

    @pytest.mark.asyncio
    async def test_default_notifier_is_silent(self):
        async def lookup(barcode):
            return make_result(barcode)

        session = ScanSession(lookup)
        assert isinstance(session.notifier, ScanNotifier)
        assert (await session.submit(A)).barcode == A
        session.close()

    def test_close_releases_notifier(self):
        notifier = RecordingNotifier()
        session = ScanSession(ControlledLookup(), notifier=notifier)
        session.close()
        assert notifier.closed
