"""Tests for the web server's background catalog sync."""
import asyncio
from types import SimpleNamespace

import pytest

from wsrecall.shared.errors import HistoryReadError
from wsrecall.web.app import auto_sync_loop


class FakeSyncService:
    def __init__(self, failures: int = 0):
        self.calls = 0
        self.failures = failures

    def sync(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise HistoryReadError("database is locked")
        return ["workspace"]


def run_until_calls(service: FakeSyncService, calls: int, interval: float = 0.01) -> None:
    async def run():
        task = asyncio.create_task(auto_sync_loop(SimpleNamespace(sync_service=service), interval))

        async def wait_for_calls():
            while service.calls < calls:
                await asyncio.sleep(0.01)

        try:
            await asyncio.wait_for(wait_for_calls(), timeout=5)
        finally:
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

    asyncio.run(run())


def test_syncs_immediately_and_repeats():
    service = FakeSyncService()
    run_until_calls(service, 3)
    assert service.calls >= 3


def test_history_errors_do_not_stop_the_loop():
    service = FakeSyncService(failures=2)
    run_until_calls(service, 4)
    assert service.calls >= 4


def test_first_sync_runs_before_the_first_interval():
    service = FakeSyncService()
    # An hour-long interval: only the startup sync can have happened
    run_until_calls(service, 1, interval=3600)
    assert service.calls == 1
