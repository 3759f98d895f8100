# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""Unit tests for the RefreshScheduler."""

import asyncio
from collections.abc import AsyncIterator, Callable

import pytest
import pytest_asyncio

from interop_bridge.models.schemas import EventKind
from interop_bridge.services.refresh_scheduler import RefreshScheduler
from tests.helper import FakeLedgerClient, LedgerState, fill_event


class Reconciler:
    """Counts passes and queries each event kind once per pass"""

    def __init__(self, scheduler_ledger: Callable[[], FakeLedgerClient]) -> None:
        self.ledger = scheduler_ledger
        self.passes = 0
        self.running = 0
        self.max_running = 0

    async def __call__(self) -> None:
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        ledger = self.ledger()
        await ledger.query_events(EventKind.OPEN)
        await asyncio.sleep(0.01)
        await ledger.query_events(EventKind.FILL)
        self.passes += 1
        self.running -= 1


@pytest_asyncio.fixture
async def scheduler(ledger: FakeLedgerClient) -> AsyncIterator[RefreshScheduler]:
    holder: dict[str, RefreshScheduler] = {}
    reconciler = Reconciler(lambda: holder["scheduler"].ledger)
    scheduler = RefreshScheduler(ledger, reconciler, interval=3600)
    holder["scheduler"] = scheduler
    scheduler.reconciler = reconciler  # type: ignore[attr-defined]
    yield scheduler
    await scheduler.stop()


@pytest.mark.asyncio
async def test_start_subscribes_each_kind_once(
    scheduler: RefreshScheduler,
    ledger: FakeLedgerClient,
) -> None:
    scheduler.start()
    scheduler.start()

    assert scheduler.running
    assert ledger.handler_count == len(EventKind)
    assert {kind: len(h) for kind, h in ledger.handlers.items()} == dict.fromkeys(
        EventKind,
        1,
    )


@pytest.mark.asyncio
async def test_one_fill_notification_causes_one_pass(
    scheduler: RefreshScheduler,
    ledger: FakeLedgerClient,
) -> None:
    scheduler.start()

    await ledger.emit(fill_event("0x1"))
    await asyncio.sleep(0)
    await scheduler.wait_idle()

    assert scheduler.pass_count == 1
    assert ledger.query_count(EventKind.OPEN) == 1
    assert ledger.query_count(EventKind.FILL) == 1


@pytest.mark.asyncio
async def test_burst_of_triggers_is_coalesced(
    scheduler: RefreshScheduler,
    ledger: FakeLedgerClient,
) -> None:
    scheduler.start()

    for i in range(5):
        await ledger.emit(fill_event(f"0x{i}"))
    await scheduler.wait_idle()

    assert scheduler.pass_count == 1
    assert scheduler.reconciler.max_running == 1  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_passes_never_overlap(scheduler: RefreshScheduler) -> None:
    scheduler.start()

    await asyncio.gather(*(scheduler.request_pass(f"r{i}") for i in range(3)))
    await asyncio.gather(*(scheduler.request_pass(f"s{i}") for i in range(3)))

    assert scheduler.reconciler.max_running == 1  # type: ignore[attr-defined]
    assert scheduler.pass_count == 2


@pytest.mark.asyncio
async def test_request_pass_when_stopped_runs_directly(
    scheduler: RefreshScheduler,
) -> None:
    await scheduler.request_pass()
    assert scheduler.reconciler.passes == 1  # type: ignore[attr-defined]
    assert scheduler.pass_count == 0


@pytest.mark.asyncio
async def test_timer_triggers_passes() -> None:
    ledger = FakeLedgerClient()
    passes = []

    async def reconcile() -> None:
        passes.append(1)

    scheduler = RefreshScheduler(ledger, reconcile, interval=0.01)
    scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert len(passes) >= 2


@pytest.mark.asyncio
async def test_rebind_moves_subscriptions(
    scheduler: RefreshScheduler,
    ledger: FakeLedgerClient,
) -> None:
    scheduler.start()
    new_ledger = FakeLedgerClient(LedgerState())

    scheduler.rebind(new_ledger)

    assert ledger.handler_count == 0
    assert new_ledger.handler_count == len(EventKind)

    await new_ledger.emit(fill_event("0x1"))
    await asyncio.sleep(0)
    await scheduler.wait_idle()

    assert scheduler.pass_count == 1
    assert new_ledger.query_count(EventKind.OPEN) == 1
    assert ledger.query_count(EventKind.OPEN) == 0


@pytest.mark.asyncio
async def test_rebind_twice_does_not_duplicate_delivery(
    scheduler: RefreshScheduler,
) -> None:
    scheduler.start()
    new_ledger = FakeLedgerClient()

    scheduler.rebind(new_ledger)
    scheduler.rebind(new_ledger)

    assert new_ledger.handler_count == len(EventKind)


@pytest.mark.asyncio
async def test_stop_removes_subscriptions(
    scheduler: RefreshScheduler,
    ledger: FakeLedgerClient,
) -> None:
    scheduler.start()
    await scheduler.stop()

    assert not scheduler.running
    assert ledger.handler_count == 0

    await ledger.emit(fill_event("0x1"))
    assert scheduler.pass_count == 0
