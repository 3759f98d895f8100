# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import asyncio
from contextlib import suppress
from logging import getLogger
from typing import Any, Awaitable, Callable, Self

from interop_bridge.interfaces import ILedgerClient
from interop_bridge.models.schemas import EventKind, OrderEvent

LOG = getLogger(__name__)

Trigger = tuple[str, asyncio.Future]


class RefreshScheduler:
    """
    Decides when a reconciliation pass is executed.

    Timer ticks and push notifications of the ledger client are put on a
    single ordered queue that feeds one worker task. All triggers that are
    queued when the worker picks up the next one are served by the same pass,
    so passes never overlap and each notification causes exactly one pass.

    The timer is re-armed only after the pass it triggered completed.
    """

    def __init__(
        self: Self,
        ledger: ILedgerClient,
        reconcile: Callable[[], Awaitable[Any]],
        interval: float,
    ) -> None:
        self.__ledger = ledger
        self.__reconcile = reconcile
        self.__interval = interval
        self.__queue: asyncio.Queue[Trigger] = asyncio.Queue()
        self.__worker: asyncio.Task | None = None
        self.__timer: asyncio.Task | None = None
        self.__running = False
        self.__pass_count = 0

    @property
    def running(self: Self) -> bool:
        return self.__running

    @property
    def pass_count(self: Self) -> int:
        """Number of completed reconciliation passes"""
        return self.__pass_count

    @property
    def ledger(self: Self) -> ILedgerClient:
        return self.__ledger

    # == Lifecycle =============================================================

    def start(self: Self) -> None:
        """Subscribe to the ledger's notifications and start the drivers."""
        if self.__running:
            return
        LOG.info("Starting the refresh scheduler (interval: %ss)...", self.__interval)
        self.__running = True
        self.__attach(self.__ledger)
        self.__worker = asyncio.create_task(self.__work())
        self.__timer = asyncio.create_task(self.__tick())

    async def stop(self: Self) -> None:
        """Cancel the timer and the worker and remove all subscriptions."""
        if not self.__running:
            return
        LOG.info("Stopping the refresh scheduler...")
        self.__running = False

        for task in (self.__timer, self.__worker):
            if task is not None and not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
        self.__timer = self.__worker = None

        self.__ledger.unsubscribe_all()

        while not self.__queue.empty():
            _, future = self.__queue.get_nowait()
            future.cancel()
            self.__queue.task_done()

    def rebind(self: Self, ledger: ILedgerClient) -> None:
        """
        Swap the ledger client handle. The listeners of the old handle are
        always removed before the new handle gets its subscriptions.
        """
        if ledger is self.__ledger:
            return
        LOG.debug("Rebinding the refresh scheduler to a new ledger client...")
        self.__ledger.unsubscribe_all()
        self.__ledger = ledger
        if self.__running:
            self.__attach(ledger)

    # == Drivers ===============================================================

    async def request_pass(self: Self, reason: str = "manual") -> None:
        """
        Request a reconciliation pass and wait until it completed. If the
        scheduler is not running, the pass is executed directly.
        """
        if not self.__running:
            await self.__reconcile()
            return
        await self.__enqueue(reason)

    async def wait_idle(self: Self) -> None:
        """Wait until every queued trigger was served."""
        await self.__queue.join()

    def __attach(self: Self, ledger: ILedgerClient) -> None:
        # A re-created handle may still carry listeners of a former owner.
        ledger.unsubscribe_all()
        for kind in EventKind:
            ledger.subscribe(kind, self.__on_ledger_event)

    async def __on_ledger_event(self: Self, event: OrderEvent) -> None:
        LOG.info("Received %s event for order '%s'", event.kind, event.order_id)
        if self.__running:
            self.__enqueue(f"push:{event.kind}")

    def __enqueue(self: Self, reason: str) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        self.__queue.put_nowait((reason, future))
        return future

    async def __tick(self: Self) -> None:
        while self.__running:
            await asyncio.sleep(self.__interval)
            await self.__enqueue("timer")

    async def __work(self: Self) -> None:
        while True:
            batch = [await self.__queue.get()]
            while not self.__queue.empty():
                batch.append(self.__queue.get_nowait())

            LOG.debug(
                "Running reconciliation pass (triggered by: %s)",
                ", ".join(reason for reason, _ in batch),
            )
            try:
                await self.__reconcile()
            except asyncio.CancelledError:
                for _, future in batch:
                    future.cancel()
                    self.__queue.task_done()
                raise
            except Exception as exc:  # pylint: disable=broad-exception-caught
                LOG.error("Reconciliation pass failed!", exc_info=exc)

            self.__pass_count += 1
            for _, future in batch:
                if not future.done():
                    future.set_result(None)
                self.__queue.task_done()
