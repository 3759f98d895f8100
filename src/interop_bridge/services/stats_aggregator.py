# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from logging import getLogger
from typing import Self, Sequence

from interop_bridge.exceptions import TransportError
from interop_bridge.interfaces import ILedgerClient
from interop_bridge.models.domain import Stats
from interop_bridge.models.schemas import EventKind, FillEvent, OpenEvent
from interop_bridge.utils import from_fixed_point

LOG = getLogger(__name__)


class StatsAggregator:
    """
    Derives the summary counters from the ``Open`` and ``Fill`` events.

    The counters are computed independently of the projected orders and may
    disagree with them, e.g. if the point read of an order failed.
    """

    def __init__(
        self: Self,
        ledger: ILedgerClient,
        unit: str = "TST",
        token_decimals: int = 18,
    ) -> None:
        self.__ledger = ledger
        self.__unit = unit
        self.__token_decimals = token_decimals
        self.__stats = Stats(unit=unit)

    def rebind(self: Self, ledger: ILedgerClient) -> None:
        self.__ledger = ledger

    @property
    def stats(self: Self) -> Stats:
        """The last successfully aggregated stats"""
        return self.__stats

    async def aggregate(
        self: Self,
        open_events: Sequence[OpenEvent] | None = None,
        fill_events: Sequence[FillEvent] | None = None,
    ) -> Stats:
        """
        Returns the current stats. Never raises, if the events can't be
        queried the previous stats are returned.
        """
        try:
            if open_events is None:
                open_events = await self.__ledger.query_events(EventKind.OPEN)
            if fill_events is None:
                fill_events = await self.__ledger.query_events(EventKind.FILL)
        except TransportError as exc:
            LOG.error("Failed to update stats, keeping previous values: %s", exc)
            return self.__stats

        total_volume = 0.0
        for event in open_events:
            if not (max_spent := event.resolved_order.max_spent):
                continue
            total_volume += float(
                from_fixed_point(max_spent[0].amount, self.__token_decimals),
            )

        stats = Stats(
            total_orders=len(open_events),
            pending_orders=len(open_events) - len(fill_events),
            completed_orders=len(fill_events),
            total_volume=total_volume,
            unit=self.__unit,
        )
        if not stats.is_consistent:
            LOG.warning(
                "Observed more Fill (%d) than Open (%d) events, stats are inconsistent!",
                stats.completed_orders,
                stats.total_orders,
            )

        self.__stats = stats
        return stats
