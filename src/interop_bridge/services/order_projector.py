# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from logging import getLogger
from typing import Iterable, Self

from interop_bridge.exceptions import OrderNotFoundError, TransportError
from interop_bridge.interfaces import ILedgerClient
from interop_bridge.models.domain import Order, OrderStatus
from interop_bridge.models.schemas import EventKind, OpenEvent, RawOrderSchema
from interop_bridge.utils import from_fixed_point

LOG = getLogger(__name__)


class OrderProjector:
    """
    Folds the ledger's ``Open`` events into the list of orders.

    Each projection re-scans the full event history. Orders are emitted in
    the order the ledger emitted their first ``Open`` event, later events for
    an already seen order id are ignored.
    """

    def __init__(self: Self, ledger: ILedgerClient, token_decimals: int = 18) -> None:
        self.__ledger = ledger
        self.__token_decimals = token_decimals

    def rebind(self: Self, ledger: ILedgerClient) -> None:
        self.__ledger = ledger

    async def project(
        self: Self,
        open_events: Iterable[OpenEvent] | None = None,
    ) -> tuple[Order, ...]:
        """
        Returns the projected orders.

        If ``open_events`` is not passed, the events are queried from the
        ledger. A failing point read only drops the affected order, a failing
        event query raises TransportError.
        """
        if open_events is None:
            open_events = await self.__ledger.query_events(EventKind.OPEN)

        seen: set[str] = set()
        orders: list[Order] = []
        for event in open_events:
            if event.order_id in seen:
                LOG.debug("Skipping duplicate Open event for '%s'", event.order_id)
                continue
            seen.add(event.order_id)

            try:
                raw_order = await self.__ledger.read_order(event.order_id)
            except (OrderNotFoundError, TransportError) as exc:
                LOG.warning(
                    "Error fetching order with ID '%s', skipping it: %s",
                    event.order_id,
                    exc,
                )
                continue

            orders.append(self.to_order(event.order_id, raw_order))

        LOG.debug("Projected %d orders from %d Open events", len(orders), len(seen))
        return tuple(orders)

    def to_order(self: Self, order_id: str, raw_order: RawOrderSchema) -> Order:
        """Convert the stored order record into the domain model"""
        return Order(
            id=order_id,
            originator=raw_order.originator,
            amount=from_fixed_point(raw_order.amount, self.__token_decimals),
            # The event history does not reveal fills or confirmations of
            # stored orders yet.
            status=OrderStatus.PENDING,
            recipient=raw_order.recipient,
            destination_chain_id=raw_order.destination_chain_id,
            fee_token=raw_order.fee_token,
            fee_value=(
                from_fixed_point(raw_order.fee_value, self.__token_decimals)
                if raw_order.fee_value is not None
                else None
            ),
            fill_deadline=raw_order.fill_deadline,
        )
