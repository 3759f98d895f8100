# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""
Interface of the ledger client, the only external collaborator the engine
depends on.

Implementations translate the ledger's wire format into the validated
schemas of ``interop_bridge.models.schemas`` and map every failure to the
exceptions of ``interop_bridge.exceptions``.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Self

from interop_bridge.models.schemas import (
    EventKind,
    LedgerOperation,
    OrderEvent,
    PendingTransactionSchema,
    RawOrderSchema,
    TransactionReceiptSchema,
)

EventHandler = Callable[[OrderEvent], Awaitable[None]]


class ILedgerClient(ABC):
    """Interface for ledger queries, submissions and event subscriptions."""

    @property
    @abstractmethod
    def can_sign(self: Self) -> bool:
        """True if the client is bound to an account that can sign."""

    # == Queries ===============================================================
    @abstractmethod
    async def query_events(self: Self, kind: EventKind) -> list[OrderEvent]:
        """
        Returns the full history of events of ``kind`` in ledger order.

        Raises TransportError if the ledger could not be reached.
        """

    @abstractmethod
    async def read_order(self: Self, order_id: str) -> RawOrderSchema:
        """
        Point read of the stored order.

        Raises OrderNotFoundError or TransportError.
        """

    @abstractmethod
    async def read_balance(self: Self, address: str) -> int:
        """Returns the fixed-point token balance of a validated address."""

    # == Transactions ==========================================================
    @abstractmethod
    async def submit(
        self: Self,
        operation: LedgerOperation,
    ) -> PendingTransactionSchema:
        """Sign and send an operation. Raises SubmissionError on rejection."""

    @abstractmethod
    async def await_confirmation(
        self: Self,
        pending: PendingTransactionSchema,
    ) -> TransactionReceiptSchema:
        """Wait until the submitted transaction was included."""

    # == Notifications =========================================================
    @abstractmethod
    def subscribe(self: Self, kind: EventKind, handler: EventHandler) -> None:
        """Call ``handler`` for every new event of ``kind``."""

    @abstractmethod
    def unsubscribe_all(self: Self) -> None:
        """Remove every handler registered on this client."""

    @abstractmethod
    async def close(self: Self) -> None:
        """Release the connection and stop listening."""
