# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""In-memory ledger and wallet used by the unit tests"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Self

from interop_bridge.exceptions import OrderNotFoundError
from interop_bridge.interfaces import EventHandler, ILedgerClient, IWalletProvider
from interop_bridge.models.schemas import (
    EventKind,
    FillEvent,
    FillInstructionSchema,
    LedgerOperation,
    OpenEvent,
    OrderEvent,
    OutputSchema,
    PendingTransactionSchema,
    RawOrderSchema,
    ResolvedOrderSchema,
    TransactionReceiptSchema,
)

ALICE = "0x1000000000000000000000000000000000000001"
BOB = "0x2000000000000000000000000000000000000002"
UNIT = 10**18


def open_event(
    order_id: str,
    amount: int = UNIT,
    *,
    user: str = ALICE,
    block_number: int = 1,
    log_index: int = 0,
    instructions: tuple[bytes, ...] = (b"\x01",),
) -> OpenEvent:
    return OpenEvent(
        order_id=order_id,
        block_number=block_number,
        log_index=log_index,
        resolved_order=ResolvedOrderSchema(
            user=user,
            origin_chain_id=31337,
            open_deadline=0,
            fill_deadline=1_900_000_000,
            order_id=order_id,
            max_spent=(
                OutputSchema(token="0x01", amount=amount, recipient="0x02", chain_id=1),
            ),
            min_received=(),
            fill_instructions=tuple(
                FillInstructionSchema(
                    destination_chain_id=1,
                    destination_settler="0x03",
                    origin_data=data,
                )
                for data in instructions
            ),
        ),
    )


def fill_event(order_id: str, block_number: int = 2) -> FillEvent:
    return FillEvent(order_id=order_id, block_number=block_number)


def raw_order(amount: int = UNIT, originator: str = ALICE) -> RawOrderSchema:
    return RawOrderSchema(
        originator=originator,
        amount=amount,
        recipient=BOB,
        destination_chain_id=1,
        fee_token="0x0000000000000000000000000000000000000000",
        fee_value=0,
        fill_deadline=1_900_000_000,
    )


@dataclass
class LedgerState:
    """Ledger content shared by all clients of one test"""

    events: dict[EventKind, list[OrderEvent]] = field(
        default_factory=lambda: {kind: [] for kind in EventKind},
    )
    orders: dict[str, RawOrderSchema] = field(default_factory=dict)
    balances: dict[str, int] = field(default_factory=dict)
    failing_queries: dict[EventKind, Exception] = field(default_factory=dict)
    failing_reads: dict[str, Exception] = field(default_factory=dict)

    def add_order(self: Self, order_id: str, amount: int = UNIT) -> OpenEvent:
        event = open_event(order_id, amount)
        self.events[EventKind.OPEN].append(event)
        self.orders[order_id] = raw_order(amount)
        return event


class FakeLedgerClient(ILedgerClient):
    """Ledger client that records every call"""

    def __init__(
        self: Self,
        state: LedgerState | None = None,
        *,
        signer: bool = False,
    ) -> None:
        self.state = state or LedgerState()
        self.calls: list[tuple[str, Any]] = []
        self.handlers: dict[EventKind, list[EventHandler]] = {}
        self.submitted: list[LedgerOperation] = []
        self.submit_error: Exception | None = None
        self.receipt_success = True
        self.closed = False
        self.__signer = signer

    @property
    def can_sign(self: Self) -> bool:
        return self.__signer

    def query_count(self: Self, kind: EventKind) -> int:
        return self.calls.count(("query_events", kind))

    @property
    def handler_count(self: Self) -> int:
        return sum(len(handlers) for handlers in self.handlers.values())

    async def query_events(self: Self, kind: EventKind) -> list[OrderEvent]:
        self.calls.append(("query_events", kind))
        if kind in self.state.failing_queries:
            raise self.state.failing_queries[kind]
        return list(self.state.events[kind])

    async def read_order(self: Self, order_id: str) -> RawOrderSchema:
        self.calls.append(("read_order", order_id))
        if order_id in self.state.failing_reads:
            raise self.state.failing_reads[order_id]
        if order_id not in self.state.orders:
            raise OrderNotFoundError(order_id)
        return self.state.orders[order_id]

    async def read_balance(self: Self, address: str) -> int:
        self.calls.append(("read_balance", address))
        return self.state.balances.get(address, 0)

    async def submit(self: Self, operation: LedgerOperation) -> PendingTransactionSchema:
        self.calls.append(("submit", operation))
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(operation)
        return PendingTransactionSchema(
            tx_hash=f"0x{len(self.submitted):064x}",
            operation=operation.name,
        )

    async def await_confirmation(
        self: Self,
        pending: PendingTransactionSchema,
    ) -> TransactionReceiptSchema:
        self.calls.append(("await_confirmation", pending.tx_hash))
        return TransactionReceiptSchema(
            tx_hash=pending.tx_hash,
            success=self.receipt_success,
            block_number=1,
        )

    def subscribe(self: Self, kind: EventKind, handler: EventHandler) -> None:
        self.handlers.setdefault(kind, []).append(handler)

    def unsubscribe_all(self: Self) -> None:
        self.handlers.clear()

    async def close(self: Self) -> None:
        self.closed = True
        self.handlers.clear()

    async def emit(self: Self, event: OrderEvent) -> None:
        """Deliver ``event`` to the subscribers like a push notification"""
        for handler in list(self.handlers.get(EventKind(event.kind), [])):
            await handler(event)


class FakeWallet(IWalletProvider):
    """Wallet whose accounts are controlled by the test"""

    def __init__(
        self: Self,
        authorized: list[str] | None = None,
        accounts: list[str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.authorized = authorized or []
        self.accounts = accounts if accounts is not None else list(self.authorized)
        self.error = error
        self.accounts_handlers: list = []
        self.chain_handlers: list = []
        self.started = False
        self.closed = False

    async def start(self: Self) -> None:
        self.started = True

    async def close(self: Self) -> None:
        self.closed = True

    async def get_authorized_accounts(self: Self) -> list[str]:
        return list(self.authorized)

    async def request_accounts(self: Self) -> list[str]:
        if self.error is not None:
            raise self.error
        return list(self.accounts)

    def on_accounts_changed(self: Self, handler: Any) -> None:  # noqa: ANN401
        self.accounts_handlers.append(handler)

    def on_chain_changed(self: Self, handler: Any) -> None:  # noqa: ANN401
        self.chain_handlers.append(handler)

    def remove_listeners(self: Self) -> None:
        self.accounts_handlers.clear()
        self.chain_handlers.clear()

    def signer(self: Self, address: str) -> str:
        return address

    async def change_accounts(self: Self, accounts: list[str]) -> None:
        for handler in list(self.accounts_handlers):
            result = handler(accounts)
            if inspect.isawaitable(result):
                await result

    def change_chain(self: Self, chain_id: int) -> None:
        for handler in list(self.chain_handlers):
            handler(chain_id)
