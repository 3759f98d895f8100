# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import time
from decimal import Decimal
from logging import getLogger
from typing import Awaitable, Callable, Self

from interop_bridge.core.event_bus import NOTIFICATION, EventBus
from interop_bridge.exceptions import (
    NoMatchingInstructionsError,
    SubmissionError,
    TransportError,
)
from interop_bridge.interfaces import ILedgerClient
from interop_bridge.models.schemas import (
    EventKind,
    FillOperation,
    LedgerOperation,
    OpenOrderOperation,
    TransactionReceiptSchema,
    TransferOperation,
)
from interop_bridge.services.session_manager import SessionManager
from interop_bridge.utils import from_fixed_point, to_fixed_point, validate_address

LOG = getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class OrderService:
    """
    Executes the user's operations against the ledger.

    Signing operations are only valid while a wallet session is connected.
    Failed submissions are reported on the event bus and never retried, the
    local read model is only updated by the reconciliation pass requested
    after a successful operation.
    """

    def __init__(  # noqa: PLR0913
        self: Self,
        ledger: ILedgerClient,
        session_manager: SessionManager,
        event_bus: EventBus,
        request_refresh: Callable[[], Awaitable[None]],
        token_decimals: int = 18,
        fill_deadline_offset: int = 3600,
    ) -> None:
        self.__ledger = ledger
        self.__session_manager = session_manager
        self.__event_bus = event_bus
        self.__request_refresh = request_refresh
        self.__token_decimals = token_decimals
        self.__fill_deadline_offset = fill_deadline_offset

    def rebind(self: Self, ledger: ILedgerClient) -> None:
        self.__ledger = ledger

    # == Reads =================================================================

    async def check_balance(self: Self, address: str) -> Decimal:
        """Returns the token balance of ``address``."""
        address = validate_address(address)
        return from_fixed_point(
            await self.__ledger.read_balance(address),
            self.__token_decimals,
        )

    # == Signing operations ====================================================

    async def transfer(
        self: Self,
        recipient: str,
        amount: Decimal | str,
    ) -> TransactionReceiptSchema:
        """Transfer ``amount`` tokens to ``recipient``."""
        self.__session_manager.require_account()
        operation = TransferOperation(
            recipient=validate_address(recipient),
            amount=to_fixed_point(amount, self.__token_decimals),
        )
        receipt = await self.__execute(operation, "Transfer failed")
        await self.__request_refresh()
        return receipt

    async def open_order(  # noqa: PLR0913
        self: Self,
        recipient: str,
        amount: Decimal | str,
        destination_chain_id: int,
        fee_token: str = ZERO_ADDRESS,
        fee_value: Decimal | str = "0",
        fill_deadline: int | None = None,
    ) -> TransactionReceiptSchema:
        """Open a new cross-chain order."""
        self.__session_manager.require_account()
        operation = OpenOrderOperation(
            recipient=validate_address(recipient),
            amount=to_fixed_point(amount, self.__token_decimals),
            destination_chain_id=destination_chain_id,
            fee_token=validate_address(fee_token),
            fee_value=to_fixed_point(fee_value, self.__token_decimals),
            fill_deadline=(
                int(time.time()) + self.__fill_deadline_offset
                if fill_deadline is None
                else fill_deadline
            ),
        )
        receipt = await self.__execute(operation, "Order submission failed")
        await self.__request_refresh()
        return receipt

    async def fill_order(self: Self, order_id: str) -> list[TransactionReceiptSchema]:
        """
        Fill an order by executing each of the fill instructions declared in
        its ``Open`` event.
        """
        self.__session_manager.require_account()

        try:
            events = await self.__ledger.query_events(EventKind.OPEN)
        except TransportError as exc:
            self.__report(f"Filling Order failed: {exc}")
            raise

        instructions = next(
            (
                event.resolved_order.fill_instructions
                for event in events
                if event.order_id == order_id
            ),
            (),
        )
        if not instructions:
            raise NoMatchingInstructionsError(order_id)

        receipts = []
        for instruction in instructions:
            receipts.append(
                await self.__execute(
                    FillOperation(
                        order_id=order_id,
                        origin_data=instruction.origin_data,
                    ),
                    "Filling Order failed",
                ),
            )

        await self.__request_refresh()
        return receipts

    # == Internals =============================================================

    async def __execute(
        self: Self,
        operation: LedgerOperation,
        failure_message: str,
    ) -> TransactionReceiptSchema:
        LOG.info("Submitting '%s' operation...", operation.name)
        try:
            pending = await self.__ledger.submit(operation)
            receipt = await self.__ledger.await_confirmation(pending)
        except (SubmissionError, TransportError) as exc:
            self.__report(f"{failure_message}: {exc}")
            raise SubmissionError(str(exc)) from exc

        if not receipt.success:
            self.__report(f"{failure_message}: transaction {receipt.tx_hash} reverted")
            raise SubmissionError(f"Transaction {receipt.tx_hash} reverted")

        LOG.info(
            "Operation '%s' confirmed with transaction %s",
            operation.name,
            receipt.tx_hash,
        )
        return receipt

    def __report(self: Self, message: str) -> None:
        LOG.error(message)
        self.__event_bus.publish(
            NOTIFICATION,
            {"message": message, "title": "Operation failed"},
        )
