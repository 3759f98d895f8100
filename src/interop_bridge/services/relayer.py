# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from logging import getLogger
from typing import Self

from interop_bridge.exceptions import BridgeStateError, SubmissionError, TransportError
from interop_bridge.interfaces import ILedgerClient
from interop_bridge.models.schemas import (
    ConfirmOperation,
    EventKind,
    OrderEvent,
    TransactionReceiptSchema,
)

LOG = getLogger(__name__)


class RelayerService:
    """
    Confirms filled orders.

    Listens for ``Fill`` events and submits a ``confirm`` transaction for
    every filled order. A failed confirmation is logged and does not stop
    the relayer.
    """

    def __init__(self: Self, ledger: ILedgerClient) -> None:
        if not ledger.can_sign:
            raise BridgeStateError("The relayer requires a signing ledger client!")
        self.__ledger = ledger
        self.__listening = False
        self.__confirmed = 0
        self.__failed = 0

    @property
    def confirmed(self: Self) -> int:
        return self.__confirmed

    @property
    def failed(self: Self) -> int:
        return self.__failed

    def start(self: Self) -> None:
        LOG.info("Listening for Fill events...")
        self.__listening = True
        self.__attach(self.__ledger)

    def stop(self: Self) -> None:
        self.__listening = False
        self.__ledger.unsubscribe_all()
        LOG.info(
            "Relayer stopped (confirmed: %d, failed: %d)",
            self.__confirmed,
            self.__failed,
        )

    def rebind(self: Self, ledger: ILedgerClient) -> None:
        """
        Move the Fill subscription to a new ledger client handle. A read-only
        handle pauses the relayer until a signing handle is bound again.
        """
        if ledger is self.__ledger:
            return
        self.__ledger.unsubscribe_all()
        self.__ledger = ledger
        if not self.__listening:
            return
        if not ledger.can_sign:
            LOG.warning("Wallet disconnected, pausing the relayer.")
            return
        LOG.info("Relayer switched to a new ledger client handle.")
        self.__attach(ledger)

    def __attach(self: Self, ledger: ILedgerClient) -> None:
        ledger.unsubscribe_all()
        ledger.subscribe(EventKind.FILL, self.on_fill)

    async def on_fill(self: Self, event: OrderEvent) -> None:
        LOG.info("Fill event detected for order '%s'", event.order_id)
        try:
            receipt = await self.confirm_order(event.order_id)
        except (SubmissionError, TransportError) as exc:
            self.__failed += 1
            LOG.error("Failed to confirm order '%s': %s", event.order_id, exc)
            return

        if receipt.success:
            self.__confirmed += 1
            LOG.info(
                "Confirmed order '%s' with transaction %s",
                event.order_id,
                receipt.tx_hash,
            )
        else:
            self.__failed += 1
            LOG.error(
                "Transaction %s confirming order '%s' reverted",
                receipt.tx_hash,
                event.order_id,
            )

    async def confirm_order(self: Self, order_id: str) -> TransactionReceiptSchema:
        pending = await self.__ledger.submit(ConfirmOperation(order_id=order_id))
        return await self.__ledger.await_confirmation(pending)
