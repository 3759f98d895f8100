# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""
Ledger client talking to the InteropToken contract via JSON-RPC.

New events are detected by polling the logs of freshly mined blocks, every
log entry is validated into the event schemas before it is handed out.
"""

import asyncio
import json
from contextlib import suppress
from importlib.resources import files
from logging import getLogger
from typing import Any, Mapping, Self

import aiohttp
from eth_account.signers.local import LocalAccount
from pydantic import ValidationError
from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from interop_bridge.exceptions import (
    OrderNotFoundError,
    SubmissionError,
    TransportError,
)
from interop_bridge.interfaces.ledger import EventHandler, ILedgerClient
from interop_bridge.models.schemas import (
    ORDER_EVENT_ADAPTER,
    ConfirmOperation,
    EventKind,
    FillOperation,
    LedgerOperation,
    OpenOrderOperation,
    OrderEvent,
    PendingTransactionSchema,
    RawOrderSchema,
    TransactionReceiptSchema,
    TransferOperation,
)

LOG = getLogger(__name__)

ORDER_DATA_TYPES = ["address", "uint256", "uint64", "address", "uint256"]
ORDER_DATA_TYPE_HASH = Web3.keccak(
    text="Order(address,uint256,uint64,address,uint256)",
)

_TRANSPORT_ERRORS = (
    Web3Exception,
    aiohttp.ClientError,
    OSError,
    asyncio.TimeoutError,
)


def load_abi() -> list[dict[str, Any]]:
    """Returns the ABI of the InteropToken contract"""
    return json.loads(
        files("interop_bridge.adapters")
        .joinpath("abi", "InteropToken.json")
        .read_text(encoding="utf-8"),
    )


def _field(value: Any, name: str, index: int) -> Any:  # noqa: ANN401
    """Access a decoded ABI tuple by name or, if unnamed, by position"""
    if isinstance(value, Mapping):
        return value[name]
    return value[index]


class Web3LedgerClientAdapter(ILedgerClient):
    """
    Ledger client backed by an EVM JSON-RPC endpoint.

    Without a signer the client is read-only and every submission fails with
    SubmissionError.
    """

    def __init__(  # noqa: PLR0913
        self: Self,
        rpc_url: str,
        contract_address: str,
        chain_id: int,
        signer: LocalAccount | None = None,
        poll_interval: float = 2.0,
        confirmation_timeout: int = 120,
    ) -> None:
        self.__w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.__contract = self.__w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=load_abi(),
        )
        self.__chain_id = chain_id
        self.__signer = signer
        self.__poll_interval = poll_interval
        self.__confirmation_timeout = confirmation_timeout
        self.__handlers: dict[EventKind, list[EventHandler]] = {}
        self.__listener: asyncio.Task | None = None

    @property
    def can_sign(self: Self) -> bool:
        return self.__signer is not None

    # == Queries ===============================================================

    async def query_events(self: Self, kind: EventKind) -> list[OrderEvent]:
        LOG.debug("Querying %s events...", kind.value)
        try:
            logs = await self.__event(kind).get_logs(from_block=0)
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(f"Could not query {kind.value} events: {exc}") from exc
        return self.__to_events(kind, logs)

    async def read_order(self: Self, order_id: str) -> RawOrderSchema:
        try:
            key = Web3.to_bytes(hexstr=order_id)
        except ValueError as exc:
            raise OrderNotFoundError(order_id) from exc

        try:
            raw = await self.__contract.functions.pendingOrders(key).call()
        except ContractLogicError as exc:
            raise OrderNotFoundError(order_id) from exc
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(f"Could not read order '{order_id}': {exc}") from exc

        originator = raw[0]
        if int(originator, 16) == 0:
            # Filled or unknown orders are deleted from the pending storage
            raise OrderNotFoundError(order_id)

        order_data = raw[3]
        return RawOrderSchema(
            originator=originator,
            fill_deadline=raw[2],
            recipient=_field(order_data, "recipient", 0),
            amount=_field(order_data, "amount", 1),
            destination_chain_id=_field(order_data, "toChain", 2),
            fee_token=_field(order_data, "feeToken", 3),
            fee_value=_field(order_data, "feeValue", 4),
        )

    async def read_balance(self: Self, address: str) -> int:
        try:
            return await self.__contract.functions.balanceOf(address).call()
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(f"Could not read balance of {address}: {exc}") from exc

    # == Transactions ==========================================================

    async def submit(
        self: Self,
        operation: LedgerOperation,
    ) -> PendingTransactionSchema:
        if self.__signer is None:
            raise SubmissionError("Read-only ledger client cannot sign transactions!")

        address = self.__signer.address
        try:
            transaction = await self.__build_call(operation).build_transaction(
                {
                    "from": address,
                    "chainId": self.__chain_id,
                    "nonce": await self.__w3.eth.get_transaction_count(
                        address,
                        "pending",
                    ),
                },
            )
            signed = self.__signer.sign_transaction(transaction)
            tx_hash = await self.__w3.eth.send_raw_transaction(signed.raw_transaction)
        except ContractLogicError as exc:
            raise SubmissionError(f"Operation '{operation.name}' reverted: {exc}") from exc
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(
                f"Could not submit operation '{operation.name}': {exc}",
            ) from exc

        LOG.debug("Submitted '%s' as %s", operation.name, Web3.to_hex(tx_hash))
        return PendingTransactionSchema(
            tx_hash=Web3.to_hex(tx_hash),
            operation=operation.name,
        )

    async def await_confirmation(
        self: Self,
        pending: PendingTransactionSchema,
    ) -> TransactionReceiptSchema:
        try:
            receipt = await self.__w3.eth.wait_for_transaction_receipt(
                pending.tx_hash,
                timeout=self.__confirmation_timeout,
            )
        except TimeExhausted as exc:
            raise SubmissionError(
                f"Transaction {pending.tx_hash} was not confirmed within "
                f"{self.__confirmation_timeout} seconds",
            ) from exc
        except _TRANSPORT_ERRORS as exc:
            raise TransportError(
                f"Could not retrieve receipt of {pending.tx_hash}: {exc}",
            ) from exc

        return TransactionReceiptSchema(
            tx_hash=pending.tx_hash,
            success=receipt["status"] == 1,
            block_number=receipt["blockNumber"],
        )

    def __build_call(self: Self, operation: LedgerOperation) -> Any:  # noqa: ANN401
        functions = self.__contract.functions
        if isinstance(operation, TransferOperation):
            return functions.transfer(operation.recipient, operation.amount)
        if isinstance(operation, OpenOrderOperation):
            order_data = self.__w3.codec.encode(
                ORDER_DATA_TYPES,
                [
                    operation.recipient,
                    operation.amount,
                    operation.destination_chain_id,
                    operation.fee_token,
                    operation.fee_value,
                ],
            )
            return functions.open(
                (operation.fill_deadline, ORDER_DATA_TYPE_HASH, order_data),
            )
        if isinstance(operation, FillOperation):
            return functions.fill(
                Web3.to_bytes(hexstr=operation.order_id),
                operation.origin_data,
                operation.filler_data,
            )
        if isinstance(operation, ConfirmOperation):
            return functions.confirm(Web3.to_bytes(hexstr=operation.order_id))
        raise SubmissionError(f"Unsupported operation: {operation}")

    # == Notifications =========================================================

    def subscribe(self: Self, kind: EventKind, handler: EventHandler) -> None:
        LOG.debug("Subscribing to %s events", kind.value)
        self.__handlers.setdefault(kind, []).append(handler)
        if self.__listener is None:
            self.__listener = asyncio.create_task(self.__listen())

    def unsubscribe_all(self: Self) -> None:
        self.__handlers.clear()
        if self.__listener is not None:
            self.__listener.cancel()
            self.__listener = None

    async def close(self: Self) -> None:
        listener = self.__listener
        self.unsubscribe_all()
        if listener is not None:
            with suppress(asyncio.CancelledError):
                await listener
        await self.__w3.provider.disconnect()

    async def __listen(self: Self) -> None:
        """Poll for new blocks and dispatch their events to the handlers"""
        last_block: int | None = None
        while True:
            try:
                current = await self.__w3.eth.block_number
                if last_block is None:
                    last_block = current
                elif current > last_block:
                    await self.__dispatch(last_block + 1, current)
                    last_block = current
            except _TRANSPORT_ERRORS as exc:
                LOG.warning("Failed to poll for new events: %s", exc)
            await asyncio.sleep(self.__poll_interval)

    async def __dispatch(self: Self, from_block: int, to_block: int) -> None:
        for kind, handlers in list(self.__handlers.items()):
            logs = await self.__event(kind).get_logs(
                from_block=from_block,
                to_block=to_block,
            )
            for event in self.__to_events(kind, logs):
                for handler in list(handlers):
                    try:
                        await handler(event)
                    except Exception as exc:  # noqa: BLE001 # pylint: disable=broad-exception-caught
                        LOG.error(
                            "Handler failed for %s event of order '%s'",
                            kind.value,
                            event.order_id,
                            exc_info=exc,
                        )

    # == Decoding ==============================================================

    def __event(self: Self, kind: EventKind) -> Any:  # noqa: ANN401
        return getattr(self.__contract.events, kind.value)()

    def __to_events(
        self: Self,
        kind: EventKind,
        logs: list[Mapping[str, Any]],
    ) -> list[OrderEvent]:
        events = []
        for log in logs:
            args = log["args"]
            data: dict[str, Any] = {
                "kind": kind.value,
                "order_id": Web3.to_hex(args["orderId"]),
                "block_number": log["blockNumber"],
                "log_index": log["logIndex"],
            }
            if kind == EventKind.OPEN:
                data["resolved_order"] = self.__to_resolved_order(
                    args["resolvedOrder"],
                )
            try:
                events.append(ORDER_EVENT_ADAPTER.validate_python(data))
            except ValidationError as exc:
                LOG.warning("Skipping malformed %s event: %s", kind.value, exc)
        return events

    @staticmethod
    def __to_output(output: Any) -> dict[str, Any]:  # noqa: ANN401
        return {
            "token": Web3.to_hex(_field(output, "token", 0)),
            "amount": _field(output, "amount", 1),
            "recipient": Web3.to_hex(_field(output, "recipient", 2)),
            "chain_id": _field(output, "chainId", 3),
        }

    def __to_resolved_order(self: Self, order: Any) -> dict[str, Any]:  # noqa: ANN401
        return {
            "user": _field(order, "user", 0),
            "origin_chain_id": _field(order, "originChainId", 1),
            "open_deadline": _field(order, "openDeadline", 2),
            "fill_deadline": _field(order, "fillDeadline", 3),
            "order_id": Web3.to_hex(_field(order, "orderId", 4)),
            "max_spent": [
                self.__to_output(output) for output in _field(order, "maxSpent", 5)
            ],
            "min_received": [
                self.__to_output(output) for output in _field(order, "minReceived", 6)
            ],
            "fill_instructions": [
                {
                    "destination_chain_id": _field(instruction, "destinationChainId", 0),
                    "destination_settler": Web3.to_hex(
                        _field(instruction, "destinationSettler", 1),
                    ),
                    "origin_data": _field(instruction, "originData", 2),
                }
                for instruction in _field(order, "fillInstructions", 7)
            ],
        }
