# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""Unit tests for the RelayerService."""

import pytest

from interop_bridge.exceptions import BridgeStateError, SubmissionError
from interop_bridge.models.schemas import ConfirmOperation, EventKind
from interop_bridge.services.relayer import RelayerService
from tests.helper import FakeLedgerClient, fill_event


@pytest.fixture
def signing_ledger() -> FakeLedgerClient:
    return FakeLedgerClient(signer=True)


def test_requires_signing_ledger(ledger: FakeLedgerClient) -> None:
    with pytest.raises(BridgeStateError):
        RelayerService(ledger)


@pytest.mark.asyncio
async def test_confirms_each_fill(signing_ledger: FakeLedgerClient) -> None:
    relayer = RelayerService(signing_ledger)
    relayer.start()

    await signing_ledger.emit(fill_event("0x01"))
    await signing_ledger.emit(fill_event("0x02"))

    assert signing_ledger.submitted == [
        ConfirmOperation(order_id="0x01"),
        ConfirmOperation(order_id="0x02"),
    ]
    assert relayer.confirmed == 2
    assert relayer.failed == 0


@pytest.mark.asyncio
async def test_only_listens_for_fills(signing_ledger: FakeLedgerClient) -> None:
    relayer = RelayerService(signing_ledger)
    relayer.start()
    relayer.start()

    assert list(signing_ledger.handlers) == [EventKind.FILL]
    assert signing_ledger.handler_count == 1


@pytest.mark.asyncio
async def test_failed_confirmation_does_not_stop_relayer(
    signing_ledger: FakeLedgerClient,
) -> None:
    relayer = RelayerService(signing_ledger)
    relayer.start()

    signing_ledger.submit_error = SubmissionError("nonce too low")
    await signing_ledger.emit(fill_event("0x01"))
    signing_ledger.submit_error = None
    await signing_ledger.emit(fill_event("0x02"))

    assert relayer.failed == 1
    assert relayer.confirmed == 1


@pytest.mark.asyncio
async def test_reverted_confirmation_is_counted(
    signing_ledger: FakeLedgerClient,
) -> None:
    relayer = RelayerService(signing_ledger)
    relayer.start()
    signing_ledger.receipt_success = False

    await signing_ledger.emit(fill_event("0x01"))

    assert relayer.failed == 1


@pytest.mark.asyncio
async def test_stop_unsubscribes(signing_ledger: FakeLedgerClient) -> None:
    relayer = RelayerService(signing_ledger)
    relayer.start()
    relayer.stop()

    await signing_ledger.emit(fill_event("0x01"))

    assert signing_ledger.submitted == []


@pytest.mark.asyncio
async def test_rebind_moves_subscription(signing_ledger: FakeLedgerClient) -> None:
    relayer = RelayerService(signing_ledger)
    relayer.start()
    replacement = FakeLedgerClient(signer=True)

    relayer.rebind(replacement)
    await signing_ledger.emit(fill_event("0x01"))
    await replacement.emit(fill_event("0x02"))

    assert signing_ledger.handler_count == 0
    assert signing_ledger.submitted == []
    assert replacement.submitted == [ConfirmOperation(order_id="0x02")]


@pytest.mark.asyncio
async def test_read_only_handle_pauses_relayer(
    signing_ledger: FakeLedgerClient,
    ledger: FakeLedgerClient,
) -> None:
    relayer = RelayerService(signing_ledger)
    relayer.start()

    relayer.rebind(ledger)
    assert ledger.handler_count == 0

    resumed = FakeLedgerClient(signer=True)
    relayer.rebind(resumed)
    await resumed.emit(fill_event("0x01"))

    assert relayer.confirmed == 1
