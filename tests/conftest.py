# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import pytest

from interop_bridge.core.event_bus import EventBus
from interop_bridge.models.dto.configuration import (
    EngineConfigDTO,
    NotificationConfigDTO,
    TelegramConfigDTO,
    WalletConfigDTO,
)

from tests.helper import FakeLedgerClient, FakeWallet, LedgerState

CONTRACT_ADDRESS = "0x5fbdb2315678afecb367f032d93f642f64180aa3"


@pytest.fixture
def ledger_state() -> LedgerState:
    return LedgerState()


@pytest.fixture
def ledger(ledger_state: LedgerState) -> FakeLedgerClient:
    return FakeLedgerClient(ledger_state)


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def engine_config() -> EngineConfigDTO:
    return EngineConfigDTO(contract_address=CONTRACT_ADDRESS, refresh_interval=60)


@pytest.fixture
def wallet_config() -> WalletConfigDTO:
    return WalletConfigDTO()


@pytest.fixture
def notification_config() -> NotificationConfigDTO:
    return NotificationConfigDTO(telegram=TelegramConfigDTO())
