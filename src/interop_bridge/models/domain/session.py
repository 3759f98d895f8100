# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from decimal import Decimal
from enum import Enum, auto
from typing import Self

from pydantic import BaseModel, ConfigDict


class SessionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()


class Session(BaseModel):
    """Snapshot of the wallet session"""

    model_config = ConfigDict(frozen=True)

    state: SessionState = SessionState.DISCONNECTED
    account: str | None = None
    balance: Decimal | None = None
    error: str | None = None

    @property
    def is_connected(self: Self) -> bool:
        return self.state == SessionState.CONNECTED and self.account is not None
