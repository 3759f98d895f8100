# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    PENDING = "Pending"
    FILLED = "Filled"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


class Order(BaseModel):
    """Domain model representing one cross-chain transfer order"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    originator: str
    amount: Decimal = Field(..., ge=0)
    status: OrderStatus = OrderStatus.PENDING

    # Details of the stored order, not every ledger exposes them
    recipient: str | None = None
    destination_chain_id: int | None = None
    fee_token: str | None = None
    fee_value: Decimal | None = None
    fill_deadline: int | None = None
