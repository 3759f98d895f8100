# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""
Schemas exchanged with the ledger client.

Every ledger log entry is validated into one of the tagged event variants
below before it reaches the engine. The ``kind`` field is the discriminator,
each kind carries a fixed payload shape.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class EventKind(str, Enum):
    """Kinds of events emitted by the ledger contract"""

    OPEN = "Open"
    FILL = "Fill"
    CONFIRM = "Confirm"
    CANCEL = "Cancel"


class OutputSchema(BaseModel):
    """One ERC-7683 output entry (``maxSpent``/``minReceived``)"""

    model_config = ConfigDict(frozen=True)

    token: str
    amount: int = Field(..., ge=0, description="Fixed-point token amount")
    recipient: str
    chain_id: int = Field(..., ge=0)


class FillInstructionSchema(BaseModel):
    """Instruction a filler has to execute on the destination chain"""

    model_config = ConfigDict(frozen=True)

    destination_chain_id: int = Field(..., ge=0)
    destination_settler: str
    origin_data: bytes


class ResolvedOrderSchema(BaseModel):
    """Full order snapshot carried by an ``Open`` event"""

    model_config = ConfigDict(frozen=True)

    user: str
    origin_chain_id: int = Field(..., ge=0)
    open_deadline: int = Field(..., ge=0)
    fill_deadline: int = Field(..., ge=0)
    order_id: str = Field(..., min_length=1)
    max_spent: tuple[OutputSchema, ...] = ()
    min_received: tuple[OutputSchema, ...] = ()
    fill_instructions: tuple[FillInstructionSchema, ...] = ()


class _OrderEventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str = Field(..., min_length=1, description="Order identifier")
    block_number: int = Field(default=0, ge=0)
    log_index: int = Field(default=0, ge=0)

    @property
    def sequence(self: Self) -> tuple[int, int]:
        """Position of the event in the ledger's total order"""
        return (self.block_number, self.log_index)


class OpenEvent(_OrderEventBase):
    kind: Literal["Open"] = "Open"
    resolved_order: ResolvedOrderSchema


class FillEvent(_OrderEventBase):
    kind: Literal["Fill"] = "Fill"


class ConfirmEvent(_OrderEventBase):
    kind: Literal["Confirm"] = "Confirm"


class CancelEvent(_OrderEventBase):
    kind: Literal["Cancel"] = "Cancel"


OrderEvent = Annotated[
    OpenEvent | FillEvent | ConfirmEvent | CancelEvent,
    Field(discriminator="kind"),
]
ORDER_EVENT_ADAPTER: TypeAdapter[OrderEvent] = TypeAdapter(OrderEvent)


class RawOrderSchema(BaseModel):
    """The order record as stored in the ledger's pending order storage"""

    originator: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0)
    recipient: str | None = None
    destination_chain_id: int | None = None
    fee_token: str | None = None
    fee_value: int | None = None
    fill_deadline: int | None = None


# == Operations ================================================================


class TransferOperation(BaseModel):
    name: Literal["transfer"] = "transfer"
    recipient: str
    amount: int = Field(..., gt=0)


class OpenOrderOperation(BaseModel):
    name: Literal["open"] = "open"
    recipient: str
    amount: int = Field(..., gt=0)
    destination_chain_id: int = Field(..., ge=0)
    fee_token: str
    fee_value: int = Field(default=0, ge=0)
    fill_deadline: int = Field(..., gt=0)


class FillOperation(BaseModel):
    name: Literal["fill"] = "fill"
    order_id: str = Field(..., min_length=1)
    origin_data: bytes
    filler_data: bytes = b""


class ConfirmOperation(BaseModel):
    name: Literal["confirm"] = "confirm"
    order_id: str = Field(..., min_length=1)


LedgerOperation = (
    TransferOperation | OpenOrderOperation | FillOperation | ConfirmOperation
)


class PendingTransactionSchema(BaseModel):
    """Handle returned by the ledger client after submitting an operation"""

    tx_hash: str = Field(..., min_length=1)
    operation: str


class TransactionReceiptSchema(BaseModel):
    tx_hash: str
    success: bool
    block_number: int | None = None

    @field_validator("tx_hash")
    @classmethod
    def validate_tx_hash(cls, value: str) -> str:
        if not value:
            raise ValueError("Transaction hash must not be empty")
        return value
