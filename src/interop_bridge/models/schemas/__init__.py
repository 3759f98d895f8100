# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from interop_bridge.models.schemas.ledger import (
    ORDER_EVENT_ADAPTER,
    CancelEvent,
    ConfirmEvent,
    ConfirmOperation,
    EventKind,
    FillEvent,
    FillInstructionSchema,
    FillOperation,
    LedgerOperation,
    OpenEvent,
    OpenOrderOperation,
    OrderEvent,
    OutputSchema,
    PendingTransactionSchema,
    RawOrderSchema,
    ResolvedOrderSchema,
    TransactionReceiptSchema,
    TransferOperation,
)

__all__ = [
    "ORDER_EVENT_ADAPTER",
    "CancelEvent",
    "ConfirmEvent",
    "ConfirmOperation",
    "EventKind",
    "FillEvent",
    "FillInstructionSchema",
    "FillOperation",
    "LedgerOperation",
    "OpenEvent",
    "OpenOrderOperation",
    "OrderEvent",
    "OutputSchema",
    "PendingTransactionSchema",
    "RawOrderSchema",
    "ResolvedOrderSchema",
    "TransactionReceiptSchema",
    "TransferOperation",
]
