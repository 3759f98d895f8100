# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""Exceptions raised by the interop bridge engine and its adapters."""


class BridgeError(Exception):
    """Base class of all interop bridge errors."""


class BridgeStateError(BridgeError):
    """The engine reached a state it cannot continue from."""


class TransportError(BridgeError):
    """A query, read or submission did not reach the ledger."""


class OrderNotFoundError(BridgeError):
    """An order id referenced by an event has no stored record."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order '{order_id}' not found on the ledger.")
        self.order_id = order_id


class InvalidAddressError(BridgeError, ValueError):
    """A malformed address was passed to a read or an operation."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Invalid address: '{address}'")
        self.address = address


class SessionRequiredError(BridgeError):
    """A signing operation was attempted without a connected wallet."""

    def __init__(self, message: str = "Please connect your wallet first") -> None:
        super().__init__(message)


class NoMatchingInstructionsError(BridgeError):
    """No fill instructions could be found for the requested order."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"No valid fill instructions found for order '{order_id}'.")
        self.order_id = order_id


class SubmissionError(BridgeError):
    """A transaction was rejected, reverted or could not be confirmed."""


class WalletError(BridgeError):
    """Base class for wallet related failures."""


class WalletUnavailableError(WalletError):
    """No wallet is available to connect to."""


class WalletRejectedError(WalletError):
    """The wallet refused to expose its accounts."""
