# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from abc import ABC, abstractmethod
from typing import Any, Callable, Self

AccountsChangedHandler = Callable[[list[str]], Any]
ChainChangedHandler = Callable[[int], Any]


class IWalletProvider(ABC):
    """Interface for the wallet that owns the user's accounts."""

    @abstractmethod
    async def start(self: Self) -> None:
        """Start watching for account and network changes."""

    @abstractmethod
    async def close(self: Self) -> None:
        """Stop watching and release all resources."""

    @abstractmethod
    async def get_authorized_accounts(self: Self) -> list[str]:
        """Accounts that are available without user interaction."""

    @abstractmethod
    async def request_accounts(self: Self) -> list[str]:
        """
        Ask the wallet for its accounts.

        Raises WalletUnavailableError if there is no wallet and
        WalletRejectedError if access was refused.
        """

    @abstractmethod
    def on_accounts_changed(self: Self, handler: AccountsChangedHandler) -> None:
        """Register a handler for account set changes."""

    @abstractmethod
    def on_chain_changed(self: Self, handler: ChainChangedHandler) -> None:
        """Register a handler for network changes."""

    @abstractmethod
    def remove_listeners(self: Self) -> None:
        """Drop all registered handlers."""

    @abstractmethod
    def signer(self: Self, address: str) -> Any:  # noqa: ANN401
        """Returns the signing key material for ``address``."""
