# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import asyncio
import inspect
from contextlib import suppress
from logging import getLogger
from typing import Any, Callable, Iterable, Self

import aiohttp
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import Web3Exception

from interop_bridge.exceptions import WalletRejectedError, WalletUnavailableError
from interop_bridge.interfaces.wallet import (
    AccountsChangedHandler,
    ChainChangedHandler,
    IWalletProvider,
)

LOG = getLogger(__name__)


class LocalAccountWalletAdapter(IWalletProvider):
    """
    Wallet backed by locally held private keys.

    Keys passed at construction count as already authorized. The adapter
    watches the chain id of the RPC endpoint and reports a changed network
    to its listeners.
    """

    def __init__(
        self: Self,
        private_keys: Iterable[str],
        rpc_url: str,
        chain_id: int,
        watch_interval: float = 10.0,
    ) -> None:
        self.__accounts: dict[str, LocalAccount] = self.__load(private_keys)
        self.__rpc_url = rpc_url
        self.__chain_id = chain_id
        self.__watch_interval = watch_interval
        self.__accounts_handlers: list[AccountsChangedHandler] = []
        self.__chain_handlers: list[ChainChangedHandler] = []
        self.__w3: AsyncWeb3 | None = None
        self.__watcher: asyncio.Task | None = None

    @staticmethod
    def __load(private_keys: Iterable[str]) -> dict[str, LocalAccount]:
        accounts = {}
        for key in private_keys:
            try:
                account = Account.from_key(key)
            except (ValueError, TypeError) as exc:
                raise WalletRejectedError("Invalid private key") from exc
            accounts[account.address] = account
        return accounts

    async def start(self: Self) -> None:
        if self.__watcher is not None:
            return
        self.__w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(self.__rpc_url))
        self.__watcher = asyncio.create_task(self.__watch_chain())

    async def close(self: Self) -> None:
        if self.__watcher is not None:
            self.__watcher.cancel()
            with suppress(asyncio.CancelledError):
                await self.__watcher
            self.__watcher = None
        if self.__w3 is not None:
            await self.__w3.provider.disconnect()
            self.__w3 = None

    async def get_authorized_accounts(self: Self) -> list[str]:
        return list(self.__accounts)

    async def request_accounts(self: Self) -> list[str]:
        if not self.__accounts:
            raise WalletUnavailableError(
                "No wallet configured, please provide a private key!",
            )
        return list(self.__accounts)

    async def switch_accounts(self: Self, private_keys: Iterable[str]) -> None:
        """Replace the held keys and notify the listeners."""
        self.__accounts = self.__load(private_keys)
        LOG.info("Wallet accounts changed: %s", list(self.__accounts))
        await self.__dispatch(self.__accounts_handlers, list(self.__accounts))

    def on_accounts_changed(self: Self, handler: AccountsChangedHandler) -> None:
        self.__accounts_handlers.append(handler)

    def on_chain_changed(self: Self, handler: ChainChangedHandler) -> None:
        self.__chain_handlers.append(handler)

    def remove_listeners(self: Self) -> None:
        self.__accounts_handlers.clear()
        self.__chain_handlers.clear()

    def signer(self: Self, address: str) -> LocalAccount:
        try:
            return self.__accounts[Web3.to_checksum_address(address)]
        except (KeyError, ValueError) as exc:
            raise WalletRejectedError(f"No key available for '{address}'") from exc

    async def __watch_chain(self: Self) -> None:
        while True:
            await asyncio.sleep(self.__watch_interval)
            try:
                chain_id = await self.__w3.eth.chain_id  # type: ignore[union-attr]
            except (Web3Exception, aiohttp.ClientError, OSError) as exc:
                LOG.debug("Could not retrieve the chain id: %s", exc)
                continue

            if chain_id != self.__chain_id:
                LOG.warning(
                    "Chain changed from %d to %d!",
                    self.__chain_id,
                    chain_id,
                )
                await self.__dispatch(self.__chain_handlers, chain_id)
                return

    @staticmethod
    async def __dispatch(handlers: list[Callable[[Any], Any]], value: Any) -> None:  # noqa: ANN401
        for handler in list(handlers):
            result = handler(value)
            if inspect.isawaitable(result):
                await result
