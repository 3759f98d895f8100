# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import inspect
from decimal import Decimal
from logging import getLogger
from typing import Any, Awaitable, Callable, Self

from interop_bridge.core.event_bus import NOTIFICATION, RESTART_REQUIRED, EventBus
from interop_bridge.exceptions import SessionRequiredError, WalletError
from interop_bridge.interfaces import IWalletProvider
from interop_bridge.models.domain import Session, SessionState

LOG = getLogger(__name__)

SessionChangeCallback = Callable[[Session], Awaitable[None] | None]


class SessionManager:
    """
    Owns the wallet session and reacts to the wallet's notifications.

    Every change of the connected account is treated as a full
    re-authentication: the balance is dropped and ``on_session_change`` is
    called so that the owner can rebuild its signing ledger client.
    """

    def __init__(
        self: Self,
        wallet: IWalletProvider,
        event_bus: EventBus,
        on_session_change: SessionChangeCallback | None = None,
    ) -> None:
        self.__wallet = wallet
        self.__event_bus = event_bus
        self.__on_session_change = on_session_change
        self.__session = Session()
        self.__listening = False
        self.__transitions = self._define_transitions()

    def _define_transitions(self: Self) -> dict[SessionState, list[SessionState]]:
        return {
            SessionState.DISCONNECTED: [
                SessionState.CONNECTING,
                SessionState.CONNECTED,
                SessionState.DISCONNECTED,
            ],
            SessionState.CONNECTING: [
                SessionState.CONNECTED,
                SessionState.DISCONNECTED,
            ],
            SessionState.CONNECTED: [
                SessionState.CONNECTED,
                SessionState.DISCONNECTED,
            ],
        }

    @property
    def session(self: Self) -> Session:
        return self.__session

    @property
    def account(self: Self) -> str | None:
        return self.__session.account

    def require_account(self: Self) -> str:
        """Returns the connected account or raises SessionRequiredError"""
        if not self.__session.is_connected:
            raise SessionRequiredError
        return self.__session.account  # type: ignore[return-value]

    # == Transitions ===========================================================

    async def initialize(self: Self) -> None:
        """
        Register the wallet listeners and connect silently if the wallet
        already authorized accounts. Repeated calls neither register the
        listeners again nor replace an established session.
        """
        if not self.__listening:
            self.__wallet.on_accounts_changed(self.on_accounts_changed)
            self.__wallet.on_chain_changed(self.on_chain_changed)
            self.__listening = True

        if self.__session.is_connected:
            return

        try:
            accounts = await self.__wallet.get_authorized_accounts()
        except WalletError as exc:
            LOG.error("Error checking existing connection: %s", exc)
            return

        if accounts:
            LOG.info("Found authorized account, connecting silently...")
            await self.__establish(accounts[0])

    async def connect(self: Self) -> Session:
        """
        Ask the wallet for its accounts and connect the first one. Failures
        are stored in the session and re-raised.
        """
        if self.__session.state == SessionState.CONNECTING:
            LOG.debug("Wallet connection already in progress.")
            return self.__session

        self.__set(Session(state=SessionState.CONNECTING))
        try:
            accounts = await self.__wallet.request_accounts()
        except WalletError as exc:
            LOG.error("Failed to connect wallet: %s", exc)
            self.__set(Session(state=SessionState.DISCONNECTED, error=str(exc)))
            self.__event_bus.publish(
                NOTIFICATION,
                {"message": f"Failed to connect wallet: {exc}", "title": "Wallet"},
            )
            raise

        if not accounts:
            LOG.warning("The wallet did not expose any account.")
            self.__set(Session(state=SessionState.DISCONNECTED))
            return self.__session

        await self.__establish(accounts[0])
        return self.__session

    async def disconnect(self: Self) -> None:
        """Forget the account, its balance and any reported error."""
        was_connected = self.__session.state != SessionState.DISCONNECTED
        self.__set(Session(state=SessionState.DISCONNECTED))
        if was_connected:
            LOG.info("Wallet disconnected.")
            await self.__notify_change()

    async def on_accounts_changed(self: Self, accounts: list[str]) -> None:
        """Handle the wallet's notification about a changed account set."""
        if accounts:
            LOG.info("Accounts changed, re-authenticating as '%s'...", accounts[0])
            await self.__establish(accounts[0])
        else:
            await self.disconnect()

    def on_chain_changed(self: Self, chain_id: int) -> None:
        """A changed network invalidates the whole session context."""
        LOG.error("The wallet switched to chain %s, a restart is required!", chain_id)
        self.__event_bus.publish(RESTART_REQUIRED, {"chain_id": chain_id})

    def set_balance(self: Self, account: str, balance: Decimal) -> None:
        """Cache the balance if ``account`` is still the connected one."""
        if self.__session.is_connected and self.__session.account == account:
            self.__set(self.__session.model_copy(update={"balance": balance}))

    # == Internals =============================================================

    async def __establish(self: Self, account: str) -> None:
        self.__set(Session(state=SessionState.CONNECTED, account=account))
        LOG.info("Connected account: %s", account)
        await self.__notify_change()

    def __set(self: Self, session: Session) -> None:
        if session.state not in self.__transitions[self.__session.state]:
            raise ValueError(
                "Invalid session transition from"
                f" {self.__session.state} to {session.state}",
            )
        self.__session = session

    async def __notify_change(self: Self) -> None:
        if self.__on_session_change is None:
            return
        result: Any = self.__on_session_change(self.__session)
        if inspect.isawaitable(result):
            await result
