# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import asyncio
import itertools
import signal
import sys
from decimal import Decimal
from importlib.metadata import version
from logging import getLogger
from typing import Any, Callable, Self

from interop_bridge.core.event_bus import (
    NOTIFICATION,
    READ_MODEL_UPDATED,
    RESTART_REQUIRED,
    EventBus,
)
from interop_bridge.core.state_machine import StateMachine, States
from interop_bridge.exceptions import (
    BridgeStateError,
    InvalidAddressError,
    TransportError,
)
from interop_bridge.interfaces import ILedgerClient, IWalletProvider
from interop_bridge.models.domain import Order, Session, Stats
from interop_bridge.models.dto.configuration import (
    EngineConfigDTO,
    NotificationConfigDTO,
    WalletConfigDTO,
)
from interop_bridge.models.schemas import EventKind
from interop_bridge.services.notification_service import NotificationService
from interop_bridge.services.order_projector import OrderProjector
from interop_bridge.services.order_service import OrderService
from interop_bridge.services.pager import page
from interop_bridge.services.refresh_scheduler import RefreshScheduler
from interop_bridge.services.relayer import RelayerService
from interop_bridge.services.session_manager import SessionManager
from interop_bridge.services.stats_aggregator import StatsAggregator

LOG = getLogger(__name__)

LedgerFactory = Callable[[str | None], ILedgerClient]


class Engine:
    """
    Orchestrates the read model of the ledger's orders but delegates specific
    responsibilities to specialized classes.

    The engine exclusively owns the projected orders, the stats and the
    session. Consumers only receive immutable snapshots.
    """

    def __init__(  # noqa: PLR0913
        self: Self,
        config: EngineConfigDTO,
        wallet_config: WalletConfigDTO,
        notification_config: NotificationConfigDTO,
        *,
        wallet: IWalletProvider | None = None,
        ledger_factory: LedgerFactory | None = None,
    ) -> None:
        LOG.info(
            "Initiate the interop bridge engine (v%s)",
            version("interop-bridge"),
        )
        LOG.debug("Config: %s", config)

        self.__event_bus = EventBus()
        self.__state_machine = StateMachine()
        self.__config = config

        # == Infrastructure components =========================================
        ##
        self.__wallet = wallet or self.__wallet_factory(wallet_config)
        self.__ledger_factory = ledger_factory or self.__default_ledger_factory
        # Read-only until a wallet session is established
        self.__ledger = self.__ledger_factory(None)

        # == Application services ==============================================
        ##
        self.__notification_service = NotificationService(
            notification_config,
            source=f"interop-bridge (chain {config.chain_id})",
        )
        self.__session_manager = SessionManager(
            wallet=self.__wallet,
            event_bus=self.__event_bus,
            on_session_change=self.__on_session_change,
        )
        self.__projector = OrderProjector(
            ledger=self.__ledger,
            token_decimals=config.token_decimals,
        )
        self.__aggregator = StatsAggregator(
            ledger=self.__ledger,
            unit=config.token_symbol,
            token_decimals=config.token_decimals,
        )
        self.__scheduler = RefreshScheduler(
            ledger=self.__ledger,
            reconcile=self.reconcile,
            interval=config.refresh_interval,
        )
        self.__order_service = OrderService(
            ledger=self.__ledger,
            session_manager=self.__session_manager,
            event_bus=self.__event_bus,
            request_refresh=self.refresh,
            token_decimals=config.token_decimals,
            fill_deadline_offset=config.fill_deadline_offset,
        )

        # == Read model ========================================================
        ##
        self.__orders: tuple[Order, ...] = ()
        self.__stats = Stats(unit=config.token_symbol)
        self.__pass_sequence = itertools.count(1)
        self.__applied_pass = 0
        self.__torn_down = False
        self.__relayer: RelayerService | None = None

        self.__setup_event_handlers()

    def __wallet_factory(self: Self, wallet_config: WalletConfigDTO) -> IWalletProvider:
        from interop_bridge.adapters.wallet import (  # pylint: disable=import-outside-toplevel # noqa: PLC0415
            LocalAccountWalletAdapter,
        )

        return LocalAccountWalletAdapter(
            private_keys=[wallet_config.private_key] if wallet_config.enabled else [],
            rpc_url=self.__config.rpc_url,
            chain_id=self.__config.chain_id,
        )

    def __default_ledger_factory(self: Self, account: str | None) -> ILedgerClient:
        """Create a read-only or, if an account is given, a signing client."""
        from interop_bridge.adapters.ledger import (  # pylint: disable=import-outside-toplevel # noqa: PLC0415
            Web3LedgerClientAdapter,
        )

        return Web3LedgerClientAdapter(
            rpc_url=self.__config.rpc_url,
            contract_address=self.__config.contract_address,
            chain_id=self.__config.chain_id,
            signer=self.__wallet.signer(account) if account else None,
            poll_interval=self.__config.log_poll_interval,
            confirmation_timeout=self.__config.confirmation_timeout,
        )

    def __setup_event_handlers(self: Self) -> None:
        self.__event_bus.subscribe(
            NOTIFICATION,
            self.__notification_service.on_notification,
        )
        self.__event_bus.subscribe(RESTART_REQUIRED, self.__on_restart_required)

    # == Snapshots =============================================================

    @property
    def event_bus(self: Self) -> EventBus:
        return self.__event_bus

    @property
    def state_machine(self: Self) -> StateMachine:
        return self.__state_machine

    @property
    def orders(self: Self) -> tuple[Order, ...]:
        return self.__orders

    @property
    def stats(self: Self) -> Stats:
        return self.__stats

    @property
    def session(self: Self) -> Session:
        return self.__session_manager.session

    @property
    def ledger(self: Self) -> ILedgerClient:
        return self.__ledger

    @property
    def scheduler(self: Self) -> RefreshScheduler:
        return self.__scheduler

    @property
    def order_service(self: Self) -> OrderService:
        return self.__order_service

    def page(
        self: Self,
        page_number: int,
        page_size: int | None = None,
    ) -> tuple[tuple[Order, ...], int]:
        """Returns the orders of ``page_number`` and the number of pages"""
        return page(self.__orders, page_size or self.__config.page_size, page_number)

    # == Session ===============================================================

    async def connect(self: Self) -> Session:
        return await self.__session_manager.connect()

    async def disconnect(self: Self) -> None:
        await self.__session_manager.disconnect()

    async def __on_session_change(self: Self, session: Session) -> None:
        """
        Rebuild the ledger client for the new session and hand it to every
        component that talks to the ledger.
        """
        account = session.account if session.is_connected else None
        LOG.debug("Rebuilding the ledger client (account: %s)", account)

        old_ledger, self.__ledger = self.__ledger, self.__ledger_factory(account)
        self.__scheduler.rebind(self.__ledger)
        self.__projector.rebind(self.__ledger)
        self.__aggregator.rebind(self.__ledger)
        self.__order_service.rebind(self.__ledger)
        if self.__relayer is not None:
            self.__relayer.rebind(self.__ledger)
        await old_ledger.close()

        if account and self.__state_machine.state == States.RUNNING:
            await self.refresh()

    def __on_restart_required(self: Self, data: dict[str, Any]) -> None:
        LOG.error("Network changed to chain %s, terminating...", data.get("chain_id"))
        self.__state_machine.transition_to(States.ERROR)

    # == Reconciliation ========================================================

    async def refresh(self: Self) -> None:
        """Run a reconciliation pass and wait for it to complete."""
        await self.__scheduler.request_pass("manual")

    async def reconcile(self: Self) -> bool:
        """
        Execute one reconciliation pass.

        The ledger is queried once per event kind, the orders and stats are
        derived from the same events. The result is only applied if no pass
        that started later was applied already and the engine was not torn
        down in the meantime. Returns True if the result was applied.
        """
        sequence = next(self.__pass_sequence)
        ledger = self.__ledger

        orders: tuple[Order, ...] | None = None
        stats: Stats | None = None
        try:
            open_events = await ledger.query_events(EventKind.OPEN)
        except TransportError as exc:
            LOG.error("Failed to fetch pending orders: %s", exc)
        else:
            orders = await self.__projector.project(open_events)
            try:
                fill_events = await ledger.query_events(EventKind.FILL)
            except TransportError as exc:
                LOG.error("Failed to update stats: %s", exc)
            else:
                stats = await self.__aggregator.aggregate(open_events, fill_events)

        account = self.__session_manager.account
        balance: Decimal | None = None
        if account:
            try:
                balance = await self.__order_service.check_balance(account)
            except (InvalidAddressError, TransportError) as exc:
                LOG.error("Failed to fetch balance: %s", exc)

        if self.__torn_down:
            LOG.debug("Discarding result of pass %d, engine was torn down.", sequence)
            return False
        if sequence < self.__applied_pass:
            LOG.debug(
                "Discarding stale result of pass %d (applied: %d)",
                sequence,
                self.__applied_pass,
            )
            return False

        self.__applied_pass = sequence
        if orders is not None:
            self.__orders = orders
        if stats is not None:
            self.__stats = stats
        if balance is not None and account:
            self.__session_manager.set_balance(account, balance)

        self.__event_bus.publish(
            READ_MODEL_UPDATED,
            {"orders": self.__orders, "stats": self.__stats, "pass": sequence},
        )
        return True

    # == Lifecycle =============================================================

    async def start(self: Self) -> None:
        """Check for an existing wallet session and start the refresh loop."""
        LOG.info("Starting the interop bridge engine...")
        await self.__wallet.start()
        await self.__session_manager.initialize()
        if self.__state_machine.state == States.ERROR:
            raise BridgeStateError("The engine failed during initialization!")
        self.__scheduler.start()
        self.__state_machine.transition_to(States.RUNNING)
        await self.refresh()

    async def sync(self: Self) -> None:
        """Restore the wallet session and run a single pass without the loop"""
        await self.__wallet.start()
        await self.__session_manager.initialize()
        await self.reconcile()

    async def stop(self: Self) -> None:
        """Tear down the engine, results of passes still in flight are dropped."""
        if self.__torn_down:
            return
        self.__torn_down = True
        # A network change after teardown must not move the engine to ERROR
        self.__event_bus.unsubscribe(RESTART_REQUIRED, self.__on_restart_required)
        await self.__scheduler.stop()
        if self.__relayer is not None:
            self.__relayer.stop()
            self.__relayer = None
        self.__wallet.remove_listeners()
        await self.__wallet.close()
        await self.__ledger.close()

    async def start_relayer(self: Self) -> RelayerService:
        """Restore the wallet session and confirm every filled order"""
        LOG.info("Starting the relayer...")
        await self.__wallet.start()
        await self.__session_manager.initialize()
        if not self.__session_manager.session.is_connected:
            raise BridgeStateError("The relayer requires a configured wallet!")
        self.__relayer = RelayerService(self.__ledger)
        self.__relayer.start()
        self.__state_machine.transition_to(States.RUNNING)
        return self.__relayer

    async def run(self: Self, *, relay: bool = False) -> None:
        """
        Start the engine and keep it running until shutdown is requested.
        With ``relay`` the engine confirms filled orders instead of keeping
        the read model up to date.
        """

        # ======================================================================
        # Handle the shutdown signals
        ##
        def _signal_handler() -> None:
            LOG.warning("Initiate a controlled shutdown of the engine...")
            self.__state_machine.transition_to(States.SHUTDOWN_REQUESTED)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

        try:
            if relay:
                await self.start_relayer()
            else:
                await self.start()
            await self.__state_machine.wait_for_shutdown()
        except (
            BridgeStateError,
            Exception,
        ) as exc:  # pylint: disable=broad-exception-caught
            LOG.error("The engine was interrupted by exception.", exc_info=exc)
            self.__state_machine.transition_to(States.ERROR)

        if self.__state_machine.state == States.SHUTDOWN_REQUESTED:
            await self.terminate(
                "The engine was shut down successfully!",
                exception=False,
            )
        else:
            await self.terminate("The engine was shut down due to an error!")

    async def terminate(
        self: Self,
        reason: str = "",
        *,
        exception: bool = True,
    ) -> None:
        """
        Handle the termination of the engine.

        1. Stops the refresh loop and removes all ledger subscriptions.
        2. Closes the ledger and wallet connections.
        3. Notifies the user about the termination.
        4. Exits, a supervisor is expected to restart the process on error.
        """
        await self.stop()
        self.__event_bus.publish(
            NOTIFICATION,
            {"message": f"Reason: {reason}", "title": "Terminated"},
        )
        sys.exit(exception)
