# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import asyncio
import sys
from logging import DEBUG, INFO, WARNING, basicConfig, getLogger
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from click import FLOAT, INT, STRING, Context, echo, pass_context
from cloup import HelpFormatter, HelpTheme, Style, argument, group, option

if TYPE_CHECKING:
    from interop_bridge.core.engine import Engine

COMMAND_FORMATTER = HelpFormatter.settings(
    theme=HelpTheme(
        invoked_command=Style(fg="bright_yellow"),
        heading=Style(fg="bright_white", bold=True),
        constraint=Style(fg="magenta"),
        col1=Style(fg="bright_yellow"),
    ),
)


def print_version(ctx: Context, param: Any, value: Any) -> None:  # noqa: ANN401, ARG001
    """Prints the version of the package"""
    if not value or ctx.resilient_parsing:
        return
    from importlib.metadata import (  # noqa: PLC0415 # pylint: disable=import-outside-toplevel
        version,
    )

    echo(version("interop-bridge"))
    ctx.exit()


def ensure_larger_than_zero(
    ctx: Context,
    param: Any,  # noqa: ANN401
    value: Any,  # noqa: ANN401
) -> Any:  # noqa: ANN401
    """Ensure the value is larger than 0"""
    if value is not None and value <= 0:
        ctx.fail(f"Value for option '{param.name}' must be larger than 0")
    return value


@group(
    context_settings={
        "auto_envvar_prefix": "INTEROP",
        "help_option_names": ["-h", "--help"],
    },
    formatter_settings=COMMAND_FORMATTER,
    no_args_is_help=True,
)
@option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
)
@option(
    "--rpc-url",
    type=STRING,
    default="http://127.0.0.1:8545/",
    show_default=True,
    help="JSON-RPC endpoint of the ledger's chain.",
)
@option(
    "--contract-address",
    required=True,
    type=STRING,
    help="Address of the InteropToken contract.",
)
@option(
    "--chain-id",
    type=INT,
    default=31337,
    show_default=True,
    callback=ensure_larger_than_zero,
    help="Expected chain ID of the RPC endpoint.",
)
@option(
    "--private-key",
    required=False,
    type=STRING,
    help="Private key of the wallet account. Runs read-only if omitted.",
)
@option(
    "--refresh-interval",
    type=FLOAT,
    default=5.0,
    show_default=True,
    callback=ensure_larger_than_zero,
    help="Seconds between two reconciliation passes.",
)
@option(
    "--page-size",
    type=INT,
    default=5,
    show_default=True,
    callback=ensure_larger_than_zero,
    help="Number of orders shown per page.",
)
@option(
    "--token-symbol",
    type=STRING,
    default="TST",
    show_default=True,
    help="Symbol of the bridged token.",
)
@option(
    "--telegram-token",
    required=False,
    type=STRING,
    help="The telegram token to use.",
)
@option(
    "--telegram-chat-id",
    required=False,
    type=STRING,
    help="The telegram chat ID to use.",
)
@option(
    "-v",
    "--verbose",
    count=True,
    help="Increase the verbosity of output. Use -vv for even more verbosity.",
)
@pass_context
def cli(ctx: Context, **kwargs: dict) -> None:
    """
    Command-line interface entry point
    """
    ctx.ensure_object(dict)
    ctx.obj |= kwargs

    verbosity = kwargs.get("verbose", 0)

    basicConfig(
        format="%(asctime)s %(levelname)8s | %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
        level=INFO if verbosity == 0 else DEBUG,
    )

    getLogger("requests").setLevel(WARNING)
    getLogger("urllib3").setLevel(WARNING)

    if verbosity > 1:  # type: ignore[operator]
        getLogger("requests").setLevel(DEBUG)
        getLogger("web3").setLevel(DEBUG)
    else:
        getLogger("web3").setLevel(WARNING)


def build_engine(ctx: Context) -> "Engine":
    """Create the engine from the options of the command group"""
    # pylint: disable=import-outside-toplevel
    from interop_bridge.core.engine import Engine  # noqa: PLC0415
    from interop_bridge.models.dto.configuration import (  # noqa: PLC0415
        EngineConfigDTO,
        NotificationConfigDTO,
        TelegramConfigDTO,
        WalletConfigDTO,
    )

    return Engine(
        config=EngineConfigDTO(
            rpc_url=ctx.obj["rpc_url"],
            contract_address=ctx.obj["contract_address"],
            chain_id=ctx.obj["chain_id"],
            refresh_interval=ctx.obj["refresh_interval"],
            page_size=ctx.obj["page_size"],
            token_symbol=ctx.obj["token_symbol"],
        ),
        wallet_config=WalletConfigDTO(private_key=ctx.obj["private_key"]),
        notification_config=NotificationConfigDTO(
            telegram=TelegramConfigDTO(
                token=ctx.obj["telegram_token"],
                chat_id=ctx.obj["telegram_chat_id"],
            ),
        ),
    )


def execute(ctx: Context, action: Callable[["Engine"], Awaitable[None]]) -> None:
    """
    Restore the session, run one reconciliation pass, execute ``action`` and
    tear the engine down again. Bridge errors end the command with exit code 1.
    """
    from interop_bridge.exceptions import BridgeError  # noqa: PLC0415 # pylint: disable=import-outside-toplevel

    async def main() -> None:
        engine = build_engine(ctx)
        try:
            await engine.sync()
            await action(engine)
        finally:
            await engine.stop()

    try:
        asyncio.run(main())
    except (BridgeError, ValueError) as exc:
        echo(f"Error: {exc}", err=True)
        sys.exit(1)


# == Long running commands =====================================================


@cli.command(
    context_settings={
        "auto_envvar_prefix": "INTEROP_RUN",
        "help_option_names": ["-h", "--help"],
    },
    formatter_settings=COMMAND_FORMATTER,
)
@pass_context
def run(ctx: Context) -> None:
    """Keep the order read model synchronized with the ledger"""

    async def main() -> None:
        await build_engine(ctx).run()

    asyncio.run(main())


@cli.command(
    context_settings={
        "auto_envvar_prefix": "INTEROP_RELAY",
        "help_option_names": ["-h", "--help"],
    },
    formatter_settings=COMMAND_FORMATTER,
)
@pass_context
def relay(ctx: Context) -> None:
    """Confirm every filled order (requires --private-key)"""
    if not ctx.obj["private_key"]:
        echo("The relayer requires a private key!", err=True)
        sys.exit(1)

    async def main() -> None:
        await build_engine(ctx).run(relay=True)

    asyncio.run(main())


# == Read model ================================================================


@cli.command(formatter_settings=COMMAND_FORMATTER)
@option(
    "--page",
    "page_number",
    type=INT,
    default=1,
    show_default=True,
    help="The page to show, clamped to the available pages.",
)
@pass_context
def orders(ctx: Context, page_number: int) -> None:
    """List the pending orders"""

    async def action(engine: "Engine") -> None:
        items, total_pages = engine.page(page_number)
        if not items:
            echo("No pending orders")
            return
        unit = engine.stats.unit
        for order in items:
            echo(
                f"{order.id}  {order.originator}  {order.amount} {unit}"
                f"  {order.status.value}",
            )
        echo(f"Page {min(max(page_number, 1), total_pages)} of {total_pages}")

    execute(ctx, action)


@cli.command(formatter_settings=COMMAND_FORMATTER)
@pass_context
def stats(ctx: Context) -> None:
    """Show the aggregated order statistics"""

    async def action(engine: "Engine") -> None:
        current = engine.stats
        echo(f"Total Orders:     {current.total_orders}")
        if current.is_consistent:
            echo(f"Pending Orders:   {current.pending_orders}")
        else:
            echo("Pending Orders:   inconsistent (more fills than opened orders)")
        echo(f"Completed Orders: {current.completed_orders}")
        echo(f"Total Volume:     {current.volume_label}")

    execute(ctx, action)


@cli.command(formatter_settings=COMMAND_FORMATTER)
@argument("address", required=False)
@pass_context
def balance(ctx: Context, address: str | None) -> None:
    """Show the token balance of ADDRESS or of the connected account"""

    async def action(engine: "Engine") -> None:
        target = address or engine.session.account
        if not target:
            echo("No address given and no wallet connected.", err=True)
            sys.exit(1)
        amount = await engine.order_service.check_balance(target)
        echo(f"{target}: {amount} {engine.stats.unit}")

    execute(ctx, action)


# == Operations ================================================================


@cli.command(formatter_settings=COMMAND_FORMATTER)
@argument("recipient")
@argument("amount")
@pass_context
def transfer(ctx: Context, recipient: str, amount: str) -> None:
    """Transfer AMOUNT tokens to RECIPIENT"""

    async def action(engine: "Engine") -> None:
        receipt = await engine.order_service.transfer(recipient, amount)
        echo(f"Transfer confirmed: {receipt.tx_hash}")

    execute(ctx, action)


@cli.command(name="open", formatter_settings=COMMAND_FORMATTER)
@argument("recipient")
@argument("amount")
@option(
    "--destination-chain-id",
    required=True,
    type=INT,
    help="Chain ID the tokens are bridged to.",
)
@option(
    "--fee-token",
    type=STRING,
    default="0x0000000000000000000000000000000000000000",
    help="Token the filler fee is paid in.",
)
@option(
    "--fee-value",
    type=STRING,
    default="0",
    show_default=True,
    help="Amount of the filler fee.",
)
@option(
    "--fill-deadline",
    type=INT,
    callback=ensure_larger_than_zero,
    help="Unix timestamp until the order must be filled, default in one hour.",
)
@pass_context
def open_order(  # noqa: PLR0913
    ctx: Context,
    recipient: str,
    amount: str,
    destination_chain_id: int,
    fee_token: str,
    fee_value: str,
    fill_deadline: int | None,
) -> None:
    """Open a cross-chain order sending AMOUNT tokens to RECIPIENT"""

    async def action(engine: "Engine") -> None:
        receipt = await engine.order_service.open_order(
            recipient=recipient,
            amount=amount,
            destination_chain_id=destination_chain_id,
            fee_token=fee_token,
            fee_value=fee_value,
            fill_deadline=fill_deadline,
        )
        echo(f"Order opened: {receipt.tx_hash}")

    execute(ctx, action)


@cli.command(formatter_settings=COMMAND_FORMATTER)
@argument("order_id")
@pass_context
def fill(ctx: Context, order_id: str) -> None:
    """Fill the order ORDER_ID"""

    async def action(engine: "Engine") -> None:
        receipts = await engine.order_service.fill_order(order_id)
        for receipt in receipts:
            echo(f"Fill confirmed: {receipt.tx_hash}")

    execute(ctx, action)
