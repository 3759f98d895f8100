# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""Conversion helpers shared by services and adapters"""

from decimal import Decimal, InvalidOperation

from web3 import Web3

from interop_bridge.exceptions import InvalidAddressError


def from_fixed_point(value: int, decimals: int = 18) -> Decimal:
    """Scale a fixed-point ledger integer to a decimal amount"""
    return Decimal(value).scaleb(-decimals)


def to_fixed_point(amount: Decimal | str | float, decimals: int = 18) -> int:
    """Scale a decimal amount to the ledger's fixed-point integer"""
    try:
        scaled = Decimal(str(amount)).scaleb(decimals)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount}") from exc
    if not scaled.is_finite():
        raise ValueError(f"Invalid amount: {amount}")
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount} exceeds {decimals} decimals")
    return int(scaled)


def validate_address(address: str) -> str:
    """
    Returns the checksummed address or raises InvalidAddressError, so that
    malformed input never reaches the ledger client.
    """
    if not isinstance(address, str) or not Web3.is_address(address):
        raise InvalidAddressError(str(address))
    return Web3.to_checksum_address(address)
