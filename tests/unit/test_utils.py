# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""Unit tests for the conversion helpers."""

from decimal import Decimal

import pytest

from interop_bridge.exceptions import InvalidAddressError
from interop_bridge.utils import from_fixed_point, to_fixed_point, validate_address


def test_from_fixed_point() -> None:
    assert from_fixed_point(1_500_000_000_000_000_000) == Decimal("1.5")
    assert from_fixed_point(0) == 0
    assert from_fixed_point(12345, decimals=2) == Decimal("123.45")


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        ("1", 10**18),
        ("0.5", 5 * 10**17),
        (Decimal("2.25"), 225 * 10**16),
        (3, 3 * 10**18),
    ],
)
def test_to_fixed_point(amount: str | Decimal | int, expected: int) -> None:
    assert to_fixed_point(amount) == expected


@pytest.mark.parametrize("amount", ["abc", "inf", "NaN", "0.0000000000000000001"])
def test_to_fixed_point_invalid(amount: str) -> None:
    with pytest.raises(ValueError, match="amount|Amount"):
        to_fixed_point(amount)


def test_validate_address_checksums() -> None:
    address = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
    assert validate_address(address) == "0x5FbDB2315678afecb367f032d93F642f64180aa3"


@pytest.mark.parametrize("address", ["", "0x1234", "not-an-address", None])
def test_validate_address_invalid(address: str) -> None:
    with pytest.raises(InvalidAddressError):
        validate_address(address)
