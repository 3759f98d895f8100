# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import re

from pydantic import BaseModel, Field, computed_field, field_validator
from web3 import Web3


class EngineConfigDTO(BaseModel):
    """
    Data transfer object for the engine configuration. These values are
    passed via CLI or environment variables.
    """

    # ==========================================================================
    # Ledger connection
    rpc_url: str = "http://127.0.0.1:8545/"
    contract_address: str
    chain_id: int = Field(default=31337, gt=0)

    # ==========================================================================
    # Read model
    refresh_interval: float = Field(
        default=5.0,
        gt=0,
        le=300,
        description="Seconds between two timer driven reconciliation passes",
    )
    page_size: int = Field(default=5, gt=0)
    token_symbol: str = "TST"
    token_decimals: int = Field(default=18, ge=0, le=36)

    # ==========================================================================
    # Transactions and push notifications
    confirmation_timeout: float = Field(default=120.0, gt=0)
    log_poll_interval: float = Field(default=2.0, gt=0)
    fill_deadline_offset: int = Field(default=3600, gt=0)

    @field_validator("contract_address")
    @classmethod
    def validate_contract_address(cls, value: str) -> str:
        """Ensure the contract address is well-formed and checksummed."""
        if not Web3.is_address(value):
            raise ValueError(f"Invalid contract address: {value}")
        return Web3.to_checksum_address(value)


class WalletConfigDTO(BaseModel):
    """Keys of the local wallet, an empty wallet runs read-only"""

    private_key: str | None = Field(default=None, repr=False)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def enabled(self) -> bool:
        return bool(self.private_key)


class TelegramConfigDTO(BaseModel):
    """Pydantic model for Telegram notification configuration."""

    token: str | None = None
    chat_id: str | None = None

    @field_validator("token")
    @classmethod
    def validate_token(cls, value: str | None) -> str | None:
        if value and not re.fullmatch(r"\d+:[\w-]{20,}", value):
            raise ValueError("Invalid Telegram bot token format")
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def enabled(self) -> bool:
        """Return True if both token and chat_id are truthy values."""
        return bool(self.token and self.chat_id)


class NotificationConfigDTO(BaseModel):
    """Pydantic model for notification service configuration."""

    telegram: TelegramConfigDTO
