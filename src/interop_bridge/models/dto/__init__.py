# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#
# Data Transfer objects

from interop_bridge.models.dto.configuration import (
    EngineConfigDTO,
    NotificationConfigDTO,
    TelegramConfigDTO,
    WalletConfigDTO,
)

__all__ = [
    "EngineConfigDTO",
    "NotificationConfigDTO",
    "TelegramConfigDTO",
    "WalletConfigDTO",
]
