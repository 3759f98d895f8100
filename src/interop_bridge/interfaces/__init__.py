# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from interop_bridge.interfaces.ledger import EventHandler, ILedgerClient
from interop_bridge.interfaces.notification import INotificationChannel
from interop_bridge.interfaces.wallet import IWalletProvider

__all__ = [
    "EventHandler",
    "ILedgerClient",
    "INotificationChannel",
    "IWalletProvider",
]
