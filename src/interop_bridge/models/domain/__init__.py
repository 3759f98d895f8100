# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#
# Domain models

from interop_bridge.models.domain.order import Order, OrderStatus
from interop_bridge.models.domain.session import Session, SessionState
from interop_bridge.models.domain.stats import Stats

__all__ = ["Order", "OrderStatus", "Session", "SessionState", "Stats"]
