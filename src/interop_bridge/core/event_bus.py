# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

"""
In-process publish/subscribe between the engine's components.

Topics used by the engine:

- ``notification``: ``{"message": str, "title": str | None}``, user-visible
  messages, delivered by the NotificationService.
- ``restart_required``: ``{"chain_id": int}``, the wallet switched networks.
- ``read_model_updated``: ``{"orders": tuple, "stats": Stats, "pass": int}``,
  published after a reconciliation result was applied.
"""

from logging import getLogger
from typing import Any, Callable, Self

LOG = getLogger(__name__)

NOTIFICATION = "notification"
RESTART_REQUIRED = "restart_required"
READ_MODEL_UPDATED = "read_model_updated"

Callback = Callable[[dict[str, Any]], None]


class EventBus:
    """Synchronous event bus, callbacks run in subscription order"""

    def __init__(self: Self) -> None:
        self._subscribers: dict[str, list[Callback]] = {}

    def subscribe(self: Self, topic: str, callback: Callback) -> None:
        self._subscribers.setdefault(topic, []).append(callback)

    def unsubscribe(self: Self, topic: str, callback: Callback) -> None:
        """Remove a callback, unknown callbacks are ignored"""
        if callback in self._subscribers.get(topic, []):
            self._subscribers[topic].remove(callback)

    def publish(self: Self, topic: str, data: dict[str, Any]) -> None:
        """
        Call every subscriber of ``topic`` with ``data``. Exceptions of a
        callback propagate to the publisher.
        """
        subscribers = self._subscribers.get(topic)
        if not subscribers:
            LOG.debug("No subscribers for '%s'", topic)
            return
        # Callbacks may (un)subscribe while being dispatched
        for callback in list(subscribers):
            callback(data)
