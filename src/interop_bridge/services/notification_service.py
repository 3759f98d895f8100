# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from logging import getLogger
from typing import Any, Self

from interop_bridge.interfaces import INotificationChannel
from interop_bridge.models.dto.configuration import NotificationConfigDTO

LOG = getLogger(__name__)


class NotificationService:
    """
    Delivers user-visible messages, e.g. failed submissions or the
    termination of the engine, through all configured channels.

    Every message is sent under a title naming the chain, so that several
    engines can report into the same chat.
    """

    def __init__(
        self: Self,
        config: NotificationConfigDTO,
        source: str = "interop-bridge",
    ) -> None:
        self.__channels: list[INotificationChannel] = []
        self.__source = source
        if config.telegram.enabled:
            self.add_telegram_channel(
                bot_token=config.telegram.token,  # type: ignore[arg-type]
                chat_id=config.telegram.chat_id,  # type: ignore[arg-type]
            )

    @property
    def channels(self: Self) -> tuple[INotificationChannel, ...]:
        return tuple(self.__channels)

    def add_channel(self: Self, channel: INotificationChannel) -> None:
        self.__channels.append(channel)

    def add_telegram_channel(self: Self, bot_token: str, chat_id: str) -> None:
        from interop_bridge.adapters.notification import (  # pylint: disable=import-outside-toplevel # noqa: PLC0415
            TelegramNotificationChannelAdapter,
        )

        self.add_channel(TelegramNotificationChannelAdapter(bot_token, chat_id))

    def notify(self: Self, message: str, title: str | None = None) -> bool:
        """
        Send ``message`` through every channel.

        Returns True if at least one channel delivered the message.
        """
        LOG.info("Sending notification: %s", message)
        title = f"{self.__source}: {title}" if title else self.__source
        delivered = [channel.send(title, message) for channel in self.__channels]
        return any(delivered)

    def on_notification(self: Self, data: dict[str, Any]) -> None:
        """Event bus handler of the ``notification`` topic"""
        self.notify(data["message"], title=data.get("title"))
