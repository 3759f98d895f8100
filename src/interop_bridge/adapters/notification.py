# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from html import escape
from logging import getLogger
from typing import Self

import requests

from interop_bridge.interfaces import INotificationChannel

LOG = getLogger(__name__)


class TelegramNotificationChannelAdapter(INotificationChannel):
    """
    Sends messages through a Telegram bot.

    Messages are rendered as HTML, error texts of the ledger may contain
    characters that would break Telegram's markdown parser.
    """

    def __init__(self: Self, bot_token: str, chat_id: str, timeout: int = 10) -> None:
        self.__chat_id = chat_id
        self.__timeout = timeout
        self.__url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        self.__session = requests.Session()

    def send(self: Self, title: str, message: str) -> bool:
        LOG.debug("Sending Telegram notification: %s", message)
        try:
            response = self.__session.post(
                self.__url,
                data={
                    "chat_id": self.__chat_id,
                    "text": f"<b>{escape(title)}</b>\n{escape(message)}",
                    "parse_mode": "HTML",
                    "disable_web_page_preview": True,
                },
                timeout=self.__timeout,
            )
        except requests.RequestException as exc:
            LOG.error("Failed to send Telegram notification: %s", exc)
            return False

        if not response.ok:
            LOG.error(
                "Telegram rejected the notification (%d): %s",
                response.status_code,
                response.text,
            )
        return response.ok
