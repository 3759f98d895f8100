# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from abc import ABC, abstractmethod
from typing import Self


class INotificationChannel(ABC):
    """Interface for channels that deliver messages to the user."""

    @abstractmethod
    def send(self: Self, title: str, message: str) -> bool:
        """Deliver ``message`` under ``title``, returns True on success."""
