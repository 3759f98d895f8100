# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

from typing import Self

from pydantic import BaseModel, ConfigDict, computed_field


class Stats(BaseModel):
    """
    Aggregated counters derived from the ledger's event history.

    The values are not authoritative. An order counts as completed as soon as
    a ``Fill`` event was observed for it, even if it was not confirmed yet.
    """

    model_config = ConfigDict(frozen=True)

    total_orders: int = 0
    pending_orders: int = 0
    completed_orders: int = 0
    total_volume: float = 0.0
    unit: str = "TST"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_consistent(self: Self) -> bool:
        """False if more fills than opened orders were observed"""
        return self.pending_orders >= 0

    @property
    def volume_label(self: Self) -> str:
        return f"{self.total_volume} {self.unit}"
