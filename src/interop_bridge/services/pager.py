# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import math
from typing import Sequence, TypeVar

T = TypeVar("T")


def page(
    items: Sequence[T],
    page_size: int,
    page_number: int,
) -> tuple[tuple[T, ...], int]:
    """
    Returns the slice of ``items`` shown on ``page_number`` and the total
    number of pages. The page number is clamped to ``[1, total_pages]``,
    there is always at least one (possibly empty) page.
    """
    if page_size < 1:
        raise ValueError(f"Page size must be larger than 0, got {page_size}")

    total_pages = max(1, math.ceil(len(items) / page_size))
    page_number = min(max(page_number, 1), total_pages)

    start = (page_number - 1) * page_size
    return tuple(items[start : start + page_size]), total_pages
