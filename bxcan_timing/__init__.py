# SPDX-FileCopyrightText: Copyright (c) 2026 bxcan_timing contributors
#
# SPDX-License-Identifier: MIT
"""
`bxcan_timing`
================================================================================

Bit timing register calculator for the bxCAN peripheral


* Author(s): bxcan_timing contributors

Implementation Notes
--------------------

**Software and Dependencies:**

* Adafruit Blinka, for `micropython.const` on CPython:
  https://github.com/adafruit/Adafruit_Blinka
"""

from .bitrate import (
    STANDARD_BAUD_RATES,
    BxcanConst,
    BxcanTiming,
    cia_sample_point,
    pack_btr,
    prescaler_range,
    round_half_away,
    search_baud_rates,
    search_timings,
    unpack_btr,
)

__version__ = "0.1.0"

__all__ = [
    "STANDARD_BAUD_RATES",
    "BxcanConst",
    "BxcanTiming",
    "cia_sample_point",
    "pack_btr",
    "prescaler_range",
    "round_half_away",
    "search_baud_rates",
    "search_timings",
    "unpack_btr",
]
