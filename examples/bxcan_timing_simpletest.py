# SPDX-FileCopyrightText: Copyright (c) 2026 bxcan_timing contributors
#
# SPDX-License-Identifier: MIT

from bxcan_timing import search_timings

# 45MHz APB1 clock, 125kbit/s, sample point at 87.5%
for timing in search_timings(45000000, 125000, 0.875):
    print(timing)
