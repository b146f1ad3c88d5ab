# SPDX-FileCopyrightText: Copyright (c) 2026 bxcan_timing contributors
#
# SPDX-License-Identifier: MIT

# enumerating the timings of every standard baudrate would be
# used for a selection process where the user would be provided
# a list of choices for the clock their peripheral runs on.
# The register value of the chosen timing is written to CAN_BTR.

from bxcan_timing import search_baud_rates, unpack_btr

timings = search_baud_rates(36000000, 0.875, sjw=2)

for timing in timings:
    ts1, ts2, brp, sjw = unpack_btr(timing.register_value)
    print('baudrate:', timing.baud_rate)
    print('sample point: {0:.2f}'.format(timing.sample_point * 100))
    print('brp:', brp, 'ts1:', ts1, 'ts2:', ts2, 'sjw:', sjw)
    print('btr:', timing.register_hex)
    print()
