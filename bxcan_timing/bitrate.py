# SPDX-FileCopyrightText: Copyright (c) 2026 bxcan_timing contributors
#
# SPDX-License-Identifier: MIT
"""
`bxcan_timing.bitrate`
================================================================================

Calculator for the bit timing register (BTR) needed to set the
baudrate(bitrate) on the bxCAN peripheral.


* Author(s): bxcan_timing contributors
"""

import logging
import math
from collections import namedtuple
from typing import Iterable, List, Tuple

from micropython import const

logger = logging.getLogger(__name__)

# BTR bit positions
_SJW_SHIFT = const(24)
_TS2_SHIFT = const(20)
_TS1_SHIFT = const(16)

_SJW_MASK = const(0x03)
_TS2_MASK = const(0x07)
_TS1_MASK = const(0x0F)
_BRP_MASK = const(0xFFFF)

STANDARD_BAUD_RATES = (
    1000000,
    500000,
    250000,
    125000,
    100000,
    83333,
    50000,
    20000,
    10000,
)


def cia_sample_point(baud_rate: int) -> float:
    """
    CiA (CAN in Automation) recommended sample point for a bitrate.

    :param baud_rate: bitrate in bits/s
    :type baud_rate: int

    :return: sample point as a 0-1 fraction
    :rtype: float
    """
    if baud_rate > 800000:
        sampl_pt = 0.75
    elif baud_rate > 500000:
        sampl_pt = 0.80
    else:
        sampl_pt = 0.875

    return sampl_pt


class BxcanConst(object):
    """
    Hardware limits used to calculate the bxCAN bit timing register
    """
    tseg1_min = 1
    tseg1_max = 16
    tseg2_min = 1
    tseg2_max = 8
    sjw_min = 1
    sjw_max = 4
    tq_per_bit_min = 3
    tq_per_bit_max = 25
    freq_tolerance = 0.001
    sample_point_tolerance = 0.05


def round_half_away(value: float) -> int:
    """
    Round to the nearest integer, ties away from zero.

    The builtin `round` resolves ties to the even neighbour which would
    select different segments for some clock/bitrate pairs.

    :rtype: int
    """
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def _check_sjw(sjw):
    if not BxcanConst.sjw_min <= sjw <= BxcanConst.sjw_max:
        raise ValueError(
            "sjw must be in the range {0}-{1}".format(
                BxcanConst.sjw_min, BxcanConst.sjw_max
            )
        )


def pack_btr(ts1: int, ts2: int, brp: int, sjw: int = 1) -> int:
    """
    Encode the timing segments into a BTR register value.

    Each field is stored as "value minus one".

    :param ts1: time segment 1 (1-16)
    :type ts1: int

    :param ts2: time segment 2 (1-8)
    :type ts2: int

    :param brp: bitrate prescaler
    :type brp: int

    :param sjw: synchronization jump width (1-4)
    :type sjw: int

    :rtype: int

    :raises: ValueError if sjw is out of range
    """
    _check_sjw(sjw)

    return (
        ((sjw - 1) << _SJW_SHIFT) |
        ((ts2 - 1) << _TS2_SHIFT) |
        ((ts1 - 1) << _TS1_SHIFT) |
        (brp - 1)
    )


def unpack_btr(btr: int) -> Tuple[int, int, int, int]:
    """
    Decode a BTR register value.

    :return: (ts1, ts2, brp, sjw)
    :rtype: tuple
    """
    ts1 = ((btr >> _TS1_SHIFT) & _TS1_MASK) + 1
    ts2 = ((btr >> _TS2_SHIFT) & _TS2_MASK) + 1
    brp = (btr & _BRP_MASK) + 1
    sjw = ((btr >> _SJW_SHIFT) & _SJW_MASK) + 1
    return ts1, ts2, brp, sjw


class BxcanTiming(
    namedtuple(
        "BxcanTiming",
        [
            "baud_rate",
            "time_quanta_per_bit",
            "prescaler",
            "sample_point",
            "sample_point_error",
            "segment1",
            "segment2",
            "register_value",
            "sjw",
        ],
        defaults=(1,),
    )
):
    """
    One valid bit timing for the bxCAN peripheral.

    Instances are only created by :func:`search_timings`.
    `sample_point` and `sample_point_error` are 0-1 fractions.
    """
    __slots__ = ()

    @property
    def register_hex(self) -> str:
        """
        BTR value as a hex string, ``0x...``
        """
        return "0x{0:X}".format(self.register_value)

    def to_dict(self) -> dict:
        """
        Structured representation used for the json output.

        Floats are rounded to 3 decimals, ties away from zero. The register
        value is given both as a number and as a hex string.

        :rtype: dict
        """
        return dict(
            baudrate=self.baud_rate,
            nbr_tq=self.time_quanta_per_bit,
            brp=self.prescaler,
            ts1=self.segment1,
            ts2=self.segment2,
            sjw=self.sjw,
            btr=self.register_value,
            sample_point=round_half_away(self.sample_point * 1000.0) / 1000.0,
            sample_point_error=round_half_away(self.sample_point_error * 1000.0) / 1000.0,
            btr_hex=self.register_hex,
        )

    def __str__(self) -> str:
        return (
            f"baudrate: {self.baud_rate}, nbr_tq: {self.time_quanta_per_bit}, "
            f"brp: {self.prescaler}, sample point: {self.sample_point * 100.0:.2f}%, "
            f"sample point error: {self.sample_point_error * 100.0:.2f}%, "
            f"ts1: {self.segment1}, ts2: {self.segment2}, "
            f"btr: 0x{self.register_value:08x}"
        )


def prescaler_range(clock_hz: int, baud_rate: int) -> range:
    """
    Prescaler values giving between 3 and 25 time quanta per bit.

    Capped to what the 16 bit BRP field of the register can hold.

    :param clock_hz: frequency at the entry of the prescaler
    :type clock_hz: int

    :param baud_rate: target bitrate
    :type baud_rate: int

    :return: inclusive prescaler range, empty if no prescaler fits
    :rtype: range
    """
    nominal_bit_time = 1.0 / baud_rate
    max_tq = nominal_bit_time / BxcanConst.tq_per_bit_min
    min_tq = nominal_bit_time / BxcanConst.tq_per_bit_max

    min_brp = int(math.ceil(min_tq * clock_hz))
    max_brp = int(math.floor(max_tq * clock_hz))
    max_brp = min(max_brp, _BRP_MASK + 1)
    logger.debug("brp range for %d Hz @ %d bit/s: %d - %d", clock_hz, baud_rate, min_brp, max_brp)

    return range(min_brp, max_brp + 1)


def search_timings(
        clock_hz: int,
        baud_rate: int,
        sample_point: float,
        sjw: int = 1
) -> List[BxcanTiming]:
    """
    Enumerates all bit timings available for a given bitrate.

    .. code-block:: python

        for timing in search_timings(45000000, 125000, 0.875):
            print(timing)

    outputs:

        baudrate: 125000, nbr_tq: 18, brp: 20, sample point: 88.89%, ...
        etc.....

    Candidates are skipped silently when the segments do not fit the
    register or the bitrate/sample point errors exceed the tolerances.
    An empty list is returned when nothing fits.

    :param clock_hz: frequency at the entry of the prescaler (Hz)
    :type clock_hz: int

    :param baud_rate: target bitrate
    :type baud_rate: int

    :param sample_point: target sample point as a 0-1 fraction
    :type sample_point: float

    :param sjw: synchronization jump width, only affects the register value
    :type sjw: int

    :return: timings in ascending prescaler order
    :rtype: list

    :raises: ValueError if sjw is out of range
    """
    _check_sjw(sjw)

    fclk = float(clock_hz)
    bit_rate = float(baud_rate)
    nominal_bit_time = 1.0 / bit_rate
    sample_point_time = nominal_bit_time * sample_point

    results = []
    for brp in prescaler_range(clock_hz, baud_rate):
        tq = brp / fclk
        nbr_tq = round_half_away(nominal_bit_time / tq)
        ts1 = round_half_away(sample_point_time / tq - 1.0)
        ts2 = nbr_tq - ts1 - 1

        if not (
            BxcanConst.tseg1_min <= ts1 <= BxcanConst.tseg1_max and
            BxcanConst.tseg2_min <= ts2 <= BxcanConst.tseg2_max
        ):
            logger.debug("brp %d: segments out of range (ts1=%d, ts2=%d)", brp, ts1, ts2)
            continue

        real_sample_point = (1 + ts1) * tq
        sp_err = abs(sample_point_time - real_sample_point) / real_sample_point

        real_freq = 1.0 / ((1 + ts1 + ts2) * tq)
        f_err = abs(bit_rate - real_freq) / bit_rate

        if not (
            f_err < BxcanConst.freq_tolerance and
            sp_err < BxcanConst.sample_point_tolerance
        ):
            logger.debug(
                "brp %d: rejected (bitrate error %.4f, sample point error %.4f)",
                brp, f_err, sp_err
            )
            continue

        results.append(
            BxcanTiming(
                baud_rate=baud_rate,
                time_quanta_per_bit=nbr_tq,
                prescaler=brp,
                sample_point=real_sample_point / nominal_bit_time,
                sample_point_error=sp_err,
                segment1=ts1,
                segment2=ts2,
                register_value=pack_btr(ts1, ts2, brp, sjw),
                sjw=sjw,
            )
        )

    logger.debug("%d timing(s) found for %d bit/s", len(results), baud_rate)
    return results


def search_baud_rates(
        clock_hz: int,
        sample_point: float,
        baud_rates: Iterable[int] = STANDARD_BAUD_RATES,
        sjw: int = 1
) -> List[BxcanTiming]:
    """
    Runs :func:`search_timings` for every bitrate and concatenates the
    results in the order the bitrates were given.

    :rtype: list
    """
    results = []
    for baud_rate in baud_rates:
        results.extend(search_timings(clock_hz, baud_rate, sample_point, sjw))
    return results
