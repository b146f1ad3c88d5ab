# SPDX-FileCopyrightText: Copyright (c) 2026 bxcan_timing contributors
#
# SPDX-License-Identifier: MIT
"""Command line front end for the bxCAN timing calculator."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .bitrate import (
    STANDARD_BAUD_RATES,
    BxcanConst,
    BxcanTiming,
    cia_sample_point,
    search_timings,
)

logger = logging.getLogger(__name__)

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

DEVICES = ("bxcan",)
OUTPUT_FORMATS = ("json",)

SAMPLE_POINT_MIN = 50.0
SAMPLE_POINT_MAX = 90.0

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def configure_logging(level_name: str, log_file: Optional[Path] = None) -> None:
    """
    Route log records to stderr and optionally to a file.

    stdout is left to the timing results.

    :param level_name: one of the keys of `LOG_LEVELS`
    :type level_name: str

    :param log_file: extra log destination, parent directories are created
    :type log_file: Path

    :raises: ValueError for an unknown level name
    """
    if level_name.lower() not in LOG_LEVELS:
        raise ValueError(
            "log level must be one of: {0}".format(", ".join(sorted(LOG_LEVELS)))
        )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=LOG_LEVELS[level_name.lower()],
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bxcan-timing",
        description="Compute CAN bit timing register values",
    )
    parser.add_argument(
        "-d",
        "--device",
        choices=DEVICES,
        required=True,
        help="The device the timings will be computed for",
    )
    parser.add_argument(
        "-f",
        "--frequency",
        type=int,
        required=True,
        help="Frequency at the entry of the prescaler (Hz)",
    )
    parser.add_argument(
        "-b",
        "--baudrate",
        type=int,
        default=None,
        help="Bits per second (default: all standard baudrates)",
    )
    parser.add_argument(
        "-s",
        "--sample-point-position",
        type=float,
        default=None,
        help="Sample point position (%%), CiA recommendation if omitted",
    )
    parser.add_argument(
        "-o",
        "--output-format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format",
    )
    parser.add_argument(
        "-w",
        "--sjw",
        type=int,
        choices=range(BxcanConst.sjw_min, BxcanConst.sjw_max + 1),
        default=1,
        help="Sync jump width",
    )
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default="warning",
        help="Logging verbosity",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional path to write logs",
    )
    return parser


def render_text(timings: Sequence[BxcanTiming]) -> str:
    return "\n".join(str(timing) for timing in timings)


def render_json(timings: Sequence[BxcanTiming]) -> str:
    return json.dumps([timing.to_dict() for timing in timings], indent=2)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    if args.frequency <= 0:
        print("Frequency must be a positive number of Hz", file=sys.stderr)
        return 1

    baud_rates: List[int] = list(STANDARD_BAUD_RATES)
    if args.baudrate is not None:
        if args.baudrate not in STANDARD_BAUD_RATES:
            print(f"Valid baudrates are {baud_rates}", file=sys.stderr)
            return 1
        baud_rates = [args.baudrate]

    spp = args.sample_point_position
    if spp is not None and not SAMPLE_POINT_MIN <= spp <= SAMPLE_POINT_MAX:
        print(
            f"Sample point position must be in the interval "
            f"[{SAMPLE_POINT_MIN} - {SAMPLE_POINT_MAX}]",
            file=sys.stderr,
        )
        return 1

    results: List[BxcanTiming] = []
    for baud_rate in baud_rates:
        if spp is None:
            sample_point = cia_sample_point(baud_rate)
        else:
            sample_point = spp / 100.0
        logger.info(
            "%s: %d Hz, %d bit/s, sample point %.1f%%",
            args.device, args.frequency, baud_rate, sample_point * 100.0,
        )

        timings = search_timings(args.frequency, baud_rate, sample_point, args.sjw)
        if not timings:
            logger.warning("No timing found for %d bit/s at %d Hz", baud_rate, args.frequency)
        results.extend(timings)

    if args.output_format == "json":
        print(render_json(results))
    elif results:
        print(render_text(results))

    return 0
