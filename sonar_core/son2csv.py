"""Export the pings of a sonar log to CSV.

Usage::

    python -m sonar_core.son2csv R00012.DAT pings.csv --channel downscan
"""
from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from sonar_core.errors import SonarDecodeError
from sonar_core.loader import open_sonar_log
from sonar_core.model import ChannelKind, Ping, SonarLog

logger = logging.getLogger(__name__)

CSV_HEADER = (
    "index",
    "timestamp",
    "latitude",
    "longitude",
    "speed_kmh",
    "track_deg",
    "depth_m",
    "temperature_c",
    "low_limit_m",
    "samples",
)
CHUNK_SIZE = 1000


def iter_pings(log: SonarLog, chunk_size: int = CHUNK_SIZE) -> Iterator[Ping]:
    total = len(log)
    for start in range(0, total, chunk_size):
        yield from log.ping_range(start, min(chunk_size, total - start))


def write_csv(pings: Iterable[Ping], output: TextIO) -> int:
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    count = 0
    for index, ping in enumerate(pings):
        writer.writerow(
            (
                index,
                ping.timestamp,
                f"{ping.latitude:.7f}",
                f"{ping.longitude:.7f}",
                f"{ping.speed:.2f}",
                f"{ping.track:.1f}",
                f"{ping.depth:.2f}",
                f"{ping.temperature:.1f}",
                f"{ping.low_limit:.2f}",
                len(ping.soundings),
            )
        )
        count += 1
    return count


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sonar log to CSV converter")
    parser.add_argument("log_file", help="input .DAT or .sl2 file")
    parser.add_argument("csv_file", help="output .CSV file")
    parser.add_argument(
        "--channel",
        default=ChannelKind.TRADITIONAL.value,
        choices=[kind.value for kind in ChannelKind],
        help="sonar channel to export",
    )
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        log = open_sonar_log(args.log_file, ChannelKind.from_name(args.channel))
    except SonarDecodeError as exc:
        logger.error("Cannot open %s: %s", args.log_file, exc)
        return 1

    logger.info("Writing %s pings to %s", len(log), args.csv_file)
    with open(Path(args.csv_file), "w", newline="", encoding="utf-8") as output:
        try:
            count = write_csv(iter_pings(log), output)
        except SonarDecodeError as exc:
            logger.error("Decoding %s failed: %s", args.log_file, exc)
            return 1
    logger.info("Done: %s rows", count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
