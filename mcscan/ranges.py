"""IPv4 address ranges: exclude lists and CIDR bounds."""

from __future__ import annotations

import bisect
import ipaddress
import logging
import os
from collections.abc import Iterable, Sequence

log = logging.getLogger(__name__)

Range = tuple[int, int]


def _to_int(ip: int | str | ipaddress.IPv4Address) -> int:
    return int(ipaddress.IPv4Address(ip))


def merge_ranges(ranges: Iterable[Range]) -> list[Range]:
    """Sort inclusive ranges and merge those that overlap or touch."""
    merged: list[Range] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1] + 1:
            last_start, last_end = merged[-1]
            if end > last_end:
                merged[-1] = (last_start, end)
        else:
            merged.append((start, end))
    return merged


def ip_in_excludes(ip: int | str | ipaddress.IPv4Address, ranges: Sequence[Range]) -> bool:
    """Tell whether ``ip`` falls in one of the sorted, merged ``ranges``."""
    value = _to_int(ip)
    index = bisect.bisect_right(ranges, value, key=lambda r: r[0])
    return index > 0 and ranges[index - 1][1] >= value


def parse_exclude_lines(lines: Iterable[str]) -> list[Range]:
    """Parse exclude-list lines into merged inclusive integer ranges.

    Each line is either ``start-end`` (two addresses) or a CIDR network.
    Blank lines and lines starting with ``#`` are ignored; ranges whose start
    lies after their end are dropped.
    """
    ranges: list[Range] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if "-" in line:
            start_text, end_text = line.split("-", 1)
            try:
                start = _to_int(start_text)
                end = _to_int(end_text)
            except ValueError:
                continue
            if start <= end:
                ranges.append((start, end))
            continue
        try:
            network = ipaddress.IPv4Network(line, strict=False)
        except ValueError:
            log.error("Invalid network format: %s", line)
            continue
        ranges.append((int(network.network_address), int(network.broadcast_address)))
    return merge_ranges(ranges)


def read_exclude_list(path: str | os.PathLike[str]) -> list[Range]:
    """Read and parse an exclude-list file."""
    with open(path, encoding="utf-8") as handle:
        return parse_exclude_lines(handle)


def network_bounds(cidr: str) -> Range:
    """Return the first and last address of ``cidr`` as integers.

    Host bits in the address are ignored. Raises ``ValueError`` if ``cidr``
    is not a valid IPv4 network.
    """
    network = ipaddress.IPv4Network(cidr.strip(), strict=False)
    return int(network.network_address), int(network.broadcast_address)