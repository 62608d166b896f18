"""Scan an IPv4 range for Minecraft servers and record their status replies."""

from __future__ import annotations

import argparse
import asyncio
import bisect
import ipaddress
import json
import logging
import os
import secrets
import string
from collections.abc import Iterator, Sequence
from contextlib import suppress
from datetime import datetime
from ipaddress import IPv4Address
from pathlib import Path

from .protocol import (
    PROTOCOL_VERSION,
    STATUS_STATE,
    create_handshake_packet,
    create_status_request,
    parse_status_response,
)
from .ranges import merge_ranges, network_bounds, read_exclude_list
from .settings import Settings, load_settings, read_last_ip, write_last_ip
from .varint import read_var_int_from_stream

log = logging.getLogger(__name__)

MINECRAFT_PORT = 25565
TOR_PROXY = ("127.0.0.1", 9050)

_ALPHANUMERIC = string.ascii_letters + string.digits
_SCAN_ERRORS = (OSError, EOFError, ValueError)


class _SocksError(Exception):
    pass


def iter_scan_ips(
    start: int,
    end: int,
    skip_to: int | IPv4Address | None = None,
    exclude_ranges: Sequence[tuple[int, int]] = (),
) -> Iterator[IPv4Address]:
    """Cycle endlessly over the addresses from ``start`` to ``end``.

    Addresses below ``skip_to`` and addresses in ``exclude_ranges`` are never
    produced. The generator stops only if a whole pass produces nothing.
    """
    ranges = merge_ranges(exclude_ranges)
    first = start if skip_to is None else max(start, int(skip_to))
    while True:
        produced = False
        ip = first
        while ip <= end:
            index = bisect.bisect_right(ranges, ip, key=lambda r: r[0])
            if index and ranges[index - 1][1] >= ip:
                ip = ranges[index - 1][1] + 1
                continue
            produced = True
            yield IPv4Address(ip)
            ip += 1
        if not produced:
            return


def validator_owns(folder: str, worker_id: int, total: int) -> bool:
    """Tell whether validator ``worker_id`` of ``total`` is responsible for ``folder``."""
    if total <= 0:
        raise ValueError("total must be positive")
    return sum(folder.encode("utf-8", "surrogateescape")) % total == worker_id


def _random_alnum(length: int) -> str:
    return "".join(secrets.choice(_ALPHANUMERIC) for _ in range(length))


async def _socks5_open(
    proxy: tuple[str, int], ip: IPv4Address, port: int, username: str, password: str
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    reader, writer = await asyncio.open_connection(*proxy)
    try:
        writer.write(b"\x05\x01\x02")
        await writer.drain()
        version, method = await reader.readexactly(2)
        if version != 5 or method != 2:
            raise _SocksError("no acceptable authentication method")

        user_bytes = username.encode()
        secret_bytes = password.encode()
        writer.write(
            bytes([1, len(user_bytes)]) + user_bytes + bytes([len(secret_bytes)]) + secret_bytes
        )
        await writer.drain()
        _, status = await reader.readexactly(2)
        if status != 0:
            raise _SocksError("authentication failed")

        writer.write(b"\x05\x01\x00\x01" + ip.packed + port.to_bytes(2, "big"))
        await writer.drain()
        version, reply, _, address_type = await reader.readexactly(4)
        if version != 5:
            raise _SocksError("invalid response version")
        if reply != 0:
            raise _SocksError(f"request rejected with reply code {reply}")
        if address_type == 1:
            await reader.readexactly(4)
        elif address_type == 4:
            await reader.readexactly(16)
        elif address_type == 3:
            (size,) = await reader.readexactly(1)
            await reader.readexactly(size)
        else:
            raise _SocksError(f"unknown address type {address_type}")
        await reader.readexactly(2)
    except BaseException:
        writer.close()
        raise
    return reader, writer


async def connect(
    ip: str | int | IPv4Address, port: int, via_tor: bool, timeout: float
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Open a TCP connection to ``ip:port``, optionally through the Tor SOCKS proxy.

    Through Tor, random credentials are used so each connection gets its own
    circuit. Raises ``TimeoutError`` if it takes longer than ``timeout`` seconds.
    """
    address = IPv4Address(ip)
    if via_tor:
        opening = _socks5_open(TOR_PROXY, address, port, _random_alnum(8), _random_alnum(12))
        try:
            return await asyncio.wait_for(opening, timeout)
        except asyncio.TimeoutError:
            raise TimeoutError("SOCKS5 timeout") from None
        except (OSError, EOFError, _SocksError) as exc:
            raise ConnectionError(f"SOCKS5 error: {exc}") from exc
    try:
        return await asyncio.wait_for(asyncio.open_connection(str(address), port), timeout)
    except asyncio.TimeoutError:
        raise TimeoutError("TCP connect timeout") from None


def _reject_constant(name: str) -> float:
    raise ValueError(f"unsupported JSON value {name}")


def save_json_to_file(
    addr: str, json_text: str, results_dir: str | os.PathLike[str] = "res"
) -> Path:
    """Pretty-print ``json_text`` into a timestamped file and ``latest.json``.

    Both go in ``results_dir/addr``. Returns the timestamped file's path and
    raises ``ValueError`` if ``json_text`` is not valid JSON.
    """
    try:
        parsed = json.loads(json_text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc
    formatted = json.dumps(parsed, indent=2, sort_keys=True, ensure_ascii=False)

    folder = Path(results_dir) / addr
    folder.mkdir(parents=True, exist_ok=True)
    target = folder / f"{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.json"
    target.write_text(formatted, encoding="utf-8")
    (folder / "latest.json").write_text(formatted, encoding="utf-8")
    log.info("Saved response to %s", target)
    return target


async def check_ip(
    ip: str | int | IPv4Address,
    settings: Settings,
    results_dir: str | os.PathLike[str] = "res",
    last_ip_path: str | os.PathLike[str] = "last_ip.txt",
) -> Path:
    """Ask the server at ``ip`` for its status and save the reply.

    Returns the path of the saved file.
    """
    address = IPv4Address(ip)
    port = MINECRAFT_PORT
    addr = f"{address}:{port}"
    log.info("Connecting to %s", addr)
    write_last_ip(last_ip_path, address)
    reader, writer = await connect(address, port, settings.use_tor, settings.connection_timeout_secs)
    try:
        writer.write(create_handshake_packet(PROTOCOL_VERSION, str(address), port, STATUS_STATE))
        writer.write(create_status_request())
        await writer.drain()
        length = await read_var_int_from_stream(reader)
        if length < 0:
            raise ValueError(f"negative packet length {length}")
        payload = await reader.readexactly(length)
    finally:
        writer.close()
        with suppress(OSError):
            await writer.wait_closed()
    code, response = parse_status_response(payload)
    log.info("%s: Code %s, Response %r", addr, code, response)
    return save_json_to_file(addr, response, results_dir)


async def validate_worker(
    worker_id: int,
    total: int,
    settings: Settings,
    results_dir: str | os.PathLike[str] = "res",
    last_ip_path: str | os.PathLike[str] = "last_ip.txt",
) -> None:
    """Re-check, over and over, the known servers that belong to this worker.

    Returns only if ``results_dir`` cannot be listed.
    """
    while True:
        try:
            entries = os.listdir(results_dir)
        except OSError as exc:
            log.error("Validator %s failed to read %s: %s", worker_id, results_dir, exc)
            return
        for folder in entries:
            log.info("Validator %s: checking %s", worker_id, folder)
            if not validator_owns(folder, worker_id, total):
                continue
            host = folder.split(":")[0]
            try:
                address = IPv4Address(host)
            except ValueError as exc:
                log.error("Validator %s: invalid IP %s: %s", worker_id, host, exc)
                continue
            try:
                await check_ip(address, settings, results_dir, last_ip_path)
            except _SCAN_ERRORS as exc:
                log.error("Validator %s: error checking IP %s: %s", worker_id, folder, exc)
        await asyncio.sleep(0)


async def run(
    settings: Settings,
    results_dir: str | os.PathLike[str] = "res",
    last_ip_path: str | os.PathLike[str] = "last_ip.txt",
) -> None:
    """Scan the configured network with a pool of workers, plus validators if enabled."""
    last_ip = read_last_ip(last_ip_path)
    try:
        start, end = network_bounds(settings.cidr)
    except ValueError:
        log.error("Invalid CIDR: %s", settings.cidr)
        return
    try:
        excludes = read_exclude_list(settings.exclude_file)
    except (OSError, UnicodeDecodeError) as exc:
        log.error("Failed to read exclude file: %s", exc)
        excludes = []

    queue: asyncio.Queue[IPv4Address | None] = asyncio.Queue(
        maxsize=max(1, settings.worker_count * 2)
    )

    async def produce() -> None:
        skip = int(last_ip) if last_ip is not None else None
        for address in iter_scan_ips(start, end, skip, excludes):
            await queue.put(address)
        for _ in range(settings.worker_count):
            await queue.put(None)

    async def work() -> None:
        while (address := await queue.get()) is not None:
            try:
                await check_ip(address, settings, results_dir, last_ip_path)
            except _SCAN_ERRORS as exc:
                log.error("Error checking IP %s: %s", address, exc)

    tasks = [produce(), *(work() for _ in range(settings.worker_count))]
    if settings.validate:
        tasks.extend(
            validate_worker(
                i, settings.validate_worker_count, settings, results_dir, last_ip_path
            )
            for i in range(settings.validate_worker_count)
        )
    await asyncio.gather(*tasks)


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="mcscan",
        description="Scan an IPv4 range for Minecraft servers and record their status.",
    )
    parser.add_argument("--settings", default="settings.json", help="settings file")
    parser.add_argument("--results-dir", default="res", help="where replies are saved")
    parser.add_argument("--last-ip", default="last_ip.txt", help="resume-point file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    try:
        settings = load_settings(args.settings)
    except (OSError, ValueError) as exc:
        log.error("Failed to load settings: %s", exc)
        return 1
    try:
        asyncio.run(run(settings, args.results_dir, args.last_ip))
    except KeyboardInterrupt:
        return 130
    return 0