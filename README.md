# mcscan

`mcscan` walks an IPv4 network block, skips the ranges you exclude and sends a
Minecraft status request ("server list ping", protocol version 757) to port
25565 on each address. A host that answers with a status document has it
stored as pretty-printed JSON.

The scan can go through a local Tor SOCKS5 proxy (`127.0.0.1:9050`). Each
connection then uses new random credentials, so Tor gives it a separate circuit.

## Installation

```
pip install .
```

Only the Python standard library is needed at run time. To run the tests:

```
pip install ".[test]"
pytest
```

## Running

```
mcscan [--settings FILE] [--results-dir DIR] [--last-ip FILE]
```

| Option          | Default         | Meaning                               |
|-----------------|-----------------|---------------------------------------|
| `--settings`    | `settings.json` | Settings file to load.                |
| `--results-dir` | `res`           | Directory where responses are stored. |
| `--last-ip`     | `last_ip.txt`   | File holding the resume point.        |

The scan runs until it is interrupted. The command exits with status 1 if the
settings cannot be loaded and 130 when interrupted with Ctrl-C. An invalid
`cidr` is logged and the command ends without scanning.

### settings.json

```json
{
  "cidr": "203.0.113.0/24",
  "exclude_file": "exclude.conf",
  "worker_count": 64,
  "connection_timeout_secs": 5,
  "use_tor": false,
  "validate": false,
  "validate_worker_count": 4
}
```

Every key is required. Counts and the timeout must be non-negative integers,
`use_tor` and `validate` must be booleans.

| Key                       | Meaning                                                                |
|---------------------------|------------------------------------------------------------------------|
| `cidr`                    | The IPv4 network to scan; host bits are ignored.                       |
| `exclude_file`            | File listing the ranges that are never contacted.                     |
| `worker_count`            | Number of concurrent connections.                                      |
| `connection_timeout_secs` | Timeout for setting up each connection, in seconds.                    |
| `use_tor`                 | Connect through the SOCKS5 proxy at `127.0.0.1:9050`.                  |
| `validate`                | Also run validators that check the servers already found again.      |
| `validate_worker_count`   | Number of validators; each takes its own share of the stored servers. |

### Exclude file

One entry per line. Blank lines and lines starting with `#` are ignored.
An entry is either a CIDR block or an inclusive range:

```
# reserved
10.0.0.0/8
192.0.2.10-192.0.2.20
```

A range whose addresses do not parse, or whose start lies after its end, is
dropped. Any other line that is not a valid network is logged and skipped.
Overlapping and adjacent ranges are merged. If the file cannot be read, the
error is logged and nothing is excluded.

### Resuming

Before each address is contacted it is written to the resume-point file. On
the next start, addresses of the network below the one stored there are
skipped. After the last address of the block the scan goes round again from
that same starting point, for as long as it runs.

### Results

Each answering server gets a folder `<results-dir>/<ip>:25565/`. It holds one
file per response, named by local time (`YYYY-MM-DD_HH-MM-SS.json`), and
`latest.json` with the most recent response. The JSON is written with an
indent of two spaces and sorted keys. A response that is not valid JSON is
logged as an error and not stored.

### Validators

With `validate` enabled, `validate_worker_count` validators run alongside the
scan. They list the results directory over and over and contact each stored
server again. A folder belongs to the validator whose number equals the sum
of the folder name's bytes modulo the number of validators.

## Library use

The protocol pieces can be used on their own:

```python
from mcscan.protocol import create_handshake_packet, create_status_request, parse_status_response
from mcscan.varint import encode_var_int, decode_var_int
from mcscan.ranges import merge_ranges, ip_in_excludes, network_bounds

packet = create_handshake_packet(757, "192.0.2.1", 25565, 1)
packet += create_status_request()

encode_var_int(300)            # b'\xac\x02'
decode_var_int(b"\xac\x02")    # (300, 2)

ranges = merge_ranges([(10, 20), (21, 30), (50, 60)])   # [(10, 30), (50, 60)]
ip_in_excludes(25, ranges)     # True
network_bounds("10.0.0.0/30")  # (167772160, 167772163)
```

- `mcscan.varint`: `encode_var_int`, `decode_var_int`, `encode_var_long`,
  `decode_var_long` and `read_var_int_from_stream` for an asyncio stream.
  Decoders return the value and the offset just past it.
- `mcscan.codec`: `encode_string` / `decode_string` for length-prefixed
  protocol strings (raising `StringTooLongError` above 32767 UTF-16 units) and
  `encode_u16` / `decode_u16` for big-endian 16-bit integers.
- `mcscan.ranges`: `parse_exclude_lines`, `read_exclude_list`, `merge_ranges`,
  `ip_in_excludes` and `network_bounds`.
- `mcscan.settings`: the `Settings` dataclass (`Settings.from_dict`),
  `load_settings`, `read_last_ip` and `write_last_ip`.
- `mcscan.scanner`: `iter_scan_ips`, `validator_owns`, `connect`, `check_ip`,
  `save_json_to_file`, `validate_worker`, `run` and the command's `main`.