"""Tab separated storage of recorded operations."""

from __future__ import annotations

import csv
import re
from collections.abc import Callable, Iterable, Iterator
from datetime import datetime, timedelta, timezone
from typing import Any, TextIO

from warpbench.bench.operations import Operation, Operations

HEADER = (
    "idx\tthread\top\tclient_id\tn_objects\tbytes\tendpoint\tfile\terror"
    "\tstart\tfirst_byte\tend\tduration_ns\n"
)

_REQUIRED = ("start", "first_byte", "end", "bytes", "thread", "n_objects", "file", "op", "error")
_LOG_EVERY = 1_000_000
_MICROSECOND = timedelta(microseconds=1)

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(Z|([+-])(\d{2}):(\d{2}))\Z"
)


def _format_time(t: datetime) -> str:
    if t.tzinfo is None:
        t = t.replace(tzinfo=timezone.utc)
    s = (
        f"{t.year:04d}-{t.month:02d}-{t.day:02d}"
        f"T{t.hour:02d}:{t.minute:02d}:{t.second:02d}"
    )
    if t.microsecond:
        s += "." + f"{t.microsecond:06d}".rstrip("0")
    offset = t.utcoffset()
    if not offset:
        return s + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{s}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _parse_time(s: str) -> datetime:
    m = _RFC3339.match(s)
    if m is None:
        raise ValueError(f"invalid RFC3339 time: {s!r}")
    year, month, day, hour, minute, second = (int(g) for g in m.group(1, 2, 3, 4, 5, 6))
    frac = m.group(7) or ""
    micro = int((frac + "000000")[:6])
    if m.group(8) == "Z":
        tz = timezone.utc
    else:
        delta = timedelta(hours=int(m.group(10)), minutes=int(m.group(11)))
        tz = timezone(-delta if m.group(9) == "-" else delta)
    return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)


def _escape(s: str) -> str:
    if any(c in s for c in '\t\n\r"'):
        return '"' + s.replace('"', '""') + '"'
    return s


def write_csv(ops: Iterable[Operation], stream: TextIO, comment: str = "") -> None:
    """Write operations to ``stream`` as tab separated values.

    The comment, if any, is written at the end, each line prefixed with ``# ``.
    """
    stream.write(HEADER)
    for idx, op in enumerate(ops):
        ttfb = _format_time(op.first_byte) if op.first_byte is not None else ""
        duration_ns = (op.end - op.start) // _MICROSECOND * 1000
        fields = (
            str(idx),
            str(op.thread),
            op.op_type,
            op.client_id,
            str(op.obj_per_op),
            str(op.size),
            _escape(op.endpoint),
            op.file,
            _escape(op.err),
            _format_time(op.start),
            ttfb,
            _format_time(op.end),
            str(duration_ns),
        )
        stream.write("\t".join(fields) + "\n")
    if comment:
        for line in comment.split("\n"):
            stream.write(f"# {line}\n")


def _uncommented(stream: Iterable[str]) -> Iterator[str]:
    return (line for line in stream if not line.startswith("#"))


def _parse_thread(s: str) -> int:
    value = int(s)
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"thread id out of range: {s!r}")
    return value


def operations_from_csv(
    stream: Iterable[str],
    analyze_only: bool = False,
    offset: int = 0,
    limit: int = 0,
    log: Callable[..., Any] | None = None,
) -> Operations:
    """Load operations written by :func:`write_csv`.

    With ``analyze_only`` client ids become single letters and file names
    become numbers, to save memory. ``offset`` records are skipped and at
    most ``limit`` are loaded when it is positive.
    """
    reader = csv.reader(_uncommented(stream), delimiter="\t")
    try:
        header = next(reader)
    except StopIteration:
        raise EOFError("no header in operations CSV") from None
    field_idx = {name: i for i, name in enumerate(header)}
    missing = [name for name in _REQUIRED if name not in field_idx]
    if missing:
        raise ValueError(f"missing columns: {', '.join(missing)}")

    client_map: dict[str, str] = {}
    file_map: dict[str, str] = {}

    def map_client(c: str) -> str:
        if not analyze_only:
            return c
        if c not in client_map:
            client_map[c] = chr((ord("a") + len(client_map)) & 0xFF)
        return client_map[c]

    def map_file(f: str) -> str:
        if not analyze_only:
            return f
        if f not in file_map:
            file_map[f] = str(len(file_map) + 1)
        return file_map[f]

    ops = Operations()
    n_fields = len(header)
    endpoint_idx = field_idx.get("endpoint")
    client_idx = field_idx.get("client_id")
    for values in reader:
        if not values:
            continue
        if len(values) != n_fields:
            raise ValueError(
                f"record on line {reader.line_num}: wrong number of fields"
            )
        if offset > 0:
            offset -= 1
            continue
        fb = values[field_idx["first_byte"]]
        ops.append(
            Operation(
                op_type=values[field_idx["op"]],
                obj_per_op=int(values[field_idx["n_objects"]]),
                start=_parse_time(values[field_idx["start"]]),
                first_byte=_parse_time(fb) if fb else None,
                end=_parse_time(values[field_idx["end"]]),
                err=values[field_idx["error"]],
                size=int(values[field_idx["bytes"]]),
                file=map_file(values[field_idx["file"]]),
                thread=_parse_thread(values[field_idx["thread"]]),
                endpoint=values[endpoint_idx] if endpoint_idx is not None else "",
                client_id=map_client(values[client_idx] if client_idx is not None else ""),
            )
        )
        if log is not None and len(ops) % _LOG_EVERY == 0:
            log("\r%d operations loaded...", len(ops))
        if limit > 0 and len(ops) >= limit:
            break
    if log is not None:
        log("\r%d operations loaded... Done!\n", len(ops))
    return ops