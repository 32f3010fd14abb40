"""Recorded benchmark operations and the statistics drawn from them."""

from __future__ import annotations

import dataclasses
import functools
import itertools
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

_UINT16_MASK = 0xFFFF
_MICROSECOND = timedelta(microseconds=1)


def _round_half_away(x: float) -> float:
    """Round to the nearest integer, halves away from zero."""
    return math.copysign(math.floor(abs(x) + 0.5), x)


class Throughput(float):
    """A throughput in bytes per second."""

    def __str__(self) -> str:
        t = float(self)
        if t < 2 << 10:
            return f"{t:.1f}B/s"
        if t < 2 << 20:
            return f"{t / (1 << 10):.1f}KiB/s"
        if t < 10 << 30:
            return f"{t / (1 << 20):.1f}MiB/s"
        if t < 10 << 40:
            return f"{t / (1 << 30):.2f}GiB/s"
        return f"{t / (1 << 40):.2f}TiB/s"

    def rounded(self) -> float:
        """Return the throughput rounded to one decimal."""
        return _round_half_away(float(self) * 10) / 10


@dataclass
class Operation:
    """A single timed request against an endpoint."""

    start: datetime
    end: datetime
    first_byte: datetime | None = None
    op_type: str = ""
    err: str = ""
    file: str = ""
    client_id: str = ""
    endpoint: str = ""
    obj_per_op: int = 0
    size: int = 0
    thread: int = 0

    def duration(self) -> timedelta:
        """Return the time from start to end."""
        return self.end - self.start

    def bytes_per_sec(self) -> Throughput:
        """Return the throughput of this operation."""
        if self.size == 0:
            return Throughput(0)
        d = self.duration()
        if d <= timedelta(0):
            return Throughput(math.inf)
        return Throughput(self.size * 1_000_000 / (d // _MICROSECOND))

    def ttfb(self) -> timedelta:
        """Return the time to first byte, or zero if none was recorded."""
        if self.first_byte is None:
            return timedelta(0)
        return self.first_byte - self.start

    def __str__(self) -> str:
        return (
            f"{self.op_type} {self.endpoint}/(bucket)/{self.file}, "
            f"{self.start}->{self.end}, Size: {self.size}, Error: {self.err}"
        )


def _throughput_cmp(a: Operation, b: Operation) -> int:
    a_dur, b_dur = a.duration(), b.duration()
    if a.size == 0 or b.size == 0:
        return -1 if a_dur < b_dur else (1 if b_dur < a_dur else 0)
    a_us = a_dur / _MICROSECOND
    b_us = b_dur / _MICROSECOND
    a_rate = a.size / a_us if a_us else math.inf
    b_rate = b.size / b_us if b_us else math.inf
    return -1 if a_rate > b_rate else (1 if b_rate > a_rate else 0)


def _ttfb_cmp(a: Operation, b: Operation) -> int:
    if a.first_byte is None or b.first_byte is None:
        ka, kb = a.start, b.start
    else:
        ka, kb = a.ttfb(), b.ttfb()
    return -1 if ka < kb else (1 if kb < ka else 0)


class Operations(list):
    """A list of operations with sorting, filtering and statistics."""

    def sort_by_start_time(self) -> None:
        """Sort by start time, earliest first."""
        self.sort(key=lambda op: op.start)

    def sort_by_end_time(self) -> None:
        """Sort by end time, earliest first."""
        self.sort(key=lambda op: op.end)

    def sort_by_endpoint(self) -> None:
        """Sort by endpoint, then by start time."""
        self.sort(key=lambda op: (op.endpoint, op.start))

    def sort_by_op_type(self) -> None:
        """Sort by operation type, then by start time."""
        self.sort(key=lambda op: (op.op_type, op.start))

    def sort_by_duration(self) -> None:
        """Sort by duration, fastest first."""
        self.sort(key=lambda op: op.duration())

    def sort_by_throughput(self) -> None:
        """Sort by throughput, fastest first."""
        self.sort(key=functools.cmp_to_key(_throughput_cmp))

    def sort_by_ttfb(self) -> None:
        """Sort by time to first byte, smallest first."""
        self.sort(key=functools.cmp_to_key(_ttfb_cmp))

    def median(self, m: float) -> Operation:
        """Return the ``m`` part median of the (assumed sorted) operations."""
        if not self:
            return Operation(start=datetime.min, end=datetime.min)
        pos = _round_half_away(len(self) * m)
        pos = max(pos, 0.0)
        pos = min(pos, len(self) - 1 + 1e-10)
        return self[int(pos)]

    def filter_by_has_ttfb(self, has_ttfb: bool) -> Operations:
        """Return operations that have (or lack) a time to first byte."""
        return Operations(op for op in self if (op.first_byte is not None) == has_ttfb)

    def filter_inside_range(self, start: datetime, end: datetime) -> Operations:
        """Return operations that start and end within the range."""
        return Operations(op for op in self if not (op.start < start or op.end > end))

    def filter_by_op(self, op_type: str) -> Operations:
        """Return operations of a type; an empty type matches all."""
        return Operations(op for op in self if op_type == "" or op.op_type == op_type)

    def filter_by_endpoint(self, endpoint: str) -> Operations:
        """Return operations run against the endpoint."""
        return Operations(op for op in self if op.endpoint == endpoint)

    def set_client_id(self, client_id: str) -> None:
        """Set the client ID on every operation."""
        for op in self:
            op.client_id = client_id

    def _split_sorted(self, attr: str) -> dict[str, Operations]:
        return {
            key: Operations(group)
            for key, group in itertools.groupby(self, key=lambda op: getattr(op, attr))
            if key != ""
        }

    def sort_split_by_endpoint(self) -> dict[str, Operations]:
        """Sort by endpoint and split into one list per endpoint."""
        self.sort_by_endpoint()
        return self._split_sorted("endpoint")

    def sort_split_by_op_type(self) -> dict[str, Operations]:
        """Sort by type and start and split into one list per type."""
        self.sort_by_op_type()
        return self._split_sorted("op_type")

    def op_types(self) -> list[str]:
        """Return the types in order of appearance, or sorted if they overlap."""
        types = list(dict.fromkeys(op.op_type for op in self))
        if self._is_mixed(types):
            types.sort()
        return types

    def is_mixed(self) -> bool:
        """Return whether operations of different types overlap in time."""
        return self._is_mixed(self.op_types())

    def _is_mixed(self, types: list[str]) -> bool:
        if len(types) <= 1:
            return False
        ranges = {t: self.filter_by_op(t).time_range() for t in types}
        for a in types:
            a_start, a_end = ranges[a]
            for b in types:
                if a == b:
                    continue
                b_start, b_end = ranges[b]
                first_end, second_start = a_end, b_end
                if b_start < a_start:
                    first_end, second_start = b_end, a_start
                if first_end > second_start:
                    return True
        return False

    def is_multi_touch(self) -> bool:
        """Return whether any file is touched more than once."""
        seen: set[str] = set()
        for op in self:
            if op.file in seen:
                return True
            seen.add(op.file)
        return False

    def has_error(self) -> bool:
        """Return whether any operation failed."""
        return any(op.err for op in self)

    def by_endpoint(self) -> dict[str, Operations]:
        """Separate the operations by endpoint, keeping their order."""
        dst: dict[str, Operations] = {}
        for op in self:
            dst.setdefault(op.endpoint, Operations()).append(op)
        return dst

    def first_op_type(self) -> str:
        """Return the type of the first operation, or an empty string."""
        return self[0].op_type if self else ""

    def first_obj_size(self) -> int:
        """Return the size of the first operation, or 0."""
        return self[0].size if self else 0

    def first_obj_per_op(self) -> int:
        """Return the objects per operation of the first operation, or 0."""
        return self[0].obj_per_op if self else 0

    def multiple_sizes(self) -> bool:
        """Return whether successful operations have different sizes."""
        if not self:
            return False
        size = self[0].size
        return any(not op.err and op.size != size for op in self)

    def min_max_size(self) -> tuple[int, int]:
        """Return the smallest and largest operation size."""
        if not self:
            return 0, 0
        sizes = [op.size for op in self]
        return min(sizes), max(sizes)

    def avg_size(self) -> int:
        """Return the average operation size, truncated."""
        if not self:
            return 0
        return sum(op.size for op in self) // len(self)

    def avg_duration(self) -> timedelta:
        """Return the average operation duration."""
        if not self:
            return timedelta(0)
        return sum((op.duration() for op in self), timedelta(0)) // len(self)

    def std_dev(self) -> timedelta:
        """Return the sample standard deviation of the durations."""
        if len(self) <= 1:
            return timedelta(0)
        avg = self.avg_duration()
        total = sum(((avg - op.duration()) / _MICROSECOND) ** 2 for op in self)
        return timedelta(microseconds=int(math.sqrt(total / (len(self) - 1))))

    def duration(self) -> timedelta:
        """Return the time from the first start to the last end."""
        start, end = self.time_range()
        if start is None or end is None:
            return timedelta(0)
        return end - start

    def time_range(self) -> tuple[datetime | None, datetime | None]:
        """Return the earliest start and latest end, or ``(None, None)``."""
        if not self:
            return None, None
        return min(op.start for op in self), max(op.end for op in self)

    def active_time_range(
        self, all_threads: bool
    ) -> tuple[datetime | None, datetime | None]:
        """Return the range in which the benchmark ran at full load.

        With ``all_threads`` every thread must have finished one request and
        the range ends at the last start of any thread. If there is no active
        range both values are the same.
        """
        if not self:
            return None, None
        if not all_threads:
            start_f = self[0].start
            end_f = self[0].end
            for op in self:
                if op.end < start_f:
                    start_f = op.end
                if end_f < op.start:
                    end_f = op.start
            start, end = end_f, start_f
            for op in self:
                if start_f < op.start < start:
                    start = op.start
                if end < op.end < end_f:
                    end = op.end
            if start > end:
                return start, start
            return start, end

        first_ended: dict[int, datetime] = {}
        last_started: dict[int, datetime] = {}
        for op in self:
            ended = first_ended.get(op.thread)
            if ended is None or ended > op.end:
                first_ended[op.thread] = op.end
            started = last_started.get(op.thread)
            if started is None or started < op.start:
                last_started[op.thread] = op.start
        start = max(first_ended.values())
        end = min(max(op.end for op in self), *last_started.values())
        if start > end:
            return start, start
        return start, end

    def threads(self) -> int:
        """Return the number of threads found."""
        if not self:
            return 0
        return max(op.thread for op in self) + 1

    def offset_threads(self, n: int) -> int:
        """Add ``n`` to every thread id and return the next free id."""
        if not self:
            return 0
        max_t = 0
        for op in self:
            op.thread = (op.thread + n) & _UINT16_MASK
            max_t = max(max_t, op.thread)
        return (max_t + 1) & _UINT16_MASK

    def hosts(self) -> int:
        """Return the number of distinct endpoints."""
        return len({op.endpoint for op in self})

    def clients(self) -> int:
        """Return the number of distinct clients."""
        return len({op.client_id for op in self})

    def endpoints(self) -> list[str]:
        """Return the distinct endpoints, sorted."""
        return sorted({op.endpoint for op in self})

    def errors(self) -> list[str]:
        """Return the error messages of failed operations."""
        return [op.err for op in self if op.err]

    def n_errors(self) -> int:
        """Return the number of failed operations."""
        return sum(1 for op in self if op.err)

    def filter_successful(self) -> Operations:
        """Return the operations that did not fail."""
        return Operations(op for op in self if not op.err)

    def clone(self) -> Operations:
        """Return a copy holding copies of the operations."""
        return Operations(dataclasses.replace(op) for op in self)

    def filter_first(self) -> Operations:
        """Sort by start time and return the first operation on each file."""
        self.sort_by_start_time()
        return Operations(_first_per_file(self))

    def filter_last(self) -> Operations:
        """Sort by start time and return the last operation on each file, latest first."""
        self.sort_by_start_time()
        return Operations(_first_per_file(reversed(self)))

    def filter_errors(self) -> Operations:
        """Return the operations that failed."""
        return Operations(op for op in self if op.err)


def _first_per_file(ops: Iterable[Operation]) -> Iterable[Operation]:
    seen: set[str] = set()
    for op in ops:
        if op.file in seen:
            continue
        seen.add(op.file)
        yield op