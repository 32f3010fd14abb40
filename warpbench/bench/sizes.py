"""Grouping of operations into log10 size segments."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from warpbench.bench.operations import Operation, Operations

LOG10_TO_SIZE: dict[int, str] = {
    0: "",
    1: "10B",
    2: "100B",
    3: "1KiB",
    4: "10KiB",
    5: "100KiB",
    6: "1MiB",
    7: "10MiB",
    8: "100MiB",
    9: "1GiB",
    10: "10GiB",
    11: "100GiB",
    12: "1TiB",
}

LOG10_TO_LOG2_SIZE: dict[int, int] = {
    0: 1,
    1: 10,
    2: 100,
    3: 1 << 10,
    4: 10 << 10,
    5: 100 << 10,
    6: 1 << 20,
    7: 10 << 20,
    8: 100 << 20,
    9: 1 << 30,
    10: 10 << 30,
    11: 100 << 30,
    12: 1 << 40,
}

_MAX_LOG10 = max(LOG10_TO_LOG2_SIZE)
_IEC_SUFFIXES = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")


def _ibytes(n: int) -> str:
    """Format a byte count with IEC units, e.g. ``1.5 KiB``."""
    if n < 10:
        return f"{n} B"
    exp = int(math.floor(math.log(n) / math.log(1024)))
    exp = min(exp, len(_IEC_SUFFIXES) - 1)
    val = math.floor(n / math.pow(1024, exp) * 10 + 0.5) / 10
    spec = ".1f" if val < 10 else ".0f"
    return f"{val:{spec}} {_IEC_SUFFIXES[exp]}"


def _log2_size(log10: int) -> int:
    return LOG10_TO_LOG2_SIZE.get(log10, 0)


@dataclass
class SizeSegment:
    """Operations whose sizes fall within one size range."""

    ops: Operations = field(default_factory=Operations)
    smallest: int = 0
    smallest_log10: int = 0
    biggest: int = 0
    biggest_log10: int = 0

    def size_string(self) -> str:
        """Return the size range as ``lo -> hi``."""
        lo, hi = self.sizes_string()
        return f"{lo} -> {hi}"

    def sizes_string(self) -> tuple[str, str]:
        """Return the lower and upper limit as strings."""
        if self.smallest_log10 <= 0 or self.biggest_log10 <= 0:
            return _ibytes(self.smallest), _ibytes(self.biggest)
        return (
            LOG10_TO_SIZE.get(self.smallest_log10, ""),
            LOG10_TO_SIZE.get(self.biggest_log10, ""),
        )


def _as_operations(ops: Iterable[Operation]) -> Operations:
    return ops if isinstance(ops, Operations) else Operations(ops)


def single_size_segment(ops: Iterable[Operation]) -> SizeSegment:
    """Return one segment holding all operations and their size range."""
    ops = _as_operations(ops)
    lo, hi = ops.min_max_size()
    min_l10 = 0
    while min_l10 < _MAX_LOG10 and lo > _log2_size(min_l10 + 1):
        min_l10 += 1
    max_l10 = 0
    while max_l10 <= _MAX_LOG10 and hi >= _log2_size(max_l10):
        max_l10 += 1
    return SizeSegment(
        ops=ops,
        smallest=lo,
        smallest_log10=min_l10,
        biggest=hi,
        biggest_log10=max_l10,
    )


def split_sizes(ops: Iterable[Operation], min_share: float) -> list[SizeSegment]:
    """Split operations into log10 size segments.

    A segment is returned once it holds at least ``min_share`` of all
    operations; otherwise it keeps growing into the next size class.
    """
    ops = _as_operations(ops)
    if not ops.multiple_sizes():
        return [single_size_segment(ops)]
    lo, hi = ops.min_max_size()
    if lo == 0:
        lo = 1
    min_log = int(math.log10(lo))
    max_log = int(math.log10(hi))
    want_n = int(len(ops) * min_share)

    def fresh(log10: int) -> SizeSegment:
        return SizeSegment(smallest=_log2_size(log10), smallest_log10=log10)

    c_log = min_log
    seg = fresh(c_log)
    result: list[SizeSegment] = []
    while c_log <= max_log:
        c_log += 1
        seg.biggest = _log2_size(c_log)
        seg.biggest_log10 = c_log
        seg.ops.extend(op for op in ops if seg.smallest <= op.size < seg.biggest)
        if len(seg.ops) >= want_n:
            result.append(seg)
            seg = fresh(c_log)
    return result