from datetime import datetime, timedelta, timezone

from warpbench.bench.operations import Operation, Operations
from warpbench.bench.sizes import SizeSegment, single_size_segment, split_sizes

BASE = datetime(2021, 1, 1, tzinfo=timezone.utc)


def make_op(size, err="", i=0):
    start = BASE + timedelta(seconds=i)
    return Operation(start=start, end=start + timedelta(seconds=1), size=size, err=err)


def test_size_string_uses_table_names():
    seg = SizeSegment(smallest=1024, smallest_log10=3, biggest=1 << 20, biggest_log10=6)
    assert seg.sizes_string() == ("1KiB", "1MiB")
    assert seg.size_string() == "1KiB -> 1MiB"


def test_sizes_string_falls_back_to_byte_counts():
    seg = SizeSegment(smallest=5, smallest_log10=0, biggest=1024, biggest_log10=0)
    lo, hi = seg.sizes_string()
    assert lo == "5 B"
    assert hi == "1.0 KiB"
    assert seg.size_string() == f"{lo} -> {hi}"


def test_single_size_segment_bounds():
    ops = Operations(make_op(1000, i=i) for i in range(3))
    seg = single_size_segment(ops)
    assert seg.smallest == 1000
    assert seg.biggest == 1000
    assert (seg.smallest_log10, seg.biggest_log10) == (2, 3)
    assert seg.sizes_string() == ("100B", "1KiB")
    assert seg.ops is ops


def test_single_size_segment_accepts_plain_list():
    seg = single_size_segment([make_op(10), make_op(20, i=1)])
    assert seg.smallest == 10
    assert seg.biggest == 20
    assert len(seg.ops) == 2


def test_split_sizes_single_size_returns_one_segment():
    ops = Operations(make_op(500, i=i) for i in range(4))
    segments = split_sizes(ops, 0.1)
    assert len(segments) == 1
    assert segments[0].ops == ops


def test_split_sizes_ignores_failed_ops_for_multiple_sizes():
    ops = Operations([make_op(500), make_op(9000, err="boom", i=1)])
    segments = split_sizes(ops, 0.1)
    assert len(segments) == 1
    assert segments[0].ops is ops


def test_split_sizes_every_class_kept_with_zero_share():
    sizes = [5, 50, 500, 5000]
    ops = Operations(make_op(s, i=i) for i, s in enumerate(sizes))
    segments = split_sizes(ops, 0.0)
    assert len(segments) == len(sizes)
    collected = [op.size for seg in segments for op in seg.ops]
    assert sorted(collected) == sizes
    for seg in segments:
        assert seg.biggest_log10 == seg.smallest_log10 + 1
        for op in seg.ops:
            assert seg.smallest <= op.size < seg.biggest


def test_split_sizes_segments_are_contiguous():
    ops = Operations(make_op(s, i=i) for i, s in enumerate([1, 3000, 70000, 2000000]))
    segments = split_sizes(ops, 0.0)
    for prev, nxt in zip(segments, segments[1:]):
        assert prev.biggest == nxt.smallest
        assert prev.biggest_log10 == nxt.smallest_log10


def test_split_sizes_with_high_share_merges_classes():
    sizes = [5, 50, 500, 5000]
    ops = Operations(make_op(s, i=i) for i, s in enumerate(sizes))
    segments = split_sizes(ops, 0.5)
    for seg in segments:
        assert len(seg.ops) >= int(len(ops) * 0.5)
    assert len(segments) < len(sizes)