import io

import pytest

from warpbench.generator.objects import ASCII_LETTERS
from warpbench.generator.options import (
    with_csv,
    with_custom_prefix,
    with_prefix_size,
    with_random_data,
    with_random_size,
    with_size,
)
from warpbench.generator.sources import new, new_fn


@pytest.mark.parametrize(
    "opts",
    [[], [with_csv().apply()]],
    ids=["Default", "CSV"],
)
def test_new(opts):
    want_size = 1 << 20
    source = new(*opts)
    obj = source.object()
    assert len(obj.reader.read()) == want_size
    assert obj.reader.seek(0, io.SEEK_SET) == 0
    assert len(obj.reader.read()) == want_size
    assert obj.reader.seek(10, io.SEEK_SET) == 10
    assert len(obj.reader.read()) == want_size - 10
    with pytest.raises(EOFError):
        obj.reader.seek(10, io.SEEK_CUR)


def test_source_kinds():
    random_obj = new().object()
    assert random_obj.content_type == "application/octet-stream"
    assert random_obj.name.endswith(".rnd")
    csv_obj = new(with_csv().apply()).object()
    assert csv_obj.content_type == "text/csv"
    assert csv_obj.name.endswith(".csv")


def test_new_propagates_option_errors():
    with pytest.raises(ValueError, match="size must be > 0"):
        new(with_size(0))


def test_random_object_names_and_metadata():
    source = new(with_size(1000), with_random_data().rng_seed(1).apply())
    first = source.object()
    second = source.object()
    assert first.name.startswith("1.") and first.name.endswith(".rnd")
    assert second.name.startswith("2.")
    assert first.content_type == "application/octet-stream"
    assert first.size == 1000
    assert str(source) == "Random data; 1000 bytes total"


def test_random_content_changes_between_objects():
    source = new(with_size(4096))
    a = source.object().reader.read()
    b = source.object().reader.read()
    assert len(a) == len(b) == 4096
    assert a != b


def test_random_seed_is_reproducible():
    opts = [with_size(2048), with_random_data().rng_seed(42).apply()]
    a = new(*opts).object()
    b = new(*opts).object()
    assert a.name == b.name
    assert a.reader.read() == b.reader.read()


def test_random_size_objects():
    source = new(with_random_size(True), with_random_data().rng_seed(3).apply())
    assert "random size up to" in str(source)
    for _ in range(5):
        obj = source.object()
        assert 0 < obj.size <= 1 << 20
        assert len(obj.reader.read()) == obj.size


def test_random_prefix():
    source = new(with_prefix_size(8), with_size(100))
    obj = source.object()
    assert len(source.prefix()) == 8
    assert obj.prefix == source.prefix()
    assert obj.name.startswith(source.prefix() + "/")


def test_custom_and_random_prefix():
    source = new(with_custom_prefix("bench"), with_prefix_size(4), with_size(100))
    assert source.prefix().startswith("bench/")
    assert len(source.prefix()) == len("bench/") + 4


def test_custom_prefix_only():
    source = new(with_custom_prefix("bench"), with_size(100))
    assert source.prefix() == "bench"
    assert source.object().name.startswith("bench/")


def test_csv_fields():
    opts = with_csv().size(3, 4).field_len(2, 5).comma(";").rng_seed(11)
    source = new(with_size(1 << 12), opts.apply())
    obj = source.object()
    assert obj.content_type == "text/csv"
    assert obj.name.endswith(".csv")
    lines = obj.reader.read().split(b"\n")
    for line in lines[:4]:
        fields = line.split(b";")
        assert len(fields) == 3
        for f in fields:
            assert 2 <= len(f) < 5
            assert all(ch in ASCII_LETTERS for ch in f)


def test_csv_fixed_field_length():
    opts = with_csv().size(2, 2).field_len(4, 4).rng_seed(5)
    source = new(with_size(100), opts.apply())
    data = source.object().reader.read()
    assert len(data) == 100
    first_line = data.split(b"\n")[0]
    assert [len(f) for f in first_line.split(b",")] == [4, 4]


def test_csv_seed_is_reproducible():
    opts = [with_size(5000), with_csv().size(4, 10).rng_seed(99).apply()]
    a = new(*opts).object()
    b = new(*opts).object()
    assert a.name == b.name
    assert a.reader.read() == b.reader.read()


def test_csv_str():
    source = new(with_csv().size(5, 100).apply())
    assert str(source) == "CSV data. 5 columns, 100 rows."


def test_new_fn_creates_independent_sources():
    make = new_fn(with_size(512), with_random_data().rng_seed(8).apply())
    a = make()
    b = make()
    assert a is not b
    obj_a = a.object()
    obj_b = b.object()
    assert obj_a.name == obj_b.name
    assert obj_a.reader.read() == obj_b.reader.read()


def test_new_fn_validates_early():
    with pytest.raises(ValueError, match="csv: rows"):
        new_fn(with_csv().size(1, -1).apply())