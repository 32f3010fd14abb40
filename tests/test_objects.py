import random

import pytest

from warpbench.generator.objects import (
    ASCII_LETTERS,
    Object,
    get_exp_rand_size,
    merge_object_prefixes,
    prefixes,
    rand_ascii_bytes,
)


def test_set_name_without_prefix():
    obj = Object()
    obj.set_name("file.rnd")
    assert obj.name == "file.rnd"


def test_set_name_with_prefix():
    obj = Object(prefix="pre")
    obj.set_name("file.rnd")
    assert obj.name == "pre/file.rnd"


def test_prefixes_are_distinct():
    objs = [Object(prefix="a"), Object(prefix="b"), Object(prefix="a")]
    assert sorted(prefixes(objs)) == ["a", "b"]
    assert prefixes([]) == []


def test_merge_object_prefixes():
    groups = [[Object(prefix="x")], [Object(prefix="y"), Object(prefix="x")], []]
    assert sorted(merge_object_prefixes(groups)) == ["x", "y"]


@pytest.mark.parametrize("n", [0, 1, 16, 200])
def test_rand_ascii_bytes_length_and_alphabet(n):
    out = rand_ascii_bytes(n, random.Random(5))
    assert len(out) == n
    assert all(ch in ASCII_LETTERS for ch in out)


def test_rand_ascii_bytes_deterministic_per_seed():
    first = rand_ascii_bytes(16, random.Random(9))
    again = rand_ascii_bytes(16, random.Random(9))
    assert len(first) == 16
    assert all(ch in ASCII_LETTERS for ch in first)
    assert first == again
    rng = random.Random(9)
    one = rand_ascii_bytes(16, rng)
    two = rand_ascii_bytes(16, rng)
    assert one == first
    assert len(two) == 16
    assert one != two


def test_exp_rand_size_empty_range():
    rng = random.Random(1)
    assert get_exp_rand_size(rng, 100, 100) == 0
    assert get_exp_rand_size(rng, 200, 100) == 0


def test_exp_rand_size_small_range():
    rng = random.Random(2)
    for _ in range(500):
        size = get_exp_rand_size(rng, 100, 105)
        assert 101 <= size <= 105


def test_exp_rand_size_no_minimum_within_bounds():
    rng = random.Random(3)
    max_size = 1 << 20
    sizes = [get_exp_rand_size(rng, 0, max_size) for _ in range(2000)]
    assert all(1 <= s <= max_size for s in sizes)
    assert len(set(sizes)) > 100


def test_exp_rand_size_with_minimum_within_bounds():
    rng = random.Random(4)
    min_size, max_size = 1000, 1 << 20
    for _ in range(2000):
        size = get_exp_rand_size(rng, min_size, max_size)
        assert min_size <= size <= max_size


def test_exp_rand_size_deterministic_per_seed():
    a = [get_exp_rand_size(random.Random(8), 0, 1 << 16) for _ in range(5)]
    b = [get_exp_rand_size(random.Random(8), 0, 1 << 16) for _ in range(5)]
    assert a == b