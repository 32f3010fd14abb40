"""Data sources that hand out objects to upload."""

from __future__ import annotations

import itertools
import posixpath
import random
from collections.abc import Callable
from typing import Protocol

from warpbench.generator.circular import CircularBuffer
from warpbench.generator.objects import Object, rand_ascii_bytes
from warpbench.generator.options import Option, Options, SourceKind
from warpbench.generator.scrambler import Scrambler


class Source(Protocol):
    """Something that produces objects to upload."""

    def object(self) -> Object: ...

    def prefix(self) -> str: ...


def _make_rng(seed: int | None) -> random.Random:
    return random.Random() if seed is None else random.Random(seed)


def _make_prefix(options: Options) -> str:
    if options.random_prefix <= 0:
        return options.custom_prefix
    rnd = rand_ascii_bytes(options.random_prefix, random.Random()).decode("ascii")
    return posixpath.join(options.custom_prefix, rnd)


def _random_name(rng: random.Random) -> str:
    return rand_ascii_bytes(16, rng).decode("ascii")


class CsvSource:
    """Produces CSV documents filled with random ASCII fields."""

    content_type = "text/csv"

    def __init__(self, options: Options) -> None:
        self.options = options
        self._rng = _make_rng(options.csv.seed)
        self._prefix = _make_prefix(options)
        self._buf = CircularBuffer(b"", options.total_size)

    def _generate(self) -> bytes:
        csv = self.options.csv
        rng = self._rng
        out = bytearray()
        for _row in range(csv.rows):
            for col in range(csv.cols):
                n = csv.min_len
                if csv.min_len != csv.max_len:
                    n += rng.randrange(csv.max_len - csv.min_len)
                out += rand_ascii_bytes(n, rng)
                out += b"\n" if col == csv.cols - 1 else csv.separator
        return bytes(out)

    def object(self) -> Object:
        """Return a new object with freshly generated CSV content."""
        size = self.options.get_size(self._rng)
        self._buf.data = self._generate()
        reader = self._buf.reset(0)
        obj = Object(
            reader=reader,
            content_type=self.content_type,
            prefix=self._prefix,
            size=size,
        )
        obj.set_name(_random_name(self._rng) + ".csv")
        return obj

    def prefix(self) -> str:
        """Return the prefix objects are placed under."""
        return self._prefix

    def __str__(self) -> str:
        csv = self.options.csv
        return f"CSV data. {csv.cols} columns, {csv.rows} rows."


class RandomSource:
    """Produces objects of scrambled random data."""

    content_type = "application/octet-stream"

    def __init__(self, options: Options) -> None:
        self.options = options
        self._rng = _make_rng(options.random.seed)
        size = min(options.random.block_size, options.total_size)
        if size <= 0:
            raise ValueError(f"size must be >= 0, got {size}")
        data = self._rng.randbytes(size)
        self._buf = Scrambler(data, options.total_size, self._rng)
        self._counter = itertools.count(1)
        self._prefix = _make_prefix(options)

    def object(self) -> Object:
        """Return a new object; its content differs from earlier ones."""
        n = next(self._counter)
        name = _random_name(self._rng)
        size = self.options.get_size(self._rng)
        obj = Object(
            content_type=self.content_type,
            prefix=self._prefix,
            size=size,
        )
        obj.set_name(f"{n}.{name}.rnd")
        obj.reader = self._buf.reset(size)
        return obj

    def prefix(self) -> str:
        """Return the prefix objects are placed under."""
        return self._prefix

    def __str__(self) -> str:
        if self.options.rand_size:
            return f"Random data; random size up to {self.options.total_size} bytes"
        return f"Random data; {self._buf.want} bytes total"


_SOURCES: dict[SourceKind, Callable[[Options], Source]] = {
    SourceKind.RANDOM: RandomSource,
    SourceKind.CSV: CsvSource,
}


def _build_options(args: tuple[Option, ...]) -> Options:
    options = Options()
    for apply in args:
        apply(options)
    return options


def new(*args: Option) -> Source:
    """Build a data source from the given options."""
    options = _build_options(args)
    return _SOURCES[options.kind](options)


def new_fn(*args: Option) -> Callable[[], Source]:
    """Validate the options and return a factory for independent sources."""
    options = _build_options(args)
    factory = _SOURCES[options.kind]

    def make() -> Source:
        return factory(options)

    return make