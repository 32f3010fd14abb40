"""Options that select and configure a data source."""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum

from warpbench.generator.objects import get_exp_rand_size


class SourceKind(Enum):
    """The kind of data a source produces."""

    RANDOM = "random"
    CSV = "csv"


Option = Callable[["Options"], None]


def _to_separator(c: str | bytes | int) -> bytes:
    if isinstance(c, int):
        sep = bytes([c])
    elif isinstance(c, str):
        sep = c.encode("ascii")
    else:
        sep = bytes(c)
    if len(sep) != 1:
        raise ValueError(f"separator must be a single byte, got {c!r}")
    return sep


@dataclass(frozen=True)
class CsvOpts:
    """Options for the CSV data source."""

    seed: int | None = None
    cols: int = 15
    rows: int = 1000
    min_len: int = 5
    max_len: int = 15
    separator: bytes = b","

    def size(self, cols: int, rows: int) -> CsvOpts:
        """Return options with the given number of columns and rows."""
        return replace(self, cols=cols, rows=rows)

    def comma(self, c: str | bytes | int) -> CsvOpts:
        """Return options using ``c`` as field separator; ASCII only."""
        return replace(self, separator=_to_separator(c))

    def field_len(self, min_len: int, max_len: int) -> CsvOpts:
        """Return options with fields of the given length range."""
        return replace(self, min_len=min_len, max_len=max_len)

    def rng_seed(self, seed: int) -> CsvOpts:
        """Return options using a fixed RNG seed, for predictable output."""
        return replace(self, seed=seed)

    def _validate(self) -> None:
        if self.rows < 0:
            raise ValueError("csv: rows <= 0")
        if self.cols < 0:
            raise ValueError("csv: cols <= 0")
        if self.min_len > self.max_len:
            raise ValueError(
                f"WithCSV.FieldLen: min:{self.min_len} > max:{self.max_len}"
            )

    def apply(self) -> Option:
        """Return an option selecting CSV data with these settings."""

        def _apply(options: Options) -> None:
            self._validate()
            options.csv = self
            options.kind = SourceKind.CSV

        return _apply


@dataclass(frozen=True)
class RandomOpts:
    """Options for the random data source."""

    seed: int | None = None
    block_size: int = 128 << 10

    def rng_seed(self, seed: int) -> RandomOpts:
        """Return options using a fixed RNG seed, for predictable output."""
        return replace(self, seed=seed)

    def size(self, size: int) -> RandomOpts:
        """Return options with a block size that is repeated to fill objects."""
        return replace(self, block_size=size)

    def _validate(self) -> None:
        if self.block_size <= 0:
            raise ValueError("random: size <= 0")

    def apply(self) -> Option:
        """Return an option selecting random data with these settings."""

        def _apply(options: Options) -> None:
            self._validate()
            options.random = self
            options.kind = SourceKind.RANDOM

        return _apply


@dataclass
class Options:
    """Settings for building a data source; changed by option functions."""

    kind: SourceKind = SourceKind.RANDOM
    custom_prefix: str = ""
    random: RandomOpts = field(default_factory=RandomOpts)
    csv: CsvOpts = field(default_factory=CsvOpts)
    min_size: int = 0
    total_size: int = 1 << 20
    random_prefix: int = 0
    rand_size: bool = False

    def get_size(self, rng: random.Random) -> int:
        """Return the size for the next object."""
        if not self.rand_size:
            return self.total_size
        return get_exp_rand_size(rng, self.min_size, self.total_size)


def with_csv() -> CsvOpts:
    """Return default CSV options."""
    return CsvOpts()


def with_random_data() -> RandomOpts:
    """Return default random data options."""
    return RandomOpts()


def with_min_max_size(min_size: int, max_size: int) -> Option:
    """Set the minimum and maximum size of generated data."""

    def _apply(options: Options) -> None:
        if min_size <= 0:
            raise ValueError("WithSize: minSize must be >= 0")
        if max_size < 0:
            raise ValueError("WithSize: maxSize must be > 0")
        if min_size > max_size:
            raise ValueError("WithSize: minSize must be < maxSize")
        if options.rand_size and max_size < 256:
            raise ValueError(
                "WithSize: random sized objects should be at least 256 bytes"
            )
        options.total_size = max_size
        options.min_size = min_size

    return _apply


def with_size(n: int) -> Option:
    """Set the size of generated data."""

    def _apply(options: Options) -> None:
        if n <= 0:
            raise ValueError("WithSize: size must be > 0")
        if options.rand_size and options.total_size < 256:
            raise ValueError(
                "WithSize: random sized objects should be at least 256 bytes"
            )
        options.total_size = n

    return _apply


def with_random_size(enabled: bool) -> Option:
    """Randomize object sizes up to the total size set."""

    def _apply(options: Options) -> None:
        if 0 < options.total_size < 256:
            raise ValueError(
                "WithRandomSize: Random sized objects should be at least 256 bytes"
            )
        options.rand_size = enabled

    return _apply


def with_custom_prefix(prefix: str) -> Option:
    """Place all generated objects under a custom prefix."""

    def _apply(options: Options) -> None:
        options.custom_prefix = prefix

    return _apply


def with_prefix_size(n: int) -> Option:
    """Set the length of the random prefix, 0 to 16 characters."""

    def _apply(options: Options) -> None:
        if n < 0 or n > 16:
            raise ValueError("WithPrefixSize: size must be >= 0 and <= 16")
        options.random_prefix = n

    return _apply