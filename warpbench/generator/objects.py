"""Generated objects and helpers shared by the data sources."""

from __future__ import annotations

import math
import random
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

ASCII_LETTERS = b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ1234567890()"

_KNUTH_MULTIPLIER = 2654435761
_MASK32 = 0xFFFFFFFF


@dataclass
class Object:
    """An object to upload: its reader, name and metadata."""

    reader: Any = None
    name: str = ""
    content_type: str = ""
    prefix: str = ""
    version_id: str = ""
    size: int = 0

    def set_name(self, name: str) -> None:
        """Set the object name, placing it under the prefix if there is one."""
        self.name = f"{self.prefix}/{name}" if self.prefix else name


def prefixes(objects: Iterable[Object]) -> list[str]:
    """Return the distinct prefixes of the objects, in first-seen order."""
    return list(dict.fromkeys(obj.prefix for obj in objects))


def merge_object_prefixes(groups: Iterable[Iterable[Object]]) -> list[str]:
    """Return the distinct prefixes across several collections of objects."""
    return list(dict.fromkeys(obj.prefix for group in groups for obj in group))


def rand_ascii_bytes(n: int, rng: random.Random) -> bytes:
    """Return ``n`` pseudorandom characters from ``ASCII_LETTERS``.

    Cheap and predictable; never suitable where real randomness matters.
    """
    v = rng.getrandbits(64)
    rnd = v & _MASK32
    rnd2 = v >> 32
    out = bytearray(n)
    for i in range(n):
        out[i] = ASCII_LETTERS[(rnd >> 16) % len(ASCII_LETTERS)]
        rnd = ((rnd ^ rnd2) * _KNUTH_MULTIPLIER) & _MASK32
    return bytes(out)


def get_exp_rand_size(rng: random.Random, min_size: int, max_size: int) -> int:
    """Return an exponentially distributed random size up to ``max_size``.

    Without a minimum the smallest scale is 127 bytes or 256 times below the
    maximum, whichever is larger.
    """
    span = max_size - min_size
    if span < 10:
        if span <= 0:
            return 0
        return 1 + min_size + rng.randrange(span)
    log_size_max = math.log2(max_size - 1)
    log_size_min = max(7.0, log_size_max - 8)
    if min_size > 1:
        log_size_min = math.log2(min_size - 1)
    ls_delta = log_size_max - log_size_min
    rand_val = rng.random()
    log_size = rand_val * ls_delta
    if log_size > 1:
        return 1 + int(math.pow(2, log_size + log_size_min))
    # Lowest part is equally distributed.
    return 1 + min_size + int(rand_val * math.pow(2, log_size_min + 1))