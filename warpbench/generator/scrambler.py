"""A seekable reader that produces an endless stream of scrambled data."""

from __future__ import annotations

import io
import random

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from warpbench.generator.circular import CircularBuffer, _seek_target

_FRAGMENT_SIZE = 16 << 10
_NONCE_PREFIX_SIZE = 8
_MAX_INT64 = (1 << 63) - 1


class Scrambler:
    """Serves ``size`` bytes of AES-GCM encrypted, endlessly repeated ``data``.

    The encrypted stream keeps advancing across resets, so every object read
    from the scrambler gets different content.
    """

    def __init__(self, data: bytes, size: int, rng: random.Random) -> None:
        key = rng.randbytes(16)
        self._cipher = AESGCM(key)
        self._nonce_prefix = key[:_NONCE_PREFIX_SIZE]
        self._sequence = 0
        self._source = CircularBuffer(data, _MAX_INT64)
        self._pending = bytearray()
        self.want = size
        self.position = 0

    def reset(self, want: int = 0) -> Scrambler:
        """Rewind the counter; a positive ``want`` sets a new total length."""
        if want > 0:
            self.want = want
        self.position = 0
        return self

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the read counter and return the new position."""
        self.position = _seek_target(self.position, self.want, offset, whence)
        return self.position

    def tell(self) -> int:
        """Return the number of bytes counted as read."""
        return self.position

    def _stream_read(self, n: int) -> bytes:
        while len(self._pending) < n:
            chunk = self._source.read(_FRAGMENT_SIZE)
            nonce = self._nonce_prefix + self._sequence.to_bytes(4, "big")
            self._sequence = (self._sequence + 1) & 0xFFFFFFFF
            self._pending += self._cipher.encrypt(nonce, chunk, None)
        out = bytes(self._pending[:n])
        del self._pending[:n]
        return out

    def read(self, size: int | None = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left if ``size`` is negative."""
        remain = self.want - self.position
        if remain <= 0:
            return b""
        n = remain if size is None or size < 0 else min(size, remain)
        out = self._stream_read(n)
        self.position += len(out)
        return out