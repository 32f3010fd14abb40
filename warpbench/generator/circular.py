"""A seekable reader that serves a fixed block of data over and over."""

from __future__ import annotations

import io


def _seek_target(position: int, want: int, offset: int, whence: int) -> int:
    """Return the new read position for a seek, or raise if it is out of range."""
    if whence == io.SEEK_SET:
        if offset > want:
            raise EOFError("seek beyond end of data")
        target = offset
    elif whence == io.SEEK_CUR:
        if offset + position > want:
            raise EOFError("seek beyond end of data")
        target = position + offset
    elif whence == io.SEEK_END:
        if offset > 0:
            raise EOFError("seek beyond end of data")
        if want + offset < 0:
            raise ValueError("seek before start of data")
        target = want + offset
    else:
        raise ValueError(f"invalid whence: {whence!r}")
    if target < 0:
        raise ValueError("negative seek position")
    return target


class CircularBuffer:
    """Serves ``size`` bytes by repeating ``data`` as often as needed.

    Seeking only moves the byte counter, so a reader can be rewound for a
    retry without the served content having to line up with the offset.
    """

    def __init__(self, data: bytes, size: int) -> None:
        self.data = bytes(data)
        self.want = size
        self.position = 0
        self._offset = 0

    def reset(self, want: int = 0) -> CircularBuffer:
        """Rewind the buffer; a positive ``want`` sets a new total length."""
        if want > 0:
            self.want = want
        self.position = 0
        self._offset = 0
        return self

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        """Move the read counter and return the new position."""
        self.position = _seek_target(self.position, self.want, offset, whence)
        return self.position

    def tell(self) -> int:
        """Return the number of bytes counted as read."""
        return self.position

    def read(self, size: int | None = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left if ``size`` is negative."""
        if not self.data:
            raise ValueError("circular buffer has no data")
        remain = self.want - self.position
        if remain <= 0:
            return b""
        n = remain if size is None or size < 0 else min(size, remain)
        view = memoryview(self.data)
        out = bytearray()
        while len(out) < n:
            if self._offset >= len(self.data):
                self._offset = 0
            take = min(len(self.data) - self._offset, n - len(out))
            out += view[self._offset:self._offset + take]
            self._offset += take
        self.position += n
        return bytes(out)