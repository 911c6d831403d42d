"""Pooled read buffers for package files.

Packages are read whole into memory because decoding performs many small
reads. Buffers are rented from a pool and handed back as soon as the load
that needed them ends, whether it succeeded or not.
"""

from pathlib import Path
from types import TracebackType


class BufferPool:
    """A small pool of reusable byte buffers.

    Not thread safe; share a pool only within one thread.
    """

    def __init__(self, max_retained: int = 4):
        self.max_retained = max_retained
        self.outstanding = 0
        self._free: list[bytearray] = []

    def rent(self, size: int) -> bytearray:
        """Return a buffer of at least ``size`` bytes."""
        for index, buffer in enumerate(self._free):
            if len(buffer) >= size:
                del self._free[index]
                break
        else:
            buffer = bytearray(size)
        self.outstanding += 1
        return buffer

    def return_buffer(self, buffer: bytearray) -> None:
        """Give a rented buffer back to the pool."""
        self.outstanding -= 1
        if len(self._free) < self.max_retained:
            self._free.append(buffer)


shared_pool = BufferPool()


class RentedFile:
    """Context manager exposing a file's bytes in a pooled buffer.

    The yielded memoryview is only valid inside the ``with`` block.

    Example:
        >>> with RentedFile(Path("scene.json")) as data:
        ...     document = json.loads(bytes(data))
    """

    def __init__(self, path: Path, pool: BufferPool | None = None):
        self.path = path
        self.pool = pool if pool is not None else shared_pool
        self._buffer: bytearray | None = None
        self._view: memoryview | None = None

    def __enter__(self) -> memoryview:
        length = self.path.stat().st_size
        buffer = self.pool.rent(length)

        try:
            view = memoryview(buffer)
            with self.path.open("rb") as f:
                read = 0
                while read < length:
                    count = f.readinto(view[read:length])
                    if not count:
                        break
                    read += count
            view.release()
        except BaseException:
            self.pool.return_buffer(buffer)
            raise

        self._buffer = buffer
        self._view = memoryview(buffer)[:read]
        return self._view

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._view is not None:
            self._view.release()
            self._view = None
        if self._buffer is not None:
            self.pool.return_buffer(self._buffer)
            self._buffer = None
