"""Ownership-tagged buffers that cross a foreign-backend boundary.

Every buffer has one owner. Adapter-owned buffers hold request data and are
released by the adapter; backend-owned buffers hold responses and are
released through the backend's own free entry point. Release runs at most
once and is driven by ``with`` blocks so that every exit path is covered.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional

from ..errors import DecodeError


class Owner(str, Enum):
    ADAPTER = "adapter"
    BACKEND = "backend"


@dataclass
class ForeignBuffer:
    ptr: int
    length: int
    owner: Owner
    releaser: Optional[Callable[[int], None]] = field(default=None, repr=False)
    released: bool = False

    @property
    def is_null(self) -> bool:
        return not self.ptr

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        if self.releaser is not None and not self.is_null:
            self.releaser(self.ptr)


@contextmanager
def owned_buffer(
    ptr: int,
    length: int,
    owner: Owner,
    releaser: Optional[Callable[[int], None]],
) -> Iterator[ForeignBuffer]:
    """Yield a buffer that is released when the block exits, however it exits."""
    buffer = ForeignBuffer(ptr=ptr or 0, length=length, owner=owner, releaser=releaser)
    try:
        yield buffer
    finally:
        buffer.release()


def decode_utf8(payload: bytes, backend: str) -> str:
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Invalid UTF-8 in {backend} output: {e}") from e
