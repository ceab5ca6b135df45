"""Formatters linked as C-ABI shared libraries and called through ctypes.

The library exports ``<Symbol>(const char *src, size_t len, ...) -> char *``,
``<Symbol>Batch(const char **srcs, const size_t *lens, size_t n, ...) ->
char **``, ``FreeString(char *)`` and ``FreeStringArray(char **, size_t)``.
Every returned pointer belongs to the library and goes back through the
matching free function exactly once.
"""

import ctypes
import logging
import threading
from contextlib import nullcontext
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

from ..errors import DecodeError, FormatError, TransportError
from .base import Capability
from .buffers import Owner, decode_utf8, owned_buffer

logger = logging.getLogger(__name__)


class FormatLibrary(Protocol):
    def call(self, symbol: str, source: bytes, length: int, *extra: int) -> Optional[int]: ...

    def call_batch(self, symbol: str, sources: Sequence[bytes], *extra: int) -> Optional[int]: ...

    def free_string(self, ptr: int) -> None: ...

    def free_string_array(self, ptr: int, count: int) -> None: ...


class NativeFormatLibrary:
    """Lazily loaded ctypes handle, shared by every worker thread."""

    def __init__(self, path: Path, extra_argtypes: Sequence = (ctypes.c_uint,)):
        self.path = Path(path)
        self.extra_argtypes = tuple(extra_argtypes)
        self._lock = threading.Lock()
        self._lib: Optional[ctypes.CDLL] = None
        self._functions: dict[str, ctypes._CFuncPtr] = {}

    def _library(self) -> ctypes.CDLL:
        if self._lib is None:
            with self._lock:
                if self._lib is None:
                    logger.debug("Loading native formatter library %s", self.path)
                    try:
                        self._lib = ctypes.CDLL(str(self.path))
                    except OSError as e:
                        raise TransportError(f"Failed to load {self.path}: {e}") from e
        return self._lib

    def _function(self, symbol: str, argtypes: Sequence, restype) -> ctypes._CFuncPtr:
        func = self._functions.get(symbol)
        if func is None:
            try:
                func = getattr(self._library(), symbol)
            except AttributeError as e:
                raise TransportError(f"Missing native symbol '{symbol}' in {self.path}") from e
            func.argtypes = list(argtypes)
            func.restype = restype
            self._functions[symbol] = func
        return func

    def call(self, symbol: str, source: bytes, length: int, *extra: int) -> Optional[int]:
        argtypes = (ctypes.c_char_p, ctypes.c_size_t, *self.extra_argtypes[: len(extra)])
        # c_void_p keeps the raw address; c_char_p would copy and lose it
        func = self._function(symbol, argtypes, ctypes.c_void_p)
        return func(source, length, *extra)

    def call_batch(self, symbol: str, sources: Sequence[bytes], *extra: int) -> Optional[int]:
        count = len(sources)
        pointers = (ctypes.c_char_p * count)(*sources)
        lengths = (ctypes.c_size_t * count)(*(len(s) for s in sources))
        argtypes = (
            ctypes.POINTER(ctypes.c_char_p),
            ctypes.POINTER(ctypes.c_size_t),
            ctypes.c_size_t,
            *self.extra_argtypes[: len(extra)],
        )
        func = self._function(symbol, argtypes, ctypes.c_void_p)
        return func(pointers, lengths, count, *extra)

    def free_string(self, ptr: int) -> None:
        self._function("FreeString", (ctypes.c_void_p,), None)(ptr)

    def free_string_array(self, ptr: int, count: int) -> None:
        self._function("FreeStringArray", (ctypes.c_void_p, ctypes.c_size_t), None)(ptr, count)


def _read_c_string(ptr: int) -> bytes:
    return ctypes.string_at(ptr)


class LinkedLibraryCapability(Capability):
    def __init__(
        self,
        name: str,
        library: FormatLibrary,
        symbol: str,
        extra_args: Sequence[int] = (),
        serialized: bool = False,
    ):
        self.name = name
        self.library = library
        self.symbol = symbol
        self.batch_symbol = f"{symbol}Batch"
        self.extra_args = tuple(extra_args)
        # Only single-instance libraries need their calls serialized
        self._lock = threading.Lock() if serialized else None

    def _guard(self):
        return self._lock if self._lock is not None else nullcontext()

    @staticmethod
    def _encode(source: str) -> bytes:
        data = source.encode("utf-8")
        if b"\x00" in data:
            raise FormatError("Invalid source: embedded NUL byte")
        return data

    def format_one(self, source: str, path: str) -> str:
        # The request bytes stay owned by Python; the library only reads them
        data = self._encode(source)
        with self._guard():
            ptr = self.library.call(self.symbol, data, len(data), *self.extra_args)
        if not ptr:
            raise FormatError(f"{self.name} returned null")
        with owned_buffer(ptr, 0, Owner.BACKEND, self.library.free_string) as result:
            return decode_utf8(_read_c_string(result.ptr), self.name)

    def format_many(
        self, sources: Sequence[str], paths: Optional[Sequence[str]] = None
    ) -> list[Union[str, FormatError]]:
        results: list[Union[str, FormatError, None]] = [None] * len(sources)
        encoded = []
        indices = []
        for index, source in enumerate(sources):
            try:
                encoded.append(self._encode(source))
                indices.append(index)
            except FormatError as e:
                results[index] = e
        if not encoded:
            return results

        # Only the sources that encoded cleanly go to the library
        count = len(encoded)
        with self._guard():
            ptr = self.library.call_batch(self.batch_symbol, encoded, *self.extra_args)
        if not ptr:
            for index in indices:
                results[index] = FormatError(f"{self.name} returned null")
            return results

        with owned_buffer(ptr, count, Owner.BACKEND, lambda p: self.library.free_string_array(p, count)) as array:
            items = ctypes.cast(array.ptr, ctypes.POINTER(ctypes.c_void_p))
            for position, index in enumerate(indices):
                item = items[position]
                if not item:
                    results[index] = FormatError("Null result")
                    continue
                try:
                    results[index] = decode_utf8(_read_c_string(item), self.name)
                except DecodeError as e:
                    results[index] = e
        return results
