"""Formatters compiled to WebAssembly and run inside a wasmtime sandbox.

The module is expected to export ``memory``, ``malloc``, ``free``,
``wasm_format(code_ptr, code_len, name_ptr, name_len) -> status``,
``wasm_get_result_ptr``, ``wasm_get_result_len`` and ``wasm_free_result``.
``wasm_init`` and ``wasm_set_style(ptr, len)`` are called once per instance
when present.
"""

import logging
import threading
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Protocol

from wasmtime import (
    Engine,
    FuncType,
    Linker,
    Module,
    Store,
    Trap,
    WasiConfig,
    WasmtimeError,
    wat2wasm,
)

from ..errors import FormatError, ParseError, TransportError
from .base import Capability
from .buffers import ForeignBuffer, Owner, decode_utf8, owned_buffer

logger = logging.getLogger(__name__)

STATUS_OK = 0
STATUS_ERROR = 1
STATUS_UNCHANGED = 2


class ModuleSession(Protocol):
    """One instantiated module. Not safe to share between threads."""

    def malloc(self, size: int) -> int: ...

    def free(self, ptr: int) -> None: ...

    def write(self, ptr: int, data: bytes) -> None: ...

    def read(self, ptr: int, length: int) -> bytes: ...

    def format(self, code_ptr: int, code_len: int, name_ptr: int, name_len: int) -> int: ...

    def result_ptr(self) -> int: ...

    def result_len(self) -> int: ...

    def free_result(self) -> None: ...


@contextmanager
def module_buffer(session: ModuleSession, data: bytes) -> Iterator[ForeignBuffer]:
    """Copy ``data`` into module memory; the allocation is freed on exit."""
    ptr = session.malloc(max(len(data), 1))
    if not ptr:
        raise TransportError("malloc returned null")
    with owned_buffer(ptr, len(data), Owner.ADAPTER, session.free) as buffer:
        session.write(ptr, data)
        yield buffer


def call_wasm_format(session: ModuleSession, source: str, path: str, backend: str) -> str:
    code = source.encode("utf-8")
    name = path.encode("utf-8")
    with ExitStack() as stack:
        code_buf = stack.enter_context(module_buffer(session, code))
        name_buf = stack.enter_context(module_buffer(session, name))
        status = session.format(code_buf.ptr, code_buf.length, name_buf.ptr, name_buf.length)

    if status == STATUS_UNCHANGED:
        return source
    if status not in (STATUS_OK, STATUS_ERROR):
        raise FormatError(f"{backend} returned unknown status code: {status}")

    result_ptr = session.result_ptr()
    result_len = session.result_len()
    with owned_buffer(result_ptr, result_len, Owner.BACKEND, lambda _ptr: session.free_result()) as result:
        payload = b"" if result.is_null or not result.length else session.read(result.ptr, result.length)
        text = decode_utf8(payload, backend)

    if status == STATUS_ERROR:
        raise ParseError(text or f"{backend} reported an error")
    return text


def _stub(result_count: int) -> Callable[..., Optional[int]]:
    # Host calls the module cannot use in a sandbox report failure
    def stub(*args):
        return -1 if result_count else None

    return stub


class WasmtimeSession:
    def __init__(self, engine: Engine, module: Module, style: Optional[str]):
        self.store = Store(engine)
        wasi = WasiConfig()
        wasi.inherit_stderr()
        self.store.set_wasi(wasi)

        linker = Linker(engine)
        linker.define_wasi()
        for item in module.imports:
            if item.module == "env" and isinstance(item.type, FuncType):
                linker.define_func("env", item.name, item.type, _stub(len(item.type.results)))

        try:
            self.instance = linker.instantiate(self.store, module)
        except (Trap, WasmtimeError) as e:
            raise TransportError(f"Failed to instantiate module: {e}") from e

        self.exports = self.instance.exports(self.store)
        self.memory = self._export("memory")
        self._malloc = self._export("malloc")
        self._free = self._export("free")
        self._format = self._export("wasm_format")
        self._result_ptr = self._export("wasm_get_result_ptr")
        self._result_len = self._export("wasm_get_result_len")
        self._free_result = self._export("wasm_free_result")

        for init_name in ("_initialize", "wasm_init"):
            init = self._optional_export(init_name)
            if init is not None:
                self._call(init)

        set_style = self._optional_export("wasm_set_style")
        if style and set_style is not None:
            with module_buffer(self, style.encode("utf-8")) as buf:
                self._call(set_style, buf.ptr, buf.length)

    def _optional_export(self, name: str):
        try:
            return self.exports[name]
        except KeyError:
            return None

    def _export(self, name: str):
        export = self._optional_export(name)
        if export is None:
            raise TransportError(f"Module does not export '{name}'")
        return export

    def _call(self, func, *args):
        try:
            return func(self.store, *args)
        except (Trap, WasmtimeError) as e:
            raise TransportError(f"WASM call failed: {e}") from e

    def malloc(self, size: int) -> int:
        return self._call(self._malloc, size)

    def free(self, ptr: int) -> None:
        self._call(self._free, ptr)

    def write(self, ptr: int, data: bytes) -> None:
        try:
            self.memory.write(self.store, data, ptr)
        except (Trap, WasmtimeError, IndexError, ValueError) as e:
            raise TransportError(f"Failed to write to module memory: {e}") from e

    def read(self, ptr: int, length: int) -> bytes:
        try:
            return bytes(self.memory.read(self.store, ptr, ptr + length))
        except (Trap, WasmtimeError, IndexError, ValueError) as e:
            raise TransportError(f"Failed to read from module memory: {e}") from e

    def format(self, code_ptr: int, code_len: int, name_ptr: int, name_len: int) -> int:
        return self._call(self._format, code_ptr, code_len, name_ptr, name_len)

    def result_ptr(self) -> int:
        return self._call(self._result_ptr)

    def result_len(self) -> int:
        return self._call(self._result_len)

    def free_result(self) -> None:
        self._call(self._free_result)


class WasmtimeModule:
    """Compiles a module file once per process and hands out fresh instances."""

    def __init__(self, path: Path, style: Optional[str] = None):
        self.path = Path(path)
        self.style = style
        self._lock = threading.Lock()
        self._engine: Optional[Engine] = None
        self._module: Optional[Module] = None

    def _compiled(self) -> tuple[Engine, Module]:
        if self._module is None:
            with self._lock:
                if self._module is None:
                    self._engine, self._module = self._compile()
        return self._engine, self._module

    def _compile(self) -> tuple[Engine, Module]:
        logger.debug("Compiling WASM module %s", self.path)
        try:
            data = self.path.read_bytes()
            if self.path.suffix == ".wat":
                data = wat2wasm(data.decode("utf-8"))
            engine = Engine()
            return engine, Module(engine, data)
        except (OSError, UnicodeDecodeError, WasmtimeError) as e:
            raise TransportError(f"Failed to load WASM module {self.path}: {e}") from e

    def new_session(self) -> WasmtimeSession:
        engine, module = self._compiled()
        return WasmtimeSession(engine, module, self.style)


class WasmCapability(Capability):
    """Formats through a sandboxed module, one instance per worker thread."""

    def __init__(self, name: str, session_factory: Callable[[], ModuleSession]):
        self.name = name
        self.session_factory = session_factory
        self._local = threading.local()

    def _session(self) -> ModuleSession:
        session = getattr(self._local, "session", None)
        if session is None:
            session = self.session_factory()
            self._local.session = session
        return session

    def format_one(self, source: str, path: str) -> str:
        session = self._session()
        try:
            return call_wasm_format(session, source, path, self.name)
        except TransportError:
            # A trapped instance may be left inconsistent
            self._local.session = None
            raise
