import threading
from pathlib import Path

import pytest

from polyfmt_formatter.backends.wasm_backend import (
    STATUS_ERROR,
    STATUS_OK,
    STATUS_UNCHANGED,
    WasmCapability,
    WasmtimeModule,
    call_wasm_format,
)
from polyfmt_formatter.errors import DecodeError, FormatError, ParseError, TransportError

DATA = Path(__file__).parent / "data"


class FakeSession:
    """In-memory module double that counts every allocation and release."""

    def __init__(self, status=STATUS_OK, result=b"", trap=False):
        self.memory = bytearray(4096)
        self.next = 8
        self.status = status
        self.result = result
        self.trap = trap
        self.allocated = []
        self.freed = []
        self.result_frees = 0
        self.received = None

    def malloc(self, size):
        ptr = self.next
        self.next += size
        self.allocated.append(ptr)
        return ptr

    def free(self, ptr):
        self.freed.append(ptr)

    def write(self, ptr, data):
        self.memory[ptr : ptr + len(data)] = data

    def read(self, ptr, length):
        return bytes(self.memory[ptr : ptr + length])

    def format(self, code_ptr, code_len, name_ptr, name_len):
        if self.trap:
            raise TransportError("wasm trap: unreachable")
        self.received = (self.read(code_ptr, code_len), self.read(name_ptr, name_len))
        if self.status in (STATUS_OK, STATUS_ERROR):
            self.result_at = self.malloc(len(self.result))
            self.write(self.result_at, self.result)
        return self.status

    def result_ptr(self):
        return self.result_at

    def result_len(self):
        return len(self.result)

    def free_result(self):
        self.result_frees += 1


def test_success_copies_result_and_releases_everything():
    session = FakeSession(result=b"int x;\n")
    assert call_wasm_format(session, "int  x ;", "a.c", "fake") == "int x;\n"
    assert session.received == (b"int  x ;", b"a.c")
    assert sorted(session.freed) == sorted(session.allocated[:2])
    assert session.result_frees == 1


def test_error_status_raises_with_backend_message():
    session = FakeSession(status=STATUS_ERROR, result=b"expected ';'")
    with pytest.raises(ParseError) as excinfo:
        call_wasm_format(session, "int x", "a.c", "fake")
    assert "expected ';'" in str(excinfo.value)
    assert len(session.freed) == 2
    assert session.result_frees == 1


def test_unchanged_status_returns_source_without_result_release():
    session = FakeSession(status=STATUS_UNCHANGED)
    assert call_wasm_format(session, "int x;\n", "a.c", "fake") == "int x;\n"
    assert len(session.freed) == 2
    assert session.result_frees == 0


def test_invalid_utf8_result_is_still_released():
    session = FakeSession(result=b"\xff\xfe")
    with pytest.raises(DecodeError):
        call_wasm_format(session, "x", "a.c", "fake")
    assert session.result_frees == 1
    assert len(session.freed) == 2


def test_unknown_status():
    session = FakeSession(status=7)
    with pytest.raises(FormatError) as excinfo:
        call_wasm_format(session, "x", "a.c", "fake")
    assert "7" in str(excinfo.value)
    assert len(session.freed) == 2


def test_trap_frees_inputs():
    session = FakeSession(trap=True)
    with pytest.raises(TransportError):
        call_wasm_format(session, "x", "a.c", "fake")
    assert len(session.freed) == 2
    assert session.result_frees == 0


def test_trap_drops_the_thread_instance():
    sessions = [FakeSession(trap=True), FakeSession(result=b"ok")]
    capability = WasmCapability("fake", lambda: sessions.pop(0))

    with pytest.raises(TransportError):
        capability.format_one("x", "a.c")
    assert capability.format_one("x", "a.c") == "ok"
    assert sessions == []


def test_instance_per_thread():
    created = []

    def factory():
        session = FakeSession(status=STATUS_UNCHANGED)
        created.append(session)
        return session

    capability = WasmCapability("fake", factory)
    capability.format_one("a", "a.c")
    capability.format_one("b", "b.c")
    assert len(created) == 1

    worker = threading.Thread(target=capability.format_one, args=("c", "c.c"))
    worker.start()
    worker.join()
    assert len(created) == 2


def test_batch_matches_single_calls():
    capability = WasmCapability("fake", lambda: FakeSession(result=b"same"))
    assert capability.format_many(["a", "b"]) == [capability.format_one("a", ""), capability.format_one("b", "")]


@pytest.fixture(scope="module")
def upper_module():
    return WasmtimeModule(DATA / "upper.wat")


def test_wasmtime_session_formats(upper_module):
    capability = WasmCapability("upper", upper_module.new_session)
    assert capability.format_one("int main() {}", "main.c") == "INT MAIN() {}"
    assert capability.format_one("", "empty.c") == ""


def test_wasmtime_session_reports_errors(upper_module):
    capability = WasmCapability("upper", upper_module.new_session)
    with pytest.raises(ParseError) as excinfo:
        capability.format_one("!broken", "bad.c")
    assert "syntax error" in str(excinfo.value)


def test_wasmtime_session_frees_inputs(upper_module):
    session = upper_module.new_session()
    free_count = session.exports["free_count"]
    call_wasm_format(session, "abc", "a.c", "upper")
    call_wasm_format(session, "", "b.c", "upper")
    assert free_count(session.store) == 4


def test_missing_module_is_transport_error(tmp_path):
    module = WasmtimeModule(tmp_path / "missing.wasm")
    capability = WasmCapability("clang-format", module.new_session)
    with pytest.raises(TransportError):
        capability.format_one("int x;", "a.c")
