from .base import Capability, LenientCapability
from .native_backend import LinkedLibraryCapability, NativeFormatLibrary
from .subprocess_backend import SubprocessCapability
from .wasm_backend import WasmCapability, WasmtimeModule

__all__ = [
    "Capability",
    "LenientCapability",
    "LinkedLibraryCapability",
    "NativeFormatLibrary",
    "SubprocessCapability",
    "WasmCapability",
    "WasmtimeModule",
]
