import logging
from types import MappingProxyType
from typing import Mapping, Optional

from .backends.base import Capability, LenientCapability
from .config import PolyfmtConfig
from .errors import UnsupportedLanguageError
from .languages import LanguageTag

logger = logging.getLogger(__name__)


class FormatterRegistry:
    """Maps each language tag to the capability that formats it.

    Built once from the run's configuration and frozen; workers only read it.
    """

    def __init__(self, config: Optional[PolyfmtConfig] = None, load_builtins: bool = True):
        self.config = config or PolyfmtConfig()
        self._capabilities: dict[LanguageTag, Capability] = {}
        self._frozen = False
        if load_builtins:
            self._load_builtin_backends()

    def register(self, tag: LanguageTag, capability: Capability) -> None:
        if self._frozen:
            raise RuntimeError("Registry is frozen")
        if tag is LanguageTag.UNKNOWN:
            raise ValueError("UNKNOWN cannot be registered")
        self._capabilities[tag] = capability

    def freeze(self) -> "FormatterRegistry":
        self._frozen = True
        self._capabilities = MappingProxyType(dict(self._capabilities))
        return self

    def resolve(self, tag: LanguageTag) -> Optional[Capability]:
        return self._capabilities.get(tag)

    def require(self, tag: LanguageTag) -> Capability:
        capability = self.resolve(tag)
        if capability is None:
            raise UnsupportedLanguageError(f"No formatter registered for {tag.value}")
        return capability

    @property
    def capabilities(self) -> Mapping[LanguageTag, Capability]:
        return MappingProxyType(dict(self._capabilities))

    def tags(self) -> list[LanguageTag]:
        return sorted(self._capabilities, key=lambda t: t.value)

    def _load_builtin_backends(self):
        from .backends.data import JsonCapability, YamlCapability
        from .backends.dockerfile import DockerfileCapability
        from .backends.external import CLANG_FORMAT, EXTERNAL_TOOLS, clang_format_style, external_capability
        from .backends.markup import MarkdownCapability, XmlCapability
        from .backends.python_black import BlackCapability
        from .backends.sql import SqlCapability
        from .backends.web import ScriptCapability, StylesheetCapability

        style = self.config.style
        backends = self.config.backends

        for tag in (LanguageTag.JAVASCRIPT, LanguageTag.JSX):
            self.register(tag, ScriptCapability(tag, style))

        stylesheet = LenientCapability(StylesheetCapability(style))
        for tag in (LanguageTag.CSS, LanguageTag.SCSS, LanguageTag.LESS, LanguageTag.SASS):
            self.register(tag, stylesheet)

        self.register(LanguageTag.JSON, JsonCapability(style))
        self.register(LanguageTag.YAML, YamlCapability(style))
        self.register(LanguageTag.PYTHON, BlackCapability(style))
        self.register(LanguageTag.DOCKERFILE, DockerfileCapability(style))
        self.register(LanguageTag.MARKDOWN, MarkdownCapability(style))
        self.register(LanguageTag.XML, XmlCapability(style))
        self.register(LanguageTag.SQL, SqlCapability(style))

        for tag, tool in EXTERNAL_TOOLS.items():
            self.register(tag, external_capability(tool, style, backends))

        if backends.goffi_library is not None:
            from .backends.native_backend import LinkedLibraryCapability, NativeFormatLibrary

            logger.debug("Using native library %s for shell and Go", backends.goffi_library)
            library = NativeFormatLibrary(backends.goffi_library)
            shell_indent = 0 if style.use_tabs else style.indent_width
            self.register(
                LanguageTag.SHELL,
                LinkedLibraryCapability("goffi:shell", library, "FormatShell", extra_args=(shell_indent,)),
            )
            self.register(LanguageTag.GO, LinkedLibraryCapability("goffi:go", library, "FormatGo"))

        if backends.clang_format_wasm is not None:
            from .backends.wasm_backend import WasmCapability, WasmtimeModule

            logger.debug("Using WASM module %s for C-family languages", backends.clang_format_wasm)
            module = WasmtimeModule(backends.clang_format_wasm, style=clang_format_style(style))
            clang = WasmCapability("clang-format", module.new_session)
        else:
            clang = external_capability(CLANG_FORMAT, style, backends)
        for tag in (LanguageTag.C, LanguageTag.CPP, LanguageTag.JAVA, LanguageTag.PROTO):
            self.register(tag, clang)

        self.freeze()
