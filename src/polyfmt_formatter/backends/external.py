"""Command lines for formatters that are only reachable as external tools."""

from typing import Callable, NamedTuple, Sequence

from ..config import BackendSettings, FormatConfig, LineEnding, QuoteStyle, Semicolons, TrailingComma
from ..languages import LanguageTag
from .subprocess_backend import SubprocessCapability


class ExternalTool(NamedTuple):
    executable: str
    build_args: Callable[[FormatConfig, str], Sequence[str]]


def clang_format_style(config: FormatConfig) -> str:
    use_tab = "Always" if config.use_tabs else "Never"
    return (
        "{BasedOnStyle: LLVM, "
        f"UseTab: {use_tab}, "
        f"IndentWidth: {config.indent_width}, "
        f"TabWidth: {config.indent_width}, "
        f"ColumnLimit: {config.line_width}}}"
    )


def _shfmt(config: FormatConfig, path: str) -> Sequence[str]:
    indent = 0 if config.use_tabs else config.indent_width
    args = ["-i", str(indent)]
    if path:
        args += ["-filename", path]
    return args


def _gofmt(config: FormatConfig, path: str) -> Sequence[str]:
    return ()


def _taplo(config: FormatConfig, path: str) -> Sequence[str]:
    crlf = "true" if config.line_ending is LineEnding.CRLF else "false"
    return [
        "fmt",
        "--option", f"column_width={config.line_width}",
        "--option", f"indent_string={config.indent_string}",
        "--option", f"crlf={crlf}",
        "-",
    ]


def _rustfmt(config: FormatConfig, path: str) -> Sequence[str]:
    hard_tabs = "true" if config.use_tabs else "false"
    newline = "Windows" if config.line_ending is LineEnding.CRLF else "Unix"
    return [
        "--edition", "2021",
        "--config",
        f"hard_tabs={hard_tabs},tab_spaces={config.indent_width},"
        f"max_width={config.line_width},newline_style={newline}",
    ]


def _stylua(config: FormatConfig, path: str) -> Sequence[str]:
    return [
        "--indent-type", "Tabs" if config.use_tabs else "Spaces",
        "--indent-width", str(config.indent_width),
        "--column-width", str(config.line_width),
        "--line-endings", "Windows" if config.line_ending is LineEnding.CRLF else "Unix",
        "--quote-style", "ForceSingle" if config.quote_style is QuoteStyle.SINGLE else "ForceDouble",
        "-",
    ]


def _rubyfmt(config: FormatConfig, path: str) -> Sequence[str]:
    return ()


def _dart(config: FormatConfig, path: str) -> Sequence[str]:
    args = ["format", "--output=show", f"--line-length={config.line_width}"]
    if path:
        args.append(f"--stdin-name={path}")
    return args


def _ktfmt(config: FormatConfig, path: str) -> Sequence[str]:
    return ["--kotlinlang-style", "-"]


def _zig(config: FormatConfig, path: str) -> Sequence[str]:
    return ["fmt", "--stdin"]


def _biome(config: FormatConfig, path: str) -> Sequence[str]:
    return [
        "format",
        f"--stdin-file-path={path or 'stdin.ts'}",
        f"--indent-style={'tab' if config.use_tabs else 'space'}",
        f"--indent-width={config.indent_width}",
        f"--line-width={config.line_width}",
        f"--line-ending={config.line_ending.value}",
        f"--quote-style={'single' if config.quote_style is QuoteStyle.SINGLE else 'double'}",
        f"--trailing-commas={'all' if config.trailing_comma is TrailingComma.ALL else 'none'}",
        f"--semicolons={'as-needed' if config.semicolons is Semicolons.AS_NEEDED else 'always'}",
        f"--bracket-spacing={'true' if config.bracket_spacing else 'false'}",
    ]


def _prettier(config: FormatConfig, path: str) -> Sequence[str]:
    args = [
        f"--stdin-filepath={path or 'stdin'}",
        f"--tab-width={config.indent_width}",
        f"--print-width={config.line_width}",
        f"--end-of-line={config.line_ending.value}",
        f"--trailing-comma={'all' if config.trailing_comma is TrailingComma.ALL else 'none'}",
    ]
    if config.use_tabs:
        args.append("--use-tabs")
    if not config.bracket_spacing:
        args.append("--no-bracket-spacing")
    if config.quote_style is QuoteStyle.SINGLE:
        args.append("--single-quote")
    if config.semicolons is Semicolons.AS_NEEDED:
        args.append("--no-semi")
    return args


def _prettier_php(config: FormatConfig, path: str) -> Sequence[str]:
    return ["--plugin=@prettier/plugin-php", *_prettier(config, path)]


def _terraform(config: FormatConfig, path: str) -> Sequence[str]:
    return ["fmt", "-no-color", "-"]


def _clang_format(config: FormatConfig, path: str) -> Sequence[str]:
    args = [f"--style={clang_format_style(config)}"]
    if path:
        args.append(f"--assume-filename={path}")
    return args


EXTERNAL_TOOLS: dict[LanguageTag, ExternalTool] = {
    LanguageTag.SHELL: ExternalTool("shfmt", _shfmt),
    LanguageTag.GO: ExternalTool("gofmt", _gofmt),
    LanguageTag.TOML: ExternalTool("taplo", _taplo),
    LanguageTag.RUST: ExternalTool("rustfmt", _rustfmt),
    LanguageTag.LUA: ExternalTool("stylua", _stylua),
    LanguageTag.RUBY: ExternalTool("rubyfmt", _rubyfmt),
    LanguageTag.DART: ExternalTool("dart", _dart),
    LanguageTag.KOTLIN: ExternalTool("ktfmt", _ktfmt),
    LanguageTag.ZIG: ExternalTool("zig", _zig),
    LanguageTag.TYPESCRIPT: ExternalTool("biome", _biome),
    LanguageTag.TSX: ExternalTool("biome", _biome),
    LanguageTag.JSONC: ExternalTool("biome", _biome),
    LanguageTag.HTML: ExternalTool("prettier", _prettier),
    LanguageTag.VUE: ExternalTool("prettier", _prettier),
    LanguageTag.SVELTE: ExternalTool("prettier", _prettier),
    LanguageTag.ASTRO: ExternalTool("prettier", _prettier),
    LanguageTag.GRAPHQL: ExternalTool("prettier", _prettier),
    LanguageTag.PHP: ExternalTool("prettier", _prettier_php),
    LanguageTag.HCL: ExternalTool("terraform", _terraform),
}

CLANG_FORMAT = ExternalTool("clang-format", _clang_format)


def external_capability(tool: ExternalTool, config: FormatConfig, backends: BackendSettings) -> SubprocessCapability:
    return SubprocessCapability(
        name=tool.executable,
        executable=backends.executable(tool.executable),
        build_args=lambda path: tool.build_args(config, path),
    )
