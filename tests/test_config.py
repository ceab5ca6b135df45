import pytest
from pydantic import ValidationError

from polyfmt_cli.config import load_config
from polyfmt_formatter.config import FormatConfig, IndentStyle, LineEnding, QuoteStyle
from polyfmt_formatter.errors import ConfigError


def test_defaults():
    config = FormatConfig()
    assert config.indent_style is IndentStyle.TABS
    assert config.indent_width == 4
    assert config.line_width == 80
    assert config.line_ending is LineEnding.LF
    assert config.quote_style is QuoteStyle.DOUBLE
    assert config.indent_string == "\t"


def test_format_config_is_immutable():
    config = FormatConfig()
    with pytest.raises(ValidationError):
        config.indent_width = 8


def test_spaces_indent_string():
    assert FormatConfig(indent_style="spaces", indent_width=2).indent_string == "  "


def test_no_file_means_defaults(tmp_path):
    config = load_config(cwd=tmp_path)
    assert config.style == FormatConfig()
    assert config.backends.goffi_library is None


def test_polyfmt_toml(tmp_path):
    (tmp_path / ".polyfmt.toml").write_text(
        'indent_style = "spaces"\n'
        "indent_width = 2\n"
        'quote_style = "single"\n'
        "\n"
        "[backends]\n"
        'goffi_library = "lib/libgoffi.so"\n'
        'executables = { rustfmt = "/opt/rustfmt" }\n'
    )
    config = load_config(cwd=tmp_path)
    assert config.style.indent_style is IndentStyle.SPACES
    assert config.style.indent_width == 2
    assert config.style.quote_style is QuoteStyle.SINGLE
    assert config.backends.goffi_library == tmp_path.resolve() / "lib" / "libgoffi.so"
    assert config.backends.executable("rustfmt") == "/opt/rustfmt"
    assert config.backends.executable("gofmt") == "gofmt"


def test_pyproject_table_found_from_subdirectory(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[tool.polyfmt]\nline_width = 100\n')
    sub = tmp_path / "pkg"
    sub.mkdir()
    assert load_config(cwd=sub).style.line_width == 100


def test_pyproject_without_table_is_skipped(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
    assert load_config(cwd=tmp_path).style == FormatConfig()


def test_explicit_config_path(tmp_path):
    path = tmp_path / "style.toml"
    path.write_text('line_ending = "crlf"\n')
    assert load_config(path).style.line_ending is LineEnding.CRLF


def test_missing_explicit_config(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.toml")


def test_unknown_key_is_rejected(tmp_path):
    (tmp_path / ".polyfmt.toml").write_text("tab_size = 2\n")
    with pytest.raises(ConfigError) as excinfo:
        load_config(cwd=tmp_path)
    assert "tab_size" in str(excinfo.value)


def test_out_of_range_value_is_rejected(tmp_path):
    (tmp_path / ".polyfmt.toml").write_text("indent_width = 0\n")
    with pytest.raises(ConfigError):
        load_config(cwd=tmp_path)


def test_malformed_toml(tmp_path):
    (tmp_path / ".polyfmt.toml").write_text("indent_width = = 2\n")
    with pytest.raises(ConfigError):
        load_config(cwd=tmp_path)
