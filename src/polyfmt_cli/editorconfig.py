from polyfmt_formatter.config import FormatConfig, QuoteStyle


def render_editorconfig(config: FormatConfig) -> str:
    """EditorConfig text matching the active style."""
    lines = [
        "# Generated by polyfmt",
        "root = true",
        "",
        "[*]",
        "charset = utf-8",
        f"end_of_line = {config.line_ending.value}",
        "insert_final_newline = true",
        "trim_trailing_whitespace = true",
        f"indent_style = {'tab' if config.use_tabs else 'space'}",
        f"indent_size = {config.indent_width}",
        f"tab_width = {config.indent_width}",
        f"max_line_length = {config.line_width}",
    ]
    quote = "single" if config.quote_style is QuoteStyle.SINGLE else "double"
    lines += [
        "",
        "[*.{js,cjs,mjs,jsx,ts,mts,cts,tsx}]",
        f"quote_type = {quote}",
        "",
        "[*.{yaml,yml}]",
        "indent_style = space",
        "indent_size = 2",
        "",
        "[*.md]",
        "trim_trailing_whitespace = false",
    ]
    return "\n".join(lines) + "\n"
