import pytest

from polyfmt_formatter.backends.base import LenientCapability
from polyfmt_formatter.backends.data import JsonCapability, YamlCapability
from polyfmt_formatter.backends.dockerfile import DockerfileCapability
from polyfmt_formatter.backends.markup import MarkdownCapability, XmlCapability
from polyfmt_formatter.backends.python_black import BlackCapability
from polyfmt_formatter.backends.sql import SqlCapability
from polyfmt_formatter.backends.web import ScriptCapability, StylesheetCapability
from polyfmt_formatter.config import FormatConfig
from polyfmt_formatter.errors import ParseError, TransportError
from polyfmt_formatter.languages import LanguageTag
from polyfmt_formatter.registry import FormatterRegistry

SPACES = FormatConfig(indent_style="spaces", indent_width=2)


def test_script_rejects_syntax_errors():
    capability = ScriptCapability(LanguageTag.JAVASCRIPT, FormatConfig())
    with pytest.raises(ParseError) as excinfo:
        capability.format_one("const = ;", "a.js")
    assert "JavaScript" in str(excinfo.value)
    assert "line 1" in str(excinfo.value)


def test_script_indents_with_tabs_by_default():
    capability = ScriptCapability(LanguageTag.JAVASCRIPT, FormatConfig())
    assert capability.format_one("function f(){return 1}", "a.js") == "function f() {\n\treturn 1;\n}\n"


def test_script_is_idempotent():
    capability = ScriptCapability(LanguageTag.JAVASCRIPT, SPACES)
    once = capability.format_one("if(a){b()}else{c()}", "a.js")
    assert capability.format_one(once, "a.js") == once


def test_script_rejects_non_script_tags():
    with pytest.raises(ValueError):
        ScriptCapability(LanguageTag.JSON, FormatConfig())
    with pytest.raises(ValueError):
        ScriptCapability(LanguageTag.TYPESCRIPT, FormatConfig())


def test_script_applies_quote_and_semicolon_style():
    config = FormatConfig(quote_style="single", semicolons="as_needed")
    capability = ScriptCapability(LanguageTag.JAVASCRIPT, config)
    assert capability.format_one('const s = "a";', "a.js") == "const s = 'a'\n"


def test_stylesheet_expands_rules():
    capability = StylesheetCapability(SPACES)
    assert capability.format_one("a{color:red}", "a.css") == "a {\n  color: red\n}\n"


def test_stylesheet_rejects_garbage():
    with pytest.raises(ParseError):
        StylesheetCapability(FormatConfig()).format_one("}}} body {{ margin", "a.css")


def test_lenient_wrapper_marks_passthrough():
    capability = LenientCapability(StylesheetCapability(FormatConfig()))
    result = capability.format_result("}}} body {{ margin", "a.less")
    assert result.source == "}}} body {{ margin"
    assert result.passthrough


def test_lenient_wrapper_does_not_hide_transport_errors():
    class Unreachable(StylesheetCapability):
        def format_one(self, source, path):
            raise TransportError("spawn failed")

    with pytest.raises(TransportError):
        LenientCapability(Unreachable(FormatConfig())).format_result("a{}", "a.css")


def test_json_keeps_key_order():
    capability = JsonCapability(FormatConfig())
    assert capability.format_one('{"b":1,"a":[1,2]}', "x.json") == '{\n\t"b": 1,\n\t"a": [\n\t\t1,\n\t\t2\n\t]\n}\n'


def test_json_crlf():
    capability = JsonCapability(FormatConfig(line_ending="crlf", indent_style="spaces", indent_width=2))
    assert capability.format_one('{"a":1}', "x.json") == '{\r\n  "a": 1\r\n}\r\n'


def test_json_parse_error():
    with pytest.raises(ParseError):
        JsonCapability(FormatConfig()).format_one('{"a":', "x.json")


def test_json_rejects_duplicate_keys():
    with pytest.raises(ParseError) as excinfo:
        JsonCapability(FormatConfig()).format_one('{"a": 1, "a": 2}', "x.json")
    assert "duplicate key" in str(excinfo.value)


@pytest.mark.parametrize("source", ['{"big": 1e400}', "[NaN]", '{"x": -Infinity}'])
def test_json_rejects_values_it_cannot_write_back(source):
    with pytest.raises(ParseError):
        JsonCapability(FormatConfig()).format_one(source, "x.json")


def test_json_batch_matches_single_calls():
    capability = JsonCapability(FormatConfig())
    results = capability.format_many(['{"a":1}', "{", "[]"], ["a.json", "b.json", "c.json"])
    assert results[0] == capability.format_one('{"a":1}', "a.json")
    assert isinstance(results[1], ParseError)
    assert results[2] == "[]\n"


def test_batch_rejects_mismatched_paths():
    with pytest.raises(ValueError):
        JsonCapability(FormatConfig()).format_many(["{}", "{}"], ["a.json"])


def test_yaml_normalizes_spacing():
    capability = YamlCapability(FormatConfig())
    assert capability.format_one("a:   1\nb: [1, 2]\n", "x.yaml") == "a: 1\nb: [1, 2]\n"


def test_yaml_keeps_comments():
    source = "# deploy pipeline\nname: build  # job name\nsteps:\n- run: make\n"
    formatted = YamlCapability(FormatConfig()).format_one(source, "ci.yml")
    assert "# deploy pipeline" in formatted
    assert "# job name" in formatted
    assert "- run: make" in formatted


def test_yaml_on_key_stays_a_string():
    formatted = YamlCapability(FormatConfig()).format_one("on: push\nenabled: yes\n", "ci.yml")
    assert formatted == "on: push\nenabled: yes\n"


def test_yaml_comment_only_file_is_kept():
    source = "# nothing configured yet\n# see docs\n"
    assert YamlCapability(FormatConfig()).format_one(source, "x.yaml") == source


def test_yaml_multiple_documents():
    capability = YamlCapability(FormatConfig())
    assert capability.format_one("a: 1\n---\nb: 2\n", "x.yml") == "a: 1\n---\nb: 2\n"


def test_yaml_parse_error():
    with pytest.raises(ParseError):
        YamlCapability(FormatConfig()).format_one("a: [1, 2\n", "x.yaml")


def test_black_formats_python():
    capability = BlackCapability(FormatConfig())
    assert capability.format_one("x=1\ny = 'a'\n", "m.py") == 'x = 1\ny = "a"\n'


def test_black_respects_single_quote_style():
    capability = BlackCapability(FormatConfig(quote_style="single"))
    assert capability.format_one("y = 'a'\n", "m.py") == "y = 'a'\n"


def test_black_parse_error():
    with pytest.raises(ParseError):
        BlackCapability(FormatConfig()).format_one("def (:\n", "m.py")


def test_dockerfile_instructions():
    source = "from python:3.12\n\n\nrun   pip install x \\\n      && rm -rf /tmp\ncmd [\"python\"]   \n\n"
    expected = 'FROM python:3.12\n\nRUN pip install x \\\n\t&& rm -rf /tmp\nCMD ["python"]\n'
    capability = DockerfileCapability(FormatConfig())
    assert capability.format_one(source, "Dockerfile") == expected
    assert capability.format_one(expected, "Dockerfile") == expected


def test_dockerfile_keeps_comments():
    capability = DockerfileCapability(FormatConfig())
    assert capability.format_one("  # base image\nFROM alpine\n", "Dockerfile") == "# base image\nFROM alpine\n"


def test_markdown_normalizes_lists_and_headings():
    capability = MarkdownCapability(FormatConfig())
    assert capability.format_one("# Title\nSome text\n\n* one\n* two\n", "README.md") == (
        "# Title\n\nSome text\n\n- one\n- two\n"
    )


def test_markdown_crlf():
    capability = MarkdownCapability(FormatConfig(line_ending="crlf"))
    assert capability.format_one("# Title\r\n", "README.md") == "# Title\r\n"


def test_xml_indents_elements():
    capability = XmlCapability(SPACES)
    assert capability.format_one("<a><b>1</b><c/></a>", "x.xml") == "<a>\n  <b>1</b>\n  <c/>\n</a>\n"


def test_xml_keeps_declaration_and_comments():
    source = '<?xml version="1.0" encoding="UTF-8"?>\n<a><!--note--><b/></a>\n'
    formatted = XmlCapability(FormatConfig()).format_one(source, "pom.xml")
    assert formatted == '<?xml version="1.0" encoding="UTF-8"?>\n<a>\n\t<!--note-->\n\t<b/>\n</a>\n'
    assert XmlCapability(FormatConfig()).format_one(formatted, "pom.xml") == formatted


def test_xml_parse_error():
    with pytest.raises(ParseError):
        XmlCapability(FormatConfig()).format_one("<a><b></a>", "x.xml")


def test_sql_reindents_and_upcases_keywords():
    formatted = SqlCapability(SPACES).format_one("select a, b from t where x=1", "q.sql")
    assert formatted.startswith("SELECT a,")
    assert "\nFROM t\n" in formatted
    assert "WHERE x = 1" in formatted
    assert formatted.endswith("\n")


def test_sass_indented_syntax_passes_through():
    capability = FormatterRegistry().require(LanguageTag.SASS)
    result = capability.format_result("nav\n  ul\n    margin: 0\n", "theme.sass")
    assert result.source == "nav\n  ul\n    margin: 0\n"
    assert result.passthrough
