import pytest

from polyfmt_formatter.languages import LanguageTag, classify, extension_of, is_supported


@pytest.mark.parametrize(
    "path, tag",
    [
        ("app.js", LanguageTag.JAVASCRIPT),
        ("app.cjs", LanguageTag.JAVASCRIPT),
        ("app.mjs", LanguageTag.JAVASCRIPT),
        ("src/types.mts", LanguageTag.TYPESCRIPT),
        ("View.tsx", LanguageTag.TSX),
        ("package.json", LanguageTag.JSON),
        ("theme.scss", LanguageTag.SCSS),
        ("ci.yml", LanguageTag.YAML),
        ("stubs.pyi", LanguageTag.PYTHON),
        ("main.go", LanguageTag.GO),
        ("lib.hpp", LanguageTag.CPP),
        ("api.proto", LanguageTag.PROTO),
        ("Dockerfile", LanguageTag.DOCKERFILE),
        ("docker/Dockerfile.dev", LanguageTag.DOCKERFILE),
        ("Containerfile", LanguageTag.DOCKERFILE),
        ("Gemfile", LanguageTag.RUBY),
        ("Rakefile", LanguageTag.RUBY),
        (".bashrc", LanguageTag.SHELL),
        ("README.md", LanguageTag.MARKDOWN),
        ("tsconfig.jsonc", LanguageTag.JSONC),
        ("theme.sass", LanguageTag.SASS),
        ("index.htm", LanguageTag.HTML),
        ("App.vue", LanguageTag.VUE),
        ("schema.gql", LanguageTag.GRAPHQL),
        ("queries/report.sql", LanguageTag.SQL),
        ("pom.xml", LanguageTag.XML),
        ("index.php", LanguageTag.PHP),
        ("main.tf", LanguageTag.HCL),
    ],
)
def test_classify_known_paths(path, tag):
    assert classify(path) is tag
    assert is_supported(path)


@pytest.mark.parametrize("path", ["notes.txt", "notes.xyz", "Makefile", "image.PNG", "Dockerfile."])
def test_classify_unknown_paths(path):
    assert classify(path) is LanguageTag.UNKNOWN
    assert not is_supported(path)


def test_extensions_are_case_sensitive():
    assert classify("APP.JS") is LanguageTag.UNKNOWN


def test_only_final_extension_counts():
    assert classify("bundle.min.js") is LanguageTag.JAVASCRIPT
    assert classify("archive.js.bak") is LanguageTag.UNKNOWN


def test_extension_of():
    assert extension_of("notes.xyz") == ".xyz"
    assert extension_of("LICENSE") == "(none)"
