from enum import Enum
from pathlib import PurePath


class LanguageTag(str, Enum):
    """Closed set of file categories that drive backend dispatch."""

    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    JSX = "jsx"
    TSX = "tsx"
    JSON = "json"
    JSONC = "jsonc"
    CSS = "css"
    SCSS = "scss"
    LESS = "less"
    SASS = "sass"
    HTML = "html"
    VUE = "vue"
    SVELTE = "svelte"
    ASTRO = "astro"
    GRAPHQL = "graphql"
    MARKDOWN = "markdown"
    YAML = "yaml"
    PYTHON = "python"
    DOCKERFILE = "dockerfile"
    SHELL = "shell"
    GO = "go"
    TOML = "toml"
    RUST = "rust"
    LUA = "lua"
    RUBY = "ruby"
    DART = "dart"
    KOTLIN = "kotlin"
    ZIG = "zig"
    C = "c"
    CPP = "cpp"
    JAVA = "java"
    PROTO = "proto"
    SQL = "sql"
    XML = "xml"
    PHP = "php"
    HCL = "hcl"
    UNKNOWN = "unknown"


EXTENSIONS: dict[LanguageTag, tuple[str, ...]] = {
    LanguageTag.JAVASCRIPT: ("js", "cjs", "mjs"),
    LanguageTag.TYPESCRIPT: ("ts", "mts", "cts"),
    LanguageTag.JSX: ("jsx", "mjsx"),
    LanguageTag.TSX: ("tsx",),
    LanguageTag.JSON: ("json",),
    LanguageTag.JSONC: ("jsonc",),
    LanguageTag.CSS: ("css",),
    LanguageTag.SCSS: ("scss",),
    LanguageTag.LESS: ("less",),
    LanguageTag.SASS: ("sass",),
    LanguageTag.HTML: ("html", "htm"),
    LanguageTag.VUE: ("vue",),
    LanguageTag.SVELTE: ("svelte",),
    LanguageTag.ASTRO: ("astro",),
    LanguageTag.GRAPHQL: ("graphql", "gql"),
    LanguageTag.MARKDOWN: ("md", "markdown"),
    LanguageTag.YAML: ("yaml", "yml"),
    LanguageTag.PYTHON: ("py", "pyi"),
    LanguageTag.DOCKERFILE: ("dockerfile",),
    LanguageTag.SHELL: ("sh", "bash", "zsh"),
    LanguageTag.GO: ("go",),
    LanguageTag.TOML: ("toml",),
    LanguageTag.RUST: ("rs",),
    LanguageTag.LUA: ("lua",),
    LanguageTag.RUBY: ("rb", "rake", "gemspec", "ru"),
    LanguageTag.DART: ("dart",),
    LanguageTag.KOTLIN: ("kt", "kts"),
    LanguageTag.ZIG: ("zig",),
    LanguageTag.C: ("c", "h"),
    LanguageTag.CPP: ("cc", "cpp", "cxx", "hh", "hpp", "hxx"),
    LanguageTag.JAVA: ("java",),
    LanguageTag.PROTO: ("proto",),
    LanguageTag.SQL: ("sql",),
    LanguageTag.XML: ("xml",),
    LanguageTag.PHP: ("php",),
    LanguageTag.HCL: ("hcl", "tf", "tfvars"),
}

# Convention-named files that carry no usable extension
FILENAMES: dict[str, LanguageTag] = {
    "Dockerfile": LanguageTag.DOCKERFILE,
    "Containerfile": LanguageTag.DOCKERFILE,
    "Rakefile": LanguageTag.RUBY,
    "Gemfile": LanguageTag.RUBY,
    "Guardfile": LanguageTag.RUBY,
    "Podfile": LanguageTag.RUBY,
    "Vagrantfile": LanguageTag.RUBY,
    "Brewfile": LanguageTag.RUBY,
    "Capfile": LanguageTag.RUBY,
    "Fastfile": LanguageTag.RUBY,
    ".bashrc": LanguageTag.SHELL,
    ".bash_profile": LanguageTag.SHELL,
    ".zshrc": LanguageTag.SHELL,
}

# Basename prefixes such as ``Dockerfile.dev``
FILENAME_PREFIXES: dict[str, LanguageTag] = {
    "Dockerfile.": LanguageTag.DOCKERFILE,
    "Containerfile.": LanguageTag.DOCKERFILE,
}


def _build_extension_index() -> dict[str, LanguageTag]:
    index: dict[str, LanguageTag] = {}
    for tag, extensions in EXTENSIONS.items():
        for ext in extensions:
            if ext in index:
                raise ValueError(f"Extension '{ext}' mapped to both {index[ext].name} and {tag.name}")
            index[ext] = tag
    return index


_BY_EXTENSION = _build_extension_index()


def classify(path: str | PurePath) -> LanguageTag:
    """Map a path to its language tag. Unrecognized paths are UNKNOWN."""
    name = PurePath(path).name
    suffix = PurePath(name).suffix
    if suffix:
        tag = _BY_EXTENSION.get(suffix[1:])
        if tag is not None:
            return tag

    tag = FILENAMES.get(name)
    if tag is not None:
        return tag

    for prefix, prefixed_tag in FILENAME_PREFIXES.items():
        if name.startswith(prefix) and len(name) > len(prefix):
            return prefixed_tag

    return LanguageTag.UNKNOWN


def is_supported(path: str | PurePath) -> bool:
    return classify(path) is not LanguageTag.UNKNOWN


def extension_of(path: str | PurePath) -> str:
    """Return the extension with its dot, or ``(none)``."""
    suffix = PurePath(path).suffix
    return suffix if suffix else "(none)"
