# config.py
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

# Identifiers that cannot be used verbatim as argument names in generated declarations
RESERVED_IDENTIFIERS: FrozenSet[str] = frozenset({
    "abstract", "break", "case", "cast", "catch", "class", "continue", "default",
    "do", "dynamic", "else", "enum", "extends", "extern", "false", "final", "for",
    "function", "if", "implements", "import", "in", "inline", "interface", "macro",
    "new", "null", "operator", "overload", "override", "package", "private",
    "public", "return", "static", "super", "switch", "this", "throw", "true",
    "try", "typedef", "untyped", "using", "var", "while",
})


@dataclass
class ParseConfig:
    # Section titles, e.g. "sublime.View Class" / "sublime Module"
    title_tag: str = "h2"
    title_regex: str = r"^\s*([A-Za-z_][\w]*(?:\.[A-Za-z_][\w]*)*)\s+(Class|Module)\s*$"
    # Siblings with these tags end the table scan of the current section
    boundary_tags: Tuple[str, ...] = ("h1",)
    # Signature cell meaning "this class has no methods"
    no_methods_sentinel: str = "no methods"
    reserved_identifiers: FrozenSet[str] = RESERVED_IDENTIFIERS
    escape_prefix: str = "_"


@dataclass
class FetchConfig:
    url: str = "https://www.sublimetext.com/docs/3/api_reference.html"
    cache_path: str = "cache/api_reference.html"
    timeout: float = 30.0
    user_agent: Optional[str] = "apidoc-externs/0.1"


@dataclass
class OutputConfig:
    externs_root: str = "externs"
    indent: int = 2
    validate: bool = True


@dataclass
class AppConfig:
    parse: ParseConfig = field(default_factory=ParseConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

# Global defaults used across modules
DEFAULTS = AppConfig()
