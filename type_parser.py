# type_parser.py
"""
Signature and type-expression parsing.

Free-text cells such as ``find_all(pattern, <flags>, [regions])`` or
``[(str, str)]`` / ``Region or None`` are turned into the canonical type model.
Bare identifiers are resolved by name through `NameTypeResolver`, whose
ordered rule table trades precision for coverage.
"""

import logging
import re
from typing import Callable, List, NamedTuple, Optional, Tuple

from config import DEFAULTS, ParseConfig
from models import (
    ANY, BOOL, BYTES, CALLBACK, FLOAT, INT, REGEX, STRING, STRING_MAP, VOID,
    ArgumentSpec, Array, ClassPathRegistry, DocParseError, Named, Nullable,
    TupleType, TypeDescriptor, wrap_array,
)
from utils import condense_spaces, singularize, split_top_level

logger = logging.getLogger(__name__)


# ==========================
# Name-based resolution
# ==========================

# Keyed by the singularized, case-folded identifier
KNOWN_NAMES = {
    "dict": STRING_MAP,
    "arg": STRING_MAP,
    "int": INT,
    "integer": INT,
    "float": FLOAT,
    "number": FLOAT,
    "str": STRING,
    "string": STRING,
    "bool": BOOL,
    "boolean": BOOL,
    "byte": BYTES,
    "none": VOID,
    "void": VOID,
    "value": ANY,
    "object": ANY,
    "any": ANY,
    "list": Array(ANY),
    "callback": CALLBACK,
    "function": CALLBACK,
}

STRING_SUFFIXES = ("string", "str", "text", "title", "name", "prefix", "suffix", "key")
INT_SUFFIXES = ("idx", "index", "limit", "timestamp", "point", "delay", "row", "col", "width", "height", "depth")
BOOL_SUFFIXES = ("flag", "bool", "enabled")


def _is_plural_flag(name: str) -> bool:
    lowered = name.lower()
    return lowered.endswith("s") and "flag" in lowered


def _is_callback(name: str) -> bool:
    lowered = name.lower()
    if lowered.endswith("callback") or lowered.startswith("on_"):
        return True
    return name.startswith("on") and name[2:3].isupper()


class ResolverRule(NamedTuple):
    label: str
    match: Callable[[str, str], Optional[TypeDescriptor]]


def _suffix_rule(label: str, predicate: Callable[[str], bool], result: TypeDescriptor) -> ResolverRule:
    return ResolverRule(label, lambda name, singular: result if predicate(name) else None)


class NameTypeResolver:
    """
    Guess a type from an identifier alone.

    Rules are evaluated in order and the first hit wins:
        known name -> documented class -> string / integer / boolean /
        callback / arg / pattern suffixes -> Any (with a warning)

    Known names and documented classes are matched on the singularized name;
    suffix rules look at the name as written.
    """

    def __init__(self, class_paths: ClassPathRegistry):
        self.class_paths = class_paths
        self.rules: List[ResolverRule] = [
            ResolverRule("known-name", lambda name, singular: KNOWN_NAMES.get(singular)),
            ResolverRule("class", self._match_class),
            _suffix_rule("string-suffix", lambda n: n.lower().endswith(STRING_SUFFIXES), STRING),
            _suffix_rule("integer-suffix",
                         lambda n: n.lower().endswith(INT_SUFFIXES) or _is_plural_flag(n), INT),
            _suffix_rule("boolean-suffix", lambda n: n.lower().endswith(BOOL_SUFFIXES), BOOL),
            _suffix_rule("callback", _is_callback, CALLBACK),
            _suffix_rule("arg-suffix", lambda n: n.lower().endswith("arg"), STRING_MAP),
            _suffix_rule("pattern-suffix", lambda n: n.lower().endswith("pattern"), REGEX),
        ]

    def resolve(self, name: str) -> TypeDescriptor:
        name = name.strip()
        if "." in name:
            dotted = tuple(name.split("."))
            if dotted in self.class_paths.paths:
                return Named(dotted)
            name = dotted[-1]

        singular = singularize(name)
        for rule in self.rules:
            result = rule.match(name, singular)
            if result is not None:
                logger.debug("resolved %r via %s", name, rule.label)
                return result

        logger.warning("could not guess a type for %r; using Any", name)
        return ANY

    def _match_class(self, name: str, singular: str) -> Optional[TypeDescriptor]:
        for path in self.class_paths.paths:
            if singularize(path[-1]) == singular:
                return Named(path)
        return None


# ==========================
# Type expressions and signatures
# ==========================

_TUPLE = re.compile(r"^\((.*)\)$", re.DOTALL)
_ALTERNATION = re.compile(r"^(.+?)\s+or\s+(.+)$", re.IGNORECASE | re.DOTALL)
_IDENTIFIER = re.compile(r"^[A-Za-z_][\w.]*$")
_CALL = re.compile(r"([A-Za-z_][\w.]*)\s*\((.*)\)", re.DOTALL)
_OPTIONAL_MARK = re.compile(r"<.*>", re.DOTALL)


def strip_brackets(text: str) -> Tuple[str, int]:
    """
    Remove ``[`` / ``]`` wrapping and return (inner text, depth).

    Raises DocParseError when the leading and trailing counts differ.
    """
    text = text.strip()
    leading = len(text) - len(text.lstrip("["))
    trailing = len(text) - len(text.rstrip("]"))
    if leading != trailing:
        raise DocParseError(f"mismatched brackets in {text!r} ({leading} '[' vs {trailing} ']')")
    if leading == 0:
        return text, 0
    return text[leading:len(text) - trailing].strip(), leading


def _wraps_whole(text: str) -> bool:
    """True when the opening parenthesis at text[0] closes at the last character."""
    depth = 0
    for idx, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return idx == len(text) - 1
    return False


class ParsedSignature(NamedTuple):
    name: str
    args: List[ArgumentSpec]


class DocTypeParser:
    """Parses signature and type cells using a frozen class-path registry."""

    def __init__(self, resolver: NameTypeResolver, cfg: Optional[ParseConfig] = None):
        self.cfg = cfg or DEFAULTS.parse
        self.resolver = resolver
        self._sentinel = re.sub(r"\s+", "", self.cfg.no_methods_sentinel).lower()

    # ---------- Types ----------

    def parse_type(self, text: str) -> TypeDescriptor:
        text = condense_spaces(text)
        inner, depth = strip_brackets(text)
        return wrap_array(self._parse_unwrapped(inner), depth)

    def _parse_unwrapped(self, text: str) -> TypeDescriptor:
        m = _TUPLE.match(text)
        if m and _wraps_whole(text):
            return TupleType(tuple(self.parse_type(part) for part in split_top_level(m.group(1))))

        m = _ALTERNATION.match(text)
        if m:
            alternatives = split_top_level(m.group(1)) + [m.group(2).strip()]
            lowered = [a.lower() for a in alternatives]
            if len(alternatives) == 2 and "none" in lowered:
                other = alternatives[1] if lowered[0] == "none" else alternatives[0]
                return Nullable(self.parse_type(other))
            logger.warning("unresolved alternation %r; using Any", text)
            return ANY

        if _IDENTIFIER.match(text):
            return self.resolver.resolve(text)

        logger.warning("unparsable type %r; using Any", text)
        return ANY

    # ---------- Signatures ----------

    def parse_signature(self, text: str) -> Optional[ParsedSignature]:
        """
        Parse ``name(arg, [arg], <arg>)``.

        Returns None for the "no methods" sentinel and raises DocParseError for
        anything else that is not call-shaped.
        """
        m = _CALL.search(text)
        if not m:
            if re.sub(r"\s+", "", text).lower() == self._sentinel:
                return None
            raise DocParseError(f"unparsable signature {text!r}")

        name = m.group(1).split(".")[-1]
        tokens = [t.strip() for t in m.group(2).split(",")]
        if tokens == [""]:
            tokens = []
        args = [self.parse_argument(tok, idx) for idx, tok in enumerate(tokens, 1)]
        return ParsedSignature(name, args)

    def parse_argument(self, token: str, position: int = 1) -> ArgumentSpec:
        optional = bool(_OPTIONAL_MARK.search(token))
        bare = token.replace("<", "").replace(">", "")
        bare = bare.split("=", 1)[0].strip()
        try:
            ident, depth = strip_brackets(bare)
        except DocParseError as e:
            raise DocParseError(f"argument {position} {token!r}: {e}") from e

        name = re.sub(r"\W+", "_", ident).strip("_")
        if not name or name[0].isdigit():
            name = f"arg{position}"

        # Dotted tokens such as sublime.Region resolve as written
        type_key = ident if _IDENTIFIER.match(ident) else name
        arg_type = wrap_array(self.resolver.resolve(type_key), depth)
        return ArgumentSpec(
            name=self.escape_identifier(name),
            optional=optional,
            array_depth=depth,
            type=arg_type,
        )

    def escape_identifier(self, name: str) -> str:
        if name in self.cfg.reserved_identifiers:
            return self.cfg.escape_prefix + name
        return name
