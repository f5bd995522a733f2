# models.py
"""
Data structures for the documentation-to-declaration pipeline.
Contains the section/table records, the type model and the two phase-scoped registries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union


class DocParseError(RuntimeError):
    """The document no longer matches the grammar closely enough to guess safely."""


# ==========================
# Document records
# ==========================

class SectionKind(str, Enum):
    CLASS = "Class"
    MODULE = "Module"


@dataclass(frozen=True)
class Table:
    """A normalized table: lowercase header strings plus verbatim cell text."""
    columns: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...] = ()

    def column_index(self, name: str) -> Optional[int]:
        try:
            return self.columns.index(name.lower())
        except ValueError:
            return None

    def column_values(self, name: str) -> List[str]:
        idx = self.column_index(name)
        if idx is None:
            return []
        return [row[idx] for row in self.rows if idx < len(row)]


@dataclass(frozen=True)
class Section:
    """One documented class or module and the tables that follow its title."""
    kind: SectionKind
    path: Tuple[str, ...]
    tables: Tuple[Table, ...] = ()

    def __post_init__(self):
        if not self.path:
            raise ValueError("section path must not be empty")

    @property
    def dotted_name(self) -> str:
        return ".".join(self.path)


# ==========================
# Type model
# ==========================

@dataclass(frozen=True)
class Primitive:
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "primitive", "name": self.name}


@dataclass(frozen=True)
class AnyType:
    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "any"}


@dataclass(frozen=True)
class RegexType:
    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "regex"}


@dataclass(frozen=True)
class Nullable:
    inner: "TypeDescriptor"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "nullable", "inner": self.inner.to_dict()}


@dataclass(frozen=True)
class Array:
    inner: "TypeDescriptor"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "array", "inner": self.inner.to_dict()}


@dataclass(frozen=True)
class TupleType:
    items: Tuple["TypeDescriptor", ...]

    @property
    def arity(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "tuple", "arity": self.arity, "items": [t.to_dict() for t in self.items]}


@dataclass(frozen=True)
class Named:
    """Reference to a class documented elsewhere in the same document."""
    path: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "named", "path": list(self.path)}


@dataclass(frozen=True)
class MapType:
    key: "TypeDescriptor"
    value: "TypeDescriptor"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "map", "key": self.key.to_dict(), "value": self.value.to_dict()}


@dataclass(frozen=True)
class FunctionType:
    args: Tuple["TypeDescriptor", ...]
    ret: "TypeDescriptor"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "function", "args": [a.to_dict() for a in self.args], "ret": self.ret.to_dict()}


TypeDescriptor = Union[Primitive, AnyType, RegexType, Nullable, Array, TupleType, Named, MapType, FunctionType]

STRING = Primitive("string")
INT = Primitive("int")
FLOAT = Primitive("float")
BOOL = Primitive("bool")
BYTES = Primitive("bytes")
VOID = Primitive("void")
ANY = AnyType()
REGEX = RegexType()
STRING_MAP = MapType(STRING, ANY)
CALLBACK = FunctionType((ANY,), VOID)


def wrap_array(inner: TypeDescriptor, depth: int) -> TypeDescriptor:
    for _ in range(depth):
        inner = Array(inner)
    return inner


# ==========================
# Declarations
# ==========================

@dataclass
class ArgumentSpec:
    name: str
    optional: bool = False
    array_depth: int = 0
    type: TypeDescriptor = ANY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "optional": self.optional,
            "array_depth": self.array_depth,
            "type": self.type.to_dict(),
        }


@dataclass
class MethodKind:
    args: List[ArgumentSpec]
    ret: TypeDescriptor

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "method", "args": [a.to_dict() for a in self.args], "ret": self.ret.to_dict()}


@dataclass
class ConstructorKind:
    args: List[ArgumentSpec]

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "constructor", "args": [a.to_dict() for a in self.args]}


@dataclass
class PropertyKind:
    type: TypeDescriptor

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "property", "type": self.type.to_dict()}


@dataclass
class EnumConstantKind:
    type: TypeDescriptor = INT

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "enum_constant", "type": self.type.to_dict()}


FieldKind = Union[MethodKind, ConstructorKind, PropertyKind, EnumConstantKind]


@dataclass
class FieldDefinition:
    name: str
    kind: FieldKind
    doc: str = ""
    is_static: bool = False
    overloads: List[FieldKind] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "doc": self.doc,
            "static": self.is_static,
            "kind": self.kind.to_dict(),
            "overloads": [o.to_dict() for o in self.overloads],
        }


@dataclass
class TypeDeclaration:
    """The generated output unit: one class or module with its full field set."""
    package_path: List[str]
    name: str
    fields: List[FieldDefinition] = field(default_factory=list)

    @property
    def full_path(self) -> Tuple[str, ...]:
        return tuple(self.package_path) + (self.name,)

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package": list(self.package_path),
            "name": self.name,
            "fields": [f.to_dict() for f in self.fields],
        }


# ==========================
# Registries
# ==========================

class _PhasedRegistry:
    """Append-only during its write phase, read-only once frozen."""

    def __init__(self):
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self):
        self._frozen = True

    def _check_writable(self):
        if self._frozen:
            raise RuntimeError(f"{type(self).__name__} is frozen; registration phase is over")

    def _check_readable(self):
        if not self._frozen:
            raise RuntimeError(f"{type(self).__name__} read before its registration phase finished")


class ClassPathRegistry(_PhasedRegistry):
    """Dotted paths of every documented class, registered before any type inference runs."""

    def __init__(self):
        super().__init__()
        self._paths: List[Tuple[str, ...]] = []

    @classmethod
    def from_paths(cls, paths) -> "ClassPathRegistry":
        reg = cls()
        for p in paths:
            reg.register(p)
        reg.freeze()
        return reg

    def register(self, path):
        self._check_writable()
        self._paths.append(tuple(path))

    @property
    def paths(self) -> List[Tuple[str, ...]]:
        self._check_readable()
        return list(self._paths)

    def __len__(self) -> int:
        return len(self._paths)


class EnumRegistry(_PhasedRegistry):
    """Dotted constant paths (e.g. ``sublime.DIALOG_CANCEL``), deduplicated in first-seen order."""

    def __init__(self):
        super().__init__()
        self._paths: Dict[str, None] = {}

    def register(self, path: str) -> bool:
        self._check_writable()
        if path in self._paths:
            return False
        self._paths[path] = None
        return True

    @property
    def paths(self) -> List[str]:
        self._check_readable()
        return list(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self._paths)
