# type_assembler.py
"""
Type Assembler

Turns segmented sections into TypeDeclarations in explicit phases:

    1. register every class path            (ClassPathRegistry, then frozen)
    2. register enum constants from tables  (EnumRegistry, then frozen)
    3. build one declaration per section    (reads the frozen class paths)
    4. attach enum constants to their owners
    5. fold same-named fields into overloads

Nothing in phase 3 may run before phase 1 has finished: the name resolver
turns "windows" into a reference to sublime.Window only if Window is known.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from config import DEFAULTS, ParseConfig
from models import (
    ClassPathRegistry, ConstructorKind, DocParseError, EnumConstantKind, EnumRegistry,
    FieldDefinition, MethodKind, PropertyKind, Section, SectionKind, Table, TypeDeclaration,
)
from type_parser import DocTypeParser, NameTypeResolver
from utils import class_case, condense_spaces, is_class_cased

logger = logging.getLogger(__name__)

METHOD_COLUMNS = {
    ("methods", "return value", "description"): False,
    ("class methods", "return value", "description"): True,
}
CONSTRUCTOR_COLUMNS = ("constructors", "description")
PROPERTY_COLUMNS = ("properties", "type", "description")

# Dotted path ending in an ALL_CAPS token, e.g. sublime.DIALOG_CANCEL
ENUM_REFERENCE = re.compile(r"\b((?:[A-Za-z_]\w*\.)+[A-Z_][A-Z0-9_]*)\b(?!\.\w)")


def _cell(row: Tuple[str, ...], idx: int) -> str:
    return row[idx] if idx < len(row) else ""


def declaration_identity(section: Section) -> Tuple[List[str], str]:
    """(package path, name) of the declaration generated for `section`."""
    if section.kind is SectionKind.CLASS:
        return list(section.path[:-1]), section.path[-1]
    return list(section.path), class_case(section.path[-1])


def enum_owner(enum_path: str) -> Tuple[Tuple[str, ...], str]:
    """
    Split ``a.b.CONST`` into the expected owning declaration path and the constant name.

    A class-cased parent (``sublime.View.X``) is taken as the owner itself;
    otherwise the parent is a module whose declaration is its capitalised name.
    """
    segments = enum_path.split(".")
    owner, const = segments[:-1], segments[-1]
    if is_class_cased(owner[-1]):
        return tuple(owner), const
    return tuple(owner) + (class_case(owner[-1]),), const


# ---------- Phase 1 & 2: registration ----------

def register_class_paths(sections: List[Section]) -> ClassPathRegistry:
    registry = ClassPathRegistry()
    for sec in sections:
        if sec.kind is SectionKind.CLASS:
            registry.register(sec.path)
    registry.freeze()
    logger.info("registered %d class path(s)", len(registry))
    return registry


def collect_enum_paths(sections: List[Section]) -> EnumRegistry:
    registry = EnumRegistry()
    for sec in sections:
        for table in sec.tables:
            for text in table.column_values("description"):
                for m in ENUM_REFERENCE.finditer(text):
                    registry.register(m.group(1))
    registry.freeze()
    logger.info("registered %d enum constant(s)", len(registry))
    return registry


# ---------- Phase 3: declarations ----------

class TypeAssembler:
    """Builds one TypeDeclaration per section, dispatching on each table's columns."""

    def __init__(self, parser: DocTypeParser):
        self.parser = parser

    def assemble(self, section: Section) -> Optional[TypeDeclaration]:
        package_path, name = declaration_identity(section)
        decl = TypeDeclaration(package_path=package_path, name=name)
        for table in section.tables:
            decl.fields.extend(self.fields_from_table(section, table))

        if not decl.fields and section.kind is SectionKind.MODULE:
            logger.info("module %s has no fields; dropped", section.dotted_name)
            return None
        return decl

    def fields_from_table(self, section: Section, table: Table) -> List[FieldDefinition]:
        columns = tuple(c.lower() for c in table.columns)
        if columns in METHOD_COLUMNS:
            is_static = METHOD_COLUMNS[columns] or section.kind is SectionKind.MODULE
            return self._method_fields(table, is_static)
        if columns == CONSTRUCTOR_COLUMNS:
            return [self._constructor_field(section, table)]
        if columns == PROPERTY_COLUMNS:
            return self._property_fields(table)

        logger.warning("%s: unrecognized table columns %s; skipped", section.dotted_name, list(columns))
        return []

    def _method_fields(self, table: Table, is_static: bool) -> List[FieldDefinition]:
        out: List[FieldDefinition] = []
        for row in table.rows:
            sig = self.parser.parse_signature(_cell(row, 0))
            if sig is None:
                continue
            ret = self.parser.parse_type(_cell(row, 1))
            out.append(FieldDefinition(
                name=sig.name,
                kind=MethodKind(args=sig.args, ret=ret),
                doc=_cell(row, 2),
                is_static=is_static,
            ))
        return out

    def _constructor_field(self, section: Section, table: Table) -> FieldDefinition:
        if not table.rows:
            raise DocParseError(f"{section.dotted_name}: constructors table has no rows")
        if len(table.rows) > 1:
            logger.warning("%s: %d extra constructor row(s) ignored",
                           section.dotted_name, len(table.rows) - 1)
        row = table.rows[0]
        sig = self.parser.parse_signature(_cell(row, 0))
        if sig is None:
            raise DocParseError(f"{section.dotted_name}: constructor row has no signature")
        return FieldDefinition(
            name=sig.name,
            kind=ConstructorKind(args=sig.args),
            doc=_cell(row, 1),
        )

    def _property_fields(self, table: Table) -> List[FieldDefinition]:
        out: List[FieldDefinition] = []
        for row in table.rows:
            name = _cell(row, 0).strip()
            if not name:
                continue
            type_cell = condense_spaces(_cell(row, 1))
            if type_cell:
                prop_type = self.parser.parse_type(type_cell)
            else:
                prop_type = self.parser.resolver.resolve(name)
            out.append(FieldDefinition(
                name=self.parser.escape_identifier(name),
                kind=PropertyKind(prop_type),
                doc=_cell(row, 2),
            ))
        return out


# ---------- Phase 4 & 5: enum injection, overloads ----------

def inject_enums(declarations: List[TypeDeclaration], enums: EnumRegistry) -> int:
    """Add each registered constant as a static int field on its owner. Returns the count added."""
    by_path: Dict[Tuple[str, ...], TypeDeclaration] = {}
    for decl in declarations:
        by_path.setdefault(decl.full_path, decl)

    added = 0
    for path in enums.paths:
        owner_path, const = enum_owner(path)
        decl = by_path.get(owner_path)
        if decl is None:
            logger.warning("no declaration %s for enum %s; dropped", ".".join(owner_path), path)
            continue
        decl.fields.append(FieldDefinition(name=const, kind=EnumConstantKind(), is_static=True))
        added += 1
    return added


def deduplicate_overloads(decl: TypeDeclaration) -> int:
    """
    Keep the first field of each name. Later same-named methods become its overloads;
    any other same-name collision is dropped with a warning.

    Returns the number of fields folded away.
    """
    canonical: Dict[str, FieldDefinition] = {}
    kept: List[FieldDefinition] = []
    folded = 0
    for fdef in decl.fields:
        first = canonical.get(fdef.name)
        if first is None:
            canonical[fdef.name] = fdef
            kept.append(fdef)
            continue
        if isinstance(first.kind, MethodKind) and isinstance(fdef.kind, MethodKind):
            first.overloads.append(fdef.kind)
            first.overloads.extend(fdef.overloads)
        else:
            logger.warning("%s: %s %r collides with an earlier %s; dropped",
                           ".".join(decl.full_path), type(fdef.kind).__name__, fdef.name,
                           type(first.kind).__name__)
        folded += 1
    decl.fields = kept
    return folded


# ---------- Pipeline ----------

@dataclass
class AssemblyResult:
    declarations: List[TypeDeclaration]
    class_paths: ClassPathRegistry
    enums: EnumRegistry
    injected_enums: int = 0
    folded_overloads: int = 0
    dropped: List[str] = field(default_factory=list)


def build_declarations(sections: List[Section], cfg: Optional[ParseConfig] = None) -> AssemblyResult:
    cfg = cfg or DEFAULTS.parse

    class_paths = register_class_paths(sections)
    enums = collect_enum_paths(sections)

    parser = DocTypeParser(NameTypeResolver(class_paths), cfg)
    assembler = TypeAssembler(parser)
    declarations: List[TypeDeclaration] = []
    dropped: List[str] = []
    for sec in sections:
        decl = assembler.assemble(sec)
        if decl is None:
            dropped.append(sec.dotted_name)
        else:
            declarations.append(decl)

    injected = inject_enums(declarations, enums)
    folded = sum(deduplicate_overloads(d) for d in declarations)

    return AssemblyResult(
        declarations=declarations,
        class_paths=class_paths,
        enums=enums,
        injected_enums=injected,
        folded_overloads=folded,
        dropped=dropped,
    )
