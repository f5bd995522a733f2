# emitter.py
"""
Writes TypeDeclarations as JSON declaration files under the externs root,
one file per declaration at <root>/<package...>/<Name>.json.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator

from config import DEFAULTS, OutputConfig
from models import TypeDeclaration

logger = logging.getLogger(__name__)

DECLARATION_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["package", "name", "fields"],
    "additionalProperties": False,
    "properties": {
        "package": {"type": "array", "items": {"type": "string", "minLength": 1}},
        "name": {"type": "string", "minLength": 1},
        "fields": {"type": "array", "items": {"$ref": "#/$defs/Field"}},
    },
    "$defs": {
        "Type": {
            "type": "object",
            "required": ["kind"],
            "properties": {
                "kind": {"enum": [
                    "primitive", "any", "regex", "nullable", "array",
                    "tuple", "named", "map", "function",
                ]},
                "name": {"type": "string"},
                "inner": {"$ref": "#/$defs/Type"},
                "arity": {"type": "integer", "minimum": 0},
                "items": {"type": "array", "items": {"$ref": "#/$defs/Type"}},
                "path": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "key": {"$ref": "#/$defs/Type"},
                "value": {"$ref": "#/$defs/Type"},
                "args": {"type": "array", "items": {"$ref": "#/$defs/Type"}},
                "ret": {"$ref": "#/$defs/Type"},
            },
        },
        "Argument": {
            "type": "object",
            "required": ["name", "optional", "array_depth", "type"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "optional": {"type": "boolean"},
                "array_depth": {"type": "integer", "minimum": 0},
                "type": {"$ref": "#/$defs/Type"},
            },
        },
        "Kind": {
            "type": "object",
            "required": ["kind"],
            "properties": {
                "kind": {"enum": ["method", "constructor", "property", "enum_constant"]},
                "args": {"type": "array", "items": {"$ref": "#/$defs/Argument"}},
                "ret": {"$ref": "#/$defs/Type"},
                "type": {"$ref": "#/$defs/Type"},
            },
        },
        "Field": {
            "type": "object",
            "required": ["name", "doc", "static", "kind", "overloads"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "doc": {"type": "string"},
                "static": {"type": "boolean"},
                "kind": {"$ref": "#/$defs/Kind"},
                "overloads": {"type": "array", "items": {"$ref": "#/$defs/Kind"}},
            },
        },
    },
}


def declaration_path(decl: TypeDeclaration, externs_root: Path) -> Path:
    return externs_root.joinpath(*decl.package_path) / f"{decl.name}.json"


def validate_declaration(data: Dict[str, Any]) -> Dict[str, Any]:
    Draft202012Validator(DECLARATION_SCHEMA).validate(data)
    return data


def check_unique_fields(decl: TypeDeclaration):
    names = decl.field_names()
    if len(names) != len(set(names)):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise ValueError(f"{'.'.join(decl.full_path)}: duplicate fields {dupes}")


def write_declarations(declarations: List[TypeDeclaration], cfg: Optional[OutputConfig] = None) -> List[Path]:
    """Serialize, validate and write every declaration. Returns the written paths."""
    cfg = cfg or DEFAULTS.output
    root = Path(cfg.externs_root)
    written: List[Path] = []
    for decl in declarations:
        check_unique_fields(decl)
        data = decl.to_dict()
        if cfg.validate:
            validate_declaration(data)
        out_path = declaration_path(decl, root)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(data, indent=cfg.indent, ensure_ascii=False) + "\n", encoding="utf-8")
        logger.debug("wrote %s", out_path)
        written.append(out_path)
    logger.info("wrote %d declaration(s) under %s", len(written), root)
    return written
