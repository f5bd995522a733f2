# utils.py
"""
Shared utility functions for the declaration pipeline.
Consolidates text normalization, identifier helpers and Markdown rendering of sections.
"""

import re
from typing import List

from models import Section, Table


# ==========================
# String & Formatting Utilities
# ==========================

_SPACES = re.compile(r"\s+")


def condense_spaces(text: str) -> str:
    """Collapse line endings and runs of whitespace into single spaces."""
    return _SPACES.sub(" ", text or "").strip()


def split_top_level(text: str, sep: str = ",") -> List[str]:
    """
    Split on `sep` outside of any (), [] or <> nesting.

    Empty parts are dropped, so "a, , b" yields ["a", "b"].
    """
    parts: List[str] = []
    buf: List[str] = []
    depth = 0
    for ch in text:
        if ch in "([<":
            depth += 1
        elif ch in ")]>":
            depth = max(0, depth - 1)
        if ch == sep and depth == 0:
            parts.append("".join(buf).strip())
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf).strip())
    return [p for p in parts if p]


def singularize(name: str) -> str:
    """Case-fold and drop one trailing 's' ("Windows" -> "window")."""
    name = name.lower()
    return name[:-1] if name.endswith("s") and len(name) > 1 else name


def class_case(segment: str) -> str:
    """Upper-case the first letter only ("sublime_plugin" -> "Sublime_plugin")."""
    return segment[:1].upper() + segment[1:]


def is_class_cased(segment: str) -> bool:
    return segment[:1].isupper()


# ==========================
# Table Rendering
# ==========================

def render_table_markdown(table: Table) -> str:
    """
    Render a normalized table as Markdown.

    Rows shorter than the header are padded, longer rows are truncated.
    """
    headers = list(table.columns)
    rows = table.rows

    if not headers and not rows:
        return ""

    lines = []
    if headers:
        lines.append("| " + " | ".join(h or "" for h in headers) + " |")
        lines.append("| " + " | ".join(["---"] * len(headers)) + " |")

    for row in rows:
        if headers:
            data = list(row[:len(headers)]) + [""] * max(0, len(headers) - len(row))
        else:
            data = list(row)
        lines.append("| " + " | ".join(str(cell or "").replace("|", "\\|") for cell in data) + " |")

    return "\n".join(lines)


# ==========================
# Section Rendering
# ==========================

def render_section_markdown(section: Section, *, level: int = 2) -> str:
    hlevel = max(1, min(level, 6))
    parts = [f"{'#' * hlevel} {section.dotted_name} {section.kind.value}", ""]

    for idx, table in enumerate(section.tables, 1):
        parts.append(f"**Table {idx}**")
        parts.append("")
        parts.append(render_table_markdown(table) or "_<empty table>_")
        parts.append("")

    return "\n".join(parts).rstrip()


def render_sections_markdown(sections: List[Section]) -> str:
    if not sections:
        return "_No sections found._\n"
    return "\n\n".join(render_section_markdown(s) for s in sections).strip() + "\n"
