# doc_ingestor.py
"""
API Reference Ingestor

Splits an HTML API-reference page into Class/Module sections and normalizes
the tables that follow each section title.
"""

import logging
import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from config import DEFAULTS, ParseConfig
from models import Section, SectionKind, Table
from utils import condense_spaces, render_sections_markdown

logger = logging.getLogger(__name__)


class ApiDocIngestor:
    """Parses an API reference page into ordered sections."""

    def __init__(self, cfg: Optional[ParseConfig] = None):
        self.cfg = cfg or DEFAULTS.parse
        self.title_pattern = re.compile(self.cfg.title_regex)
        self.boundary_tags = {t.lower() for t in self.cfg.boundary_tags}

    # ---------- Public API ----------

    def parse(self, html: str) -> List[Section]:
        """Parse the document and return its sections in document order."""
        soup = BeautifulSoup(html, "html.parser")
        return self.segment(soup)

    def segment(self, soup: BeautifulSoup) -> List[Section]:
        sections: List[Section] = []
        for title in soup.find_all(self.cfg.title_tag):
            header = self._parse_title(title)
            if header is None:
                continue
            kind, path = header
            tables = []
            for element in self._iter_section_tables(title):
                table = self.normalize_table(element)
                if table is not None:
                    tables.append(table)
            sections.append(Section(kind=kind, path=path, tables=tuple(tables)))
            logger.debug("section %s (%s): %d table(s)", ".".join(path), kind.value, len(tables))
        return sections

    def normalize_table(self, element: Tag) -> Optional[Table]:
        """Convert a <table> element into a Table, or None when it has no header row."""
        rows = element.find_all("tr")
        if not rows:
            logger.warning("table without header row skipped")
            return None

        header_row = rows[0]
        columns = tuple(
            condense_spaces(cell.get_text()).lower()
            for cell in header_row.find_all(["th", "td"])
        )
        if not columns:
            logger.warning("table without header row skipped")
            return None

        body = tuple(
            tuple(condense_spaces(cell.get_text()) for cell in row.find_all(["th", "td"]))
            for row in rows[1:]
        )
        return Table(columns=columns, rows=body)

    # ---------- Internal methods ----------

    def _parse_title(self, title: Tag) -> Optional[Tuple[SectionKind, Tuple[str, ...]]]:
        text = condense_spaces(title.get_text())
        m = self.title_pattern.match(text)
        if not m:
            logger.warning("unparsable section title skipped: %r", text)
            return None
        path = tuple(m.group(1).split("."))
        return SectionKind(m.group(2)), path

    def _iter_section_tables(self, title: Tag):
        """Yield the table siblings between `title` and the next title or boundary element."""
        for sibling in title.find_next_siblings():
            name = (sibling.name or "").lower()
            if name == self.cfg.title_tag.lower() or name in self.boundary_tags:
                break
            if name == "table":
                yield sibling


if __name__ == "__main__":
    import argparse, sys
    ap = argparse.ArgumentParser(description="Segment an API reference page and print its sections as Markdown")
    ap.add_argument("html", help="Path to the HTML document")
    ap.add_argument("--title-tag", default=DEFAULTS.parse.title_tag)
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    ing = ApiDocIngestor(ParseConfig(title_tag=args.title_tag))
    with open(args.html, "r", encoding="utf-8") as f:
        secs = ing.parse(f.read())
    sys.stdout.write(render_sections_markdown(secs))
