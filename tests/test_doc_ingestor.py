"""Tests for section segmentation and table normalization."""

import logging

from bs4 import BeautifulSoup

from config import ParseConfig
from doc_ingestor import ApiDocIngestor
from models import SectionKind
from utils import render_sections_markdown


def test_sections_in_document_order(sample_html):
    sections = ApiDocIngestor().parse(sample_html)
    assert [s.dotted_name for s in sections] == [
        "sublime", "sublime.Window", "sublime.Region", "sublime.View", "sublime_plugin",
    ]
    assert [s.kind for s in sections] == [
        SectionKind.MODULE, SectionKind.CLASS, SectionKind.CLASS, SectionKind.CLASS, SectionKind.MODULE,
    ]
    assert sections[1].path == ("sublime", "Window")


def test_unmatched_title_is_skipped_with_warning(sample_html, caplog):
    with caplog.at_level(logging.WARNING):
        sections = ApiDocIngestor().parse(sample_html)
    assert "Example Plugins" in caplog.text
    assert all("Example" not in s.dotted_name for s in sections)


def test_tables_stop_at_next_title_and_boundary(sample_html):
    sections = {s.dotted_name: s for s in ApiDocIngestor().parse(sample_html)}
    assert len(sections["sublime"].tables) == 1
    assert len(sections["sublime.Region"].tables) == 3
    # The table under the unmatched title belongs to no section
    assert len(sections["sublime.View"].tables) == 1
    # The <h1> ends the last section's scan
    assert len(sections["sublime_plugin"].tables) == 1


def test_headerless_table_is_dropped(caplog):
    soup = BeautifulSoup("<table></table>", "html.parser")
    with caplog.at_level(logging.WARNING):
        assert ApiDocIngestor().normalize_table(soup.table) is None
    assert "without header row" in caplog.text


def test_table_columns_lowercased_and_cells_verbatim():
    soup = BeautifulSoup(
        "<table><tr><th> Methods </th><th>Return  Value</th><th>Description</th></tr>"
        "<tr><td><code>find</code>(pattern,\n start_pt)</td><td>Region</td><td>Finds It.</td></tr></table>",
        "html.parser",
    )
    table = ApiDocIngestor().normalize_table(soup.table)
    assert table.columns == ("methods", "return value", "description")
    assert table.rows == (("find(pattern, start_pt)", "Region", "Finds It."),)
    assert table.column_values("Description") == ["Finds It."]


def test_non_table_siblings_do_not_end_a_section():
    html = """
    <h2>pkg.Thing Class</h2>
    <p>Some prose.</p>
    <div class="note">A note.</div>
    <table><tr><th>Properties</th><th>Type</th><th>Description</th></tr>
           <tr><td>size</td><td>int</td><td>Size.</td></tr></table>
    """
    sections = ApiDocIngestor().parse(html)
    assert len(sections) == 1
    assert sections[0].tables[0].rows == (("size", "int", "Size."),)


def test_configurable_title_tag():
    html = "<h3>pkg Module</h3><table><tr><th>Methods</th></tr></table><h2>other Module</h2>"
    sections = ApiDocIngestor(ParseConfig(title_tag="h3")).parse(html)
    assert [s.dotted_name for s in sections] == ["pkg"]


def test_section_markdown_dump(sample_html):
    md = render_sections_markdown(ApiDocIngestor().parse(sample_html))
    assert "## sublime.Window Class" in md
    assert "| methods | return value | description |" in md
    assert "run_command(string, <args>)" in md
