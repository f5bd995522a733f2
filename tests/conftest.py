"""Shared fixtures: a small API reference page in the documented table convention."""

import sys
from pathlib import Path

import pytest

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import ClassPathRegistry
from type_parser import DocTypeParser, NameTypeResolver


SAMPLE_HTML = """
<html><body>
<h1>API Reference</h1>
<p>Intro text.</p>

<h2>sublime Module</h2>
<p>Module level functions.</p>
<table>
  <tr><th>Methods</th><th>Return Value</th><th>Description</th></tr>
  <tr><td><code>set_timeout</code>(callback, delay)</td><td>None</td><td>Runs the callback.</td></tr>
  <tr><td>active_window()</td><td>Window</td><td>Returns the most recently used window.</td></tr>
  <tr><td>ok_cancel_dialog(string, &lt;ok_title&gt;)</td><td>bool</td>
      <td>Returns sublime.DIALOG_YES or sublime.DIALOG_CANCEL.</td></tr>
  <tr><td>yes_no_cancel_dialog(string)</td><td>int</td>
      <td>Returns sublime.DIALOG_YES, sublime.DIALOG_NO or sublime.DIALOG_CANCEL.</td></tr>
</table>

<h2>sublime.Window Class</h2>
<table>
  <tr><th>Methods</th><th>Return Value</th><th>Description</th></tr>
  <tr><td>id()</td><td>int</td><td>Returns a number that uniquely identifies this window.</td></tr>
  <tr><td>views()</td><td>[View]</td><td>Returns all open views in the window.</td></tr>
  <tr><td>run_command(string, &lt;args&gt;)</td><td>None</td><td>Runs the named command.</td></tr>
  <tr><td>run_command(string)</td><td>None</td><td>Runs the named command without arguments.</td></tr>
  <tr><td>find_output_panel(name)</td><td>View or None</td><td>Returns the view of the panel.</td></tr>
</table>

<h2>sublime.Region Class</h2>
<table>
  <tr><th>Constructors</th><th>Description</th></tr>
  <tr><td>Region(a, b)</td><td>Creates a Region.</td></tr>
</table>
<table>
  <tr><th>Properties</th><th>Type</th><th>Description</th></tr>
  <tr><td>a</td><td>int</td><td>The first end of the region.</td></tr>
  <tr><td>xpos</td><td>(int, int)</td><td>Target horizontal position.</td></tr>
</table>
<table>
  <tr><th>Methods</th><th>Return Value</th><th>Description</th></tr>
  <tr><td>begin()</td><td>int</td><td>Returns the minimum of a and b.</td></tr>
  <tr><td>cover(region)</td><td>Region</td><td>Returns a region spanning both.</td></tr>
</table>

<h2>sublime.View Class</h2>
<table>
  <tr><th>Methods</th><th>Return Value</th><th>Description</th></tr>
  <tr><td>find_all(pattern, &lt;flags&gt;, &lt;format&gt;, &lt;extractions&gt;)</td><td>[Region]</td>
      <td>Returns all non-overlapping regions.</td></tr>
  <tr><td>add_regions(key, [regions], &lt;scope&gt;, &lt;icon&gt;, &lt;flags&gt;)</td><td>None</td>
      <td>Flags may be sublime.DRAW_EMPTY or sublime.HIDE_ON_MINIMAP. See other.Thing.MISSING_CONST.</td></tr>
</table>
<table></table>

<h2>Example Plugins</h2>
<table>
  <tr><th>Methods</th><th>Return Value</th><th>Description</th></tr>
  <tr><td>not_collected()</td><td>None</td><td>Belongs to no section.</td></tr>
</table>

<h2>sublime_plugin Module</h2>
<table>
  <tr><th>Name</th><th>Description</th></tr>
  <tr><td>EventListener</td><td>Base class for listeners.</td></tr>
</table>

<h1>Appendix</h1>
<table>
  <tr><th>Methods</th><th>Return Value</th><th>Description</th></tr>
  <tr><td>also_not_collected()</td><td>None</td><td>After a boundary.</td></tr>
</table>
</body></html>
"""


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def class_paths():
    return ClassPathRegistry.from_paths([
        ("sublime", "Window"),
        ("sublime", "View"),
        ("sublime", "Region"),
    ])


@pytest.fixture
def resolver(class_paths):
    return NameTypeResolver(class_paths)


@pytest.fixture
def parser(resolver):
    return DocTypeParser(resolver)
