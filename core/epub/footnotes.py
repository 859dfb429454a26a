"""
Footnote extraction for chapter XHTML.

\\footnote{...} bodies are pulled out in order of appearance, replaced by a
numbered reference, and rendered as a chapter-end notes section whose
entries link back to their references.
"""

from typing import Callable, Iterator, List, Optional, Tuple

from config.constants import FOOTNOTE_BACKLINK
from core.latex.latex_text import replace_command


class FootnoteTable:
    """Ordered footnote bodies; indices are 1-based and assigned on add()."""

    def __init__(self):
        self._bodies: List[str] = []

    def add(self, body: str) -> int:
        self._bodies.append(body.strip())
        return len(self._bodies)

    def get(self, index: int) -> str:
        return self._bodies[index - 1]

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        return iter(enumerate(self._bodies, start=1))

    def map_bodies(self, transform: Callable[[str], str]) -> None:
        """Apply transform to every body in place."""
        self._bodies = [transform(body) for body in self._bodies]


def render_reference(index: int) -> str:
    return (
        f'<sup class="footnote-ref"><a href="#fn{index}" id="fnref{index}">[{index}]</a></sup>'
    )


def extract_footnotes(text: str, table: Optional[FootnoteTable] = None) -> Tuple[str, FootnoteTable]:
    """
    Replace every \\footnote{...} with a numbered reference.

    Args:
        text: Chapter markup
        table: Table to append to (a new one if None)

    Returns:
        (text with references, footnote table)
    """
    table = table if table is not None else FootnoteTable()
    text = replace_command(text, 'footnote', lambda body: render_reference(table.add(body)))
    return text, table


def render_footnote_section(
    table: FootnoteTable,
    title: str,
    backlink: str = FOOTNOTE_BACKLINK,
) -> str:
    """Chapter-end notes section, or '' when there are no footnotes."""
    if not len(table):
        return ''
    entries = '\n'.join(
        f'<li id="fn{index}"><p>{body} <a href="#fnref{index}">{backlink}</a></p></li>'
        for index, body in table
    )
    return (
        '<section class="footnotes"><hr/>'
        f'<h2 class="footnotes-title">{title}</h2>'
        f'<ol class="footnote-list">\n{entries}\n</ol></section>'
    )
