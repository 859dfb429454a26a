"""
EPUB Module - chapter LaTeX to EPUB 3 XHTML

Markup Transpiler: thirteen-step LaTeX -> XHTML body conversion
Tables, footnotes, blocks: the structural conversions it delegates to
Labels: localized strings and the table-of-contents <nav>

Example usage:
    >>> from core.epub import latex_to_xhtml
    >>> fragment = latex_to_xhtml(chapter_latex, 'Chapter 1', 'pl')
    >>> fragment.footnote_count
"""

from core.epub.footnotes import FootnoteTable
from core.epub.labels import LABELS, TocEntry, escape_xml, get_label, render_toc
from core.epub.tables import TableRow, parse_table_rows
from core.epub.xhtml_transpiler import (
    RenderedFragment,
    TranspilerConfig,
    XhtmlTranspiler,
    latex_to_xhtml,
)

__all__ = [
    'FootnoteTable',
    'LABELS',
    'TocEntry',
    'escape_xml',
    'get_label',
    'render_toc',
    'TableRow',
    'parse_table_rows',
    'RenderedFragment',
    'TranspilerConfig',
    'XhtmlTranspiler',
    'latex_to_xhtml',
]
