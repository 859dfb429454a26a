"""
Markup Transpiler - sanitized chapter LaTeX to an EPUB 3 XHTML body fragment

Architecture:
    - Config-driven design with TranspilerConfig
    - Thirteen ordered steps, each a pure text -> text function
    - Output is the chapter body only; the caller owns the document shell
      (<html>, <head>, stylesheet) and packaging

Guarantees:
    - Never raises; unknown commands degrade to their argument text
    - For balanced input the body is well-formed XML
    - N footnotes give N references and N linked notes
"""

from dataclasses import dataclass
from typing import Optional

from config.constants import FOOTNOTE_BACKLINK
from config.logging_config import get_logger
from config.settings import settings
from core.epub.blocks import (
    close_list_items, convert_callouts, convert_lists, convert_quotes, wrap_paragraphs,
)
from core.epub.footnotes import FootnoteTable, extract_footnotes, render_footnote_section
from core.epub.inline import (
    convert_headings, convert_inline_formatting, convert_special_characters,
    strip_remaining_commands,
)
from core.epub.labels import get_label
from core.epub.tables import convert_tables
from core.latex.latex_text import strip_document_scaffolding

logger = get_logger(__name__)


@dataclass
class TranspilerConfig:
    """
    Configuration for the XHTML transpiler.

    Attributes:
        callout_icons: Prefix callout box titles with their icon
        footnote_backlink: Text of the link from a note back to its reference
        default_language: Label language when transpile() gets none
    """
    callout_icons: bool = True
    footnote_backlink: str = FOOTNOTE_BACKLINK
    default_language: str = 'en'

    @classmethod
    def from_settings(cls) -> 'TranspilerConfig':
        return cls(
            callout_icons=settings.callout_icons,
            footnote_backlink=settings.footnote_backlink,
            default_language=settings.default_language,
        )


@dataclass
class RenderedFragment:
    """XHTML chapter body produced from one LaTeX chapter"""
    body: str
    title: str
    lang: str
    footnote_count: int = 0


def escape_markup_characters(text: str) -> str:
    """Step 1b: literal '<' / '>' in the source must not read as tags."""
    return text.replace('<', '&lt;').replace('>', '&gt;')


class XhtmlTranspiler:
    """
    LaTeX -> XHTML chapter transpiler.

    Usage:
        >>> transpiler = XhtmlTranspiler(TranspilerConfig())
        >>> fragment = transpiler.transpile(chapter_latex, 'Chapter 1', 'en')
        >>> fragment.body
    """

    def __init__(self, config: Optional[TranspilerConfig] = None):
        self.config = config if config is not None else TranspilerConfig()

    def transpile(self, latex: str, title: str, lang: Optional[str] = None) -> RenderedFragment:
        """
        Convert one chapter.

        Args:
            latex: Sanitized chapter LaTeX
            title: Chapter title (carried on the result, not rendered)
            lang: Language code; selects localized labels only

        Returns:
            RenderedFragment with the XHTML body
        """
        lang = lang or self.config.default_language

        # Step 1: Document scaffolding and page commands, literal angle brackets
        text = strip_document_scaffolding(latex, page_commands=True)
        text = escape_markup_characters(text)

        # Step 2: Headings
        text = convert_headings(text)

        # Step 3: Inline formatting (innermost first)
        text = convert_inline_formatting(text)

        # Step 4: Footnotes -> numbered references
        text, footnotes = extract_footnotes(text)

        # Step 5: Callout boxes
        text = convert_callouts(text, icons=self.config.callout_icons)

        # Step 6: Lists
        text = convert_lists(text)

        # Step 7: Quotations
        text = convert_quotes(text)

        # Step 8: Tables
        text = convert_tables(text)

        # Step 9: Special characters
        text = convert_special_characters(text)

        # Step 10: Remaining commands
        text = strip_remaining_commands(text)

        # Step 11: Close list items
        text = close_list_items(text)

        # Step 12: Paragraphs
        body = wrap_paragraphs(text)

        # Step 13: Footnote section
        section = self._render_footnotes(footnotes, lang)
        if section:
            body = f'{body}\n{section}' if body else section

        logger.debug(f"Transpiled '{title}' ({lang}): {len(body)} chars, {len(footnotes)} footnote(s)")
        return RenderedFragment(body=body, title=title, lang=lang, footnote_count=len(footnotes))

    def _render_footnotes(self, footnotes: FootnoteTable, lang: str) -> str:
        # Bodies left the text at step 4; apply steps 9 and 10 to them here
        footnotes.map_bodies(
            lambda note: ' '.join(strip_remaining_commands(convert_special_characters(note)).split())
        )
        return render_footnote_section(
            footnotes, get_label('footnotes', lang), self.config.footnote_backlink
        )


def latex_to_xhtml(latex: str, title: str, lang: Optional[str] = None,
                   config: Optional[TranspilerConfig] = None) -> RenderedFragment:
    """Transpile one chapter with the given config (defaults from settings)."""
    return XhtmlTranspiler(config or TranspilerConfig.from_settings()).transpile(latex, title, lang)
