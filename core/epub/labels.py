"""
Localized labels and navigation for EPUB chapter documents.

Only a handful of strings appear in generated XHTML (footnote heading,
table-of-contents heading); they are looked up here by language code with an
English fallback.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from config.constants import DEFAULT_LANGUAGE


LABELS: Dict[str, Dict[str, str]] = {
    'en': {'footnotes': 'Notes', 'toc': 'Table of Contents'},
    'pl': {'footnotes': 'Przypisy', 'toc': 'Spis treści'},
    'de': {'footnotes': 'Anmerkungen', 'toc': 'Inhaltsverzeichnis'},
    'es': {'footnotes': 'Notas', 'toc': 'Índice'},
    'fr': {'footnotes': 'Notes', 'toc': 'Table des matières'},
    'it': {'footnotes': 'Note', 'toc': 'Indice'},
    'pt': {'footnotes': 'Notas', 'toc': 'Sumário'},
    'nl': {'footnotes': 'Noten', 'toc': 'Inhoudsopgave'},
}

_XML_ESCAPES = (
    ('&', '&amp;'),
    ('<', '&lt;'),
    ('>', '&gt;'),
    ('"', '&quot;'),
    ("'", '&apos;'),
)


def get_label(key: str, lang: str = DEFAULT_LANGUAGE) -> str:
    """Label for key in lang; unknown languages fall back to English."""
    table = LABELS.get((lang or DEFAULT_LANGUAGE).lower().split('-')[0], LABELS[DEFAULT_LANGUAGE])
    return table.get(key, LABELS[DEFAULT_LANGUAGE][key])


def escape_xml(text: str) -> str:
    """Escape text for use in XML content or attribute values."""
    for raw, entity in _XML_ESCAPES:
        text = text.replace(raw, entity)
    return text


@dataclass
class TocEntry:
    """One chapter document listed in the navigation document"""
    filename: str
    title: str


def render_toc(chapters: Iterable[TocEntry], lang: str = DEFAULT_LANGUAGE) -> str:
    """
    Render the EPUB 3 table-of-contents <nav> fragment.

    Args:
        chapters: Chapter documents in reading order
        lang: Book language, selects the heading label

    Returns:
        <nav epub:type="toc" id="toc"> fragment with numbered entries
    """
    items: List[str] = [
        f'      <li><a href="{escape_xml(entry.filename)}">{number}. {escape_xml(entry.title)}</a></li>'
        for number, entry in enumerate(chapters, start=1)
    ]
    heading = escape_xml(get_label('toc', lang))
    return (
        '  <nav epub:type="toc" id="toc">\n'
        f'    <h1>{heading}</h1>\n'
        '    <ol>\n'
        + ''.join(item + '\n' for item in items)
        + '    </ol>\n'
        '  </nav>'
    )
