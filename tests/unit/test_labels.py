"""
Tests for localized labels, XML escaping and the navigation fragment.
"""

import xml.etree.ElementTree as ET

import pytest

from core.epub.labels import LABELS, TocEntry, escape_xml, get_label, render_toc


class TestGetLabel:
    """Label lookup with English fallback"""

    @pytest.mark.parametrize("lang,expected", [
        ('en', 'Notes'),
        ('pl', 'Przypisy'),
        ('de', 'Anmerkungen'),
        ('PL', 'Przypisy'),
        ('pt-BR', 'Notas'),
        ('xx', 'Notes'),
        ('', 'Notes'),
        (None, 'Notes'),
    ])
    def test_footnotes_label(self, lang, expected):
        assert get_label('footnotes', lang) == expected

    def test_every_language_has_every_key(self):
        for table in LABELS.values():
            assert set(table) == set(LABELS['en'])


class TestEscapeXml:
    """Entity escaping"""

    def test_all_special_characters(self):
        assert escape_xml('a<b>&"\'') == 'a&lt;b&gt;&amp;&quot;&apos;'

    def test_ampersand_escaped_once(self):
        assert escape_xml('&lt;') == '&amp;lt;'


class TestRenderToc:
    """Navigation <nav> fragment"""

    def test_entries_numbered(self):
        nav = render_toc([TocEntry('chapter-1.xhtml', 'Start'), TocEntry('chapter-2.xhtml', 'Risk & Reward')])

        assert '<li><a href="chapter-1.xhtml">1. Start</a></li>' in nav
        assert '<li><a href="chapter-2.xhtml">2. Risk &amp; Reward</a></li>' in nav
        assert '<h1>Table of Contents</h1>' in nav

    def test_localized_heading(self):
        assert '<h1>Spis treści</h1>' in render_toc([TocEntry('c.xhtml', 'A')], 'pl')

    def test_well_formed(self):
        nav = render_toc([TocEntry('c1.xhtml', '<Odd> "title"')], 'fr')
        root = ET.fromstring(
            f'<body xmlns:epub="http://www.idpf.org/2007/ops">{nav}</body>'
        )

        links = root.findall('.//a')
        assert len(links) == 1
        assert links[0].text == '1. <Odd> "title"'

    def test_empty_book(self):
        nav = render_toc([])
        assert '<ol>\n    </ol>' in nav
