"""
XHTML Transpiler Test Suite

Tests LaTeX -> XHTML body conversion:
1. Headings and inline formatting
2. Footnotes and the notes section
3. Callout boxes, lists, quotations
4. Tables
5. Special characters and leftover commands
6. Well-formedness of the body
"""

import xml.etree.ElementTree as ET

import pytest

from config.constants import CALLOUT_ICONS
from core.epub.blocks import close_list_items, wrap_paragraphs
from core.epub.footnotes import FootnoteTable, extract_footnotes, render_footnote_section
from core.epub.inline import convert_inline_formatting
from core.epub.tables import parse_table_rows
from core.epub.xhtml_transpiler import TranspilerConfig, XhtmlTranspiler, latex_to_xhtml


def body_of(transpiler, latex, lang='en'):
    return transpiler.transpile(latex, 'Test', lang).body


def assert_well_formed(body):
    ET.fromstring(f'<div>{body}</div>')


# ============================================================================
# HEADINGS + INLINE
# ============================================================================

class TestHeadingsAndInline:
    """Headings and emphasis"""

    def test_headings(self, transpiler):
        body = body_of(transpiler, "\\chapter{Intro}\n\\section{Background}")
        assert body == (
            '<h1 class="chapter-title">Intro</h1>\n\n'
            '<h2 class="section-title">Background</h2>'
        )

    def test_starred_and_deeper_headings(self, transpiler):
        body = body_of(transpiler, "\\section*{Summary}\n\\subsection{Detail}\n\\subsubsection{Fine}")

        assert '<h2 class="section-title">Summary</h2>' in body
        assert '<h3 class="subsection-title">Detail</h3>' in body
        assert '<h4 class="subsubsection-title">Fine</h4>' in body

    def test_nested_inline_formatting(self, transpiler):
        body = body_of(transpiler, "\\textbf{\\textit{both}} and \\texttt{code}")
        assert body == '<p><strong><em>both</em></strong> and <code>code</code></p>'

    def test_underline(self, transpiler):
        assert '<span class="underline">u</span>' in body_of(transpiler, "\\underline{u}")

    def test_deeply_nested_inline_formatting(self):
        assert convert_inline_formatting("\\textbf{a \\textit{b \\texttt{c}} d}") == \
            '<strong>a <em>b <code>c</code></em> d</strong>'

    def test_emphasis_across_blank_line(self, transpiler):
        body = body_of(transpiler, "\\textbf{first para\n\nsecond para}")

        assert body == '<p><strong>first para</strong></p>\n\n<p><strong>second para</strong></p>'
        assert_well_formed(body)

    def test_paragraphs_split_on_blank_lines(self, transpiler):
        body = body_of(transpiler, "First paragraph\ncontinues.\n\nSecond one.")
        assert body == '<p>First paragraph\ncontinues.</p>\n\n<p>Second one.</p>'


# ============================================================================
# FOOTNOTES
# ============================================================================

class TestFootnotes:
    """Numbered references and the trailing notes section"""

    def test_reference_and_note_linked(self, transpiler):
        fragment = transpiler.transpile(
            "A claim\\footnote{Source: \\textit{Nature}, 2020.} here.", 'Ch', 'en'
        )

        assert fragment.footnote_count == 1
        assert '<a href="#fn1" id="fnref1">[1]</a>' in fragment.body
        assert '<li id="fn1"><p>Source: <em>Nature</em>, 2020. <a href="#fnref1">' in fragment.body
        assert '<h2 class="footnotes-title">Notes</h2>' in fragment.body
        assert fragment.body.startswith('<p>A claim<sup class="footnote-ref">')

    def test_numbered_in_order(self, transpiler):
        fragment = transpiler.transpile("a\\footnote{one} b\\footnote{two} c\\footnote{three}", 'Ch')

        assert fragment.footnote_count == 3
        for index, text in enumerate(['one', 'two', 'three'], start=1):
            assert f'<li id="fn{index}"><p>{text} ' in fragment.body
            assert f'href="#fn{index}"' in fragment.body

    def test_localized_heading(self, transpiler):
        body = body_of(transpiler, "Tekst\\footnote{Uwaga}.", lang='pl')
        assert '<h2 class="footnotes-title">Przypisy</h2>' in body

    def test_note_body_gets_character_conversion(self, transpiler):
        body = body_of(transpiler, "x\\footnote{50\\% of R\\&D -- roughly}")
        assert '50% of R&amp;D – roughly' in body

    def test_no_footnotes_no_section(self, transpiler):
        assert 'footnotes' not in body_of(transpiler, "Plain text.")

    def test_footnote_inside_bold(self, transpiler):
        fragment = transpiler.transpile("\\textbf{x\\footnote{y}} z", 'Ch')

        assert fragment.body.startswith('<p><strong>x<sup class="footnote-ref">')
        assert '</sup></strong> z</p>' in fragment.body
        assert '<li id="fn1"><p>y ' in fragment.body
        assert_well_formed(fragment.body)

    def test_nested_braces_in_footnote(self):
        text, table = extract_footnotes("a\\footnote{see {this} one} b")

        assert len(table) == 1
        assert table.get(1) == 'see {this} one'
        assert 'footnote' not in text.replace('footnote-ref', '')

    def test_empty_table_renders_nothing(self):
        assert render_footnote_section(FootnoteTable(), 'Notes') == ''


# ============================================================================
# BLOCKS
# ============================================================================

class TestCallouts:
    """Callout boxes"""

    def test_titled_box(self, transpiler):
        body = body_of(transpiler, "\\begin{tipbox}{Rule}\nKeep it short.\n\\end{tipbox}")

        assert '<aside class="box box-tip">' in body
        assert f'<p class="box-title">{CALLOUT_ICONS["tipbox"]} Rule</p>' in body
        assert '<p>Keep it short.</p>' in body
        assert_well_formed(body)

    def test_untitled_box(self, transpiler):
        body = body_of(transpiler, "\\begin{warningbox}\nCareful.\n\\end{warningbox}")

        assert '<aside class="box box-warn">' in body
        assert 'box-title' not in body
        assert '<p>Careful.</p>' in body

    def test_icons_disabled(self):
        transpiler = XhtmlTranspiler(TranspilerConfig(callout_icons=False))
        body = body_of(transpiler, "\\begin{keyinsight}{Remember}\nx\n\\end{keyinsight}")

        assert '<p class="box-title">Remember</p>' in body

    def test_quote(self, transpiler):
        body = body_of(transpiler, "\\begin{quote}\nWise words.\n\\end{quote}")
        assert body == '<blockquote class="quote">\n\n<p>Wise words.</p>\n\n</blockquote>'


class TestLists:
    """itemize / enumerate / description"""

    def test_bullet_list(self, transpiler):
        body = body_of(transpiler, "\\begin{itemize}\n\\item One\n\\item Two\n\\end{itemize}")

        assert '<ul class="list-bullet">' in body
        assert '<li>One</li>' in body
        assert '<li>Two</li>' in body
        assert_well_formed(body)

    def test_numbered_list(self, transpiler):
        body = body_of(transpiler, "\\begin{enumerate}\n\\item First\n\\end{enumerate}")

        assert '<ol class="list-ordered">' in body
        assert '<li>First</li>' in body

    def test_description_list(self, transpiler):
        body = body_of(transpiler, "\\begin{description}\n\\item[Term] Definition\n\\end{description}")

        assert '<dt><strong>Term</strong></dt><dd>Definition</dd>' in body
        assert_well_formed(body)

    def test_nested_lists_well_formed(self, transpiler):
        body = body_of(
            transpiler,
            "\\begin{itemize}\n\\item A\n\\begin{enumerate}\n\\item B\n\\end{enumerate}\n\\end{itemize}",
        )

        assert '<li>B</li>' in body
        assert '</ol></li>' in body
        assert_well_formed(body)

    def test_stray_item_dropped(self, transpiler):
        assert body_of(transpiler, "\\item lonely") == '<p>lonely</p>'

    def test_close_list_items_directly(self):
        html = '<ul>\n<li>a\n<li>b\n</ul>'
        assert close_list_items(html) == '<ul>\n<li>a</li>\n<li>b</li>\n</ul>'

    def test_wrap_paragraphs_keeps_blocks(self):
        html = '<h1>T</h1>\n\ntext <em>here</em>\n\n<ul>\n<li>x</li>\n</ul>'
        assert wrap_paragraphs(html) == (
            '<h1>T</h1>\n\n<p>text <em>here</em></p>\n\n<ul>\n<li>x</li>\n</ul>'
        )


# ============================================================================
# TABLES
# ============================================================================

TABLE_LATEX = (
    "\\begin{table}[h]\n\\centering\n\\caption{Results}\n"
    "\\begin{tabular}{ll}\n\\toprule\nA & B \\\\\n\\midrule\n"
    "1 & 2 \\\\\n3 & 4 \\\\\n\\bottomrule\n\\end{tabular}\n\\end{table}"
)


class TestTables:
    """tabular / tabularx conversion"""

    def test_table_shape(self, transpiler):
        body = body_of(transpiler, TABLE_LATEX)

        assert body.startswith('<table class="data-table"><caption>Results</caption><thead>')
        assert body.count('<tr>') == 3
        assert '<thead><tr><th>A</th><th>B</th></tr></thead>' in body
        assert '<td>3</td><td>4</td>' in body
        assert 'centering' not in body
        assert_well_formed(body)

    def test_standalone_tabularx(self, transpiler):
        body = body_of(transpiler, "\\begin{tabularx}{\\textwidth}{lX}\nx & y \\\\\n\\end{tabularx}")

        assert '<tbody><tr><td>x</td><td>y</td></tr></tbody>' in body
        assert 'textwidth' not in body

    def test_multicolumn_colspan(self, transpiler):
        body = body_of(transpiler, "\\begin{tabular}{lll}\n\\multicolumn{2}{c}{Wide} & X \\\\\n\\end{tabular}")
        assert '<td colspan="2">Wide</td><td>X</td>' in body

    def test_escaped_ampersand_stays_in_cell(self):
        rows = parse_table_rows("R\\&D & Budget \\\\")

        assert len(rows) == 1
        assert rows[0].cells == ['R\\&D', 'Budget']

    def test_hline_header(self):
        rows = parse_table_rows("\\hline\nH1 & H2 \\\\ \\hline\nv1 & v2 \\\\ \\hline")

        assert [row.is_header for row in rows] == [True, False]

    def test_no_rule_no_header(self):
        rows = parse_table_rows("a & b \\\\ c & d \\\\")
        assert not any(row.is_header for row in rows)


# ============================================================================
# CHARACTERS + LEFTOVER COMMANDS
# ============================================================================

class TestCharacters:
    """Special characters and escaping"""

    def test_typography(self, transpiler):
        body = body_of(transpiler, "Pages 10--20 --- wow ``quoted'' it's 50\\% \\& more~here")
        assert body == '<p>Pages 10–20 — wow “quoted” it’s 50% &amp; more&#160;here</p>'

    def test_escaped_ampersand(self, transpiler):
        assert body_of(transpiler, "R\\&D") == '<p>R&amp;D</p>'

    def test_angle_brackets_escaped(self, transpiler):
        assert body_of(transpiler, "a <b> tag") == '<p>a &lt;b&gt; tag</p>'

    def test_line_break(self, transpiler):
        assert body_of(transpiler, "a\\\\b") == '<p>a<br/>b</p>'

    def test_escaped_braces(self, transpiler):
        assert body_of(transpiler, "set \\{x\\}") == '<p>set &#123;x&#125;</p>'


class TestLeftoverCommands:
    """Commands with no XHTML counterpart"""

    def test_references(self, transpiler):
        body = body_of(transpiler, "See \\ref{fig:1} and \\cite{knuth} kept\\label{x} end")
        assert body == '<p>See [ref] and [cite] kept end</p>'

    def test_unknown_commands_degrade_to_text(self, transpiler):
        body = body_of(transpiler, "\\newthing{Kept text} and \\relax done")
        assert body == '<p>Kept text and done</p>'

    def test_page_commands_removed(self, transpiler):
        assert body_of(transpiler, "\\clearpage\nText\\newpage") == '<p>Text</p>'

    def test_color_unwrapped(self, transpiler):
        assert body_of(transpiler, "\\textcolor{red}{Alert} now") == '<p>Alert now</p>'

    def test_never_raises_on_garbage(self, transpiler):
        fragment = transpiler.transpile("\\end{itemize} \\begin{tabular} { } \\footnote{", 'Ch')
        assert isinstance(fragment.body, str)


# ============================================================================
# RESULT
# ============================================================================

class TestResult:
    """RenderedFragment fields"""

    def test_fragment_fields(self, transpiler):
        fragment = transpiler.transpile("Text", 'Chapter 1', 'de')

        assert fragment.title == 'Chapter 1'
        assert fragment.lang == 'de'
        assert fragment.footnote_count == 0

    def test_default_language(self):
        fragment = XhtmlTranspiler(TranspilerConfig(default_language='pl')).transpile("x\\footnote{y}", 'T')

        assert fragment.lang == 'pl'
        assert 'Przypisy' in fragment.body

    @pytest.mark.parametrize("latex", [
        "\\chapter{A}\nText with \\textbf{bold}.\\footnote{Note.}",
        TABLE_LATEX,
        "\\begin{tipbox}{T}\n\\begin{itemize}\n\\item a\n\\item b\n\\end{itemize}\n\\end{tipbox}",
    ])
    def test_body_well_formed(self, latex):
        config = TranspilerConfig()
        assert_well_formed(latex_to_xhtml(latex, 'T', 'en', config).body)
