"""
Table Conversion - LaTeX tabular / tabularx (booktabs style) to XHTML tables.

Supports:
- \\begin{table}[pos] wrappers with \\caption (-> <caption>)
- Standalone tabular / tabularx
- Header rows: content rows before the first \\midrule, or before an
  \\hline that follows a content row
- \\multicolumn{n}{align}{x} -> colspan
- \\rowcolor / \\cellcolor / \\textcolor unwrapped, rules dropped
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from core.epub.inline import convert_inline_formatting, unwrap_color_commands
from core.latex.latex_text import read_group, replace_command, skip_optional_arg


# =============================================================================
# PATTERNS
# =============================================================================

TABLE_WRAPPER_PATTERN = re.compile(
    r'\\begin\{table\*?\}(?:\[[^\]]*\])?'
    r'((?:(?!\\begin\{table\*?\}).)*?)'
    r'\\end\{table\*?\}',
    re.DOTALL,
)

TABULAR_BEGIN_PATTERN = re.compile(r'\\begin\{(tabularx|tabular)\}')

# Row separator with optional extra spacing: \\ or \\[2pt]
ROW_SEPARATOR_PATTERN = re.compile(r'\\\\(?:\s*\[[^\]]*\])?')

RULE_PATTERN = re.compile(
    r'\\(?:toprule|midrule|bottomrule|hline)(?![a-zA-Z])(?:\[[^\]]*\])?'
    r'|\\cmidrule(?:\([^)]*\))?\{[^}]*\}'
    r'|\\cline\{[^}]*\}'
)

HEADER_RULE_PATTERN = re.compile(r'\\(?:midrule|hline)(?![a-zA-Z])')

# '&' column separator; escaped \& and XML entities are cell text
CELL_SEPARATOR_PATTERN = re.compile(r'(?<!\\)&(?!#?\w+;)')

MULTICOLUMN_PATTERN = re.compile(r'^\\multicolumn\s*\{\s*(\d+)\s*\}')


@dataclass
class TableRow:
    """One tabular row: raw cell texts plus header flag"""
    cells: List[str] = field(default_factory=list)
    is_header: bool = False


# =============================================================================
# PARSING
# =============================================================================

def find_tabular(text: str, start: int = 0) -> Optional[Tuple[int, int, str]]:
    """
    Locate the next tabular / tabularx environment.

    Returns:
        (start, end, body) where body excludes the column spec, or None
    """
    match = TABULAR_BEGIN_PATTERN.search(text, start)
    if not match:
        return None
    name = match.group(1)
    cursor = skip_optional_arg(text, match.end())
    for _ in range(2 if name == 'tabularx' else 1):
        group = read_group(text, cursor)
        if group is None:
            break
        cursor = group[1]
    end_token = '\\end{' + name + '}'
    close = text.find(end_token, cursor)
    if close == -1:
        return None
    return match.start(), close + len(end_token), text[cursor:close]


def parse_table_rows(body: str) -> List[TableRow]:
    """
    Split a tabular body into rows and cells.

    Args:
        body: Text between the column spec and \\end{tabular}

    Returns:
        Content rows in order; rule-only rows are dropped
    """
    rows: List[TableRow] = []
    header_count = None

    for segment in ROW_SEPARATOR_PATTERN.split(body):
        if header_count is None and rows and HEADER_RULE_PATTERN.search(segment):
            header_count = len(rows)
        content = unwrap_color_commands(RULE_PATTERN.sub('', segment)).strip()
        if not content:
            continue
        rows.append(TableRow(cells=[cell.strip() for cell in CELL_SEPARATOR_PATTERN.split(content)]))

    for row in rows[:header_count or 0]:
        row.is_header = True
    return rows


# =============================================================================
# RENDERING
# =============================================================================

def render_cell(cell: str, tag: str) -> str:
    span = ''
    match = MULTICOLUMN_PATTERN.match(cell)
    if match:
        spec = read_group(cell, match.end())
        content = read_group(cell, spec[1]) if spec else None
        if content:
            span = f' colspan="{match.group(1)}"'
            cell = (content[0] + cell[content[1]:]).strip()
    return f'<{tag}{span}>{convert_inline_formatting(cell)}</{tag}>'


def render_row(row: TableRow) -> str:
    tag = 'th' if row.is_header else 'td'
    return '<tr>' + ''.join(render_cell(cell, tag) for cell in row.cells) + '</tr>'


def render_table(rows: List[TableRow], caption: Optional[str] = None) -> str:
    """<table class="data-table"> with optional caption, thead and a tbody."""
    parts = ['<table class="data-table">']
    if caption:
        parts.append(f'<caption>{caption.strip()}</caption>')
    header = [row for row in rows if row.is_header]
    if header:
        parts.append('<thead>' + ''.join(render_row(row) for row in header) + '</thead>')
    parts.append('<tbody>' + ''.join(render_row(row) for row in rows if not row.is_header) + '</tbody>')
    parts.append('</table>')
    return '\n\n' + ''.join(parts) + '\n\n'


# =============================================================================
# CONVERSION
# =============================================================================

def _convert_table_wrapper(match: re.Match) -> str:
    content = match.group(1)
    captions: List[str] = []
    content = replace_command(content, 'caption', lambda caption: captions.append(caption) or '')
    caption = captions[0] if captions else None

    found = find_tabular(content)
    if found is None:
        # No tabular inside: keep the wrapper's content, caption as a paragraph
        prefix = f'<p class="table-caption">{caption.strip()}</p>' if caption else ''
        return '\n\n' + prefix + content + '\n\n'
    return render_table(parse_table_rows(found[2]), caption)


def convert_tables(text: str) -> str:
    """
    Convert table wrappers first (innermost first), then standalone tabulars.
    """
    while True:
        converted = TABLE_WRAPPER_PATTERN.sub(_convert_table_wrapper, text)
        if converted == text:
            break
        text = converted

    parts = []
    pos = 0
    while True:
        found = find_tabular(text, pos)
        if found is None:
            break
        start, end, body = found
        parts.append(text[pos:start])
        parts.append(render_table(parse_table_rows(body)))
        pos = end
    parts.append(text[pos:])
    return ''.join(parts)
