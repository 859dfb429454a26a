"""
Block-level conversions for the XHTML transpiler: callout boxes, lists,
quotations, list-item closing and paragraph wrapping.

Every converter emits blank lines around the block tags it creates so the
paragraph wrapper sees block tags at chunk starts.
"""

import re
from typing import Dict, List, Optional, Tuple

from config.constants import CALLOUT_CLASSES, CALLOUT_ICONS


# ===========================================
# CALLOUT BOXES
# ===========================================
def _callout_pattern(name: str) -> re.Pattern:
    # Body may not contain another box of the same kind: innermost first
    return re.compile(
        r'\\begin\{' + name + r'\}(?:\{([^{}]*)\})?'
        r'((?:(?!\\begin\{' + name + r'\}).)*?)'
        r'\\end\{' + name + r'\}',
        re.DOTALL,
    )


CALLOUT_PATTERNS: Dict[str, re.Pattern] = {name: _callout_pattern(name) for name in CALLOUT_CLASSES}


def convert_callouts(text: str, icons: bool = True) -> str:
    """
    tipbox / keyinsight / warningbox / examplebox -> <aside class="box ...">.

    Args:
        text: Chapter markup
        icons: Prefix box titles with the box icon
    """
    for name, pattern in CALLOUT_PATTERNS.items():
        css_class = CALLOUT_CLASSES[name]
        icon = CALLOUT_ICONS[name] + ' ' if icons else ''

        def _render(match: re.Match, css_class=css_class, icon=icon) -> str:
            title, body = match.group(1), match.group(2)
            heading = f'<p class="box-title">{icon}{title.strip()}</p>' if title is not None else ''
            return (
                f'\n\n<aside class="box {css_class}">{heading}<div class="box-content">\n\n'
                f'{body.strip()}\n\n</div></aside>\n\n'
            )

        while True:
            converted = pattern.sub(_render, text)
            if converted == text:
                break
            text = converted
    return text


# ===========================================
# LISTS
# ===========================================
LIST_TAGS = {
    'itemize': ('<ul class="list-bullet">', '</ul>'),
    'enumerate': ('<ol class="list-ordered">', '</ol>'),
    'description': ('<dl class="list-description">', '</dl>'),
}

LIST_TOKEN_PATTERN = re.compile(
    r'\\begin\{(?P<open>itemize|enumerate|description)\}(?:\[[^\]]*\])?'
    r'|\\end\{(?P<close>itemize|enumerate|description)\}'
    r'|\\item(?![a-zA-Z])[ \t]*(?:\[(?P<term>[^\]]*)\])?\s*'
)


def convert_lists(text: str) -> str:
    """
    itemize / enumerate / description -> ul / ol / dl with <li> or <dt><dd> items.

    Items are left open here; close_list_items() closes them. A closer with
    no matching list is dropped and lists still open at the end are closed.
    """
    stack: List[str] = []
    parts = []
    pos = 0

    for match in LIST_TOKEN_PATTERN.finditer(text):
        parts.append(text[pos:match.start()])
        pos = match.end()

        if match.group('open'):
            name = match.group('open')
            stack.append(name)
            parts.append('\n\n' + LIST_TAGS[name][0] + '\n')
        elif match.group('close'):
            name = match.group('close')
            if name not in stack:
                continue
            while stack:
                closing = stack.pop()
                parts.append('\n' + LIST_TAGS[closing][1] + '\n\n')
                if closing == name:
                    break
        else:
            if not stack:
                # \item outside any list
                continue
            term = match.group('term')
            if stack[-1] == 'description':
                if term is None:
                    parts.append('<dd>')
                else:
                    parts.append(f'<dt><strong>{term.strip()}</strong></dt><dd>')
            elif term is not None:
                parts.append(f'<li><strong>{term.strip()}</strong> ')
            else:
                parts.append('<li>')

    parts.append(text[pos:])
    while stack:
        parts.append('\n' + LIST_TAGS[stack.pop()][1] + '\n\n')
    return ''.join(parts)


# ===========================================
# QUOTATIONS
# ===========================================
QUOTE_PATTERN = re.compile(
    r'\\begin\{quote\}((?:(?!\\begin\{quote\}).)*?)\\end\{quote\}',
    re.DOTALL,
)


def convert_quotes(text: str) -> str:
    """quote -> <blockquote class="quote">, innermost first."""
    while True:
        converted = QUOTE_PATTERN.sub(
            lambda m: f'\n\n<blockquote class="quote">\n\n{m.group(1).strip()}\n\n</blockquote>\n\n',
            text,
        )
        if converted == text:
            return converted
        text = converted


# ===========================================
# LIST ITEM CLOSING
# ===========================================
ITEM_TOKEN_PATTERN = re.compile(r'<(/?)(ul|ol|dl|li|dt|dd)\b[^>]*>')


def close_list_items(html: str) -> str:
    """
    Insert </li> and </dd> where an item ends.

    An item ends at the next sibling item or at its list's closing tag; the
    closer goes right after the item's last non-blank character.
    """
    frames: List[Dict[str, Optional[str]]] = []
    inserts: List[Tuple[int, int, str]] = []  # (position, order, closer)

    def _close_open_item(position: int) -> None:
        frame = frames[-1]
        if frame['item']:
            anchor = len(html[:position].rstrip())
            inserts.append((anchor, len(inserts), f"</{frame['item']}>"))
            frame['item'] = None

    for match in ITEM_TOKEN_PATTERN.finditer(html):
        closing, tag = match.group(1), match.group(2)
        if tag in ('ul', 'ol', 'dl'):
            if closing:
                if frames:
                    _close_open_item(match.start())
                    frames.pop()
            else:
                frames.append({'item': None})
            continue
        if not frames or closing:
            continue
        if tag in ('li', 'dd'):
            _close_open_item(match.start())
            frames[-1]['item'] = tag
        elif tag == 'dt':
            _close_open_item(match.start())

    while frames:
        _close_open_item(len(html))
        frames.pop()

    # Same position: earlier closers must end up first
    for position, _, closer in sorted(inserts, reverse=True):
        html = html[:position] + closer + html[position:]
    return html


# ===========================================
# PARAGRAPHS
# ===========================================
BLOCK_TAG_PATTERN = re.compile(
    r'</?(?:h[1-6]|ul|ol|dl|table|aside|blockquote|section|hr|li|dt|dd|thead|tbody'
    r'|tr|th|td|caption|p|div|nav)\b'
)


def wrap_paragraphs(html: str) -> str:
    """
    Wrap loose text chunks (separated by blank lines) in <p>.

    Chunks starting with a block tag or a footnote reference pass through;
    otherwise the text before the first block tag is wrapped.
    """
    chunks = []
    for chunk in re.split(r'\n\s*\n', html):
        chunk = chunk.strip()
        if not chunk:
            continue
        if BLOCK_TAG_PATTERN.match(chunk) or chunk.startswith('<sup'):
            chunks.append(chunk)
            continue
        block = BLOCK_TAG_PATTERN.search(chunk)
        if block is None:
            chunks.append(f'<p>{chunk}</p>')
        else:
            lead = chunk[:block.start()].rstrip()
            chunks.append(f'<p>{lead}</p>{chunk[block.start():]}' if lead else chunk[block.start():])
    return '\n\n'.join(chunks)
