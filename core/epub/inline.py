"""
Inline conversions for the XHTML transpiler: headings, emphasis, special
characters and the final sweep of leftover LaTeX commands.
"""

import re

from config.constants import HEADING_LEVELS
from core.latex.latex_text import read_group, replace_command, skip_optional_arg


# ===========================================
# HEADINGS + EMPHASIS
# ===========================================
INLINE_TAGS = {
    'textbf': ('<strong>', '</strong>'),
    'textit': ('<em>', '</em>'),
    'emph': ('<em>', '</em>'),
    'underline': ('<span class="underline">', '</span>'),
    'texttt': ('<code>', '</code>'),
}

# Argument with at most one level of nested braces, e.g. \textbf{x\footnote{y}}.
# Deeper nesting is reached on a later round, once the inner command is gone.
INLINE_PATTERN = re.compile(
    r'\\(textbf|textit|emph|underline|texttt)\s*\{((?:[^{}]|\{[^{}]*\})*)\}'
)

# A blank line inside an argument becomes a paragraph break in step 12
PARAGRAPH_BREAK_PATTERN = re.compile(r'\n[ \t]*\n\s*')


def convert_headings(text: str) -> str:
    """\\chapter ... \\subsubsection -> <h1> ... <h4>, each on its own block."""
    for command, tag, css_class in HEADING_LEVELS:
        text = replace_command(
            text, command,
            lambda title, tag=tag, css_class=css_class:
                f'\n\n<{tag} class="{css_class}">{title.strip()}</{tag}>\n\n',
        )
    return text


def convert_inline_formatting(text: str) -> str:
    """
    Bold, italic, underline and monospace.

    Rounds repeat until nothing changes, so \\textbf{\\textit{x}} becomes
    <strong><em>x</em></strong>. An argument spanning a blank line is closed
    before the break and reopened after it, keeping each paragraph well-formed.
    """
    def _render(match: re.Match) -> str:
        open_tag, close_tag = INLINE_TAGS[match.group(1)]
        body = PARAGRAPH_BREAK_PATTERN.sub(
            lambda brk: f'{close_tag}{brk.group(0)}{open_tag}', match.group(2)
        )
        return f'{open_tag}{body}{close_tag}'

    while True:
        converted = INLINE_PATTERN.sub(_render, text)
        if converted == text:
            return converted
        text = converted


# ===========================================
# SPECIAL CHARACTERS
# ===========================================
# Applied in order; later entries assume earlier ones already ran
SPECIAL_CHARACTERS = (
    (re.compile(r'---'), '—'),
    (re.compile(r'--'), '–'),
    (re.compile(r'``'), '“'),
    (re.compile(r"''"), '”'),
    (re.compile(r'`'), '‘'),
    (re.compile(r"'"), '’'),
    (re.compile(r'\\\\(?:\[[^\]]*\])?'), '<br/>'),
    (re.compile(r'~'), '&#160;'),
    (re.compile(r'\\%'), '%'),
    (re.compile(r'\\&'), '&amp;'),
    (re.compile(r'\\#'), '#'),
    (re.compile(r'\\\$'), '$'),
    (re.compile(r'\\_'), '_'),
    (re.compile(r'\\\{'), '&#123;'),
    (re.compile(r'\\\}'), '&#125;'),
    (re.compile(r'\\textbackslash(?:\{\})?'), '&#92;'),
    (re.compile(r'\\textasciitilde(?:\{\})?'), '~'),
    (re.compile(r'\\textasciicircum(?:\{\})?'), '^'),
    (re.compile(r'\\,'), ' '),
    # Last: any '&' that does not already start an entity
    (re.compile(r'&(?!#?\w+;)'), '&amp;'),
)


def convert_special_characters(text: str) -> str:
    """Typographic quotes and dashes, escaped characters, line breaks."""
    for pattern, replacement in SPECIAL_CHARACTERS:
        text = pattern.sub(replacement, text)
    return text


# ===========================================
# LEFTOVER COMMANDS
# ===========================================
# Brace arguments of \begin{name} that are layout parameters, not content
ENVIRONMENT_ARGUMENTS = {
    'minipage': 1,
    'wrapfigure': 2,
    'tabular': 1,
    'tabularx': 2,
    'multicols': 1,
}

ENVIRONMENT_TOKEN_PATTERN = re.compile(r'\\(begin|end)\{([^}]*)\}')
DISPLAY_MATH_DELIMITER_PATTERN = re.compile(r'\\[\[\]()]')
GENERIC_COMMAND_PATTERN = re.compile(r'\\[a-zA-Z]+\*?(?:\[[^\]]*\])?\{([^{}]*)\}')
BARE_COMMAND_PATTERN = re.compile(r'\\[a-zA-Z]+\*?[ \t]?')
CONTROL_SPACE_PATTERN = re.compile(r'\\ ')
CONTROL_SYMBOL_PATTERN = re.compile(r'\\[-@/!;:]')
GROUPING_BRACE_PATTERN = re.compile(r'[{}]')


def _strip_environment_tokens(text: str) -> str:
    parts = []
    pos = 0
    for match in ENVIRONMENT_TOKEN_PATTERN.finditer(text):
        if match.start() < pos:
            continue
        parts.append(text[pos:match.start()])
        pos = match.end()
        if match.group(1) == 'begin':
            pos = skip_optional_arg(text, pos)
            for _ in range(ENVIRONMENT_ARGUMENTS.get(match.group(2), 0)):
                group = read_group(text, pos)
                if group is None:
                    break
                pos = group[1]
    parts.append(text[pos:])
    return ''.join(parts)


def unwrap_color_commands(text: str) -> str:
    """Drop \\rowcolor / \\cellcolor / \\color and unwrap \\textcolor{c}{x} -> x."""
    for command in ('rowcolor', 'cellcolor', 'color'):
        text = replace_command(text, command, lambda _: '', allow_star=False)
    return replace_command(
        text, 'textcolor', lambda _color, content: content, allow_star=False, arg_count=2
    )


def strip_remaining_commands(text: str) -> str:
    """
    Remove or unwrap every LaTeX command still present.

    Cross references degrade to [ref] / [cite]; spacing and color commands
    disappear; stray captions become caption paragraphs; any other
    \\cmd[opt]{arg} becomes arg; bare commands and grouping braces go last.
    """
    text = replace_command(text, 'label', lambda _: '')
    text = replace_command(text, 'ref', lambda _: '[ref]')
    text = replace_command(text, 'cite', lambda _: '[cite]')
    for spacing in ('vspace', 'hspace'):
        text = replace_command(text, spacing, lambda _: '')
    text = re.sub(r'\\(?:noindent|centering)(?![a-zA-Z])\s*', '', text)
    text = replace_command(
        text, 'caption', lambda caption: f'<p class="table-caption">{caption.strip()}</p>'
    )
    text = unwrap_color_commands(text)
    text = _strip_environment_tokens(text)
    text = DISPLAY_MATH_DELIMITER_PATTERN.sub('', text)

    while True:
        unwrapped = GENERIC_COMMAND_PATTERN.sub(r'\1', text)
        if unwrapped == text:
            break
        text = unwrapped

    text = BARE_COMMAND_PATTERN.sub('', text)
    text = CONTROL_SPACE_PATTERN.sub(' ', text)
    text = CONTROL_SYMBOL_PATTERN.sub('', text)
    return GROUPING_BRACE_PATTERN.sub('', text)
