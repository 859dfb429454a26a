"""
LaTeX Text Helpers

Small, dependency-free helpers shared by the sanitizer and the XHTML
transpiler: code-fence and document-scaffolding stripping, brace-aware
command argument handling, and word counting.

Usage:
    >>> from core.latex.latex_text import replace_command
    >>> replace_command(r"\\section{Intro}", "section", lambda arg: arg.upper())
    'INTRO'
"""

import re
from typing import Callable, Optional, Tuple


# Markdown code fences the generator sometimes wraps its whole answer in
CODE_FENCE_OPEN_PATTERN = re.compile(r'\A\s*```(?:latex|tex)?[ \t]*\n?')
CODE_FENCE_CLOSE_PATTERN = re.compile(r'\n?```\s*\Z')

# Wrapping-document scaffolding: everything up to \begin{document}, the closing
# \end{document}, and stray \usepackage lines
PREAMBLE_PATTERN = re.compile(r'\\documentclass.*?\\begin\{document\}', re.DOTALL)
END_DOCUMENT_PATTERN = re.compile(r'\\end\{document\}')
USEPACKAGE_PATTERN = re.compile(r'\\usepackage(\[[^\]]*\])?\{[^}]*\}')

# Commands that only make sense for a compiled PDF
PAGE_COMMAND_PATTERN = re.compile(
    r'\\(?:clearpage|newpage|tableofcontents|maketitle)(?![a-zA-Z])'
    r'|\\thispagestyle\{[^}]*\}'
)

WORD_COUNT_STRIP_PATTERN = re.compile(r'\\[a-zA-Z]+(\{[^}]*\})?')


def strip_code_fences(text: str) -> str:
    """Remove a ```latex / ```tex / ``` fence wrapping the whole text."""
    text = CODE_FENCE_OPEN_PATTERN.sub('', text)
    return CODE_FENCE_CLOSE_PATTERN.sub('', text)


def strip_document_scaffolding(text: str, page_commands: bool = False) -> str:
    """
    Remove preamble/postamble so only the chapter body remains.

    Args:
        text: LaTeX that may contain \\documentclass ... \\begin{document}
        page_commands: Also drop \\clearpage, \\newpage, \\tableofcontents,
            \\maketitle and \\thispagestyle{...}

    Returns:
        Text without document scaffolding. Idempotent.
    """
    text = PREAMBLE_PATTERN.sub('', text)
    text = END_DOCUMENT_PATTERN.sub('', text)
    text = USEPACKAGE_PATTERN.sub('', text)
    if page_commands:
        text = PAGE_COMMAND_PATTERN.sub('', text)
    return text


def find_group_end(text: str, start: int) -> int:
    """
    Find the end of a brace group.

    Args:
        text: Source text
        start: Index of the opening '{'

    Returns:
        Index just past the matching '}', or -1 if the group never closes.
        Escaped braces (\\{ and \\}) are skipped.
    """
    depth = 0
    i = start
    length = len(text)
    while i < length:
        ch = text[i]
        if ch == '\\':
            i += 2
            continue
        if ch == '{':
            depth += 1
        elif ch == '}':
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return -1


def read_group(text: str, pos: int) -> Optional[Tuple[str, int]]:
    """
    Read a brace group starting at pos (leading spaces allowed).

    Returns:
        (inner text, index past the group) or None if there is no complete group.
    """
    while pos < len(text) and text[pos] in ' \t':
        pos += 1
    if pos >= len(text) or text[pos] != '{':
        return None
    end = find_group_end(text, pos)
    if end == -1:
        return None
    return text[pos + 1:end - 1], end


def skip_optional_arg(text: str, pos: int) -> int:
    """Skip a [...] optional argument at pos, if present."""
    probe = pos
    while probe < len(text) and text[probe] in ' \t':
        probe += 1
    if probe < len(text) and text[probe] == '[':
        close = text.find(']', probe)
        if close != -1:
            return close + 1
    return pos


def replace_command(
    text: str,
    name: str,
    render: Callable[..., str],
    allow_star: bool = True,
    arg_count: int = 1,
) -> str:
    """
    Replace every \\name[opt]{arg}... with render(arg, ...), matching braces properly.

    Commands with fewer than arg_count complete arguments are left untouched.

    Args:
        text: Source text
        name: Command name without backslash
        render: Called with the argument texts; its result replaces the command
        allow_star: Also match the starred form (\\section*{...})
        arg_count: Number of brace arguments the command takes

    Returns:
        Text with the command replaced
    """
    pattern = re.compile(
        r'\\' + re.escape(name) + r'(?![a-zA-Z])' + (r'\*?' if allow_star else '')
    )
    parts = []
    pos = 0
    while True:
        match = pattern.search(text, pos)
        if not match:
            break
        cursor = skip_optional_arg(text, match.end())
        args = []
        for _ in range(arg_count):
            group = read_group(text, cursor)
            if group is None:
                break
            args.append(group[0])
            cursor = group[1]
        if len(args) < arg_count:
            parts.append(text[pos:match.end()])
            pos = match.end()
            continue
        parts.append(text[pos:match.start()])
        parts.append(render(*args))
        pos = cursor
    parts.append(text[pos:])
    return ''.join(parts)


def count_words(latex: str) -> int:
    """Count words in LaTeX content after stripping commands."""
    return len([w for w in WORD_COUNT_STRIP_PATTERN.sub('', latex).split() if w])
