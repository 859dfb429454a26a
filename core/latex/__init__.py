"""
LaTeX Module - generated chapter LaTeX cleanup

Markup Sanitizer: fences, scaffolding, prompt echoes, balance repair
Phrase cleaner: optional removal of stock model phrasing
Text helpers: brace-aware command handling shared with the EPUB transpiler

Example usage:
    >>> from core.latex import LatexSanitizer, SanitizerConfig
    >>> sanitizer = LatexSanitizer(SanitizerConfig(remove_ai_phrases=True, language='pl'))
    >>> clean = sanitizer.sanitize(model_output)
"""

from core.latex.latex_text import (
    count_words,
    strip_code_fences,
    strip_document_scaffolding,
    replace_command,
)
from core.latex.phrase_cleaner import PhraseCleanStats, remove_ai_phrases
from core.latex.sanitizer import (
    LATEX_VOCABULARY,
    SanitizerConfig,
    SanitizeResult,
    LatexSanitizer,
    sanitize_generated_latex,
)

__all__ = [
    'count_words',
    'strip_code_fences',
    'strip_document_scaffolding',
    'replace_command',
    'PhraseCleanStats',
    'remove_ai_phrases',
    'LATEX_VOCABULARY',
    'SanitizerConfig',
    'SanitizeResult',
    'LatexSanitizer',
    'sanitize_generated_latex',
]
