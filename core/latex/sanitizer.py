"""
Markup Sanitizer - repair generated chapter LaTeX before it is stored

Model output arrives wrapped in code fences, sometimes with a full document
preamble, copies of prompt instructions, unclosed environments and dangling
braces. The sanitizer turns it into a self-contained, balanced chapter body.

Pipeline (order matters):
    1. strip code fences             (```latex ... ```)
    2. strip document scaffolding    (\\documentclass ... \\begin{document}, \\usepackage)
    3. strip prompt echoes           (checklist lines, instruction headers, \\begin{...})
    4. strip a dangling command      (\\begin{tab at the very end of a cut-off answer)
    5. AI phrase cleanup             (optional, language aware)
    6. balance repair                (environments + braces, see core.repair.balance)
    7. collapse blank lines          (3+ blank lines -> 2)

Everything that deletes text runs before the balance repair, so a removed
line can never unbalance the result afterwards. The steps are rerun until the
text stops changing (at most MAX_SANITIZE_ROUNDS times), which is what makes
sanitize() idempotent when one step exposes work for an earlier one.

Example usage:
    >>> from core.latex.sanitizer import sanitize_generated_latex
    >>> clean = sanitize_generated_latex(model_output)
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from config.constants import (
    KNOWN_ENVIRONMENTS, MAX_BLANK_LINES, MAX_SANITIZE_ROUNDS, NESTING_PAIRS,
    PROMPT_ECHO_PREFIXES, PROMPT_WARNING_PREFIXES,
)
from config.logging_config import get_logger
from config.settings import settings
from core.latex.latex_text import count_words, strip_code_fences, strip_document_scaffolding
from core.latex.phrase_cleaner import PhraseCleanStats, remove_ai_phrases
from core.repair.balance import BalanceRepairer, MarkerVocabulary, RepairReport

logger = get_logger(__name__)


# Region markers the sanitizer balances
LATEX_VOCABULARY = MarkerVocabulary(
    names=KNOWN_ENVIRONMENTS,
    nesting_pairs=NESTING_PAIRS,
)

# ===========================================
# PROMPT ECHO PATTERNS
# ===========================================
EMPTY_ENVIRONMENT_PATTERN = re.compile(r'\\(?:begin|end)\{\.{0,3}\}')
CHECKLIST_LINE_PATTERN = re.compile(r'^□\s+.*$', re.MULTILINE)
ECHO_HEADER_PATTERN = re.compile(
    r'^(?:' + '|'.join(re.escape(p) for p in PROMPT_ECHO_PREFIXES) + r').*$',
    re.MULTILINE,
)
ECHO_WARNING_PATTERN = re.compile(
    r'^⚠️?\s+(?:' + '|'.join(re.escape(p) for p in PROMPT_WARNING_PREFIXES) + r').*$',
    re.MULTILINE,
)

# A region or scaffolding command cut off inside its name argument at the very
# end of the text; closing its brace would mint a marker nobody wrote
DANGLING_COMMAND_PATTERN = re.compile(
    r'\\(?:begin|end|documentclass|usepackage)(?:\[[^\]]*\])?\{[^{}]*\Z'
)


@dataclass
class SanitizerConfig:
    """
    Configuration for the markup sanitizer.

    Attributes:
        strip_prompt_echoes: Remove instruction text the model copied from its prompt
        remove_ai_phrases: Run the AI phrase cleaner (off by default)
        language: Chapter language, used by the phrase cleaner
        max_blank_lines: Longest run of blank lines kept
    """
    strip_prompt_echoes: bool = True
    remove_ai_phrases: bool = False
    language: str = 'en'
    max_blank_lines: int = MAX_BLANK_LINES

    @classmethod
    def from_settings(cls, language: Optional[str] = None) -> 'SanitizerConfig':
        return cls(
            strip_prompt_echoes=settings.strip_prompt_echoes,
            remove_ai_phrases=settings.remove_ai_phrases,
            language=language or settings.default_language,
            max_blank_lines=settings.max_blank_lines,
        )


@dataclass
class SanitizeResult:
    """Sanitized text plus what was changed on the way"""
    text: str
    repair: RepairReport = field(default_factory=RepairReport)
    echo_lines_removed: int = 0
    phrase_stats: PhraseCleanStats = field(default_factory=PhraseCleanStats)
    word_count: int = 0

    def to_dict(self) -> dict:
        return {
            'repair': self.repair.to_dict(),
            'echo_lines_removed': self.echo_lines_removed,
            'phrases': self.phrase_stats.to_dict(),
            'word_count': self.word_count,
        }


def strip_prompt_echoes(text: str) -> Tuple[str, int]:
    """
    Remove instruction fragments the model echoed into its answer.

    Returns:
        (cleaned text, number of removed fragments)
    """
    removed = 0
    for pattern in (EMPTY_ENVIRONMENT_PATTERN, CHECKLIST_LINE_PATTERN,
                    ECHO_HEADER_PATTERN, ECHO_WARNING_PATTERN):
        text, hits = pattern.subn('', text)
        removed += hits
    return text, removed


def strip_dangling_command(text: str) -> str:
    """Drop a marker or package command cut off inside its braces at the end of text."""
    while True:
        stripped = DANGLING_COMMAND_PATTERN.sub('', text)
        if stripped == text:
            return text
        logger.debug(f"Dropped dangling command tail {text[len(stripped):]!r}")
        text = stripped


def collapse_blank_lines(text: str, max_blank_lines: int = MAX_BLANK_LINES) -> str:
    """Collapse runs of more than max_blank_lines blank lines."""
    keep = max_blank_lines + 1
    return re.sub(r'\n{%d,}' % (keep + 1), '\n' * keep, text)


class LatexSanitizer:
    """
    Generated-LaTeX sanitizer.

    Pure and idempotent: sanitize(sanitize(x)) == sanitize(x).
    """

    def __init__(self, config: Optional[SanitizerConfig] = None):
        self.config = config or SanitizerConfig()
        self.repairer = BalanceRepairer(LATEX_VOCABULARY)

    def sanitize_with_report(self, latex: str) -> SanitizeResult:
        """
        Run the full pipeline and report what changed.

        Args:
            latex: Raw model output

        Returns:
            SanitizeResult with the cleaned chapter body
        """
        result = SanitizeResult(text='')

        text = latex
        for round_number in range(1, MAX_SANITIZE_ROUNDS + 1):
            cleaned = self._run_pipeline(text, result)
            if cleaned == text:
                break
            text = cleaned
        else:
            logger.warning(f"Sanitizer output still changing after {MAX_SANITIZE_ROUNDS} rounds")

        if round_number > 2:
            logger.debug(f"Sanitizer settled after {round_number} rounds")
        result.text = text
        result.word_count = count_words(text)
        return result

    def _run_pipeline(self, text: str, result: SanitizeResult) -> str:
        """One pass of steps 1-7, accumulating into result."""
        text = strip_code_fences(text)
        text = strip_document_scaffolding(text)

        if self.config.strip_prompt_echoes:
            text, removed = strip_prompt_echoes(text)
            if removed:
                logger.debug(f"Stripped {removed} prompt echo fragment(s)")
                result.echo_lines_removed += removed

        text = strip_dangling_command(text)

        if self.config.remove_ai_phrases:
            text = remove_ai_phrases(text, self.config.language, result.phrase_stats)

        text, report = self.repairer.repair_with_report(text)
        result.repair.merge(report)
        return collapse_blank_lines(text, self.config.max_blank_lines)

    def sanitize(self, latex: str) -> str:
        return self.sanitize_with_report(latex).text


def sanitize_generated_latex(latex: str, config: Optional[SanitizerConfig] = None) -> str:
    """Sanitize model output with the given config (defaults from settings)."""
    return LatexSanitizer(config or SanitizerConfig.from_settings()).sanitize(latex)
