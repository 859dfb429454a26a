"""
AI Phrase Cleaner

Removes stock model phrasing ("It is worth noting that", "Furthermore,")
from generated chapter LaTeX. English rules always apply; language-specific
rule sets are layered on top for the chapter language.

Conservative by construction: only whole phrases are removed or swapped,
LaTeX commands and environments are never matched.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from config.logging_config import get_logger
logger = get_logger(__name__)


# (pattern, replacement). A replacement of None removes the phrase and
# capitalizes the word that followed it when the phrase opened a sentence.
PhraseRule = Tuple[re.Pattern, object]

UNIVERSAL_RULES: List[PhraseRule] = [
    (re.compile(r'^(Furthermore|Moreover|Additionally),?[ \t]*', re.MULTILINE), None),
    (re.compile(r'^(In conclusion|To summarize|In summary),?[ \t]*', re.MULTILINE), None),
    (re.compile(r"It(?:'s| is) worth noting that\s*", re.IGNORECASE), None),
    (re.compile(r"It(?:'s| is) important to (?:understand|note|recognize) that\s*", re.IGNORECASE), None),
    (re.compile(r"Let(?:'s| us) (?:dive into|explore|delve into)\s*", re.IGNORECASE), None),
    (re.compile(r"In today's rapidly (?:evolving|changing)\s*", re.IGNORECASE), None),
    (re.compile(r'In the dynamic world of\s*', re.IGNORECASE), None),
    (re.compile(r'\bgame[- ]changer\b', re.IGNORECASE), 'significant shift'),
    (re.compile(r'\bcutting[- ]edge\b', re.IGNORECASE), 'advanced'),
    (re.compile(r'\bparadigm shift\b', re.IGNORECASE), 'fundamental change'),
    (re.compile(r'(?<=\S) {2,}'), ' '),
]

LANGUAGE_RULES: Dict[str, List[PhraseRule]] = {
    'pl': [
        (re.compile(r'W dzisiejszym dynamicznie zmieniaj[aą]cym si[eę] [śs]wiecie\s*'), None),
        (re.compile(r'W erze cyfrowej transformacji\s*'), None),
        (re.compile(r'Nie jest tajemnic[aą],?\s*[żz]e\s*', re.IGNORECASE), None),
        (re.compile(r'Warto zauwa[żz]y[ćc],?\s*[żz]e\s*', re.IGNORECASE), None),
        (re.compile(r'Nale[żz]y podkre[śs]li[ćc],?\s*[żz]e\s*', re.IGNORECASE), None),
        (re.compile(r'Jest to niezwykle istotne', re.IGNORECASE), 'To istotne'),
        (re.compile(r'Co wi[ęe]cej,?\s*'), None),
        (re.compile(r'Ponadto,?\s*'), None),
        (re.compile(r'Podsumowuj[aą]c,?\s*'), None),
        (re.compile(r'szeroki wybór', re.IGNORECASE), 'wybór'),
        (re.compile(r'najwy[żz]sz(a|ej) jako[śs]ci', re.IGNORECASE), r'wysok\1 jakości'),
        (re.compile(r'idealne rozwi[aą]zanie', re.IGNORECASE), 'dobre rozwiązanie'),
    ],
}


@dataclass
class PhraseCleanStats:
    """Counts of phrases removed or replaced, keyed by rule pattern"""
    total_changes: int = 0
    rule_hits: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'total_changes': self.total_changes,
            'rule_hits': dict(self.rule_hits),
        }


def _remove_and_capitalize(text: str, pattern: re.Pattern) -> Tuple[str, int]:
    """Drop each match; uppercase the next letter when the match started a sentence."""
    count = 0
    parts = []
    pos = 0
    last = ''  # last non-blank character emitted so far
    for match in pattern.finditer(text):
        kept = text[pos:match.start()]
        parts.append(kept)
        kept = kept.rstrip(' \t')
        if kept:
            last = kept[-1]
        starts_sentence = not last or last in '\n.!?:'
        pos = match.end()
        if starts_sentence and pos < len(text) and text[pos].islower():
            last = text[pos].upper()
            parts.append(last)
            pos += 1
        count += 1
    parts.append(text[pos:])
    return ''.join(parts), count


def remove_ai_phrases(latex: str, language: str = 'en', stats: PhraseCleanStats = None) -> str:
    """
    Strip stock model phrasing from chapter LaTeX.

    Args:
        latex: Chapter LaTeX
        language: Chapter language code; selects extra rule sets
        stats: Optional stats object updated in place

    Returns:
        Cleaned LaTeX
    """
    rules = UNIVERSAL_RULES + LANGUAGE_RULES.get(language, [])

    for pattern, replacement in rules:
        if replacement is None:
            latex, hits = _remove_and_capitalize(latex, pattern)
        else:
            latex, hits = pattern.subn(replacement, latex)
        if hits and stats is not None:
            stats.total_changes += hits
            stats.rule_hits[pattern.pattern] = stats.rule_hits.get(pattern.pattern, 0) + hits

    if stats is not None and stats.total_changes:
        logger.debug(f"AI phrase cleanup ({language}): {stats.total_changes} changes")
    return latex
