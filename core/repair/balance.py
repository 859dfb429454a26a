"""
Balance Repairer - open/close marker balancing for semi-trusted markup

Repairs text produced by a language model so that every region opened with a
known marker is closed exactly once, in LIFO order. The repairer only inserts
or removes marker tokens (and trailing grouping characters); every other
character is left where it was.

Passes (run in this order by repair()):
    1. count_balance()          - append missing closers, drop orphan closers
    2. swap_adjacent_closers()  - \\end{table}\\end{tabularx} -> inner first
    3. repair_nesting()         - synthesize an inner closer that was dropped
    4. count_balance()          - safety net after pass 3 edits
    5. enforce_order()          - LIFO across all names, whatever is left
    6. balance_braces()         - close unescaped '{' groups at the tail

Guarantees:
    - Never raises; ambiguous input yields a best-effort buffer
    - Idempotent: repair(repair(x)) == repair(x)
    - Names outside the vocabulary are never touched

Usage:
    >>> vocab = MarkerVocabulary(names=('tipbox', 'table', 'tabularx'),
    ...                          nesting_pairs=(('table', 'tabularx'),))
    >>> repaired = BalanceRepairer(vocab).repair(generated_latex)
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from config.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MarkerVocabulary:
    """
    Closed vocabulary of named region markers.

    Attributes:
        names: Marker names the repairer is allowed to touch
        nesting_pairs: (outer, inner) pairs where inner conventionally sits inside outer
        open_prefix / close_prefix / suffix: token shape, e.g. '\\begin{' + name + '}'
        escape_char: Grouping characters preceded by this are not counted
        group_open / group_close: Grouping characters balanced by pass 5
    """
    names: Tuple[str, ...]
    nesting_pairs: Tuple[Tuple[str, str], ...] = ()
    open_prefix: str = '\\begin{'
    close_prefix: str = '\\end{'
    suffix: str = '}'
    escape_char: str = '\\'
    group_open: str = '{'
    group_close: str = '}'

    def open_token(self, name: str) -> str:
        return f"{self.open_prefix}{name}{self.suffix}"

    def close_token(self, name: str) -> str:
        return f"{self.close_prefix}{name}{self.suffix}"

    @property
    def nesting_names(self) -> Tuple[str, ...]:
        """Names taking part in at least one containment relationship."""
        ordered: List[str] = []
        for outer, inner in self.nesting_pairs:
            for name in (outer, inner):
                if name not in ordered:
                    ordered.append(name)
        return tuple(ordered)

    def nests_inside(self, inner: str, outer: str) -> bool:
        return (outer, inner) in self.nesting_pairs

    def token_pattern(self, names: Optional[Tuple[str, ...]] = None) -> re.Pattern:
        """Regex matching open/close tokens for names; groups: kind, name."""
        names = names if names is not None else self.names
        alternation = '|'.join(re.escape(n) for n in sorted(names, key=len, reverse=True))
        return re.compile(
            '(?P<kind>' + re.escape(self.open_prefix) + '|' + re.escape(self.close_prefix) + ')'
            '(?P<name>' + alternation + ')' + re.escape(self.suffix)
        )

    def is_open(self, match: re.Match) -> bool:
        return match.group('kind') == self.open_prefix


@dataclass
class BalanceLedger:
    """
    Transient per-pass state: open-marker stack plus open/close counters.

    A close pops the most recent open entry with the same name, wherever it
    sits in the stack; a close with no open entry is counted but pops nothing.
    """
    stack: List[str] = field(default_factory=list)
    opens: Counter = field(default_factory=Counter)
    closes: Counter = field(default_factory=Counter)

    def open(self, name: str) -> None:
        self.stack.append(name)
        self.opens[name] += 1

    def close(self, name: str) -> bool:
        """Record a close. Returns True if it matched an open entry."""
        self.closes[name] += 1
        for idx in range(len(self.stack) - 1, -1, -1):
            if self.stack[idx] == name:
                del self.stack[idx]
                return True
        return False

    def missing(self, name: str) -> int:
        """How many closers name still needs (opens - closes, floored at 0)."""
        return max(self.opens[name] - self.closes[name], 0)

    def closing_sequence(self) -> List[str]:
        """
        Names to close, innermost first, so that opens == closes per name.

        Walks the stack from the top; an entry is emitted only while its name
        still needs closers, which keeps the count exact when a closer appeared
        before its opener.
        """
        needed = {name: self.missing(name) for name in set(self.stack)}
        sequence = []
        for name in reversed(self.stack):
            if needed.get(name, 0) > 0:
                sequence.append(name)
                needed[name] -= 1
        return sequence


@dataclass
class RepairReport:
    """What a repair run changed, for logging and diagnostics."""
    appended_closers: List[str] = field(default_factory=list)
    removed_orphans: List[str] = field(default_factory=list)
    swapped_pairs: List[Tuple[str, str]] = field(default_factory=list)
    inserted_closers: List[str] = field(default_factory=list)
    appended_braces: int = 0
    unmatched_braces: int = 0

    @property
    def changed(self) -> bool:
        return bool(
            self.appended_closers or self.removed_orphans or self.swapped_pairs
            or self.inserted_closers or self.appended_braces
        )

    def merge(self, other: 'RepairReport') -> None:
        """Fold a later run's report into this one."""
        self.appended_closers.extend(other.appended_closers)
        self.removed_orphans.extend(other.removed_orphans)
        self.swapped_pairs.extend(other.swapped_pairs)
        self.inserted_closers.extend(other.inserted_closers)
        self.appended_braces += other.appended_braces
        self.unmatched_braces = other.unmatched_braces

    def to_dict(self) -> Dict[str, object]:
        return {
            'appended_closers': list(self.appended_closers),
            'removed_orphans': list(self.removed_orphans),
            'swapped_pairs': [list(pair) for pair in self.swapped_pairs],
            'inserted_closers': list(self.inserted_closers),
            'appended_braces': self.appended_braces,
            'unmatched_braces': self.unmatched_braces,
        }

    def summary(self) -> str:
        return (
            f"appended={len(self.appended_closers)} removed={len(self.removed_orphans)} "
            f"swapped={len(self.swapped_pairs)} inserted={len(self.inserted_closers)} "
            f"braces+={self.appended_braces}"
        )


class BalanceRepairer:
    """
    Generic marker balancing over a MarkerVocabulary.

    Each pass is a pure function of its input text; the report argument only
    collects what happened.
    """

    def __init__(self, vocabulary: MarkerVocabulary):
        self.vocabulary = vocabulary
        self._tokens = vocabulary.token_pattern()
        self._nesting_tokens = (
            vocabulary.token_pattern(vocabulary.nesting_names)
            if vocabulary.nesting_pairs else None
        )

    # ------------------------------------------------------------------
    # Pass 1
    # ------------------------------------------------------------------

    def count_balance(self, text: str, report: RepairReport) -> str:
        """Make opens == closes per name: drop the first orphan closers, append missing ones."""
        vocab = self.vocabulary
        opens: Counter = Counter()
        closes: Counter = Counter()
        for match in self._tokens.finditer(text):
            (opens if vocab.is_open(match) else closes)[match.group('name')] += 1

        excess = {name: closes[name] - opens[name] for name in closes if closes[name] > opens[name]}
        if excess:
            def _drop(match: re.Match) -> str:
                name = match.group('name')
                if not vocab.is_open(match) and excess.get(name, 0) > 0:
                    excess[name] -= 1
                    report.removed_orphans.append(name)
                    logger.debug(f"Removed orphan {vocab.close_token(name)}")
                    return ''
                return match.group(0)

            text = self._tokens.sub(_drop, text)

        ledger = BalanceLedger()
        for match in self._tokens.finditer(text):
            name = match.group('name')
            if vocab.is_open(match):
                ledger.open(name)
            else:
                ledger.close(name)

        for name in ledger.closing_sequence():
            text += '\n' + vocab.close_token(name)
            report.appended_closers.append(name)
            logger.debug(f"Appended missing {vocab.close_token(name)}")
        return text

    # ------------------------------------------------------------------
    # Pass 2
    # ------------------------------------------------------------------

    def swap_adjacent_closers(self, text: str, report: RepairReport) -> str:
        """
        Swap close-outer immediately followed by close-inner.

        Only when the scan so far shows inner as the innermost open region with
        outer directly around it; correctly ordered closers are left alone.
        """
        if self._nesting_tokens is None:
            return text

        vocab = self.vocabulary
        tokens = list(self._nesting_tokens.finditer(text))
        stack: List[str] = []
        edits: List[Tuple[int, int, str]] = []
        idx = 0
        while idx < len(tokens):
            match = tokens[idx]
            name = match.group('name')
            idx += 1
            if vocab.is_open(match):
                stack.append(name)
                continue
            if stack and stack[-1] == name:
                stack.pop()
                continue
            if idx < len(tokens) and len(stack) >= 2 and stack[-2] == name:
                inner = stack[-1]
                following = tokens[idx]
                between = text[match.end():following.start()]
                if (vocab.nests_inside(inner, name) and not vocab.is_open(following)
                        and following.group('name') == inner and not between.strip()):
                    edits.append((match.start(), following.end(),
                                  following.group(0) + between + match.group(0)))
                    report.swapped_pairs.append((name, inner))
                    logger.debug(f"Nesting fix: swapped {match.group(0)} / {following.group(0)}")
                    stack.pop()
                    stack.pop()
                    idx += 1
                    continue
            if name in stack:
                del stack[len(stack) - 1 - stack[::-1].index(name)]

        for start, end, replacement in reversed(edits):
            text = text[:start] + replacement + text[end:]
        return text

    # ------------------------------------------------------------------
    # Pass 3
    # ------------------------------------------------------------------

    def repair_nesting(self, text: str, report: RepairReport) -> str:
        """
        Insert a dropped inner closer before its outer closer.

        Only names in the containment vocabulary are tracked. When a closer is
        synthesized, the next orphan closer of that name is removed so the
        per-name counts stay equal.
        """
        if self._nesting_tokens is None:
            return text

        vocab = self.vocabulary
        stack: List[str] = []
        owed: Counter = Counter()
        edits: List[Tuple[int, int, str]] = []  # (start, end, replacement)

        for match in self._nesting_tokens.finditer(text):
            name = match.group('name')
            if vocab.is_open(match):
                stack.append(name)
                continue
            if stack and stack[-1] == name:
                stack.pop()
                continue
            if len(stack) >= 2 and stack[-2] == name and vocab.nests_inside(stack[-1], name):
                inner = stack[-1]
                edits.append((match.start(), match.start(), vocab.close_token(inner) + '\n'))
                report.inserted_closers.append(inner)
                logger.debug(f"Nesting fix: inserting missing {vocab.close_token(inner)} "
                             f"before {vocab.close_token(name)}")
                owed[inner] += 1
                stack.pop()
                stack.pop()
                continue
            if owed[name] > 0 and name not in stack:
                edits.append((match.start(), match.end(), ''))
                owed[name] -= 1
                report.removed_orphans.append(name)

        for start, end, replacement in reversed(edits):
            text = text[:start] + replacement + text[end:]
        return text

    # ------------------------------------------------------------------
    # Pass 5
    # ------------------------------------------------------------------

    def enforce_order(self, text: str, report: RepairReport) -> str:
        """
        Make every close match the innermost open region, over all names.

        A closer whose region is open further down the stack gets closers for
        the regions above it inserted first; a closer with no open region is
        removed. Regions still open at the end are closed innermost first.
        """
        vocab = self.vocabulary
        stack: List[str] = []
        edits: List[Tuple[int, int, str]] = []

        for match in self._tokens.finditer(text):
            name = match.group('name')
            if vocab.is_open(match):
                stack.append(name)
                continue
            if stack and stack[-1] == name:
                stack.pop()
                continue
            if name in stack:
                inserted = ''
                while stack[-1] != name:
                    inner = stack.pop()
                    inserted += vocab.close_token(inner) + '\n'
                    report.inserted_closers.append(inner)
                    logger.debug(f"Order fix: inserting {vocab.close_token(inner)} "
                                 f"before {match.group(0)}")
                stack.pop()
                edits.append((match.start(), match.start(), inserted))
            else:
                edits.append((match.start(), match.end(), ''))
                report.removed_orphans.append(name)
                logger.debug(f"Order fix: removed {match.group(0)} with no open region")

        for start, end, replacement in reversed(edits):
            text = text[:start] + replacement + text[end:]
        for name in reversed(stack):
            text += '\n' + vocab.close_token(name)
            report.appended_closers.append(name)
        return text

    # ------------------------------------------------------------------
    # Pass 6
    # ------------------------------------------------------------------

    def balance_braces(self, text: str, report: RepairReport) -> str:
        """
        Append closers for unescaped grouping characters left open.

        A closer seen at depth 0 has no opener to match; it is left in place
        and counted in report.unmatched_braces.
        """
        vocab = self.vocabulary
        depth = 0
        unmatched = 0
        previous = ''
        for ch in text:
            if previous != vocab.escape_char:
                if ch == vocab.group_open:
                    depth += 1
                elif ch == vocab.group_close:
                    if depth == 0:
                        unmatched += 1
                    else:
                        depth -= 1
            previous = ch

        if unmatched:
            logger.debug(f"Left {unmatched} unmatched '{vocab.group_close}' as-is")
        report.unmatched_braces = unmatched
        if depth > 0:
            if text.endswith(vocab.escape_char):
                # the first closer would be escaped
                text += ' '
            text += vocab.group_close * depth
            report.appended_braces += depth
        return text

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def repair_with_report(self, text: str) -> Tuple[str, RepairReport]:
        """Run all passes and return the repaired text with a report."""
        report = RepairReport()
        text = self.count_balance(text, report)
        text = self.swap_adjacent_closers(text, report)
        text = self.repair_nesting(text, report)
        text = self.count_balance(text, report)
        text = self.enforce_order(text, report)
        text = self.balance_braces(text, report)
        if report.changed:
            logger.info(f"Balance repair: {report.summary()}")
        return text, report

    def repair(self, text: str) -> str:
        return self.repair_with_report(text)[0]
