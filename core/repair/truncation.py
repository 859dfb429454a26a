"""
Truncation Repairer - close a JSON value that was cut off mid-stream

The structure generator emits a JSON outline; when the model hits its token
limit the text simply stops, often inside a string or right after a key.
This module rewinds to the last complete element and closes every open
container, innermost first.

Algorithm:
    1. Locate the value start (first '{' or '['). None found -> input returned unchanged.
    2. Tokenize strictly (strings with escapes, numbers, true/false/null,
       punctuation) while tracking the container stack in a BalanceLedger.
    3. Record a safe point after the outermost open, every complete value
       and every container close: cutting there and closing the stack is
       always valid JSON. A nested open is not a safe point, so a cut right
       after '{' or '[' drops the element it started.
    4. If the value completes, return it (trailing prose dropped).
       Otherwise cut at the last safe point and append the closers.

A number at the very end of the buffer, or followed by a character that could
continue it, counts as incomplete and is dropped rather than guessed.
"""

import re
from typing import Optional

from config.logging_config import get_logger
from core.repair.balance import BalanceLedger

logger = get_logger(__name__)


_TOKEN_PATTERN = re.compile(r'''
      (?P<ws>\s+)
    | (?P<punct>[{}\[\]:,])
    | (?P<string>"(?:[^"\\\x00-\x1f]|\\["\\/bfnrt]|\\u[0-9a-fA-F]{4})*")
    | (?P<number>-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?)
    | (?P<literal>true|false|null)
''', re.VERBOSE)

_NUMBER_CONTINUATION = frozenset('0123456789.eE+-')

_CLOSERS = {'{': '}', '[': ']'}

# Parser expectations inside the innermost container
_VALUE = 'value'
_VALUE_OR_END = 'value_or_end'
_KEY = 'key'
_KEY_OR_END = 'key_or_end'
_COLON = 'colon'
_COMMA_OR_END = 'comma_or_end'


def find_value_start(text: str) -> int:
    """Index of the first '{' or '[', or -1."""
    candidates = [idx for idx in (text.find('{'), text.find('[')) if idx != -1]
    return min(candidates) if candidates else -1


def _number_is_complete(text: str, end: int) -> bool:
    return end < len(text) and text[end] not in _NUMBER_CONTINUATION


def repair_truncated_json(text: str) -> str:
    """
    Return a JSON text that parses, dropping only the incomplete tail element.

    Args:
        text: Raw generator output believed to hold a (possibly truncated)
            JSON object or array, optionally surrounded by prose

    Returns:
        The repaired JSON value, or text unchanged when it holds no '{' / '['
    """
    start = find_value_start(text)
    if start == -1:
        return text

    ledger = BalanceLedger()
    expect = _VALUE
    safe_end: Optional[int] = None
    safe_closers = ''
    pos = start
    length = len(text)

    def _closers() -> str:
        return ''.join(_CLOSERS[name] for name in ledger.closing_sequence())

    while pos < length:
        match = _TOKEN_PATTERN.match(text, pos)
        if match is None:
            break
        kind = match.lastgroup
        token = match.group()

        if kind == 'ws':
            pos = match.end()
            continue

        container = ledger.stack[-1] if ledger.stack else None

        if kind == 'punct':
            if token in _CLOSERS:
                if expect not in (_VALUE, _VALUE_OR_END):
                    break
                nested = bool(ledger.stack)
                ledger.open(token)
                expect = _KEY_OR_END if token == '{' else _VALUE_OR_END
                if nested:
                    # An element that has only just started is not kept
                    pos = match.end()
                    continue
            elif token in '}]':
                wanted = '{' if token == '}' else '['
                if container != wanted or expect not in (_KEY_OR_END, _VALUE_OR_END, _COMMA_OR_END):
                    break
                ledger.close(wanted)
                if not ledger.stack:
                    end = match.end()
                    if end < length and text[end:].strip():
                        logger.debug(f"Dropped {length - end} chars after complete JSON value")
                    return text[start:end]
                expect = _COMMA_OR_END
            elif token == ':':
                if expect != _COLON:
                    break
                expect = _VALUE
                pos = match.end()
                continue
            else:  # ','
                if expect != _COMMA_OR_END:
                    break
                expect = _KEY if container == '{' else _VALUE
                pos = match.end()
                continue
        elif kind == 'string':
            if expect in (_KEY, _KEY_OR_END):
                expect = _COLON
                pos = match.end()
                continue
            if expect not in (_VALUE, _VALUE_OR_END):
                break
            expect = _COMMA_OR_END
        else:  # number / literal
            if expect not in (_VALUE, _VALUE_OR_END):
                break
            if kind == 'number' and not _number_is_complete(text, match.end()):
                break
            expect = _COMMA_OR_END

        pos = match.end()
        safe_end = pos
        safe_closers = _closers()

    if safe_end is None:
        # The start marker itself could not be tokenized; nothing to salvage
        return text

    repaired = text[start:safe_end] + safe_closers
    logger.info(
        f"Repaired truncated JSON: kept {safe_end - start} of {length - start} chars, "
        f"closed {len(safe_closers)} container(s)"
    )
    return repaired
