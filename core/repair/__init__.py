"""
Repair Module - deterministic recovery of model-generated text

Balance Repairer: open/close marker balancing over a closed vocabulary
Truncation Repairer: JSON cut off mid-stream is closed at the last safe point
Structured output: fence stripping + repair-on-failure JSON loading

Example usage:
    >>> from core.repair import load_structured_output
    >>> outline = load_structured_output(response_text, truncated=True)
"""

from core.repair.balance import (
    MarkerVocabulary,
    BalanceLedger,
    RepairReport,
    BalanceRepairer,
)
from core.repair.truncation import repair_truncated_json
from core.repair.structured_output import (
    StructuredOutputError,
    strip_code_fences,
    extract_json_block,
    load_structured_output,
)

__all__ = [
    'MarkerVocabulary',
    'BalanceLedger',
    'RepairReport',
    'BalanceRepairer',
    'repair_truncated_json',
    'StructuredOutputError',
    'strip_code_fences',
    'extract_json_block',
    'load_structured_output',
]
