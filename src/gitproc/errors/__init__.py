"""Classification of failed git processes.

Example:
    >>> from gitproc.errors import ExecuteResult, classify
    >>> result = ExecuteResult(128, stderr="fatal: bad revision 'nope'\\n")
    >>> type(classify(result)).__name__
    'BadRevisionError'
"""

from gitproc.errors._classifier import (
    FATAL_EXIT_CODE,
    USAGE_EXIT_CODE,
    classify,
    raise_for_result,
)
from gitproc.errors._result import CANCELED, ExecuteResult
from gitproc.errors._rules import (
    GENERIC_RULES,
    PUSH_HINTS,
    SPECIFIC_RULES,
    ErrorFactory,
    ErrorRule,
    RuleMatch,
    push_error_type_for_hint,
)

__all__ = [
    "CANCELED",
    "FATAL_EXIT_CODE",
    "GENERIC_RULES",
    "PUSH_HINTS",
    "SPECIFIC_RULES",
    "USAGE_EXIT_CODE",
    "ErrorFactory",
    "ErrorRule",
    "ExecuteResult",
    "RuleMatch",
    "classify",
    "push_error_type_for_hint",
    "raise_for_result",
]
