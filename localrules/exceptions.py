"""Errors raised by the package.

Both are raised only at fold boundaries (dataset construction, context building,
single query prediction). Classifiers and evaluation never catch them, so a failure
in any fold aborts the whole evaluation.
"""


class InvalidInputError(ValueError):
    """Raised when given data or arguments cannot be processed, e.g. empty dataset,
    records with wrong number of values or index of excluded record out of range.
    """


class InvalidStateError(RuntimeError):
    """Raised on programming contract violations, e.g. asking distance context for
    a nominal distance of an attribute it has no learned table for.
    """
