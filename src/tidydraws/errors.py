"""Exception hierarchy for reshaping and summarizing posterior draws.

Every error carries the name of the operation that raised it so messages
read like ``[spread_draws] ...``. Each concrete error also inherits from
the closest built-in exception, so callers can catch either the specific
class or the standard type.
"""

from __future__ import annotations


class TidyDrawsError(Exception):
    """Base exception for tidydraws failures.

    Attributes:
        message: Human-readable error description.
        operation: Name of the operation where the error occurred (optional).

    Example:
        >>> raise TidyDrawsError("Something went wrong", operation="expand")
        TidyDrawsError: [expand] Something went wrong
    """

    def __init__(self, message: str, operation: str = "") -> None:
        """Initialize error.

        Args:
            message: Error description.
            operation: Operation name (optional).
        """
        self.message = message
        self.operation = operation
        super().__init__(str(self))

    def __str__(self) -> str:
        """Format error with operation prefix if available."""
        if self.operation:
            return f"[{self.operation}] {self.message}"
        return self.message


class DimensionMismatchError(TidyDrawsError, ValueError):
    """Shape inconsistency between a variable and a query.

    Raised when:
    - More index bindings are given than the variable has dimensions
    - Two joined variables share an index name with different sizes
    - Variables in one store disagree on the number of draws
    """


class OutOfRangeIndexError(TidyDrawsError, IndexError):
    """An index position falls outside a recovered level set.

    Indices are never clamped; a dimension of size 4 bound to a factor with
    3 levels fails here instead of mislabeling the fourth position.
    """


class EmptyPartitionError(TidyDrawsError, ValueError):
    """A summarization group has no samples for a value column."""


class AmbiguousLevelError(TidyDrawsError, ValueError):
    """Comparison input does not have exactly one row per draw and level."""


class UnknownVariableError(TidyDrawsError, KeyError):
    """Requested variable is absent from the parameter store."""
