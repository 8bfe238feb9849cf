"""Errors raised while learning or applying a CAIM discretization."""


class CAIMError(Exception):
    """Base class for all discretization errors."""


class EmptyColumn(CAIMError, ValueError):
    """A selected column has no usable (value, class label) pair."""

    def __init__(self, column):
        self.column = column
        super().__init__(
            "Column '{}' has no non-missing values with a class label; "
            "it cannot be discretized.".format(column))


class IllegalBoundary(CAIMError, ValueError):
    """A boundary lies outside the open range of the scheme or already exists."""

    def __init__(self, value, reason):
        self.value = value
        super().__init__("Illegal boundary {!r}: {}".format(value, reason))


class Cancelled(CAIMError):
    """Cooperative cancellation was requested."""

    def __init__(self, message="Execution cancelled"):
        super().__init__(message)


class UnknownColumn(CAIMError, ValueError):
    """A configured column is not part of the input table."""

    def __init__(self, column, role='column to bin'):
        self.column = column
        super().__init__(
            "The selected {} '{}' does not exist in the input data table."
            .format(role, column))
