import enum
import typing

__all__ = [
    "DeckPropsError",
    "ValidationError",
    "OutOfBoundsError",
    "InvalidRegionError",
    "UnknownFieldError",
    "TypeMismatchError",
    "RecordError",
    "DeckSyntaxError",
    "ErrorKind",
    "KeywordError",
]


class DeckPropsError(Exception):
    """Base class for all deckprops-related errors."""

    pass


class ValidationError(DeckPropsError, ValueError):
    """Raised when input data fails validation checks."""

    pass


class OutOfBoundsError(ValidationError, IndexError):
    """Raised when a cell index lies outside the grid extent."""

    pass


class InvalidRegionError(ValidationError):
    """Raised when a box is inverted, outside the grid, or does not match its data."""

    pass


class UnknownFieldError(ValidationError, KeyError):
    """Raised when a record names a property that is not defined."""

    def __str__(self) -> str:
        # `KeyError` quotes its message by default
        return str(self.args[0]) if self.args else ""


class TypeMismatchError(ValidationError, TypeError):
    """Raised when a value cannot be stored in a property of the given kind."""

    pass


class RecordError(ValidationError):
    """Raised when a keyword record has missing or malformed items."""

    pass


class DeckSyntaxError(RecordError):
    """Raised when deck text cannot be split into keywords and records."""

    def __init__(self, message: str, line: typing.Optional[int] = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class ErrorKind(enum.Enum):
    """Kind of failure that stopped a keyword processing pass."""

    INVALID_REGION = "invalid_region"
    UNKNOWN_FIELD = "unknown_field"
    TYPE_MISMATCH = "type_mismatch"
    OUT_OF_BOUNDS = "out_of_bounds"
    INVALID_RECORD = "invalid_record"

    @classmethod
    def of(cls, exc: BaseException) -> "ErrorKind":
        """Classify an engine error."""
        if isinstance(exc, InvalidRegionError):
            return cls.INVALID_REGION
        if isinstance(exc, UnknownFieldError):
            return cls.UNKNOWN_FIELD
        if isinstance(exc, TypeMismatchError):
            return cls.TYPE_MISMATCH
        if isinstance(exc, OutOfBoundsError):
            return cls.OUT_OF_BOUNDS
        return cls.INVALID_RECORD


class KeywordError(DeckPropsError, ValueError):
    """
    Raised when a keyword record cannot be applied.

    Carries the failure kind, the offending record and its position in the
    record stream. The underlying error is chained as `__cause__`.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        record: typing.Any = None,
        position: typing.Optional[int] = None,
    ) -> None:
        self.kind = kind
        self.record = record
        self.position = position
        super().__init__(message)
