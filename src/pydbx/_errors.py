"""Exception hierarchy for SQL building and record mapping."""


class DbxError(Exception):
    """Base exception for pydbx errors.

    Provides dual messaging: a sanitized user-facing message and
    internal details for logging.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped

    def internal(self) -> str:
        return self.internal_details


class MissingParameterError(DbxError):
    """Raised when a named placeholder has no bound value."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Named parameter not found: {name}",
            f"placeholder {{:{name}}} is referenced by the SQL but was not bound",
        )
        self.name = name


class UnsupportedOperationError(DbxError):
    """Raised when a dialect cannot express the requested operation."""

    def __init__(self, dialect: str, operation: str) -> None:
        super().__init__(f"{operation} is not supported by the {dialect} dialect")
        self.dialect = dialect
        self.operation = operation


class InvalidLikeEscapeError(DbxError):
    """Raised when a LIKE escape table does not hold from/to pairs."""


class ModelError(DbxError):
    """Base class for record mapping failures."""


class InvalidModelError(ModelError):
    """Raised when a value is not a mappable record."""


class MissingPrimaryKeyError(ModelError):
    """Raised when a record type has no resolvable primary key."""


class CompositePrimaryKeyError(ModelError):
    """Raised when a single-key lookup targets a composite primary key."""
