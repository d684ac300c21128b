"""Exception hierarchy for the books data-access layer.

Every adapter catches the failures of its own driver (SQLAlchemy, pymongo)
and re-raises one of the classes below, chained with ``from``, so callers
only deal with this hierarchy whatever backend is configured.

Usage:
    from librolab.core.exceptions import SelectError

    raise SelectError(f"Error finding books by title: {title}") from e
"""

from typing import Any


class BooksDbError(Exception):
    """Base exception for all data-access errors.

    Attributes:
        code: Machine-readable error code (e.g., "SELECT_FAILED")
        message: Human-readable description of the attempted operation
        details: Additional error details (optional)
    """

    code: str = "BOOKS_DB_ERROR"
    message: str = "An unexpected database error occurred"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Override default message
            code: Override default error code
            details: Additional error details
        """
        if message:
            self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary a presentation layer can show.

        Returns:
            Error dictionary with code, message and, when present, details
            and the underlying cause.
        """
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            error["details"] = self.details
        if self.__cause__ is not None:
            error["cause"] = str(self.__cause__)
        return {"error": error}


class BooksDbConnectionError(BooksDbError):
    """Raised when connecting, disconnecting or using a closed connection fails."""

    code: str = "CONNECTION_FAILED"
    message: str = "Could not communicate with the database"


class SelectError(BooksDbError):
    """Raised when a read (login, search, listing) fails in the store."""

    code: str = "SELECT_FAILED"
    message: str = "Error reading from the database"


class InsertError(BooksDbError):
    """Raised when a write (book, author, genre, review, user) is rejected."""

    code: str = "INSERT_FAILED"
    message: str = "Error writing to the database"


class DeleteError(BooksDbError):
    """Raised when a removal fails."""

    code: str = "DELETE_FAILED"
    message: str = "Error removing from the database"


class BookNotFoundError(DeleteError):
    """Raised when the book to remove does not exist in the store."""

    code: str = "BOOK_NOT_FOUND"
    message: str = "Book not found"

    def __init__(self, book_id: int | None = None, message: str | None = None) -> None:
        """Initialize with the id that was looked up."""
        details: dict[str, Any] = {}
        if book_id is not None:
            details["book_id"] = book_id
            if not message:
                message = f"Book with ID {book_id} not found"

        super().__init__(message=message, details=details if details else None)
