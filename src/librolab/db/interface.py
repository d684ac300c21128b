"""
Contract shared by every books data-access adapter.

Each implementation talks to one kind of store (MySQL through SQLAlchemy,
MongoDB through pymongo, or plain Python lists) and must translate the
failures of its driver into the classes of ``librolab.core.exceptions``:
``BooksDbConnectionError`` for connect/disconnect, ``SelectError`` for reads,
``InsertError`` for writes and ``DeleteError`` for removals. A search with no
match returns an empty list and a failed login returns ``None``; neither is an
error.

Adapters keep a single connection and are not safe for overlapping calls
from several threads. Use ``librolab.db.worker.BooksDbWorker`` to run calls
off the UI thread one at a time.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import ValidationError

from librolab.core.exceptions import InsertError
from librolab.schemas import Author, Book, Genre, Review, ReviewCreate, User

logger = logging.getLogger(__name__)


class BooksDb(ABC):
    """Persistence operations for books, authors, genres, reviews and users."""

    @abstractmethod
    def connect(self, locator: str) -> bool:
        """
        Connect to the store. Succeeds without reconnecting when already connected.

        Args:
            locator (str): Connection URL of the store.

        Returns:
            bool: True once connected.

        Raises:
            BooksDbConnectionError: On network or authentication failure.
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection. Closing a closed connection is a no-op."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        ...

    @abstractmethod
    def login(self, username: str, password: str) -> Optional[User]:
        """
        Look up a user by plaintext credentials.

        Returns:
            Optional[User]: The user, or None when the credentials don't match.
        """

    @abstractmethod
    def find_books_by_title(self, title: str) -> List[Book]:
        """Books whose title contains ``title`` (case-insensitive)."""

    @abstractmethod
    def find_books_by_isbn(self, isbn: str) -> List[Book]:
        """Books whose ISBN equals ``isbn`` (case-insensitive)."""

    @abstractmethod
    def find_books_by_author(self, author: str) -> List[Book]:
        """Books with an author whose name contains ``author`` (case-insensitive)."""

    @abstractmethod
    def find_books_by_genre(self, genre: str) -> List[Book]:
        """Books with a genre named exactly ``genre`` (case-insensitive)."""

    @abstractmethod
    def find_books_by_rating(self, rating: float) -> List[Book]:
        """Books whose derived rating is greater than or equal to ``rating``."""

    @abstractmethod
    def add_book(self, book: Book, added_by: Optional[User] = None) -> Book:
        """
        Store a book and its author/genre associations, all or nothing.

        Args:
            book (Book): Book to store; its authors and genres must already exist.
            added_by (Optional[User]): Logged-in user to attribute the book to.
                Defaults to ``book.added_by``.

        Returns:
            Book: A copy of ``book`` carrying the id assigned by the store.

        Raises:
            InsertError: If any part of the insert fails; nothing is stored.
        """

    @abstractmethod
    def add_author(self, author: Author, added_by: Optional[User] = None) -> Author:
        ...

    @abstractmethod
    def add_genre(self, genre: Genre) -> Genre:
        ...

    @abstractmethod
    def add_review(self, book: Book, user: User, rating: int, text: Optional[str] = None) -> Review:
        """
        Add a review dated today.

        Raises:
            InsertError: If the rating is outside [1, 5], the book is unknown
                or the store rejects the write.
        """

    @abstractmethod
    def add_user(self, username: str, password: str) -> User:
        ...

    @abstractmethod
    def get_all_authors(self) -> List[Author]:
        """Every author, ordered by name."""

    @abstractmethod
    def get_all_genres(self) -> List[Genre]:
        """Every genre, ordered by name."""

    @abstractmethod
    def remove_book(self, book: Book) -> None:
        """
        Delete the book with ``book.id``.

        Raises:
            BookNotFoundError: If no book has that id.
            DeleteError: If the store rejects the removal.
        """

    def __enter__(self) -> "BooksDb":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    @staticmethod
    def validate_review(book: Book, rating: int, text: Optional[str]) -> ReviewCreate:
        """
        Check a review before any adapter writes it.

        Raises:
            InsertError: If ``rating`` is outside [1, 5].
        """
        try:
            return ReviewCreate(rating=rating, text=text)
        except ValidationError as e:
            logger.warning(f"Rejected review with rating {rating} for book {book.id}.")
            raise InsertError(
                f"Invalid rating {rating} for book: {book.title}",
                details={"book_id": book.id, "rating": rating},
            ) from e

    @staticmethod
    def attribution(entity_added_by: Optional[User], added_by: Optional[User]) -> Optional[User]:
        """The user an insert is attributed to: the explicit session user wins."""
        return added_by if added_by is not None else entity_added_by
