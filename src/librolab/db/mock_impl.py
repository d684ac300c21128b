"""
In-memory implementation of the books contract.

Holds a fixed catalogue of nine books, three authors, three genres and one
user, so the presentation layer and the contract tests can run without a
store. ``login`` accepts any password for an existing username: that
permissive behaviour belongs to this adapter only.
"""

import datetime
import logging
from typing import List, Optional

from librolab.core.exceptions import BookNotFoundError, BooksDbConnectionError, InsertError
from librolab.db.interface import BooksDb
from librolab.schemas import Author, Book, Genre, Review, User

logger = logging.getLogger(__name__)

MOCK_USER = User(id=1, username="admin")

MOCK_AUTHORS = [
    Author(id=1, name="J.K. Rowling"),
    Author(id=2, name="J.R.R. Tolkien"),
    Author(id=3, name="George R.R. Martin"),
]

MOCK_GENRES = [
    Genre(id=1, name="Fantasy"),
    Genre(id=2, name="Adventure"),
    Genre(id=3, name="Drama"),
]

MOCK_BOOKS = [
    Book(id=1, isbn="123456789", title="Databases Illuminated", publisher="Cathy Ricardo"),
    Book(id=2, isbn="234567891", title="Dark Databases", publisher="Someone"),
    Book(id=3, isbn="456789012", title="The buried giant", publisher="Kazuo Ishiguro"),
    Book(id=4, isbn="567890123", title="Never let me go", publisher="Kazuo Ishiguro"),
    Book(id=5, isbn="678901234", title="The remains of the day", publisher="Kazuo Ishiguro"),
    Book(id=6, isbn="234567890", title="Alias Grace", publisher="Margaret Atwood"),
    Book(id=7, isbn="345678911", title="The handmaids tale", publisher="Margaret Atwood"),
    Book(id=8, isbn="345678901", title="Shuggie Bain", publisher="Douglas Stuart"),
    Book(id=9, isbn="345678912", title="Microserfs", publisher="Douglas Coupland"),
]


def _catalogue() -> List[Book]:
    """Fresh copies of the mock books linked to their authors and genres."""
    rowling, tolkien, martin = MOCK_AUTHORS
    fantasy, adventure, drama = MOCK_GENRES
    books = [book.model_copy(deep=True) for book in MOCK_BOOKS]

    books[0].authors.append(rowling)
    books[0].genres.append(fantasy)
    books[1].authors.append(tolkien)
    books[1].genres.append(adventure)
    for book in books[2:]:
        book.authors.append(martin)
        book.genres.append(drama)
    return books


class MockBooksDb(BooksDb):
    """Books store kept in Python lists; every instance starts from the same catalogue."""

    def __init__(self) -> None:
        self._books: List[Book] = _catalogue()
        self._authors: List[Author] = list(MOCK_AUTHORS)
        self._genres: List[Genre] = list(MOCK_GENRES)
        self._users: List[User] = [MOCK_USER]
        self._connected = False

    def connect(self, locator: str = "") -> bool:
        self._connected = True
        return True

    def disconnect(self) -> None:
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _require_connection(self) -> None:
        if not self._connected:
            raise BooksDbConnectionError("Not connected to a database.")

    def login(self, username: str, password: str) -> Optional[User]:
        self._require_connection()
        # Any password is accepted for a known username.
        for user in self._users:
            if user.username.lower() == username.lower():
                return user
        return None

    def add_user(self, username: str, password: str) -> User:
        self._require_connection()
        if any(u.username.lower() == username.lower() for u in self._users):
            raise InsertError(f"Error adding user: {username}", details={"username": username})
        user = User(id=max(u.id for u in self._users) + 1, username=username)
        self._users.append(user)
        return user

    def _select(self, predicate) -> List[Book]:
        self._require_connection()
        return [book.model_copy(deep=True) for book in self._books if predicate(book)]

    def find_books_by_title(self, title: str) -> List[Book]:
        title = title.strip().lower()
        return self._select(lambda book: title in book.title.lower())

    def find_books_by_isbn(self, isbn: str) -> List[Book]:
        isbn = isbn.strip().lower()
        return self._select(lambda book: book.isbn.lower() == isbn)

    def find_books_by_author(self, author: str) -> List[Book]:
        author = author.strip().lower()
        return self._select(lambda book: any(author in a.name.lower() for a in book.authors))

    def find_books_by_genre(self, genre: str) -> List[Book]:
        genre = genre.strip().lower()
        return self._select(lambda book: any(g.name.lower() == genre for g in book.genres))

    def find_books_by_rating(self, rating: float) -> List[Book]:
        return self._select(lambda book: book.rating >= rating)

    def add_book(self, book: Book, added_by: Optional[User] = None) -> Book:
        self._require_connection()
        user = self.attribution(book.added_by, added_by)
        book_id = max((b.id for b in self._books), default=0) + 1
        stored = book.model_copy(update={"id": book_id, "added_by": user, "reviews": []}, deep=True)
        self._books.append(stored)
        return stored.model_copy(deep=True)

    def add_author(self, author: Author, added_by: Optional[User] = None) -> Author:
        self._require_connection()
        user = self.attribution(author.added_by, added_by)
        stored = author.model_copy(update={
            "id": max((a.id for a in self._authors), default=0) + 1,
            "added_by": user,
        })
        self._authors.append(stored)
        return stored.model_copy()

    def add_genre(self, genre: Genre) -> Genre:
        self._require_connection()
        stored = genre.model_copy(update={"id": max((g.id for g in self._genres), default=0) + 1})
        self._genres.append(stored)
        return stored.model_copy()

    def add_review(self, book: Book, user: User, rating: int, text: Optional[str] = None) -> Review:
        self._require_connection()
        review_in = self.validate_review(book, rating, text)
        for stored in self._books:
            if stored.id == book.id:
                review = Review(
                    rating=review_in.rating,
                    text=review_in.text,
                    date=datetime.date.today(),
                    user=user,
                    book_id=stored.id,
                )
                stored.reviews.append(review)
                return review
        raise InsertError(f"Error adding review, unknown book: {book.title}", details={"book_id": book.id})

    def get_all_authors(self) -> List[Author]:
        self._require_connection()
        return [a.model_copy() for a in sorted(self._authors, key=lambda a: (a.name, a.id))]

    def get_all_genres(self) -> List[Genre]:
        self._require_connection()
        return [g.model_copy() for g in sorted(self._genres, key=lambda g: (g.name, g.id))]

    def remove_book(self, book: Book) -> None:
        self._require_connection()
        for index, stored in enumerate(self._books):
            if stored.id == book.id:
                del self._books[index]
                logger.info(f"Book {book.id} '{book.title}' removed.")
                return
        logger.warning(f"Attempted removal of non-existent book ID: {book.id}")
        raise BookNotFoundError(book_id=book.id)
