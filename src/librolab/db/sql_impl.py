"""
Relational implementation of the books contract, on top of SQLAlchemy.

Books, authors and genres are normalized rows; the two many-to-many
relationships live in the ``book_authors`` and ``book_genres`` junction
tables and reviews reference both a book and a user.

Every search runs one base query (books LEFT JOIN users) and then three
hydration queries per book for its authors, genres and reviews, so N books
cost 1 + 3N SELECTs. That is fine for a lab-sized catalogue and is kept on
purpose.
"""

import logging
from typing import Any, Callable, List, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from librolab import crud
from librolab.core.exceptions import (
    BookNotFoundError,
    BooksDbConnectionError,
    DeleteError,
    InsertError,
    SelectError,
)
from librolab.db.interface import BooksDb
from librolab.db.session import Base, create_db_engine, create_session_factory
from librolab.schemas import Author, Book, Genre, Review, User
from librolab import models

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlBooksDb(BooksDb):
    """
    Books store backed by a relational database (MySQL in production).

    Args:
        **engine_options: Extra keyword arguments for ``create_engine``, e.g.
            ``poolclass`` and ``connect_args`` for an in-memory SQLite database.
    """

    def __init__(self, **engine_options: Any) -> None:
        self._engine_options = engine_options
        self._engine: Optional[Engine] = None
        self._session: Optional[Session] = None

    # --- Connection ---

    def connect(self, locator: str) -> bool:
        if self._session is not None:
            return True # Already connected
        engine = None
        try:
            engine = create_db_engine(locator, **self._engine_options)
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            if engine is not None:
                engine.dispose()
            logger.exception(f"Could not connect to database: {locator}")
            raise BooksDbConnectionError(f"Could not connect to database: {locator}") from e
        self._engine = engine
        self._session = create_session_factory(engine)()
        logger.info(f"Connected to {engine.url.render_as_string(hide_password=True)}")
        return True

    def disconnect(self) -> None:
        if self._session is None:
            return
        try:
            self._session.close()
            self._engine.dispose()
        except SQLAlchemyError as e:
            raise BooksDbConnectionError("Could not disconnect from database.") from e
        finally:
            self._session = None
            self._engine = None

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise BooksDbConnectionError("Not connected to a database.")
        return self._engine

    @property
    def db(self) -> Session:
        if self._session is None:
            raise BooksDbConnectionError("Not connected to a database.")
        return self._session

    def create_schema(self) -> None:
        """Create every table of the catalogue that does not exist yet."""
        Base.metadata.create_all(bind=self.engine)

    def _read(self, load: Callable[[Session], T], error_message: str) -> T:
        """
        Run a read and end its transaction, whether it succeeds or not.

        ``load`` must return plain schemas: the rollback expires every ORM
        instance of the session.

        Raises:
            SelectError: If the driver fails. The session is rolled back first,
                so an invalidated connection is replaced on the next call.
        """
        db = self.db
        try:
            result = load(db)
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(error_message)
            raise SelectError(error_message) from e
        db.rollback() # Reads never keep a snapshot open
        return result

    # --- Users ---

    def login(self, username: str, password: str) -> Optional[User]:
        def load(db: Session) -> Optional[User]:
            db_user = crud.get_user_by_credentials(db, username, password)
            return User.model_validate(db_user) if db_user else None

        return self._read(load, f"Error logging in user: {username}")

    def add_user(self, username: str, password: str) -> User:
        db = self.db
        try:
            db_user = crud.create_user(db, username, password)
            user = User.model_validate(db_user)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Error adding user: {username}")
            raise InsertError(f"Error adding user: {username}") from e
        logger.info(f"User {user.id} '{username}' added.")
        return user

    # --- Searches ---

    def _search(self, query: Callable[[Session], List[crud.crud_book.BookRow]], error_message: str) -> List[Book]:
        return self._read(
            lambda db: [self._hydrate(db, book, username) for book, username in query(db)],
            error_message,
        )

    @staticmethod
    def _hydrate(db: Session, db_book: models.Book, added_by_username: Optional[str]) -> Book:
        added_by = None
        if db_book.added_by_id is not None:
            added_by = User(id=db_book.added_by_id, username=added_by_username)

        return Book(
            id=db_book.id,
            isbn=db_book.isbn,
            title=db_book.title,
            publisher=db_book.publisher,
            added_by=added_by,
            authors=[Author.model_validate(a) for a in crud.get_authors_for_book(db, db_book.id)],
            genres=[Genre.model_validate(g) for g in crud.get_genres_for_book(db, db_book.id)],
            reviews=[Review.model_validate(r) for r in crud.get_reviews_for_book(db, db_book.id)],
        )

    def find_books_by_title(self, title: str) -> List[Book]:
        title = title.strip()
        return self._search(
            lambda db: crud.search_books_by_title(db, title),
            f"Error finding books by title: {title}",
        )

    def find_books_by_isbn(self, isbn: str) -> List[Book]:
        isbn = isbn.strip()
        return self._search(
            lambda db: crud.search_books_by_isbn(db, isbn),
            f"Error finding books by ISBN: {isbn}",
        )

    def find_books_by_author(self, author: str) -> List[Book]:
        author = author.strip()
        return self._search(
            lambda db: crud.search_books_by_author(db, author),
            f"Error finding books by author: {author}",
        )

    def find_books_by_genre(self, genre: str) -> List[Book]:
        genre = genre.strip()
        return self._search(
            lambda db: crud.search_books_by_genre(db, genre),
            f"Error finding books by genre: {genre}",
        )

    def find_books_by_rating(self, rating: float) -> List[Book]:
        return self._search(
            lambda db: crud.search_books_by_rating(db, rating),
            f"Error finding books by rating: {rating}",
        )

    # --- Inserts ---

    def add_book(self, book: Book, added_by: Optional[User] = None) -> Book:
        user = self.attribution(book.added_by, added_by)
        db = self.db
        try:
            db_book = crud.create_book(
                db,
                isbn=book.isbn,
                title=book.title,
                publisher=book.publisher,
                added_by_id=user.id if user else None,
                author_ids=[a.id for a in book.authors],
                genre_ids=[g.id for g in book.genres],
            )
            book_id = db_book.id
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Error adding book: {book.title}")
            raise InsertError(f"Error adding book: {book.title}", details={"isbn": book.isbn}) from e
        logger.info(f"Book {book_id} '{book.title}' added with {len(book.authors)} authors and {len(book.genres)} genres.")
        return book.model_copy(update={"id": book_id, "added_by": user})

    def add_author(self, author: Author, added_by: Optional[User] = None) -> Author:
        user = self.attribution(author.added_by, added_by)
        db = self.db
        try:
            db_author = crud.create_author(db, author.name, author.birthdate, user.id if user else None)
            author_id = db_author.id
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Error adding author: {author.name}")
            raise InsertError(f"Error adding author: {author.name}") from e
        logger.info(f"Author {author_id} '{author.name}' added.")
        return author.model_copy(update={"id": author_id, "added_by": user})

    def add_genre(self, genre: Genre) -> Genre:
        db = self.db
        try:
            genre_id = crud.create_genre(db, genre.name).id
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Error adding genre: {genre.name}")
            raise InsertError(f"Error adding genre: {genre.name}") from e
        logger.info(f"Genre {genre_id} '{genre.name}' added.")
        return genre.model_copy(update={"id": genre_id})

    def add_review(self, book: Book, user: User, rating: int, text: Optional[str] = None) -> Review:
        review_in = self.validate_review(book, rating, text)
        db = self.db
        try:
            if crud.get_book_by_id(db, book.id) is None:
                db.rollback()
                raise InsertError(f"Error adding review, unknown book: {book.title}", details={"book_id": book.id})
            db_review = crud.create_review(db, review_in, user_id=user.id, book_id=book.id)
            review = Review(
                rating=db_review.rating,
                text=db_review.text,
                book_id=book.id,
                user=user,
                date=db_review.date,
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Error adding review for book: {book.title}")
            raise InsertError(f"Error adding review for book: {book.title}") from e
        logger.info(f"Review added for book {book.id} by user {user.id}.")
        return review

    # --- Listings ---

    def get_all_authors(self) -> List[Author]:
        return self._read(
            lambda db: [Author.model_validate(a) for a in crud.get_all_authors(db)],
            "Error fetching all authors",
        )

    def get_all_genres(self) -> List[Genre]:
        return self._read(
            lambda db: [Genre.model_validate(g) for g in crud.get_all_genres(db)],
            "Error fetching all genres",
        )

    # --- Removal ---

    def remove_book(self, book: Book) -> None:
        db = self.db
        try:
            found = crud.delete_book(db, book.id)
            if not found:
                db.rollback()
                logger.warning(f"Attempted removal of non-existent book ID: {book.id}")
                raise BookNotFoundError(book_id=book.id)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Could not remove book: {book.title}")
            raise DeleteError(f"Could not remove book: {book.title}", details={"book_id": book.id}) from e
        logger.info(f"Book {book.id} '{book.title}' removed.")
