"""
MongoDB implementation of the books contract, on top of pymongo.

Collections:
    books    {_id, isbn, title, publisher, added_by, author_ids, genre_ids, reviews}
    authors  {_id, name, birthdate, added_by}
    genres   {_id, name}
    users    {_id, username (unique index), password}
    counters {_id: "<sequence>_id", seq}

Books reference their authors and genres through arrays of integer ids and
embed their reviews as sub-documents. MongoDB has no auto-increment, so every
integer id comes from ``next_sequence``, a single atomic find-and-increment on
the counters collection that creates the counter on first use.
"""

import datetime
import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from pymongo import MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from librolab.core.exceptions import (
    BookNotFoundError,
    BooksDbConnectionError,
    DeleteError,
    InsertError,
    SelectError,
)
from librolab.db.interface import BooksDb
from librolab.schemas import Author, Book, Genre, Review, User

logger = logging.getLogger(__name__)

BOOKS_COLLECTION = "books"
AUTHORS_COLLECTION = "authors"
GENRES_COLLECTION = "genres"
USERS_COLLECTION = "users"
COUNTERS_COLLECTION = "counters"

DEFAULT_DATABASE_NAME = "library_db"


def _contains(term: str) -> Dict[str, str]:
    return {"$regex": re.escape(term), "$options": "i"}


def _equals_ignore_case(term: str) -> Dict[str, str]:
    return {"$regex": f"^{re.escape(term)}$", "$options": "i"}


def _to_datetime(value: Optional[datetime.date]) -> Optional[datetime.datetime]:
    # BSON stores datetimes only.
    if value is None:
        return None
    return datetime.datetime(value.year, value.month, value.day)


def _to_date(value: Any) -> Optional[datetime.date]:
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


class MongoBooksDb(BooksDb):
    """
    Books store backed by MongoDB.

    Args:
        database_name: Database holding the collections.
        client_factory: Callable building the client from the locator.
            Defaults to ``pymongo.MongoClient``; tests pass ``mongomock.MongoClient``.
        timeout_ms: Server selection timeout handed to the client.
    """

    def __init__(
        self,
        database_name: str = DEFAULT_DATABASE_NAME,
        client_factory: Callable[..., MongoClient] = MongoClient,
        timeout_ms: int = 5000,
    ) -> None:
        self._database_name = database_name
        self._client_factory = client_factory
        self._timeout_ms = timeout_ms
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

    # --- Connection ---

    def connect(self, locator: str) -> bool:
        """
        Connect to MongoDB and check the server answers.

        Args:
            locator: MongoDB connection URI (credentials included).

        Returns:
            True if the connection is successful.

        Raises:
            BooksDbConnectionError: If the server can't be reached or refuses the credentials.
        """
        if self._client is not None:
            return True
        client = None
        try:
            client = self._client_factory(locator, serverSelectionTimeoutMS=self._timeout_ms)
            database = client[self._database_name]
            # MongoClient connects lazily; force a round trip now.
            database.list_collection_names()
            database[USERS_COLLECTION].create_index("username", unique=True)
        except PyMongoError as e:
            if client is not None:
                client.close()
            logger.exception(f"Could not connect to MongoDB database '{self._database_name}'")
            raise BooksDbConnectionError(f"Could not connect to MongoDB: {e}") from e
        self._client = client
        self._database = database
        logger.info(f"Connected to MongoDB database '{self._database_name}'")
        return True

    def disconnect(self) -> None:
        if self._client is None:
            return
        try:
            self._client.close()
        except PyMongoError as e:
            raise BooksDbConnectionError("Could not disconnect from MongoDB.") from e
        finally:
            self._client = None
            self._database = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def _collection(self, name: str) -> Collection:
        if self._database is None:
            raise BooksDbConnectionError("Not connected to a database.")
        return self._database[name]

    def next_sequence(self, name: str) -> int:
        """
        Atomically increment and return the counter of a sequence.

        One ``find_one_and_update`` round trip with upsert, so the first call
        for a new sequence returns 1 and concurrent callers never share an id.

        Args:
            name: Sequence name, e.g. "books".

        Returns:
            The next integer id.

        Raises:
            InsertError: If the counter can't be incremented.
        """
        try:
            counter = self._collection(COUNTERS_COLLECTION).find_one_and_update(
                {"_id": f"{name}_id"},
                {"$inc": {"seq": 1}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise InsertError(f"Error generating next sequence ID for {name}") from e
        if counter is None:
            raise InsertError(f"Failed to generate ID for {name}")
        return counter["seq"]

    # --- Users ---

    def login(self, username: str, password: str) -> Optional[User]:
        try:
            doc = self._collection(USERS_COLLECTION).find_one({"username": username, "password": password})
        except PyMongoError as e:
            logger.exception(f"Error logging in user: {username}")
            raise SelectError(f"Error logging in user: {username}") from e
        return User(id=doc["_id"], username=doc["username"]) if doc else None

    def add_user(self, username: str, password: str) -> User:
        try:
            user_id = self.next_sequence(USERS_COLLECTION)
            self._collection(USERS_COLLECTION).insert_one(
                {"_id": user_id, "username": username, "password": password}
            )
        except DuplicateKeyError as e:
            logger.warning(f"Username already taken: {username}")
            raise InsertError(f"Error adding user: {username}", details={"username": username}) from e
        except PyMongoError as e:
            logger.exception(f"Error adding user: {username}")
            raise InsertError(f"Error adding user: {username}") from e
        logger.info(f"User {user_id} '{username}' added.")
        return User(id=user_id, username=username)

    def _fetch_users(self, user_ids: Iterable[Optional[int]]) -> Dict[int, User]:
        ids = sorted({user_id for user_id in user_ids if user_id is not None})
        if not ids:
            return {}
        docs = self._collection(USERS_COLLECTION).find({"_id": {"$in": ids}})
        return {doc["_id"]: User(id=doc["_id"], username=doc["username"]) for doc in docs}

    # --- Mapping ---

    def _map_author(self, doc: Dict[str, Any], users: Dict[int, User]) -> Author:
        return Author(
            id=doc["_id"],
            name=doc["name"],
            birthdate=_to_date(doc.get("birthdate")),
            added_by=users.get(doc.get("added_by")),
        )

    def _find_by_ids(self, collection: str, ids: List[int]) -> List[Dict[str, Any]]:
        """Resolve an id array with one $in query, keeping the order of the array."""
        if not ids:
            return []
        found = {doc["_id"]: doc for doc in self._collection(collection).find({"_id": {"$in": ids}})}
        return [found[i] for i in ids if i in found]

    def _map_book(self, doc: Dict[str, Any]) -> Book:
        """
        Map a book document to a fully hydrated Book.
        Authors and genres are manual joins on the id arrays; reviews are embedded.
        """
        author_docs = self._find_by_ids(AUTHORS_COLLECTION, doc.get("author_ids") or [])
        genre_docs = self._find_by_ids(GENRES_COLLECTION, doc.get("genre_ids") or [])
        review_docs = doc.get("reviews") or []

        users = self._fetch_users(
            [doc.get("added_by")]
            + [a.get("added_by") for a in author_docs]
            + [r.get("user_id") for r in review_docs]
        )

        reviews = []
        for r in review_docs:
            user_id = r["user_id"]
            reviewer = users.get(user_id) or User(id=user_id, username="Unknown")
            reviews.append(
                Review(
                    rating=r["rating"],
                    text=r.get("text"),
                    date=_to_date(r["date"]),
                    user=reviewer,
                    book_id=doc["_id"],
                )
            )

        return Book(
            id=doc["_id"],
            isbn=doc["isbn"],
            title=doc["title"],
            publisher=doc.get("publisher"),
            added_by=users.get(doc.get("added_by")),
            authors=[self._map_author(a, users) for a in author_docs],
            genres=[Genre(id=g["_id"], name=g["name"]) for g in genre_docs],
            reviews=reviews,
        )

    def _find_books(self, query: Dict[str, Any]) -> List[Book]:
        docs = self._collection(BOOKS_COLLECTION).find(query).sort("_id", 1)
        return [self._map_book(doc) for doc in docs]

    # --- Searches ---

    def find_books_by_title(self, title: str) -> List[Book]:
        title = title.strip()
        try:
            return self._find_books({"title": _contains(title)})
        except PyMongoError as e:
            logger.exception(f"Error finding books by title: {title}")
            raise SelectError(f"Error finding books by title: {title}") from e

    def find_books_by_isbn(self, isbn: str) -> List[Book]:
        isbn = isbn.strip()
        try:
            return self._find_books({"isbn": _equals_ignore_case(isbn)})
        except PyMongoError as e:
            logger.exception(f"Error finding books by ISBN: {isbn}")
            raise SelectError(f"Error finding books by ISBN: {isbn}") from e

    def find_books_by_author(self, author: str) -> List[Book]:
        """
        Finds books by author name.
        First finds matching authors, then finds books referencing those authors.
        """
        author = author.strip()
        try:
            author_ids = [
                doc["_id"]
                for doc in self._collection(AUTHORS_COLLECTION).find({"name": _contains(author)}, {"_id": 1})
            ]
            if not author_ids:
                return []
            return self._find_books({"author_ids": {"$in": author_ids}})
        except PyMongoError as e:
            logger.exception(f"Error finding books by author: {author}")
            raise SelectError(f"Error finding books by author: {author}") from e

    def find_books_by_genre(self, genre: str) -> List[Book]:
        genre = genre.strip()
        try:
            genre_ids = [
                doc["_id"]
                for doc in self._collection(GENRES_COLLECTION).find({"name": _equals_ignore_case(genre)}, {"_id": 1})
            ]
            if not genre_ids:
                return []
            return self._find_books({"genre_ids": {"$in": genre_ids}})
        except PyMongoError as e:
            logger.exception(f"Error finding books by genre: {genre}")
            raise SelectError(f"Error finding books by genre: {genre}") from e

    def find_books_by_rating(self, rating: float) -> List[Book]:
        """
        Finds books by derived rating.
        Loads every book and filters in memory; an aggregation pipeline would
        scale better but this keeps the rating logic in one place (Book.rating).
        """
        try:
            return [book for book in self._find_books({}) if book.rating >= rating]
        except PyMongoError as e:
            logger.exception(f"Error finding books by rating: {rating}")
            raise SelectError(f"Error finding books by rating: {rating}") from e

    # --- Inserts ---

    def add_book(self, book: Book, added_by: Optional[User] = None) -> Book:
        """
        Adds a new book as a single document.
        Author and genre relations are stored as arrays of ids in the book document,
        so the insert is atomic on its own.
        """
        user = self.attribution(book.added_by, added_by)
        try:
            book_id = self.next_sequence(BOOKS_COLLECTION)
            self._collection(BOOKS_COLLECTION).insert_one({
                "_id": book_id,
                "isbn": book.isbn,
                "title": book.title,
                "publisher": book.publisher,
                "added_by": user.id if user else None,
                "author_ids": [a.id for a in book.authors],
                "genre_ids": [g.id for g in book.genres],
                "reviews": [],
            })
        except PyMongoError as e:
            logger.exception(f"Error adding book: {book.title}")
            raise InsertError(f"Error adding book: {book.title}", details={"isbn": book.isbn}) from e
        logger.info(f"Book {book_id} '{book.title}' added.")
        return book.model_copy(update={"id": book_id, "added_by": user})

    def add_author(self, author: Author, added_by: Optional[User] = None) -> Author:
        user = self.attribution(author.added_by, added_by)
        try:
            author_id = self.next_sequence(AUTHORS_COLLECTION)
            self._collection(AUTHORS_COLLECTION).insert_one({
                "_id": author_id,
                "name": author.name,
                "birthdate": _to_datetime(author.birthdate),
                "added_by": user.id if user else None,
            })
        except PyMongoError as e:
            logger.exception(f"Error adding author: {author.name}")
            raise InsertError(f"Error adding author: {author.name}") from e
        logger.info(f"Author {author_id} '{author.name}' added.")
        return author.model_copy(update={"id": author_id, "added_by": user})

    def add_genre(self, genre: Genre) -> Genre:
        try:
            genre_id = self.next_sequence(GENRES_COLLECTION)
            self._collection(GENRES_COLLECTION).insert_one({"_id": genre_id, "name": genre.name})
        except PyMongoError as e:
            logger.exception(f"Error adding genre: {genre.name}")
            raise InsertError(f"Error adding genre: {genre.name}") from e
        logger.info(f"Genre {genre_id} '{genre.name}' added.")
        return genre.model_copy(update={"id": genre_id})

    def add_review(self, book: Book, user: User, rating: int, text: Optional[str] = None) -> Review:
        """
        Adds a review to a book.
        Reviews are embedded in the book document, so this is one atomic $push.
        """
        review_in = self.validate_review(book, rating, text)
        today = datetime.date.today()
        try:
            result = self._collection(BOOKS_COLLECTION).update_one(
                {"_id": book.id},
                {"$push": {"reviews": {
                    "rating": review_in.rating,
                    "text": review_in.text,
                    "date": _to_datetime(today),
                    "user_id": user.id,
                }}},
            )
        except PyMongoError as e:
            logger.exception(f"Error adding review for book: {book.title}")
            raise InsertError(f"Error adding review for book: {book.title}") from e
        if result.matched_count == 0:
            raise InsertError(f"Error adding review, unknown book: {book.title}", details={"book_id": book.id})
        logger.info(f"Review added for book {book.id} by user {user.id}.")
        return Review(rating=review_in.rating, text=review_in.text, date=today, user=user, book_id=book.id)

    # --- Listings ---

    def get_all_authors(self) -> List[Author]:
        try:
            docs = list(self._collection(AUTHORS_COLLECTION).find().sort([("name", 1), ("_id", 1)]))
            users = self._fetch_users(doc.get("added_by") for doc in docs)
            return [self._map_author(doc, users) for doc in docs]
        except PyMongoError as e:
            logger.exception("Error fetching all authors")
            raise SelectError("Error fetching all authors") from e

    def get_all_genres(self) -> List[Genre]:
        try:
            docs = self._collection(GENRES_COLLECTION).find().sort([("name", 1), ("_id", 1)])
            return [Genre(id=doc["_id"], name=doc["name"]) for doc in docs]
        except PyMongoError as e:
            logger.exception("Error fetching all genres")
            raise SelectError("Error fetching all genres") from e

    # --- Removal ---

    def remove_book(self, book: Book) -> None:
        try:
            result = self._collection(BOOKS_COLLECTION).delete_one({"_id": book.id})
        except PyMongoError as e:
            logger.exception(f"Could not remove book: {book.title}")
            raise DeleteError(f"Could not remove book: {book.title}", details={"book_id": book.id}) from e
        if result.deleted_count == 0:
            logger.warning(f"Attempted removal of non-existent book ID: {book.id}")
            raise BookNotFoundError(book_id=book.id)
        logger.info(f"Book {book.id} '{book.title}' removed.")
