# tests/db/test_mongo_impl.py
import datetime
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, OperationFailure, ServerSelectionTimeoutError

from librolab.core.exceptions import BooksDbConnectionError, InsertError, SelectError
from librolab.db.mongo_impl import (
    AUTHORS_COLLECTION,
    BOOKS_COLLECTION,
    COUNTERS_COLLECTION,
    USERS_COLLECTION,
    MongoBooksDb,
)
from librolab.schemas import Author, Book, Genre

# --- Helper Fixtures ---
@pytest.fixture
def raw_db(mongo_books_db):
    """The underlying mongomock database, for checking document layout."""
    return mongo_books_db._database

@pytest.fixture
def atomic_counters(mongo_books_db, monkeypatch):
    """
    Serializes find_one_and_update on the counters collection, the way the
    server applies a single-document update atomically.
    """
    original_collection = mongo_books_db._collection
    counters = original_collection(COUNTERS_COLLECTION)
    lock = threading.Lock()
    calls = []

    class AtomicCounters:
        def find_one_and_update(self, *args, **kwargs):
            calls.append((args, kwargs))
            with lock:
                return counters.find_one_and_update(*args, **kwargs)

    wrapper = AtomicCounters()
    monkeypatch.setattr(
        mongo_books_db,
        "_collection",
        lambda name: wrapper if name == COUNTERS_COLLECTION else original_collection(name),
    )
    return calls
# --------------------------------------------------------------------------------

def test_connect_failure_raises_connection_error():
    database = MagicMock()
    database.list_collection_names.side_effect = ServerSelectionTimeoutError("no servers available")
    client = MagicMock()
    client.__getitem__.return_value = database

    books_db = MongoBooksDb(client_factory=lambda *args, **kwargs: client)

    with pytest.raises(BooksDbConnectionError):
        books_db.connect("mongodb://nowhere:27017")
    assert not books_db.is_connected
    client.close.assert_called_once()

def test_connect_passes_timeout_to_client():
    factory = MagicMock()
    books_db = MongoBooksDb(database_name="library_db", client_factory=factory, timeout_ms=1234)

    books_db.connect("mongodb://localhost:27017")

    factory.assert_called_once_with("mongodb://localhost:27017", serverSelectionTimeoutMS=1234)

def test_connect_creates_unique_username_index(raw_db):
    indexes = raw_db[USERS_COLLECTION].index_information()

    assert any(
        index["key"] == [("username", 1)] and index.get("unique") for index in indexes.values()
    )

def test_duplicate_username_keeps_first_user(mongo_books_db, raw_db):
    first = mongo_books_db.add_user("kathy", "a")

    with pytest.raises(InsertError) as excinfo:
        mongo_books_db.add_user("kathy", "b")

    assert excinfo.value.details == {"username": "kathy"}
    assert isinstance(excinfo.value.__cause__, DuplicateKeyError)
    assert raw_db[USERS_COLLECTION].count_documents({"username": "kathy"}) == 1
    assert mongo_books_db.login("kathy", "a") == first
    assert mongo_books_db.login("kathy", "b") is None

def test_next_sequence_starts_at_one_and_increments(mongo_books_db, raw_db):
    assert mongo_books_db.next_sequence("genres") == 1
    assert mongo_books_db.next_sequence("genres") == 2
    assert mongo_books_db.next_sequence("books") == 1

    assert raw_db[COUNTERS_COLLECTION].find_one({"_id": "genres_id"})["seq"] == 2

def test_next_sequence_is_one_atomic_upsert(mongo_books_db, atomic_counters):
    mongo_books_db.add_author(Author(name="Mary Shelley"))

    assert len(atomic_counters) == 1
    args, kwargs = atomic_counters[0]
    assert args == ({"_id": "authors_id"}, {"$inc": {"seq": 1}})
    assert kwargs == {"upsert": True, "return_document": ReturnDocument.AFTER}

def test_concurrent_add_author_never_shares_an_id(mongo_books_db, atomic_counters, raw_db):
    with ThreadPoolExecutor(max_workers=8) as pool:
        authors = list(pool.map(lambda n: mongo_books_db.add_author(Author(name=f"Author {n}")), range(50)))

    ids = [a.id for a in authors]
    assert len(set(ids)) == 50
    assert sorted(ids) == list(range(1, 51))
    assert len(atomic_counters) == 50
    assert raw_db[AUTHORS_COLLECTION].count_documents({}) == 50

def test_sequential_add_author_ids_differ(mongo_books_db):
    first = mongo_books_db.add_author(Author(name="Mary Shelley"))
    second = mongo_books_db.add_author(Author(name="Bram Stoker"))

    assert (first.id, second.id) == (1, 2)

def test_next_sequence_failure_raises_insert_error(mongo_books_db, monkeypatch):
    counters = MagicMock()
    counters.find_one_and_update.side_effect = OperationFailure("not authorized")
    monkeypatch.setattr(mongo_books_db, "_collection", lambda name: counters)

    with pytest.raises(InsertError):
        mongo_books_db.add_genre(Genre(name="Gothic"))

def test_book_document_embeds_reference_arrays(mongo_books_db, raw_db):
    user = mongo_books_db.add_user("victor", "creature")
    shelley = mongo_books_db.add_author(Author(name="Mary Shelley", birthdate=datetime.date(1797, 8, 30)))
    gothic = mongo_books_db.add_genre(Genre(name="Gothic"))

    stored = mongo_books_db.add_book(
        Book(isbn="9780486282114", title="Frankenstein", publisher="Dover", authors=[shelley], genres=[gothic]),
        added_by=user,
    )

    doc = raw_db[BOOKS_COLLECTION].find_one({"_id": stored.id})
    assert doc["author_ids"] == [shelley.id]
    assert doc["genre_ids"] == [gothic.id]
    assert doc["added_by"] == user.id
    assert doc["reviews"] == []
    author_doc = raw_db[AUTHORS_COLLECTION].find_one({"_id": shelley.id})
    assert author_doc["birthdate"] == datetime.datetime(1797, 8, 30)

def test_add_review_pushes_embedded_document(mongo_books_db, raw_db):
    user = mongo_books_db.add_user("victor", "creature")
    stored = mongo_books_db.add_book(Book(isbn="1", title="Frankenstein"))

    mongo_books_db.add_review(stored, user, 5, "Alive!")
    mongo_books_db.add_review(stored, user, 2)

    reviews = raw_db[BOOKS_COLLECTION].find_one({"_id": stored.id})["reviews"]
    assert [r["rating"] for r in reviews] == [5, 2]
    assert reviews[0]["text"] == "Alive!"
    assert reviews[1]["text"] is None
    assert reviews[0]["user_id"] == user.id
    assert "reviews" not in raw_db.list_collection_names()

def test_hydration_follows_stored_author_order(mongo_books_db):
    first = mongo_books_db.add_author(Author(name="Neil Gaiman"))
    second = mongo_books_db.add_author(Author(name="Terry Pratchett"))

    mongo_books_db.add_book(Book(isbn="2", title="Good Omens", authors=[second, first]))

    book = mongo_books_db.find_books_by_title("omens")[0]
    assert [a.name for a in book.authors] == ["Terry Pratchett", "Neil Gaiman"]

def test_review_by_deleted_user_is_unknown(mongo_books_db, raw_db):
    stored = mongo_books_db.add_book(Book(isbn="3", title="The Last Man"))
    raw_db[BOOKS_COLLECTION].update_one(
        {"_id": stored.id},
        {"$push": {"reviews": {"rating": 3, "text": None, "date": datetime.datetime(2024, 1, 2), "user_id": 42}}},
    )

    review = mongo_books_db.find_books_by_isbn("3")[0].reviews[0]
    assert review.user.id == 42
    assert review.user.username == "Unknown"
    assert review.date == datetime.date(2024, 1, 2)

def test_find_by_rating_filters_in_memory(mongo_books_db, raw_db):
    user = mongo_books_db.add_user("victor", "creature")
    good = mongo_books_db.add_book(Book(isbn="4", title="Good"))
    poor = mongo_books_db.add_book(Book(isbn="5", title="Poor"))
    mongo_books_db.add_review(good, user, 5)
    mongo_books_db.add_review(poor, user, 1)

    assert [b.id for b in mongo_books_db.find_books_by_rating(3)] == [good.id]

def test_search_driver_error_becomes_select_error(mongo_books_db, monkeypatch):
    collection = MagicMock()
    collection.find.side_effect = OperationFailure("cursor killed")
    monkeypatch.setattr(mongo_books_db, "_collection", lambda name: collection)

    with pytest.raises(SelectError) as excinfo:
        mongo_books_db.find_books_by_title("Frankenstein")
    assert isinstance(excinfo.value.__cause__, OperationFailure)
