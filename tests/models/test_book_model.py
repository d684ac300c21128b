# tests/models/test_book_model.py
import pytest
from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError

from librolab.models.author import Author
from librolab.models.book import Book, book_authors, book_genres
from librolab.models.genre import Genre

def test_create_book(db_session):
    """Test creating a valid Book instance."""
    book = Book(title="A Wizard of Earthsea", isbn="9780547773742", publisher="Parnassus Press")
    db_session.add(book)
    db_session.flush()

    retrieved_book = db_session.query(Book).filter(Book.isbn == "9780547773742").first()

    assert retrieved_book is not None
    assert retrieved_book.id is not None
    assert retrieved_book.title == "A Wizard of Earthsea"
    assert retrieved_book.publisher == "Parnassus Press"
    assert retrieved_book.added_by_id is None
    assert retrieved_book.reviews == []

def test_create_book_no_title(db_session):
    """Creating a book without a title raises IntegrityError."""
    db_session.add(Book(isbn="1234567890123"))

    with pytest.raises(IntegrityError):
        db_session.flush()

def test_duplicate_isbn_is_allowed(db_session):
    """ISBN is indexed but not unique: two editions may share it."""
    db_session.add_all([Book(title="Edition 1", isbn="9999999999999"), Book(title="Edition 2", isbn="9999999999999")])
    db_session.flush()

    assert db_session.query(Book).filter(Book.isbn == "9999999999999").count() == 2

def test_relationships_through_junction_tables(db_session):
    author = Author(name="Ursula K. Le Guin")
    genre = Genre(name="Fantasy")
    book = Book(title="The Tombs of Atuan", isbn="9780689845369", authors=[author], genres=[genre])
    db_session.add(book)
    db_session.flush()

    rows = db_session.execute(select(book_authors.c.book_id, book_authors.c.author_id)).all()
    assert [tuple(r) for r in rows] == [(book.id, author.id)]
    assert db_session.execute(select(book_genres.c.genre_id)).scalars().all() == [genre.id]

def test_junction_primary_key_rejects_repeated_pair(db_session):
    author = Author(name="Ursula K. Le Guin")
    book = Book(title="Tehanu", isbn="9780689845338")
    db_session.add_all([author, book])
    db_session.flush()

    db_session.execute(insert(book_authors).values(book_id=book.id, author_id=author.id))
    with pytest.raises(IntegrityError):
        db_session.execute(insert(book_authors).values(book_id=book.id, author_id=author.id))

def test_book_repr(db_session):
    """Test the __repr__ method of the Book model."""
    title = "Representation Test Book Title That Is Quite Long"
    isbn = "1122334455667"

    book = Book(title=title, isbn=isbn)
    db_session.add(book)
    db_session.flush()

    expected_repr = f"<Book(id={book.id}, title='{title[:30]}...', isbn='{isbn}')>"
    assert repr(book) == expected_repr
