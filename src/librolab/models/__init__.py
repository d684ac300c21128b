# Import every model so Base.metadata knows all tables.
from .user import User
from .author import Author
from .genre import Genre
from .book import Book, book_authors, book_genres
from .review import Review

__all__ = ["User", "Author", "Genre", "Book", "Review", "book_authors", "book_genres"]
