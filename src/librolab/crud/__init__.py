from .crud_user import get_user_by_credentials, get_user_by_username, create_user
from .crud_author import get_all_authors, get_authors_for_book, create_author
from .crud_genre import get_all_genres, get_genres_for_book, create_genre
from .crud_review import create_review, get_reviews_for_book
from .crud_book import (
    search_books_by_title,
    search_books_by_isbn,
    search_books_by_author,
    search_books_by_genre,
    search_books_by_rating,
    get_book_by_id,
    create_book,
    delete_book,
)

__all__ = [
    "get_user_by_credentials",
    "get_user_by_username",
    "create_user",
    "get_all_authors",
    "get_authors_for_book",
    "create_author",
    "get_all_genres",
    "get_genres_for_book",
    "create_genre",
    "create_review",
    "get_reviews_for_book",
    "search_books_by_title",
    "search_books_by_isbn",
    "search_books_by_author",
    "search_books_by_genre",
    "search_books_by_rating",
    "get_book_by_id",
    "create_book",
    "delete_book",
]
