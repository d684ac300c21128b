from .constants import UNPERSISTED_ID, MIN_RATING, MAX_RATING
from .user import User
from .author import Author
from .genre import Genre
from .review import Review, ReviewCreate
from .book import Book

__all__ = [
    "UNPERSISTED_ID",
    "MIN_RATING",
    "MAX_RATING",
    "User",
    "Author",
    "Genre",
    "Review",
    "ReviewCreate",
    "Book",
]
