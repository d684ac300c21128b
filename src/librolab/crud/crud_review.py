from sqlalchemy.orm import Session, joinedload
import datetime
import logging

from ..models.review import Review
from ..schemas.review import ReviewCreate

logger = logging.getLogger(__name__)


def create_review(db: Session, review: ReviewCreate, user_id: int, book_id: int) -> Review:
    """Adds a review dated today. The caller commits."""
    db_review = Review(
        **review.model_dump(),
        user_id=user_id,
        book_id=book_id,
        date=datetime.date.today(),
    )
    db.add(db_review)
    db.flush() # Ensure db_review gets an ID and is pending insertion
    logger.debug(f"Review {db_review.id} staged for book {book_id} by user {user_id}.")
    return db_review


def get_reviews_for_book(db: Session, book_id: int) -> list[Review]:
    """Reseñas de un libro en orden de inserción, con su usuario (una sola consulta)."""
    return db.query(Review).\
            options(joinedload(Review.user)).\
            filter(Review.book_id == book_id).\
            order_by(Review.id).all()
