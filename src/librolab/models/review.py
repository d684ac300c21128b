# src/librolab/models/review.py
import datetime
from sqlalchemy import Column, Integer, Text, Date, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from librolab.db.session import Base

class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    text = Column("review_text", Text, nullable=True)
    date = Column("review_date", Date, nullable=False, default=datetime.date.today)

    user = relationship("User")
    book = relationship("Book", back_populates="reviews")

    __table_args__ = (
        # Ensure rating is between 1 and 5
        CheckConstraint('rating >= 1 AND rating <= 5', name='review_rating_check'),
    )

    def __repr__(self):
        return f"<Review(id={self.id}, book_id={self.book_id}, user_id={self.user_id}, rating={self.rating})>"
