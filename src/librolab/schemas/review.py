"""
Esquemas Pydantic para la entidad Review.
Define el modelo de entrada (validación de la calificación) y el de salida.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from .constants import MIN_RATING, MAX_RATING
from .user import User


class ReviewCreate(BaseModel):
    """
    Esquema para la creación de una reseña.
    user y book se pasan aparte a la operación add_review.

    Atributos:
        rating (int): Calificación entre 1 y 5.
        text (Optional[str]): Texto opcional de la reseña.
    """
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    text: Optional[str] = None


class Review(ReviewCreate):
    """
    Reseña almacenada. Es inmutable una vez creada.

    Atributos:
        book_id (int): ID del libro reseñado.
        user (User): Usuario autor de la reseña.
        date (datetime.date): Fecha en que se escribió.
    """
    book_id: int
    user: User
    date: datetime.date

    model_config = ConfigDict(from_attributes=True, frozen=True)

    def __str__(self) -> str:
        return f"{self.rating}/5 by {self.user.username} ({self.date})"
