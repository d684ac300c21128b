"""
Esquema Pydantic para la entidad Book.
Un libro tiene varios autores y géneros y puede recibir reseñas de varios usuarios.
La valoración no se almacena: se calcula a partir de las reseñas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from .author import Author
from .constants import UNPERSISTED_ID
from .genre import Genre
from .review import Review
from .user import User


class Book(BaseModel):
    """
    Libro del catálogo, completamente hidratado cuando viene del almacén.

    Atributos:
        id (int): ID asignado por el almacén; UNPERSISTED_ID mientras no se haya guardado.
        isbn (str): ISBN del libro (no se exige que sea único).
        title (str): Título.
        publisher (Optional[str]): Editorial.
        added_by (Optional[User]): Usuario que añadió el libro.
        authors (List[Author]): Autores, en orden.
        genres (List[Genre]): Géneros, en orden.
        reviews (List[Review]): Reseñas, en orden de inserción.
    """
    id: int = UNPERSISTED_ID
    isbn: str
    title: str
    publisher: Optional[str] = None
    added_by: Optional[User] = None
    authors: List[Author] = Field(default_factory=list)
    genres: List[Genre] = Field(default_factory=list)
    reviews: List[Review] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @property
    def rating(self) -> float:
        """
        Media aritmética de las calificaciones de las reseñas.

        Returns:
            float: La media, o 0.0 si el libro no tiene reseñas.
        """
        if not self.reviews:
            return 0.0
        return sum(review.rating for review in self.reviews) / len(self.reviews)

    @property
    def is_persisted(self) -> bool:
        return self.id != UNPERSISTED_ID

    def __str__(self) -> str:
        return f"{self.title}, {self.isbn}, {self.publisher}"
