"""
Modelo ORM para la entidad Book y sus tablas de unión con autores y géneros.
Las relaciones muchos a muchos se guardan en book_authors y book_genres.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Table
from sqlalchemy.orm import relationship
from librolab.db.session import Base

book_authors = Table(
    "book_authors",
    Base.metadata,
    Column("book_id", Integer, ForeignKey("books.id"), primary_key=True),
    Column("author_id", Integer, ForeignKey("authors.id"), primary_key=True),
)

book_genres = Table(
    "book_genres",
    Base.metadata,
    Column("book_id", Integer, ForeignKey("books.id"), primary_key=True),
    Column("genre_id", Integer, ForeignKey("genres.id"), primary_key=True),
)

class Book(Base):
    """
    Representa un libro en la base de datos.

    Atributos:
        id (int): Identificador primario del libro.
        isbn (str): ISBN del libro (no único).
        title (str): Título del libro.
        publisher (str): Editorial.
        added_by_id (int): Usuario que añadió el libro (opcional).
        authors (List[Author]): Autores, vía book_authors.
        genres (List[Genre]): Géneros, vía book_genres.
        reviews (List[Review]): Reseñas asociadas al libro.
    """
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    isbn = Column(String(20), index=True, nullable=False)
    title = Column(String(255), index=True, nullable=False)
    publisher = Column(String(255), nullable=True)
    added_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    added_by = relationship("User")
    authors = relationship("Author", secondary=book_authors)
    genres = relationship("Genre", secondary=book_genres)
    reviews = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        """
        Representación legible del objeto Book para depuración.

        Returns:
            str: Cadena representando el libro.
        """
        return f"<Book(id={self.id}, title='{self.title[:30]}...', isbn='{self.isbn}')>"
