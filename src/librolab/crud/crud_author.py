"""
Operaciones CRUD para el modelo Author.
"""

import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ..models.author import Author
from ..models.book import book_authors

def get_all_authors(db: Session) -> List[Author]:
    """Todos los autores ordenados por nombre, con el usuario que los añadió."""
    stmt = select(Author).options(joinedload(Author.added_by)).order_by(Author.name, Author.id)
    return list(db.execute(stmt).scalars().all())

def get_authors_for_book(db: Session, book_id: int) -> List[Author]:
    """
    Autores de un libro, en el orden en que se asociaron.

    Args:
        db (Session): Sesión de base de datos SQLAlchemy.
        book_id (int): ID del libro.

    Returns:
        List[Author]: Autores con added_by ya cargado (una sola consulta).
    """
    stmt = (
        select(Author)
        .join(book_authors, Author.id == book_authors.c.author_id)
        .options(joinedload(Author.added_by))
        .where(book_authors.c.book_id == book_id)
        .order_by(Author.id)
    )
    return list(db.execute(stmt).scalars().all())

def create_author(
    db: Session,
    name: str,
    birthdate: Optional[datetime.date] = None,
    added_by_id: Optional[int] = None,
) -> Author:
    db_author = Author(name=name, birthdate=birthdate, added_by_id=added_by_id)
    db.add(db_author)
    db.flush()
    return db_author
