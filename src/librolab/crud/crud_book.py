"""
Operaciones CRUD para el modelo Book.
Incluye las búsquedas por título, ISBN, autor, género y valoración, el alta
de un libro con sus relaciones y el borrado.

Las búsquedas devuelven filas (Book, username) donde username es el nombre
del usuario que añadió el libro, o None. La hidratación de autores, géneros
y reseñas se hace aparte, un libro cada vez.
"""

from sqlalchemy.orm import Session
from sqlalchemy import Select, func, insert, select
from typing import Iterable, List, Optional, Tuple

from ..models.author import Author
from ..models.book import Book, book_authors, book_genres
from ..models.genre import Genre
from ..models.review import Review
from ..models.user import User

BookRow = Tuple[Book, Optional[str]]

def _base_query() -> Select:
    """books LEFT JOIN users, para conocer quién añadió cada libro."""
    return (
        select(Book, User.username)
        .outerjoin(User, Book.added_by_id == User.id)
        .order_by(Book.id)
    )

def _rows(db: Session, stmt: Select) -> List[BookRow]:
    return [(book, username) for book, username in db.execute(stmt).all()]

def search_books_by_title(db: Session, title: str) -> List[BookRow]:
    """
    Busca libros cuyo título contiene el texto, sin distinguir mayúsculas.

    Args:
        db (Session): Sesión de base de datos SQLAlchemy.
        title (str): Fragmento del título.

    Returns:
        List[BookRow]: Filas (Book, username) ordenadas por ID.
    """
    return _rows(db, _base_query().where(Book.title.icontains(title, autoescape=True)))

def search_books_by_isbn(db: Session, isbn: str) -> List[BookRow]:
    """Coincidencia exacta de ISBN, sin distinguir mayúsculas."""
    return _rows(db, _base_query().where(func.lower(Book.isbn) == isbn.lower()))

def search_books_by_author(db: Session, author: str) -> List[BookRow]:
    """Libros con al menos un autor cuyo nombre contiene el texto."""
    stmt = (
        _base_query()
        .join(book_authors, Book.id == book_authors.c.book_id)
        .join(Author, book_authors.c.author_id == Author.id)
        .where(Author.name.icontains(author, autoescape=True))
        .distinct()
    )
    return _rows(db, stmt)

def search_books_by_genre(db: Session, genre: str) -> List[BookRow]:
    """Libros asociados a un género con ese nombre exacto, sin distinguir mayúsculas."""
    stmt = (
        _base_query()
        .join(book_genres, Book.id == book_genres.c.book_id)
        .join(Genre, book_genres.c.genre_id == Genre.id)
        .where(func.lower(Genre.name) == genre.lower())
        .distinct()
    )
    return _rows(db, stmt)

def search_books_by_rating(db: Session, rating: float) -> List[BookRow]:
    """
    Libros cuya valoración media es mayor o igual que rating.
    Un libro sin reseñas cuenta como 0.0.
    """
    stmt = (
        _base_query()
        .outerjoin(Review, Book.id == Review.book_id)
        .group_by(Book.id, User.id, User.username)
        .having(func.coalesce(func.avg(Review.rating), 0) >= rating)
    )
    return _rows(db, stmt)

def get_book_by_id(db: Session, book_id: int) -> Optional[Book]:
    """
    Recupera un libro por su ID primario.

    Args:
        db (Session): Sesión de base de datos SQLAlchemy.
        book_id (int): ID del libro a recuperar.

    Returns:
        Optional[Book]: El objeto Book si se encuentra, None si no existe.
    """
    return db.get(Book, book_id)

def create_book(
    db: Session,
    isbn: str,
    title: str,
    publisher: Optional[str],
    added_by_id: Optional[int],
    author_ids: Iterable[int],
    genre_ids: Iterable[int],
) -> Book:
    """
    Inserta el libro y sus filas de unión dentro de la transacción en curso.
    No hace commit ni rollback: quien llama decide el resultado de la transacción.

    Returns:
        Book: El libro insertado, con el ID generado por la base de datos.
    """
    db_book = Book(isbn=isbn, title=title, publisher=publisher, added_by_id=added_by_id)
    db.add(db_book)
    db.flush() # Needed for the generated id

    for author_id in author_ids:
        db.execute(insert(book_authors).values(book_id=db_book.id, author_id=author_id))
    for genre_id in genre_ids:
        db.execute(insert(book_genres).values(book_id=db_book.id, genre_id=genre_id))
    return db_book

def delete_book(db: Session, book_id: int) -> bool:
    """
    Borra el libro, sus filas de unión y sus reseñas. No hace commit.

    Returns:
        bool: True si el libro existía, False si no.
    """
    db_book = get_book_by_id(db, book_id)
    if db_book is None:
        return False
    db.delete(db_book)
    db.flush()
    return True
