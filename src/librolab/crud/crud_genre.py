from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.genre import Genre
from ..models.book import book_genres

def get_all_genres(db: Session) -> List[Genre]:
    stmt = select(Genre).order_by(Genre.name, Genre.id)
    return list(db.execute(stmt).scalars().all())

def get_genres_for_book(db: Session, book_id: int) -> List[Genre]:
    stmt = (
        select(Genre)
        .join(book_genres, Genre.id == book_genres.c.genre_id)
        .where(book_genres.c.book_id == book_id)
        .order_by(Genre.id)
    )
    return list(db.execute(stmt).scalars().all())

def create_genre(db: Session, name: str) -> Genre:
    db_genre = Genre(name=name)
    db.add(db_genre)
    db.flush()
    return db_genre
