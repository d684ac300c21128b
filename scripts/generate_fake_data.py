"""
Script para generación de datos falsos en la base de datos configurada.

Este módulo crea usuarios, autores, géneros, libros y reseñas de prueba
utilizando Faker y las operaciones del contrato BooksDb. Está pensado para
poblar entornos de desarrollo o pruebas con datos realistas y variados.

Uso:
    Ejecutar directamente este script. Requiere que la base de datos esté
    accesible y, para MySQL, que las tablas existan (ver populate_db.py --create-schema).

Nota:
    - Los usuarios generados tendrán una contraseña común definida en FAKE_PASSWORD.
"""

import random
import logging
import sys
from typing import List

from faker import Faker

from librolab.core.config import settings
from librolab.core.exceptions import BooksDbError, InsertError
from librolab.db.factory import open_books_db
from librolab.db.interface import BooksDb
from librolab.schemas import Author, Book, Genre, User

logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

NUM_FAKE_USERS: int = 10
NUM_FAKE_AUTHORS: int = 15
NUM_FAKE_BOOKS: int = 30
MAX_REVIEWS_PER_USER: int = 8
MIN_REVIEWS_PER_USER: int = 1
FAKE_PASSWORD: str = "password123"
GENRE_NAMES: List[str] = ["Fantasy", "Science Fiction", "Mystery", "Romance", "History", "Poetry"]

fake = Faker(['es_ES', 'en_US'])


def generate_data(books_db: BooksDb) -> None:
    """
    Genera datos falsos a través del adaptador.

    Crea usuarios con nombres únicos, autores, géneros y libros con uno o dos
    autores y géneros; después cada usuario reseña un número aleatorio de
    libros distintos.

    Args:
        books_db (BooksDb): Adaptador conectado.
    """
    logger.info("--- Iniciando Generación de Datos Falsos ---")

    users: List[User] = []
    for _ in range(NUM_FAKE_USERS):
        username = fake.unique.user_name()
        try:
            users.append(books_db.add_user(username, FAKE_PASSWORD))
        except InsertError as e:
            logger.warning(f"Usuario '{username}' no creado: {e.message}")
    logger.info(f"{len(users)} usuarios creados.")
    if not users:
        logger.error("No hay usuarios para atribuir los datos. Abortando.")
        return

    authors: List[Author] = [
        books_db.add_author(
            Author(name=fake.name(), birthdate=fake.date_of_birth(minimum_age=25, maximum_age=90)),
            added_by=random.choice(users),
        )
        for _ in range(NUM_FAKE_AUTHORS)
    ]
    genres: List[Genre] = [books_db.add_genre(Genre(name=name)) for name in GENRE_NAMES]

    books: List[Book] = []
    for _ in range(NUM_FAKE_BOOKS):
        book = Book(
            isbn=fake.isbn13(separator=""),
            title=fake.sentence(nb_words=4).rstrip("."),
            publisher=fake.company(),
            authors=random.sample(authors, k=random.randint(1, 2)),
            genres=random.sample(genres, k=random.randint(1, 2)),
        )
        books.append(books_db.add_book(book, added_by=random.choice(users)))
    logger.info(f"{len(books)} libros creados.")

    total_reviews = 0
    for user in users:
        num_reviews = random.randint(MIN_REVIEWS_PER_USER, min(MAX_REVIEWS_PER_USER, len(books)))
        for book in random.sample(books, k=num_reviews):
            books_db.add_review(book, user, random.randint(1, 5), fake.paragraph(nb_sentences=2))
            total_reviews += 1

    logger.info(f"--- Generación Finalizada: {total_reviews} reseñas creadas. ---")


if __name__ == "__main__":
    try:
        books_db = open_books_db()
    except BooksDbError as e:
        logger.error(f"No se pudo conectar: {e.message}")
        sys.exit(1)
    try:
        generate_data(books_db)
    except BooksDbError as e:
        logger.exception(f"Error CRÍTICO durante la generación: {e.message}")
        sys.exit(1)
    finally:
        logger.info("Cerrando conexión.")
        books_db.disconnect()
