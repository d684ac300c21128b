"""
Script para poblar la base de datos configurada con el catálogo de referencia.

Copia los libros, autores y géneros del adaptador en memoria (MockBooksDb) al
almacén indicado por BOOKS_DB_BACKEND (MySQL o MongoDB), usando únicamente las
operaciones del contrato BooksDb. Está pensado para preparar entornos de
desarrollo o pruebas con los mismos datos que ve la interfaz sin base de datos.

Uso:
    python scripts/populate_db.py [--create-schema] [--admin-password PASSWORD]

Nota:
    - Solo añade libros si no existen previamente por ISBN.
    - Los autores y géneros se reutilizan si ya existe uno con el mismo nombre.
"""

import argparse
import logging
import sys
from typing import Dict

from librolab.core.config import settings
from librolab.core.exceptions import BooksDbError
from librolab.db.factory import open_books_db
from librolab.db.interface import BooksDb
from librolab.db.mock_impl import MockBooksDb
from librolab.db.sql_impl import SqlBooksDb
from librolab.schemas import Author, Genre, User

logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def populate_books(books_db: BooksDb, admin: User) -> int:
    """
    Copia el catálogo de referencia al almacén.

    Args:
        books_db (BooksDb): Adaptador conectado de destino.
        admin (User): Usuario al que se atribuyen los libros y autores.

    Returns:
        int: Número de libros añadidos.
    """
    with MockBooksDb() as reference:
        reference.connect()
        catalogue = reference.find_books_by_title("")
    authors: Dict[str, Author] = {a.name: a for a in books_db.get_all_authors()}
    genres: Dict[str, Genre] = {g.name: g for g in books_db.get_all_genres()}
    total_books_added = 0

    for book in catalogue:
        if books_db.find_books_by_isbn(book.isbn):
            logger.info(f"Libro ya existe (ISBN): '{book.title}' [{book.isbn}]. Saltando.")
            continue

        for author in book.authors:
            if author.name not in authors:
                authors[author.name] = books_db.add_author(Author(name=author.name), added_by=admin)
        for genre in book.genres:
            if genre.name not in genres:
                genres[genre.name] = books_db.add_genre(Genre(name=genre.name))

        new_book = book.model_copy(update={
            "authors": [authors[a.name] for a in book.authors],
            "genres": [genres[g.name] for g in book.genres],
        })
        stored = books_db.add_book(new_book, added_by=admin)
        total_books_added += 1
        logger.info(f"  Añadido: '{stored.title}' (ID: {stored.id}, ISBN: {stored.isbn})")

    return total_books_added


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the configured books database with the reference catalogue.")
    parser.add_argument("--create-schema", action="store_true", help="Create the SQL tables first (mysql backend only).")
    parser.add_argument("--admin-username", default="admin")
    parser.add_argument("--admin-password", default="admin")
    args = parser.parse_args()

    logger.info(f"--- Iniciando Población de Libros ({settings.BOOKS_DB_BACKEND}) ---")
    try:
        books_db = open_books_db()
    except BooksDbError as e:
        logger.error(f"No se pudo conectar: {e.message}")
        return 1

    try:
        if args.create_schema and isinstance(books_db, SqlBooksDb):
            books_db.create_schema()
        admin = books_db.login(args.admin_username, args.admin_password)
        if admin is None:
            admin = books_db.add_user(args.admin_username, args.admin_password)
        total = populate_books(books_db, admin)
    except BooksDbError as e:
        logger.exception(f"Error durante la población: {e.message}")
        return 1
    finally:
        logger.info("Cerrando conexión.")
        books_db.disconnect()

    logger.info(f"--- Población de Libros Finalizada: {total} libros añadidos en total. ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())
