"""
Selección del adaptador de datos según la configuración.
El adaptador se elige una vez al arrancar; el resto del código solo ve BooksDb.
"""

import logging
from typing import Iterator, Optional

from librolab.core.config import Settings, settings as default_settings
from librolab.db.interface import BooksDb
from librolab.db.mock_impl import MockBooksDb
from librolab.db.mongo_impl import MongoBooksDb
from librolab.db.sql_impl import SqlBooksDb

logger = logging.getLogger(__name__)


def create_books_db(config: Optional[Settings] = None) -> BooksDb:
    """
    Crea el adaptador indicado por BOOKS_DB_BACKEND, sin conectarlo.

    Args:
        config (Optional[Settings]): Configuración; por defecto la global.

    Returns:
        BooksDb: SqlBooksDb, MongoBooksDb o MockBooksDb.

    Raises:
        ValueError: Si el backend configurado no existe.
    """
    config = config or default_settings
    backend = config.BOOKS_DB_BACKEND
    if backend == "mysql":
        return SqlBooksDb()
    if backend == "mongo":
        return MongoBooksDb(database_name=config.MONGO_DB_NAME, timeout_ms=config.MONGO_TIMEOUT_MS)
    if backend == "mock":
        return MockBooksDb()
    raise ValueError(f"Unknown books database backend: {backend}")


def open_books_db(config: Optional[Settings] = None) -> BooksDb:
    """Crea el adaptador configurado y lo conecta a su localizador."""
    config = config or default_settings
    books_db = create_books_db(config)
    books_db.connect(config.locator)
    logger.info(f"Using '{config.BOOKS_DB_BACKEND}' books database.")
    return books_db


def get_books_db(config: Optional[Settings] = None) -> Iterator[BooksDb]:
    """
    Proporciona un adaptador conectado para usarlo como dependencia.

    Yields:
        BooksDb: Adaptador conectado.

    Ensures:
        La conexión se cierra correctamente después de su uso.
    """
    books_db = open_books_db(config)
    try:
        yield books_db
    finally:
        books_db.disconnect()
