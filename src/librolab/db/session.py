"""
Configuración y utilidades para la sesión SQLAlchemy del adaptador relacional.
Incluye la clase base de los modelos ORM y fábricas de motor y sesión a partir
de una URL, ya que la URL se conoce en connect() y no al importar el módulo.
"""

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

Base = declarative_base()


def create_db_engine(database_url: str, **engine_options: Any) -> Engine:
    """
    Crea el motor SQLAlchemy para la URL indicada.

    Args:
        database_url (str): URL SQLAlchemy (por ejemplo mysql+pymysql://... o sqlite://).
        **engine_options: Opciones adicionales para create_engine (poolclass, connect_args...).

    Returns:
        Engine: Motor listo para abrir conexiones.
    """
    engine_options.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **engine_options)


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Devuelve una fábrica de sesiones ligada al motor, sin autoflush.

    Args:
        engine (Engine): Motor creado con create_db_engine.

    Returns:
        sessionmaker: Fábrica de sesiones.
    """
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
