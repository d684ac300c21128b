"""
Modelo ORM para la entidad Author.
"""

from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship
from librolab.db.session import Base

class Author(Base):
    """
    Representa un autor.

    Atributos:
        id (int): Identificador primario del autor.
        name (str): Nombre del autor.
        birthdate (date): Fecha de nacimiento (opcional).
        added_by_id (int): Usuario que registró al autor (opcional).
    """
    __tablename__ = "authors"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), index=True, nullable=False)
    birthdate = Column(Date, nullable=True)
    added_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    added_by = relationship("User")

    def __repr__(self) -> str:
        return f"<Author(id={self.id}, name='{self.name}')>"
