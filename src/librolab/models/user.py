"""
Modelo ORM para la entidad User.
La contraseña se guarda en texto plano: el catálogo no implementa hashing.
"""

from sqlalchemy import Column, Integer, String
from librolab.db.session import Base

class User(Base):
    """
    Representa un usuario registrado.

    Atributos:
        id (int): Identificador primario del usuario.
        username (str): Nombre de usuario único.
        password (str): Contraseña en texto plano.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(64), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
