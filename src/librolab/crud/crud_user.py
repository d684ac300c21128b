"""
Operaciones CRUD para el modelo User.
Incluye el login (comparación de contraseña en texto plano) y el alta de usuarios.
"""

from sqlalchemy.orm import Session
from ..models.user import User
from typing import Optional

def get_user_by_credentials(db: Session, username: str, password: str) -> Optional[User]:
    """
    Obtiene el usuario cuyo nombre y contraseña coinciden exactamente.

    Args:
        db (Session): Sesión de base de datos SQLAlchemy.
        username (str): Nombre de usuario.
        password (str): Contraseña en texto plano.

    Returns:
        Optional[User]: El usuario si las credenciales coinciden, None si no.
    """
    return db.query(User).filter(User.username == username, User.password == password).first()

def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()

def create_user(db: Session, username: str, password: str) -> User:
    """
    Crea un nuevo usuario. No hace commit: lo gestiona quien llama.

    Args:
        db (Session): Sesión de base de datos SQLAlchemy.
        username (str): Nombre de usuario único.
        password (str): Contraseña en texto plano.

    Returns:
        User: El usuario creado, con su ID asignado.
    """
    db_user = User(username=username, password=password)
    db.add(db_user)
    db.flush()
    return db_user
