"""
Esquema Pydantic para la entidad Author.
Un autor puede haber escrito varios libros (relación muchos a muchos).
"""

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .constants import UNPERSISTED_ID
from .user import User


class Author(BaseModel):
    """
    Autor de uno o más libros.

    Atributos:
        id (int): ID asignado por el almacén; UNPERSISTED_ID mientras no se haya guardado.
        name (str): Nombre completo del autor.
        birthdate (Optional[datetime.date]): Fecha de nacimiento, si se conoce.
        added_by (Optional[User]): Usuario que registró al autor.
    """
    id: int = UNPERSISTED_ID
    name: str
    birthdate: Optional[datetime.date] = None
    added_by: Optional[User] = None

    model_config = ConfigDict(from_attributes=True)

    def __str__(self) -> str:
        return self.name
