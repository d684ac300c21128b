"""
Esquema Pydantic para la entidad Genre.
"""

from pydantic import BaseModel, ConfigDict

from .constants import UNPERSISTED_ID


class Genre(BaseModel):
    """
    Género literario asociable a varios libros.

    Atributos:
        id (int): ID asignado por el almacén; UNPERSISTED_ID mientras no se haya guardado.
        name (str): Nombre del género.
    """
    id: int = UNPERSISTED_ID
    name: str

    model_config = ConfigDict(from_attributes=True)

    def __str__(self) -> str:
        return self.name
