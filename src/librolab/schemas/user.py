"""
Esquemas Pydantic para la entidad User del catálogo.
Un usuario puede añadir libros y autores y escribir reseñas.
"""

from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    """
    Usuario autenticado (nunca expone la contraseña).

    Atributos:
        id (int): ID del usuario en el almacén.
        username (str): Nombre de usuario único.
    """
    id: int
    username: str

    model_config = ConfigDict(from_attributes=True, frozen=True)

    def __str__(self) -> str:
        return self.username
