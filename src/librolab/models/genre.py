from sqlalchemy import Column, Integer, String
from librolab.db.session import Base

class Genre(Base):
    __tablename__ = "genres"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), index=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Genre(id={self.id}, name='{self.name}')>"
