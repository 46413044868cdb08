# SQLAlchemy models for SpoTICfy catalog

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, text
from api_spoticfy.config.config import Base


class Artistas(Base):
    __tablename__ = "artistas"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    nombre = Column(String, nullable=False)


class Albumes(Base):
    __tablename__ = "albumes"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    nombre = Column(String, nullable=False)
    artista = Column(Integer, ForeignKey("artistas.id"), nullable=False, index=True)


class Canciones(Base):
    __tablename__ = "canciones"
    __table_args__ = (
        CheckConstraint("reproducciones >= 0", name="ck_canciones_reproducciones"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    nombre = Column(String, nullable=False)
    duracion = Column(Integer, nullable=False)
    reproducciones = Column(Integer, nullable=False, default=0, server_default=text("0"))
    album = Column(Integer, ForeignKey("albumes.id"), nullable=False, index=True)
