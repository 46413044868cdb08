# Pydantic schemas for SpoTICfy catalog

from pydantic import BaseModel, Field


# Artista schemas
class ArtistaCreate(BaseModel):
    nombre: str


class ArtistaResponse(BaseModel):
    id: int
    nombre: str

    class Config:
        from_attributes = True


# Album schemas
class AlbumCreate(BaseModel):
    nombre: str
    artista: int


class AlbumResponse(BaseModel):
    id: int
    nombre: str
    artista: int

    class Config:
        from_attributes = True


class AlbumDetalleResponse(BaseModel):
    id: int
    nombre: str
    nombre_artista: str


# Cancion schemas
class CancionCreate(BaseModel):
    # reproducciones is not accepted from clients; extra keys are ignored
    nombre: str
    duracion: int = Field(ge=0)
    album: int


class CancionResponse(BaseModel):
    id: int
    nombre: str
    duracion: int
    reproducciones: int
    album: int

    class Config:
        from_attributes = True


class CancionDetalleResponse(BaseModel):
    id: int
    nombre: str
    duracion: int
    reproducciones: int
    nombre_artista: str
    nombre_album: str


# Error response schema
class ErrorResponse(BaseModel):
    detail: str
