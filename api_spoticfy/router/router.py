# Router for SpoTICfy catalog
#
# Handlers are plain functions: FastAPI runs them in its threadpool, each with
# its own session from get_db.

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from api_spoticfy.config.config import get_db
from api_spoticfy.service.service import ArtistaService, AlbumService, CancionService
from api_spoticfy.schema.schema import (
    ArtistaCreate, ArtistaResponse,
    AlbumCreate, AlbumResponse, AlbumDetalleResponse,
    CancionCreate, CancionResponse, CancionDetalleResponse,
    ErrorResponse
)
from typing import List

NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}
BLOCKED = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}

router = APIRouter()


# Artista endpoints
@router.get("/artistas", response_model=List[ArtistaResponse])
def get_all_artistas(db: Session = Depends(get_db)):
    """Get all artists"""
    return ArtistaService(db).get_all_artistas()


@router.get("/artistas/{artista_id}", response_model=ArtistaResponse, responses=NOT_FOUND)
def get_artista(artista_id: int, db: Session = Depends(get_db)):
    """Get an artist by id"""
    return ArtistaService(db).get_artista(artista_id)


@router.post("/artistas", response_model=ArtistaResponse, status_code=status.HTTP_201_CREATED)
def create_artista(artista: ArtistaCreate, db: Session = Depends(get_db)):
    """Create a new artist"""
    return ArtistaService(db).create_artista(artista)


@router.put("/artistas/{artista_id}", response_model=ArtistaResponse, responses=NOT_FOUND)
def update_artista(artista_id: int, artista: ArtistaCreate, db: Session = Depends(get_db)):
    """Rename an artist"""
    return ArtistaService(db).update_artista(artista_id, artista)


@router.delete(
    "/artistas/{artista_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **BLOCKED},
)
def delete_artista(artista_id: int, db: Session = Depends(get_db)):
    """Delete an artist that has no albums"""
    ArtistaService(db).delete_artista(artista_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/artistas/{artista_id}/albumes",
    response_model=List[AlbumDetalleResponse],
    responses=NOT_FOUND,
)
def get_artista_albumes(artista_id: int, db: Session = Depends(get_db)):
    """Get the albums of an artist"""
    return ArtistaService(db).get_artista_albumes(artista_id)


@router.get(
    "/artistas/{artista_id}/canciones",
    response_model=List[CancionDetalleResponse],
    responses=NOT_FOUND,
)
def get_artista_canciones(artista_id: int, db: Session = Depends(get_db)):
    """Get every song of an artist, across all of their albums"""
    return ArtistaService(db).get_artista_canciones(artista_id)


# Album endpoints
@router.get("/albumes", response_model=List[AlbumDetalleResponse])
def get_all_albumes(db: Session = Depends(get_db)):
    """Get all albums with their artist name"""
    return AlbumService(db).get_all_albumes()


@router.get("/albumes/{album_id}", response_model=AlbumDetalleResponse, responses=NOT_FOUND)
def get_album(album_id: int, db: Session = Depends(get_db)):
    """Get an album with its artist name"""
    return AlbumService(db).get_album(album_id)


@router.post(
    "/albumes",
    response_model=AlbumResponse,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND,
)
def create_album(album: AlbumCreate, db: Session = Depends(get_db)):
    """Create an album for an existing artist"""
    return AlbumService(db).create_album(album)


@router.put("/albumes/{album_id}", response_model=AlbumResponse, responses=NOT_FOUND)
def update_album(album_id: int, album: AlbumCreate, db: Session = Depends(get_db)):
    """Update the name and artist of an album"""
    return AlbumService(db).update_album(album_id, album)


@router.delete(
    "/albumes/{album_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**NOT_FOUND, **BLOCKED},
)
def delete_album(album_id: int, db: Session = Depends(get_db)):
    """Delete an album that has no songs"""
    AlbumService(db).delete_album(album_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/albumes/{album_id}/canciones",
    response_model=List[CancionDetalleResponse],
    responses=NOT_FOUND,
)
def get_album_canciones(album_id: int, db: Session = Depends(get_db)):
    """Get the songs of an album"""
    return AlbumService(db).get_album_canciones(album_id)


# Cancion endpoints
@router.get("/canciones", response_model=List[CancionDetalleResponse])
def get_all_canciones(db: Session = Depends(get_db)):
    """Get all songs with their artist and album names"""
    return CancionService(db).get_all_canciones()


@router.get("/canciones/{cancion_id}", response_model=CancionDetalleResponse, responses=NOT_FOUND)
def get_cancion(cancion_id: int, db: Session = Depends(get_db)):
    """Get a song with its artist and album names"""
    return CancionService(db).get_cancion(cancion_id)


@router.post(
    "/canciones",
    response_model=CancionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND,
)
def create_cancion(cancion: CancionCreate, db: Session = Depends(get_db)):
    """Create a song in an existing album, with zero plays"""
    return CancionService(db).create_cancion(cancion)


@router.put("/canciones/{cancion_id}", response_model=CancionResponse, responses=NOT_FOUND)
def update_cancion(cancion_id: int, cancion: CancionCreate, db: Session = Depends(get_db)):
    """Update name, duration and album of a song; plays are kept"""
    return CancionService(db).update_cancion(cancion_id, cancion)


@router.delete(
    "/canciones/{cancion_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
)
def delete_cancion(cancion_id: int, db: Session = Depends(get_db)):
    """Delete a song"""
    CancionService(db).delete_cancion(cancion_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/canciones/{cancion_id}/reproducir",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
)
def reproducir_cancion(cancion_id: int, db: Session = Depends(get_db)):
    """Count one play of a song"""
    CancionService(db).reproducir_cancion(cancion_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
