# Repository layer for SpoTICfy catalog
#
# Repositories flush but never commit: the service owns the transaction.

from sqlalchemy.orm import Session
from sqlalchemy import delete, func, select, update
from api_spoticfy.model.model import Artistas, Albumes, Canciones
from typing import Iterable, List, Optional


class ArtistaRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_artista(self, nombre: str) -> Artistas:
        db_artista = Artistas(nombre=nombre)
        self.db.add(db_artista)
        self.db.flush()
        self.db.refresh(db_artista)
        return db_artista

    def get_all_artistas(self) -> List[Artistas]:
        return self.db.query(Artistas).order_by(Artistas.id).all()

    def get_artista_by_id(self, artista_id: int, for_update: bool = False) -> Optional[Artistas]:
        query = self.db.query(Artistas).filter(Artistas.id == artista_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_artistas_by_ids(self, artista_ids: Iterable[int]) -> List[Artistas]:
        ids = set(artista_ids)
        if not ids:
            return []
        return self.db.query(Artistas).filter(Artistas.id.in_(ids)).all()

    def update_artista(self, artista_id: int, nombre: str) -> Optional[Artistas]:
        db_artista = self.get_artista_by_id(artista_id)
        if db_artista:
            db_artista.nombre = nombre
            self.db.flush()
            self.db.refresh(db_artista)
        return db_artista

    def count_albumes_by_artista(self, artista_id: int) -> int:
        return self.db.scalar(
            select(func.count(Albumes.id)).where(Albumes.artista == artista_id)
        )

    def delete_artista(self, artista_id: int) -> bool:
        result = self.db.execute(delete(Artistas).where(Artistas.id == artista_id))
        return result.rowcount > 0


class AlbumRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_album(self, nombre: str, artista_id: int) -> Albumes:
        db_album = Albumes(nombre=nombre, artista=artista_id)
        self.db.add(db_album)
        self.db.flush()
        self.db.refresh(db_album)
        return db_album

    def get_all_albumes(self) -> List[Albumes]:
        return self.db.query(Albumes).order_by(Albumes.id).all()

    def get_album_by_id(self, album_id: int, for_update: bool = False) -> Optional[Albumes]:
        query = self.db.query(Albumes).filter(Albumes.id == album_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_albumes_by_ids(self, album_ids: Iterable[int]) -> List[Albumes]:
        ids = set(album_ids)
        if not ids:
            return []
        return self.db.query(Albumes).filter(Albumes.id.in_(ids)).all()

    def get_albumes_by_artista(self, artista_id: int) -> List[Albumes]:
        return (
            self.db.query(Albumes)
            .filter(Albumes.artista == artista_id)
            .order_by(Albumes.id)
            .all()
        )

    def update_album(self, album_id: int, nombre: str, artista_id: int) -> Optional[Albumes]:
        db_album = self.get_album_by_id(album_id)
        if db_album:
            db_album.nombre = nombre
            db_album.artista = artista_id
            self.db.flush()
            self.db.refresh(db_album)
        return db_album

    def delete_album(self, album_id: int) -> bool:
        result = self.db.execute(delete(Albumes).where(Albumes.id == album_id))
        return result.rowcount > 0


class CancionRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_cancion(self, nombre: str, duracion: int, album_id: int) -> Canciones:
        db_cancion = Canciones(
            nombre=nombre,
            duracion=duracion,
            reproducciones=0,
            album=album_id
        )
        self.db.add(db_cancion)
        self.db.flush()
        self.db.refresh(db_cancion)
        return db_cancion

    def get_all_canciones(self) -> List[Canciones]:
        return self.db.query(Canciones).order_by(Canciones.id).all()

    def get_cancion_by_id(self, cancion_id: int) -> Optional[Canciones]:
        return self.db.query(Canciones).filter(Canciones.id == cancion_id).first()

    def get_canciones_by_album(self, album_id: int) -> List[Canciones]:
        return (
            self.db.query(Canciones)
            .filter(Canciones.album == album_id)
            .order_by(Canciones.id)
            .all()
        )

    def get_canciones_by_albumes(self, album_ids: Iterable[int]) -> List[Canciones]:
        ids = set(album_ids)
        if not ids:
            return []
        return (
            self.db.query(Canciones)
            .filter(Canciones.album.in_(ids))
            .order_by(Canciones.id)
            .all()
        )

    def count_canciones_by_album(self, album_id: int) -> int:
        return self.db.scalar(
            select(func.count(Canciones.id)).where(Canciones.album == album_id)
        )

    def update_cancion(
        self, cancion_id: int, nombre: str, duracion: int, album_id: int
    ) -> Optional[Canciones]:
        db_cancion = self.get_cancion_by_id(cancion_id)
        if db_cancion:
            db_cancion.nombre = nombre
            db_cancion.duracion = duracion
            db_cancion.album = album_id
            self.db.flush()
            self.db.refresh(db_cancion)
        return db_cancion

    def delete_cancion(self, cancion_id: int) -> bool:
        result = self.db.execute(delete(Canciones).where(Canciones.id == cancion_id))
        return result.rowcount > 0

    def increment_reproducciones(self, cancion_id: int) -> bool:
        # Evaluated by the database, so concurrent plays never lose an update
        result = self.db.execute(
            update(Canciones)
            .where(Canciones.id == cancion_id)
            .values(reproducciones=Canciones.reproducciones + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
