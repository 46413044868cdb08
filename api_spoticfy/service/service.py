# Service layer for SpoTICfy catalog
#
# Every operation runs in a single transaction: preconditions are checked and
# the mutation applied against the same consistent view of the database.

import logging
from contextlib import contextmanager

from sqlalchemy.orm import Session
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from api_spoticfy.exception.exception import (
    ConstraintViolation, ForeignKeyViolation, NotFound, TransientStoreError
)
from api_spoticfy.projector.projector import index_by_id, project_album, project_cancion
from api_spoticfy.repository.repository import ArtistaRepository, AlbumRepository, CancionRepository
from api_spoticfy.schema.schema import (
    ArtistaCreate, ArtistaResponse,
    AlbumCreate, AlbumResponse, AlbumDetalleResponse,
    CancionCreate, CancionResponse, CancionDetalleResponse
)
from typing import List

logger = logging.getLogger(__name__)


@contextmanager
def _transaction(db: Session, parent: str = None):
    """Commit on success, roll back on any failure and translate store errors.

    parent names the referenced entity (e.g. "Album 3") reported when the
    database rejects a write on a foreign key.
    """
    try:
        yield
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error, rolled back: %s", e.orig)
        raise ForeignKeyViolation(f"{parent or 'Referenced entity'} does not exist") from e
    except (OperationalError, PoolTimeoutError) as e:
        db.rollback()
        logger.error("Database unavailable: %s", e)
        raise TransientStoreError("Database temporarily unavailable") from e
    except DBAPIError as e:
        db.rollback()
        if e.connection_invalidated:
            logger.error("Database connection lost: %s", e)
            raise TransientStoreError("Database temporarily unavailable") from e
        raise
    except Exception:
        db.rollback()
        raise


class ArtistaService:
    def __init__(self, db: Session):
        self.db = db
        self.artista_repo = ArtistaRepository(db)
        self.album_repo = AlbumRepository(db)
        self.cancion_repo = CancionRepository(db)

    def _get_artista_or_404(self, artista_id: int, for_update: bool = False):
        db_artista = self.artista_repo.get_artista_by_id(artista_id, for_update=for_update)
        if not db_artista:
            raise NotFound("Artist not found")
        return db_artista

    def create_artista(self, artista: ArtistaCreate) -> ArtistaResponse:
        with _transaction(self.db):
            db_artista = self.artista_repo.create_artista(artista.nombre)
            response = ArtistaResponse.model_validate(db_artista)
        logger.info("Created artist %s", response.id)
        return response

    def get_all_artistas(self) -> List[ArtistaResponse]:
        with _transaction(self.db):
            artistas = self.artista_repo.get_all_artistas()
            return [ArtistaResponse.model_validate(a) for a in artistas]

    def get_artista(self, artista_id: int) -> ArtistaResponse:
        with _transaction(self.db):
            return ArtistaResponse.model_validate(self._get_artista_or_404(artista_id))

    def update_artista(self, artista_id: int, artista: ArtistaCreate) -> ArtistaResponse:
        with _transaction(self.db):
            db_artista = self.artista_repo.update_artista(artista_id, artista.nombre)
            if not db_artista:
                raise NotFound("Artist not found")
            response = ArtistaResponse.model_validate(db_artista)
        logger.info("Updated artist %s", artista_id)
        return response

    def delete_artista(self, artista_id: int) -> None:
        with _transaction(self.db):
            self._get_artista_or_404(artista_id, for_update=True)
            albumes = self.artista_repo.count_albumes_by_artista(artista_id)
            if albumes > 0:
                logger.warning(
                    "Refusing to delete artist %s: %d albums reference it", artista_id, albumes
                )
                raise ConstraintViolation(
                    f"Cannot delete artist {artista_id}: it still has {albumes} album(s)"
                )
            try:
                self.artista_repo.delete_artista(artista_id)
            except IntegrityError as e:
                raise ConstraintViolation(
                    f"Cannot delete artist {artista_id}: albums still reference it"
                ) from e
        logger.info("Deleted artist %s", artista_id)

    def get_artista_albumes(self, artista_id: int) -> List[AlbumDetalleResponse]:
        with _transaction(self.db):
            db_artista = self._get_artista_or_404(artista_id)
            artistas_por_id = {db_artista.id: db_artista}
            return [
                project_album(album, artistas_por_id)
                for album in self.album_repo.get_albumes_by_artista(artista_id)
            ]

    def get_artista_canciones(self, artista_id: int) -> List[CancionDetalleResponse]:
        with _transaction(self.db):
            db_artista = self._get_artista_or_404(artista_id)
            albumes_por_id = index_by_id(self.album_repo.get_albumes_by_artista(artista_id))
            canciones = self.cancion_repo.get_canciones_by_albumes(albumes_por_id.keys())
            artistas_por_id = {db_artista.id: db_artista}
            return [project_cancion(c, albumes_por_id, artistas_por_id) for c in canciones]


class AlbumService:
    def __init__(self, db: Session):
        self.db = db
        self.artista_repo = ArtistaRepository(db)
        self.album_repo = AlbumRepository(db)
        self.cancion_repo = CancionRepository(db)

    def _check_artista_exists(self, artista_id: int) -> None:
        if not self.artista_repo.get_artista_by_id(artista_id):
            logger.warning("Rejected album write: artist %s does not exist", artista_id)
            raise ForeignKeyViolation(f"Artist {artista_id} does not exist")

    def get_all_albumes(self) -> List[AlbumDetalleResponse]:
        with _transaction(self.db):
            albumes = self.album_repo.get_all_albumes()
            artistas_por_id = index_by_id(
                self.artista_repo.get_artistas_by_ids(a.artista for a in albumes)
            )
            return [project_album(a, artistas_por_id) for a in albumes]

    def get_album(self, album_id: int) -> AlbumDetalleResponse:
        with _transaction(self.db):
            db_album = self.album_repo.get_album_by_id(album_id)
            if not db_album:
                raise NotFound("Album not found")
            artistas_por_id = index_by_id(
                self.artista_repo.get_artistas_by_ids([db_album.artista])
            )
            return project_album(db_album, artistas_por_id)

    def create_album(self, album: AlbumCreate) -> AlbumResponse:
        with _transaction(self.db, parent=f"Artist {album.artista}"):
            self._check_artista_exists(album.artista)
            db_album = self.album_repo.create_album(album.nombre, album.artista)
            response = AlbumResponse.model_validate(db_album)
        logger.info("Created album %s for artist %s", response.id, response.artista)
        return response

    def update_album(self, album_id: int, album: AlbumCreate) -> AlbumResponse:
        with _transaction(self.db, parent=f"Artist {album.artista}"):
            if not self.album_repo.get_album_by_id(album_id):
                raise NotFound("Album not found")
            self._check_artista_exists(album.artista)
            db_album = self.album_repo.update_album(album_id, album.nombre, album.artista)
            response = AlbumResponse.model_validate(db_album)
        logger.info("Updated album %s", album_id)
        return response

    def delete_album(self, album_id: int) -> None:
        with _transaction(self.db):
            # The row lock makes concurrent song inserts into this album wait
            if not self.album_repo.get_album_by_id(album_id, for_update=True):
                raise NotFound("Album not found")
            canciones = self.cancion_repo.count_canciones_by_album(album_id)
            if canciones > 0:
                logger.warning(
                    "Refusing to delete album %s: %d songs reference it", album_id, canciones
                )
                raise ConstraintViolation(
                    f"Cannot delete album {album_id}: it still has {canciones} song(s)"
                )
            try:
                self.album_repo.delete_album(album_id)
            except IntegrityError as e:
                raise ConstraintViolation(
                    f"Cannot delete album {album_id}: songs still reference it"
                ) from e
        logger.info("Deleted album %s", album_id)

    def get_album_canciones(self, album_id: int) -> List[CancionDetalleResponse]:
        with _transaction(self.db):
            db_album = self.album_repo.get_album_by_id(album_id)
            if not db_album:
                raise NotFound("Album not found")
            albumes_por_id = {db_album.id: db_album}
            artistas_por_id = index_by_id(
                self.artista_repo.get_artistas_by_ids([db_album.artista])
            )
            return [
                project_cancion(c, albumes_por_id, artistas_por_id)
                for c in self.cancion_repo.get_canciones_by_album(album_id)
            ]


class CancionService:
    def __init__(self, db: Session):
        self.db = db
        self.artista_repo = ArtistaRepository(db)
        self.album_repo = AlbumRepository(db)
        self.cancion_repo = CancionRepository(db)

    def _check_album_exists(self, album_id: int) -> None:
        # Locked so a concurrent delete of this album cannot pass its song count check
        if not self.album_repo.get_album_by_id(album_id, for_update=True):
            logger.warning("Rejected song write: album %s does not exist", album_id)
            raise ForeignKeyViolation(f"Album {album_id} does not exist")

    def _project(self, canciones) -> List[CancionDetalleResponse]:
        albumes_por_id = index_by_id(
            self.album_repo.get_albumes_by_ids(c.album for c in canciones)
        )
        artistas_por_id = index_by_id(
            self.artista_repo.get_artistas_by_ids(a.artista for a in albumes_por_id.values())
        )
        return [project_cancion(c, albumes_por_id, artistas_por_id) for c in canciones]

    def get_all_canciones(self) -> List[CancionDetalleResponse]:
        with _transaction(self.db):
            return self._project(self.cancion_repo.get_all_canciones())

    def get_cancion(self, cancion_id: int) -> CancionDetalleResponse:
        with _transaction(self.db):
            db_cancion = self.cancion_repo.get_cancion_by_id(cancion_id)
            if not db_cancion:
                raise NotFound("Song not found")
            return self._project([db_cancion])[0]

    def create_cancion(self, cancion: CancionCreate) -> CancionResponse:
        with _transaction(self.db, parent=f"Album {cancion.album}"):
            self._check_album_exists(cancion.album)
            db_cancion = self.cancion_repo.create_cancion(
                cancion.nombre, cancion.duracion, cancion.album
            )
            response = CancionResponse.model_validate(db_cancion)
        logger.info("Created song %s in album %s", response.id, response.album)
        return response

    def update_cancion(self, cancion_id: int, cancion: CancionCreate) -> CancionResponse:
        with _transaction(self.db, parent=f"Album {cancion.album}"):
            if not self.cancion_repo.get_cancion_by_id(cancion_id):
                raise NotFound("Song not found")
            self._check_album_exists(cancion.album)
            db_cancion = self.cancion_repo.update_cancion(
                cancion_id, cancion.nombre, cancion.duracion, cancion.album
            )
            response = CancionResponse.model_validate(db_cancion)
        logger.info("Updated song %s", cancion_id)
        return response

    def delete_cancion(self, cancion_id: int) -> None:
        with _transaction(self.db):
            if not self.cancion_repo.delete_cancion(cancion_id):
                raise NotFound("Song not found")
        logger.info("Deleted song %s", cancion_id)

    def reproducir_cancion(self, cancion_id: int) -> None:
        with _transaction(self.db):
            if not self.cancion_repo.increment_reproducciones(cancion_id):
                raise NotFound("Song not found")
        logger.debug("Played song %s", cancion_id)
