from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from api_spoticfy.config.config import Base, build_engine, build_session_factory
from api_spoticfy.exception.exception import (
    ConstraintViolation, ForeignKeyViolation, NotFound, TransientStoreError
)
from api_spoticfy.model.model import Albumes, Canciones
from api_spoticfy.repository.repository import AlbumRepository, ArtistaRepository, CancionRepository
from api_spoticfy.schema.schema import AlbumCreate, ArtistaCreate, CancionCreate
from api_spoticfy.service.service import (
    ArtistaService, AlbumService, CancionService, _transaction
)
from init_data import seed


# Albums

def test_get_album_projects_artist_name(catalogo):
    album = AlbumService(catalogo).get_album(2)
    assert album.model_dump() == {"id": 2, "nombre": "Ya lo sabIA", "nombre_artista": "Lean"}


def test_get_all_albumes(catalogo):
    albumes = AlbumService(catalogo).get_all_albumes()
    assert [(a.nombre, a.nombre_artista) for a in albumes] == [
        ("La Base de los Datos", "Lean"),
        ("Ya lo sabIA", "Lean"),
        ("No es Java", "Nacho"),
    ]


def test_get_missing_album(catalogo):
    with pytest.raises(NotFound):
        AlbumService(catalogo).get_album(42)


def test_create_album_with_missing_artist_inserts_nothing(catalogo):
    with pytest.raises(ForeignKeyViolation):
        AlbumService(catalogo).create_album(AlbumCreate(nombre="Fantasma", artista=99))
    assert catalogo.query(Albumes).count() == 3


def test_update_missing_album_is_not_found_before_artist_check(catalogo):
    with pytest.raises(NotFound):
        AlbumService(catalogo).update_album(42, AlbumCreate(nombre="X", artista=99))


def test_update_album_with_missing_artist(catalogo):
    with pytest.raises(ForeignKeyViolation):
        AlbumService(catalogo).update_album(2, AlbumCreate(nombre="X", artista=99))
    assert AlbumService(catalogo).get_album(2).nombre == "Ya lo sabIA"


def test_delete_album_without_songs(catalogo):
    AlbumService(catalogo).delete_album(3)
    assert catalogo.get(Albumes, 3) is None


def test_delete_album_with_songs_is_rejected_and_changes_nothing(catalogo):
    with pytest.raises(ConstraintViolation):
        AlbumService(catalogo).delete_album(1)
    assert catalogo.get(Albumes, 1) is not None
    assert catalogo.query(Canciones).filter(Canciones.album == 1).count() == 2


def test_delete_missing_album_is_not_found(catalogo):
    with pytest.raises(NotFound):
        AlbumService(catalogo).delete_album(42)


def test_delete_album_rejected_by_store_is_constraint_violation(catalogo, monkeypatch):
    # A song that appears after the count makes the DELETE itself fail
    monkeypatch.setattr(CancionRepository, "count_canciones_by_album", lambda self, album_id: 0)
    with pytest.raises(ConstraintViolation):
        AlbumService(catalogo).delete_album(1)
    assert catalogo.get(Albumes, 1) is not None


def test_create_album_rejected_by_store_names_the_artist(catalogo, monkeypatch):
    monkeypatch.setattr(AlbumService, "_check_artista_exists", lambda self, artista_id: None)
    with pytest.raises(ForeignKeyViolation) as excinfo:
        AlbumService(catalogo).create_album(AlbumCreate(nombre="Fantasma", artista=99))
    assert excinfo.value.detail == "Artist 99 does not exist"
    assert catalogo.query(Albumes).count() == 3


def test_album_canciones(catalogo):
    canciones = AlbumService(catalogo).get_album_canciones(1)
    assert [c.id for c in canciones] == [1, 3]
    assert {c.nombre_album for c in canciones} == {"La Base de los Datos"}
    with pytest.raises(NotFound):
        AlbumService(catalogo).get_album_canciones(42)


# Songs

def test_create_cancion_ignores_client_reproducciones(catalogo):
    body = CancionCreate.model_validate(
        {"nombre": "Un 1 para el que diga Java", "duracion": 180, "album": 3, "reproducciones": 999}
    )
    cancion = CancionService(catalogo).create_cancion(body)
    assert cancion.reproducciones == 0
    assert catalogo.get(Canciones, cancion.id).reproducciones == 0


def test_create_cancion_in_missing_album(catalogo):
    with pytest.raises(ForeignKeyViolation):
        CancionService(catalogo).create_cancion(CancionCreate(nombre="X", duracion=1, album=99))
    assert catalogo.query(Canciones).count() == 3


def test_update_cancion_preserves_reproducciones(catalogo):
    body = CancionCreate.model_validate(
        {"nombre": "El COUNT de momentos JOIN", "duracion": 300, "album": 2, "reproducciones": 0}
    )
    cancion = CancionService(catalogo).update_cancion(1, body)
    assert cancion.reproducciones == 100
    assert cancion.album == 2


def test_update_missing_cancion(catalogo):
    with pytest.raises(NotFound):
        CancionService(catalogo).update_cancion(42, CancionCreate(nombre="X", duracion=1, album=1))


def test_get_cancion_resolves_names(catalogo):
    cancion = CancionService(catalogo).get_cancion(2)
    assert (cancion.nombre_album, cancion.nombre_artista) == ("Ya lo sabIA", "Lean")


def test_delete_cancion(catalogo):
    service = CancionService(catalogo)
    service.delete_cancion(2)
    with pytest.raises(NotFound):
        service.delete_cancion(2)


def test_reproducir_cancion(catalogo):
    service = CancionService(catalogo)
    service.reproducir_cancion(3)
    assert service.get_cancion(3).reproducciones == 201
    with pytest.raises(NotFound):
        service.reproducir_cancion(42)


def test_concurrent_plays_are_not_lost(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'spoticfy.db'}")
    Base.metadata.create_all(bind=engine)
    session_factory = build_session_factory(engine)
    with session_factory() as db:
        seed(db)

    def play(_):
        with session_factory() as db:
            CancionService(db).reproducir_cancion(3)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(play, range(40)))

    with session_factory() as db:
        assert db.get(Canciones, 3).reproducciones == 240
    engine.dispose()


def test_delete_album_races_with_new_cancion(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'spoticfy.db'}")
    Base.metadata.create_all(bind=engine)
    session_factory = build_session_factory(engine)
    with session_factory() as db:
        seed(db)

    def borrar(album_id):
        with session_factory() as db:
            AlbumService(db).delete_album(album_id)

    def crear(album_id):
        with session_factory() as db:
            CancionService(db).create_cancion(CancionCreate(nombre="Nueva", duracion=60, album=album_id))

    with ThreadPoolExecutor(max_workers=2) as pool:
        for _ in range(50):
            with session_factory() as db:
                album_id = AlbumService(db).create_album(AlbumCreate(nombre="Efimero", artista=1)).id
            borrado = pool.submit(borrar, album_id)
            creada = pool.submit(crear, album_id)
            error_borrado = borrado.exception()
            error_creada = creada.exception()
            if error_borrado is None:
                assert isinstance(error_creada, ForeignKeyViolation)
            else:
                assert isinstance(error_borrado, ConstraintViolation)
                assert error_creada is None

    with session_factory() as db:
        huerfanas = db.query(Canciones).filter(~Canciones.album.in_(select(Albumes.id))).count()
        assert huerfanas == 0
    engine.dispose()


# Artists

def test_artista_crud(catalogo):
    service = ArtistaService(catalogo)
    creado = service.create_artista(ArtistaCreate(nombre="Santi"))
    assert service.get_artista(creado.id).nombre == "Santi"
    assert service.update_artista(creado.id, ArtistaCreate(nombre="Santiago")).nombre == "Santiago"
    assert [a.nombre for a in service.get_all_artistas()] == ["Lean", "Nacho", "Santiago"]
    service.delete_artista(creado.id)
    with pytest.raises(NotFound):
        service.get_artista(creado.id)


def test_delete_artista_with_albums_is_rejected(catalogo):
    with pytest.raises(ConstraintViolation):
        ArtistaService(catalogo).delete_artista(2)
    with pytest.raises(NotFound):
        ArtistaService(catalogo).delete_artista(42)


def test_delete_artista_rejected_by_store_is_constraint_violation(catalogo, monkeypatch):
    monkeypatch.setattr(ArtistaRepository, "count_albumes_by_artista", lambda self, artista_id: 0)
    with pytest.raises(ConstraintViolation):
        ArtistaService(catalogo).delete_artista(2)
    assert catalogo.query(Albumes).filter(Albumes.artista == 2).count() == 1


def test_artista_albumes_and_canciones(catalogo):
    service = ArtistaService(catalogo)
    assert [a.nombre for a in service.get_artista_albumes(1)] == ["La Base de los Datos", "Ya lo sabIA"]
    assert [c.id for c in service.get_artista_canciones(1)] == [1, 2, 3]
    assert service.get_artista_canciones(2) == []


# Transactions

def test_transaction_maps_integrity_error_and_rolls_back(catalogo):
    with pytest.raises(ForeignKeyViolation):
        with _transaction(catalogo):
            AlbumRepository(catalogo).create_album("Sin artista", 99)
    assert catalogo.query(Albumes).count() == 3


def test_transaction_maps_operational_error(catalogo):
    with pytest.raises(TransientStoreError):
        with _transaction(catalogo):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))
