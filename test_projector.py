import pytest

from api_spoticfy.model.model import Artistas, Albumes, Canciones
from api_spoticfy.projector.projector import index_by_id, project_album, project_cancion

ARTISTAS = [Artistas(id=1, nombre="Lean"), Artistas(id=2, nombre="Nacho")]
ALBUMES = [
    Albumes(id=1, nombre="La Base de los Datos", artista=1),
    Albumes(id=2, nombre="Ya lo sabIA", artista=1),
    Albumes(id=3, nombre="No es Java", artista=2),
]


def test_index_by_id():
    artistas_por_id = index_by_id(ARTISTAS)
    assert set(artistas_por_id) == {1, 2}
    assert artistas_por_id[2].nombre == "Nacho"
    assert index_by_id([]) == {}


def test_project_album_replaces_artista_with_its_nombre():
    proyectado = project_album(ALBUMES[1], index_by_id(ARTISTAS))
    assert proyectado.model_dump() == {"id": 2, "nombre": "Ya lo sabIA", "nombre_artista": "Lean"}


def test_project_cancion_resolves_artist_through_album():
    cancion = Canciones(id=2, nombre="Sos el WHERE de mi SELECT", duracion=200, reproducciones=150, album=3)
    proyectado = project_cancion(cancion, index_by_id(ALBUMES), index_by_id(ARTISTAS))
    data = proyectado.model_dump()
    assert list(data) == [
        "id", "nombre", "duracion", "reproducciones", "nombre_artista", "nombre_album"
    ]
    assert data["nombre_artista"] == "Nacho"
    assert data["nombre_album"] == "No es Java"
    assert data["reproducciones"] == 150


def test_project_cancion_with_unknown_album():
    cancion = Canciones(id=9, nombre="Huerfana", duracion=10, reproducciones=0, album=99)
    with pytest.raises(KeyError):
        project_cancion(cancion, index_by_id(ALBUMES), index_by_id(ARTISTAS))
