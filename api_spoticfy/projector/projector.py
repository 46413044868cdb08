# Join projections: replace foreign key ids with the referenced entity's nombre

from typing import Dict, Iterable, TypeVar

from api_spoticfy.model.model import Artistas, Albumes, Canciones
from api_spoticfy.schema.schema import AlbumDetalleResponse, CancionDetalleResponse

Row = TypeVar("Row")


def index_by_id(rows: Iterable[Row]) -> Dict[int, Row]:
    """Build an id -> row map once so each projection is a dict lookup."""
    return {row.id: row for row in rows}


def project_album(album: Albumes, artistas_por_id: Dict[int, Artistas]) -> AlbumDetalleResponse:
    artista = artistas_por_id[album.artista]
    return AlbumDetalleResponse(
        id=album.id,
        nombre=album.nombre,
        nombre_artista=artista.nombre,
    )


def project_cancion(
    cancion: Canciones,
    albumes_por_id: Dict[int, Albumes],
    artistas_por_id: Dict[int, Artistas],
) -> CancionDetalleResponse:
    """Project a song with its album and, through the album, its artist.

    Raises KeyError if the album or artist is missing from the maps, which
    cannot happen while the foreign keys hold.
    """
    album = albumes_por_id[cancion.album]
    artista = artistas_por_id[album.artista]
    return CancionDetalleResponse(
        id=cancion.id,
        nombre=cancion.nombre,
        duracion=cancion.duracion,
        reproducciones=cancion.reproducciones,
        nombre_artista=artista.nombre,
        nombre_album=album.nombre,
    )
