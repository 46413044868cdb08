import logging

from api_spoticfy.config.config import Base, build_engine, build_session_factory, settings
from api_spoticfy.model.model import Artistas, Albumes, Canciones

logger = logging.getLogger(__name__)

ARTISTAS = ["Lean", "Nacho"]

# (nombre, indice del artista)
ALBUMES = [
    ("La Base de los Datos", 0),
    ("Ya lo sabIA", 0),
    ("No es Java", 1),
]

# (nombre, duracion, reproducciones, indice del album)
CANCIONES = [
    ("Momento pgAdmin ft. Nacho", 180, 100, 0),
    ("Sos el WHERE de mi SELECT", 200, 150, 1),
    ("Es JavaScript", 240, 200, 0),
]


def seed(db):
    """Insert the demo catalog. Returns False if the database already has data."""
    if db.query(Artistas).first():
        return False

    artistas = [Artistas(nombre=nombre) for nombre in ARTISTAS]
    db.add_all(artistas)
    db.flush()

    albumes = [Albumes(nombre=nombre, artista=artistas[i].id) for nombre, i in ALBUMES]
    db.add_all(albumes)
    db.flush()

    # Seed data sets play counts directly; the API always starts songs at zero
    db.add_all(
        Canciones(nombre=nombre, duracion=duracion, reproducciones=reproducciones, album=albumes[i].id)
        for nombre, duracion, reproducciones, i in CANCIONES
    )
    db.commit()
    return True


def init_db(database_url: str = None):
    """Crear las tablas y datos iniciales"""
    engine = build_engine(database_url)
    Base.metadata.create_all(bind=engine)

    # Crear sesión
    db = build_session_factory(engine)()

    try:
        if not seed(db):
            logger.info("La base de datos ya tiene datos.")
            return
        logger.info("Se agregaron %d artistas a la base de datos.", len(ARTISTAS))
        logger.info("Se agregaron %d albumes a la base de datos.", len(ALBUMES))
        logger.info("Se agregaron %d canciones a la base de datos.", len(CANCIONES))
    except Exception:
        logger.exception("Error al inicializar datos")
        db.rollback()
        raise
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    init_db()
