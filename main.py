import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.engine import Engine
from api_spoticfy.router.router import router as api_spoticfy_router
from api_spoticfy.config.config import Base, build_engine, build_session_factory, settings
from api_spoticfy.exception.exception import (
    CatalogError, ConstraintViolation, ForeignKeyViolation, NotFound, TransientStoreError
)

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFound: status.HTTP_404_NOT_FOUND,
    ForeignKeyViolation: status.HTTP_404_NOT_FOUND,
    ConstraintViolation: status.HTTP_400_BAD_REQUEST,
    TransientStoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def catalog_error_handler(request: Request, exc: CatalogError):
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(status_code=status_code, content={"detail": exc.detail})


def create_app(engine: Engine = None) -> FastAPI:
    """Build the API around an engine; a new one is created from settings if omitted."""
    owns_engine = engine is None
    engine = engine or build_engine()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting SpoTICfy API...")
        Base.metadata.create_all(bind=engine)
        yield
        if owns_engine:
            engine.dispose()
        logger.info("SpoTICfy API stopped")

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for error_class in ERROR_STATUS:
        app.add_exception_handler(error_class, catalog_error_handler)

    app.include_router(api_spoticfy_router)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "SpoTICfy API working!"

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
