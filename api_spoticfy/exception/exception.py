# Catalog errors raised by the service layer and mapped to HTTP status codes in main.py


class CatalogError(Exception):
    """Base class for failures the catalog reports to its callers."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(CatalogError):
    """The requested entity id does not exist."""


class ForeignKeyViolation(CatalogError):
    """A referenced parent entity (artista, album) does not exist."""


class ConstraintViolation(CatalogError):
    """A business rule blocks the mutation, e.g. an album that still has songs."""


class TransientStoreError(CatalogError):
    """Connection or timeout failure talking to the database."""
