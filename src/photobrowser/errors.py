"""
Error taxonomy shared by the catalog reader, the directory scanner and the host application
"""


class PhotoBrowserError(Exception):
    """Base class for every error raised by photobrowser"""


class CatalogConnectionError(PhotoBrowserError, ConnectionError):
    """
    The catalog exists but could not be opened (corrupt file, permissions, lock contention)
    """

    def __init__(self, message: str, engine_message: str | None = None):
        super().__init__(message)
        self.engine_message = engine_message


class NotFoundError(CatalogConnectionError, FileNotFoundError):
    """No library bundle, catalog database, directory or file at the expected location"""


class StateError(PhotoBrowserError, RuntimeError):
    """An operation was invoked while the reader was not in the state it requires"""


class ValidationError(PhotoBrowserError, ValueError):
    """Malformed caller input (e.g. negative limit / offset)"""


class QueryError(PhotoBrowserError):
    """
    The database engine rejected a well-formed query. The engine's own message is kept for diagnostics.
    """

    def __init__(self, message: str, engine_message: str | None = None):
        if engine_message:
            message = f"{message}: {engine_message}"
        super().__init__(message)
        self.engine_message = engine_message


class PhotoReadError(PhotoBrowserError, OSError):
    """A photo file or directory exists but could not be read (e.g. permission denied)"""
