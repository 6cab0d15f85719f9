"""
Read-only access to the Photos catalog (an SQLite database inside the library bundle).

The catalog schema belongs to Apple and is undocumented, so every table / column name and every assumption about
where original files live is kept in this module.

A CatalogReader holds a single connection and is not thread safe: callers must make sure only one of them drives a
given reader at a time.
"""

import enum
import logging
import sqlite3
from pathlib import Path

from photobrowser import errors, models
from photobrowser.catalog import locator
from photobrowser.utils import date_tools

logger = logging.getLogger(__name__)

# Database file names inside <bundle>/database, in the order they are tried
DATABASE_FILE_NAMES = ("photos.db", "Photos.sqlite")
DATABASE_DIR_NAME = "database"
ORIGINALS_DIR_NAME = "originals"

# Largest value SQLite can bind as an INTEGER
MAX_SQLITE_INTEGER = 2**63 - 1

_VISIBLE_ASSETS = f"ZASSET.ZTRASHEDSTATE = {models.TRASHED_STATE_ACTIVE} AND ZASSET.ZKIND = {models.KIND_IMAGE}"

_PHOTOS_QUERY = f"""
    SELECT
        ZASSET.Z_PK AS id,
        ZASSET.ZFILENAME AS filename,
        ZASSET.ZDIRECTORY AS directory,
        ZASSET.ZUUID AS uuid,
        ZASSET.ZADDEDDATE AS added_date,
        ZASSET.ZDATECREATED AS date_created,
        ZASSET.ZMODIFICATIONDATE AS modification_date,
        ZASSET.ZWIDTH AS width,
        ZASSET.ZHEIGHT AS height,
        ZASSET.ZKIND AS kind,
        ZASSET.ZTRASHEDSTATE AS trashed_state
    FROM ZASSET
    WHERE {_VISIBLE_ASSETS}
    ORDER BY ZASSET.ZDATECREATED DESC, ZASSET.Z_PK DESC
    LIMIT ? OFFSET ?
"""

_COUNT_QUERY = f"SELECT COUNT(*) AS count FROM ZASSET WHERE {_VISIBLE_ASSETS}"


class ReaderState(enum.Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


class CatalogReader:
    """
    Serves paginated, path-resolved photo queries from the Photos catalog.

    Life cycle: UNOPENED -> (connect) -> OPEN -> (close) -> CLOSED. A closed reader may connect() again.
    """

    def __init__(self, library_path: Path | None = None):
        self._configured_library_path = library_path
        self._library_path: Path | None = None
        self._db: sqlite3.Connection | None = None
        self._state = ReaderState.UNOPENED

    def __repr__(self):
        return f"CatalogReader({self._library_path or self._configured_library_path}, state={self._state.name})"

    def __enter__(self) -> "CatalogReader":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ReaderState.OPEN

    @property
    def library_path(self) -> Path | None:
        return self._library_path

    def connect(self):
        """
        Locate the library and open its database read-only.

        :raise NotFoundError: No library bundle, or no database inside it
        :raise CatalogConnectionError: The database exists but SQLite refused to open it
        """
        if self.is_open:
            return

        library_path = self._configured_library_path or locator.find_library()
        if library_path is None:
            raise errors.NotFoundError("Photos library not found")

        if not library_path.exists():
            raise errors.NotFoundError(f"Photos library not found at {library_path}")

        db_path = self._find_database(library_path)
        if db_path is None:
            raise errors.NotFoundError(
                f"Photos database not found at {library_path.joinpath(DATABASE_DIR_NAME, DATABASE_FILE_NAMES[0])}"
            )

        db = None
        try:
            db = sqlite3.connect(f"{db_path.absolute().as_uri()}?mode=ro", uri=True)
            db.row_factory = sqlite3.Row

            # SQLite opens lazily; touch the schema so a corrupt / locked file fails here rather than on first query
            db.execute("SELECT COUNT(*) FROM sqlite_master").fetchone()

        except sqlite3.Error as e:
            if db is not None:
                db.close()
            raise errors.CatalogConnectionError(
                f"Failed to open Photos database {db_path}: {e}", engine_message=str(e)
            ) from e

        self._db = db
        self._library_path = library_path
        self._state = ReaderState.OPEN

        logger.info(f"Opened Photos database {db_path}")

    def close(self):
        if self._db is not None:
            self._db.close()
            self._db = None

            logger.info(f"Closed Photos database of {self._library_path}")

        if self._state is ReaderState.OPEN:
            self._state = ReaderState.CLOSED

    def get_photos(self, limit: int = 100, offset: int = 0) -> list[models.ResolvedPhoto]:
        """
        Return one page of visible photos (most recently created first).

        Rows whose original file can't be found on disk are dropped, so the page may be shorter than `limit` even when
        more rows exist. Use get_photo_count() and keep paging until offset reaches it.
        """
        _validate_non_negative_int("limit", limit)
        _validate_non_negative_int("offset", offset)
        db = self._require_open("get_photos")

        if limit == 0:
            return []

        try:
            rows = db.execute(_PHOTOS_QUERY, (limit, offset)).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Error querying photos: {e}")
            raise errors.QueryError("Failed to query photos", engine_message=str(e)) from e

        photos = []
        for row in rows:
            record = map_photo_row(row)

            path = self.resolve_path(record)
            if path is None:
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(f"Skipping {record.name} (id={record.id}) - original file not found")
                continue

            photos.append(models.ResolvedPhoto(**vars(record), path=path))

        return photos

    def get_photo_count(self) -> int:
        db = self._require_open("get_photo_count")

        try:
            return db.execute(_COUNT_QUERY).fetchone()["count"]
        except sqlite3.Error as e:
            raise errors.QueryError("Failed to count photos", engine_message=str(e)) from e

    def resolve_path(self, record: models.PhotoRecord) -> Path | None:
        """
        Find the original file of a catalog record.

        Library versions differ in how they lay out the originals folder, and the catalog does not say which one is in
        use, so both layouts are tried (first hit wins):
          1. originals/<directory>/<filename>
          2. originals/<first segment of uuid>/<filename>
        """
        library_path = self._library_path or self._configured_library_path
        if library_path is None or not record.filename:
            return None

        originals_path = library_path.joinpath(ORIGINALS_DIR_NAME)

        if record.directory:
            full_path = originals_path.joinpath(record.directory, record.filename)
            if full_path.exists():
                return full_path

        if record.uuid:
            bucket = record.uuid.split("-", 1)[0]
            alt_path = originals_path.joinpath(bucket, record.filename)
            if alt_path.exists():
                return alt_path

        return None

    @staticmethod
    def _find_database(library_path: Path) -> Path | None:
        for file_name in DATABASE_FILE_NAMES:
            db_path = library_path.joinpath(DATABASE_DIR_NAME, file_name)
            if db_path.is_file():
                return db_path

        return None

    def _require_open(self, operation: str) -> sqlite3.Connection:
        if self._state is not ReaderState.OPEN or self._db is None:
            raise errors.StateError(
                f"{operation}() requires an open catalog (call connect() first); reader is {self._state.name}"
            )

        return self._db


def map_photo_row(row: sqlite3.Row) -> models.PhotoRecord:
    return models.PhotoRecord(
        id=row["id"],
        filename=row["filename"],
        directory=row["directory"],
        uuid=row["uuid"],
        width=row["width"],
        height=row["height"],
        added_date=date_tools.from_vendor_timestamp(row["added_date"]),
        date_created=date_tools.from_vendor_timestamp(row["date_created"]),
        modification_date=date_tools.from_vendor_timestamp(row["modification_date"]),
        kind=row["kind"],
        trashed_state=row["trashed_state"],
    )


def _validate_non_negative_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise errors.ValidationError(f"{name} must be a non-negative integer (got {value!r})")

    if value > MAX_SQLITE_INTEGER:
        raise errors.ValidationError(f"{name} must be at most {MAX_SQLITE_INTEGER} (got {value})")
