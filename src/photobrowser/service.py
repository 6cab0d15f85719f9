"""
The boundary used by the host application (CLI / UI process).

A PhotoBrowser owns the single catalog connection of the process: the host creates it at start-up and must call
shutdown() (or use it as a context manager) when it exits.
"""

import logging
from collections.abc import Generator
from pathlib import Path

from photobrowser import errors, models
from photobrowser.catalog import locator
from photobrowser.catalog.reader import CatalogReader
from photobrowser.configuration import Config
from photobrowser.scan import directory_scanner
from photobrowser.utils import general_tools, image_tools

logger = logging.getLogger(__name__)


class PhotoBrowser:
    def __init__(self, config: Config):
        self.config = config
        self._reader: CatalogReader | None = None

    def __enter__(self) -> "PhotoBrowser":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()

    def is_photo_catalog_available(self) -> bool:
        if self.config.photos_library_location is not None:
            return locator.is_supported_platform() and self.config.photos_library_location.exists()

        return locator.is_available()

    @general_tools.timeit
    def list_catalog_photos(self, limit: int | None = None, offset: int = 0) -> models.CatalogPage:
        """
        Fetch a page of catalog photos, opening the catalog on first use.

        `total` is the catalog's count and can be larger than what pages deliver (unresolvable rows are dropped), so
        keep requesting pages until offset reaches total instead of stopping on a short page.
        """
        if limit is None:
            limit = self.config.page_size

        reader = self._get_reader()

        photos = reader.get_photos(limit=limit, offset=offset)
        total = reader.get_photo_count()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Catalog page offset={offset} limit={limit}: {len(photos)} photos (of {total})")

        return models.CatalogPage(photos=photos, total=total, limit=limit, offset=offset)

    def iter_catalog_pages(
        self, page_size: int | None = None, offset: int = 0
    ) -> Generator[models.CatalogPage, None, None]:
        """
        Walk the catalog page by page, starting at `offset`. At least one page is always yielded, so the last one
        carries the catalog's total even when there is nothing left to list.
        """
        while True:
            page = self.list_catalog_photos(limit=page_size, offset=offset)
            yield page

            if page.limit == 0 or not page.has_more:
                break

            offset = page.next_offset

    def iter_catalog_photos(
        self, page_size: int | None = None, offset: int = 0
    ) -> Generator[models.ResolvedPhoto, None, None]:
        for page in self.iter_catalog_pages(page_size=page_size, offset=offset):
            yield from page.photos

    def read_catalog_photo(self, photo: models.ResolvedPhoto) -> str:
        """
        Return the photo as a data URI, filling in its (deferred) size
        """
        if photo.path is None:
            raise errors.NotFoundError(f"Photo {photo.name} (id={photo.id}) has no file on disk")

        data = image_tools.read_photo_bytes(photo.path)
        photo.size = len(data)

        return image_tools.encode_data_uri(data, photo.path)

    def list_directory_photos(self, directory: Path, include_metadata: bool = False) -> list[models.PhotoDescriptor]:
        return directory_scanner.list_directory_photos(directory, include_metadata=include_metadata)

    def read_photo_as_data_uri(self, path: Path) -> str:
        return image_tools.read_photo_as_data_uri(path)

    def shutdown(self):
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def _get_reader(self) -> CatalogReader:
        if self._reader is None:
            reader = CatalogReader(library_path=self.config.photos_library_location)
            reader.connect()
            self._reader = reader

        return self._reader
