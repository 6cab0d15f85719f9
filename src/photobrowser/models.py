from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class ImageType:
    ext: str
    mime_type: str


# List all supported image types (anything else is ignored when listing a directory)
supported_image_types = {
    t.ext: t
    for t in [
        ImageType(ext=".jpg", mime_type="image/jpeg"),
        ImageType(ext=".jpeg", mime_type="image/jpeg"),
        ImageType(ext=".png", mime_type="image/png"),
        ImageType(ext=".gif", mime_type="image/gif"),
        ImageType(ext=".bmp", mime_type="image/bmp"),
        ImageType(ext=".webp", mime_type="image/webp"),
        ImageType(ext=".heic", mime_type="image/heic"),
    ]
}

DEFAULT_MIME_TYPE = "image/jpeg"

# Values of the catalog's kind / trashed-state columns that are visible to callers
KIND_IMAGE = 0
TRASHED_STATE_ACTIVE = 0


@dataclass
class PhotoRecord:
    """
    A single asset row from the Photos catalog, with timestamps already converted to UTC datetimes
    """

    id: int
    filename: str | None = None
    directory: str | None = None
    uuid: str | None = None
    width: int | None = None
    height: int | None = None
    added_date: datetime | None = None
    date_created: datetime | None = None
    modification_date: datetime | None = None
    kind: int = KIND_IMAGE
    trashed_state: int = TRASHED_STATE_ACTIVE

    @property
    def name(self) -> str:
        return self.filename or "Unknown"


@dataclass
class ResolvedPhoto(PhotoRecord):
    """
    A catalog record whose original file was found on disk.

    `size` stays None until the file is actually read.
    """

    path: Path | None = None
    size: int | None = field(default=None, compare=False)


@dataclass
class PhotoDescriptor:
    """An image file found in a plain directory"""

    name: str
    path: Path
    size: int
    modified: datetime
    time_taken: datetime | None = None


@dataclass
class CatalogPage:
    """
    One page of catalog photos.

    `total` is the catalog's count of visible rows. A page may hold fewer than `limit` photos even when more rows
    exist, since rows whose file can't be found are dropped.
    """

    photos: list[ResolvedPhoto]
    total: int
    limit: int
    offset: int

    @property
    def next_offset(self) -> int:
        return self.offset + self.limit

    @property
    def has_more(self) -> bool:
        return self.next_offset < self.total
