import logging
from collections.abc import Generator
from datetime import datetime
from pathlib import Path, PurePath

from dateutil.tz import UTC

from photobrowser import errors, models
from photobrowser.utils import general_tools, image_tools

logger = logging.getLogger(__name__)


@general_tools.timeit
def list_directory_photos(directory: Path, include_metadata: bool = False) -> list[models.PhotoDescriptor]:
    """
    List the image files directly inside a directory (no recursion), sorted by name.

    :param directory: The directory to list
    :param include_metadata: Also read the date taken from each image's EXIF data (slower)
    :return: A descriptor per image file
    """
    if not directory.exists():
        raise errors.NotFoundError(f"Directory {directory} does not exist")

    if not directory.is_dir():
        raise errors.ValidationError(f"{directory} is not a directory")

    logger.info(f"Scanning {directory} for photos...")

    photos = []
    for image_path in iter_images(directory):
        try:
            stats = image_path.stat()
        except FileNotFoundError:
            # Removed while we were listing
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"Skipping {image_path} - it no longer exists")
            continue
        except OSError as e:
            raise errors.PhotoReadError(f"Could not read {image_path}: {e.strerror or e}") from e

        photo = models.PhotoDescriptor(
            name=image_path.name,
            path=image_path,
            size=stats.st_size,
            modified=datetime.fromtimestamp(stats.st_mtime, tz=UTC),
        )

        if include_metadata:
            photo.time_taken = image_tools.extract_image_time_taken(image_path)

        photos.append(photo)

    logger.info(f"Found {len(photos)} photos in {directory}")

    return photos


def iter_images(directory: Path) -> Generator[Path, None, None]:
    try:
        entries = sorted(directory.iterdir(), key=lambda e: e.name)
    except OSError as e:
        raise errors.PhotoReadError(f"Could not list {directory}: {e.strerror or e}") from e

    for entry in entries:
        if entry.is_file() and image_tools.is_image(PurePath(entry.name)):
            yield entry
