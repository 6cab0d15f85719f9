import base64
import logging
from contextlib import closing
from datetime import datetime
from functools import lru_cache
from pathlib import Path, PurePath
from typing import Any

import PIL.ExifTags
import PIL.Image

from photobrowser import errors, models

logger = logging.getLogger(__name__)


def is_image(filename: PurePath) -> bool:
    return filename.suffix.lower() in models.supported_image_types


def mime_type_for(filename: PurePath) -> str:
    image_type = models.supported_image_types.get(filename.suffix.lower())
    if image_type is None:
        return models.DEFAULT_MIME_TYPE

    return image_type.mime_type


def read_photo_bytes(disk_path: Path) -> bytes:
    try:
        return disk_path.read_bytes()
    except FileNotFoundError as e:
        raise errors.NotFoundError(f"Photo not found at {disk_path}") from e
    except IsADirectoryError as e:
        raise errors.ValidationError(f"{disk_path} is a directory, not a photo") from e
    except OSError as e:
        raise errors.PhotoReadError(f"Could not read photo {disk_path}: {e.strerror or e}") from e


def read_photo_as_data_uri(disk_path: Path) -> str:
    """
    Read a file and return it as a `data:` URI. The MIME type comes from the file extension.
    """
    return encode_data_uri(read_photo_bytes(disk_path), disk_path)


def encode_data_uri(data: bytes, filename: PurePath) -> str:
    payload = base64.b64encode(data).decode("ascii")

    return f"data:{mime_type_for(filename)};base64,{payload}"


@lru_cache(maxsize=128)
def extract_metadata(disk_path: Path) -> dict[str, Any]:
    """
    Convert Image EXIF data into a dictionary (only the header is parsed, pixels are never decoded)
    """
    metadata = {}

    try:
        with closing(PIL.Image.open(disk_path)) as pil_image:
            exif_data = pil_image.getexif()

            for tag_id in exif_data:
                # get the tag name, instead of human unreadable tag id
                tag = PIL.ExifTags.TAGS.get(tag_id, tag_id)

                data = exif_data.get(tag_id)
                if isinstance(data, bytes):
                    continue

                metadata[tag] = data

    except (PIL.UnidentifiedImageError, OSError):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"No metadata available for {disk_path}")

    return metadata


def extract_image_time_taken(disk_path: Path) -> datetime | None:
    metadata = extract_metadata(disk_path)

    datetime_str = metadata.get("DateTime")
    if datetime_str is None:
        return None

    try:
        return datetime.strptime(datetime_str, "%Y:%m:%d %H:%M:%S")
    except ValueError:
        if logger.isEnabledFor(logging.DEBUG):
            logger.exception(f"Failed to parse date for {disk_path}")
        return None
