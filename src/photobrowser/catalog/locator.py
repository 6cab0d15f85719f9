"""
Finds the macOS Photos library bundle on this machine
"""

import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORM = "darwin"

# Bundle names under ~/Pictures, in priority order
LIBRARY_BUNDLE_NAMES = (
    "Photos Library.photoslibrary",
    "Photos.photoslibrary",
)


def is_supported_platform() -> bool:
    return sys.platform == SUPPORTED_PLATFORM


def candidate_paths(home: Path | None = None) -> list[Path]:
    if home is None:
        home = Path.home()

    return [home.joinpath("Pictures", bundle_name) for bundle_name in LIBRARY_BUNDLE_NAMES]


def find_library(home: Path | None = None) -> Path | None:
    """
    Return the first conventional library location that exists, or None if there is none (or we are not on macOS)
    """
    if not is_supported_platform():
        return None

    for library_path in candidate_paths(home):
        if library_path.exists():
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"Found Photos library at {library_path}")
            return library_path

    return None


def is_available(home: Path | None = None) -> bool:
    """
    True if a Photos library can be found. Only checks for existence, the database is never opened.
    """
    if not is_supported_platform():
        return False

    return find_library(home) is not None
