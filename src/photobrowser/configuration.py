import dataclasses
import logging
import pathlib
import sys

DEFAULT_PAGE_SIZE = 100
LOG_LEVELS = ("CRITICAL", "DEBUG", "ERROR", "FATAL", "INFO", "WARNING")


@dataclasses.dataclass(frozen=True)
class Config:
    """
    Global configuration object, configuration taken from config files and CLI
    """

    photos_library_location: pathlib.Path | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = "INFO"


def get_config_files() -> list[pathlib.Path]:
    """
    Resolve a list of config file paths to be read (in that order) into the Configuration object
    """
    config_files_dir_path = pathlib.Path(__file__).parent.parent.parent.resolve()
    return [
        config_files_dir_path.joinpath(config_file_name)
        for config_file_name in ("photobrowser.conf", "photobrowser.my.conf")
    ]


def load_config_from_files(config_files: list[pathlib.Path] | None = None) -> dict[str, str]:
    """
    Load configuration from config files if they exist (later files override earlier ones).

    The config files use a simple key=value format. Lines starting with # or ; are comments.
    """
    if config_files is None:
        config_files = get_config_files()

    config_dict = {}

    for config_file in config_files:
        if not config_file.exists():
            continue

        with config_file.open() as f:
            for line in f:
                line = line.strip()

                # Skip empty lines and comments
                if not line or line.startswith("#") or line.startswith(";"):
                    continue

                if "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()

                    # Only add non-empty values
                    if value:
                        config_dict[key] = value

    return config_dict


def configure_logging(log_level: str):
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        stream=sys.stdout,
        level=log_level,
        format="%(asctime)s - [%(levelname)s] %(message)s",
    )

    logging.getLogger().setLevel(log_level)

    # Pillow logs every plugin it tries while opening an image
    logging.getLogger("PIL").setLevel(logging.WARNING)


def make_config(
    photos_library_location: pathlib.Path | None = None,
    page_size: int | None = None,
    log_level: str | None = None,
    config_files: list[pathlib.Path] | None = None,
) -> Config:
    """
    Create a Config object from the provided parameters, loading defaults from config files.
    Explicit parameters override config file values.
    """
    file_config = load_config_from_files(config_files)

    if photos_library_location is None and file_config.get("photos_library_location"):
        photos_library_location = pathlib.Path(file_config["photos_library_location"]).expanduser()

    if photos_library_location is not None and not photos_library_location.exists():
        raise ValueError(f"Photos library {photos_library_location} does not exist!")

    if page_size is None:
        page_size_value = file_config.get("page_size", str(DEFAULT_PAGE_SIZE))
        try:
            page_size = int(page_size_value)
        except ValueError:
            raise ValueError(f"page_size must be an integer (got '{page_size_value}')")

    if page_size <= 0:
        raise ValueError(f"page_size must be positive (got {page_size})")

    if log_level is None:
        log_level = file_config.get("log_level", "INFO")

    log_level = log_level.upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level '{log_level}'. Valid levels: {', '.join(LOG_LEVELS)}")

    return Config(
        photos_library_location=photos_library_location,
        page_size=page_size,
        log_level=log_level,
    )
