import logging
from datetime import datetime, timedelta

from dateutil.tz import UTC

logger = logging.getLogger(__name__)

# Zero point of the timestamps stored in the Photos catalog
VENDOR_EPOCH = datetime(year=2001, month=1, day=1, tzinfo=UTC)


def from_vendor_timestamp(seconds: float | int | None) -> datetime | None:
    """
    Convert seconds since the vendor epoch into a UTC datetime. None stays None (0 is the epoch itself).

    Values that don't fit in a datetime (or aren't finite) are treated as missing.
    """
    if seconds is None:
        return None

    try:
        return VENDOR_EPOCH + timedelta(seconds=float(seconds))
    except (OverflowError, ValueError):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Ignoring out of range catalog timestamp {seconds!r}")
        return None


def to_vendor_timestamp(dt: datetime) -> float:
    """
    Inverse of from_vendor_timestamp. Naive datetimes are taken to be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)

    return (dt - VENDOR_EPOCH).total_seconds()
