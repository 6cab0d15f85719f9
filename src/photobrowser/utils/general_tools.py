import functools
import logging
import time

logger = logging.getLogger(__name__)


def timeit(func):
    """
    Log the execution time of slow calls (anything above a second)
    """

    @functools.wraps(func)
    def helper(*args, **params):
        start = time.time()
        result = func(*args, **params)

        elapsed = time.time() - start
        if elapsed > 1:
            logger.info(f"!---- '{func.__name__}' execution time: {elapsed:.2f} sec ----!")

        return result

    return helper
