import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

logger = logging.getLogger("restcall")


def setup_logging(should_debug: bool = False) -> None:
    """Attach a stream handler to the ``restcall`` logger.

    Calling this more than once replaces the previously installed handler.
    """
    for handler in list(logger.handlers):
        if getattr(handler, "_restcall_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._restcall_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if should_debug else logging.INFO)
