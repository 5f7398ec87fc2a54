import logging
from typing import Optional

LOGGER_NAME = "cloth_solver"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def reset_logging() -> logging.Logger:
    """Detach and close every handler on the `cloth_solver` logger."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    return logger


def setup_logging(
    log_file: Optional[str],
    *,
    quiet: bool = False,
    debug: bool = False,
) -> logging.Logger:
    """Configure and return the `cloth_solver` logger.

    Console output goes to stderr unless ``quiet``; ``log_file`` adds a file
    handler truncated on every call. Repeated calls replace earlier handlers.
    """
    logger = reset_logging()
    # caplog hooks the root logger, so records must keep flowing upward.
    logger.propagate = True

    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)

    if log_file:
        try:
            _attach(logger, logging.FileHandler(log_file, mode="w"), level)
        except OSError as exc:
            print(f"[logging] Could not open log file '{log_file}': {exc}")

    if not quiet:
        _attach(logger, logging.StreamHandler(), level)

    return logger
