import logging

from eventmanager.config import EventManagerConfig

PACKAGE = "eventmanager"


class CustomFormatter(logging.Formatter):
    def format(self, record):
        record.levelname = record.levelname.ljust(8)  # Adjust the number as needed
        return super().format(record)


def configure_logger(log_level: int | str | None = None) -> logging.Logger:
    """Configures console logging for the eventmanager package

    Attaches a single stream handler to the ``eventmanager`` logger so handler failures and
    registration decisions become visible without touching the root logger. Calling it again
    replaces the handler it installed previously instead of stacking a second one, so repeated
    calls only change the level and format.

    Args:
        log_level (int | str | None): The level to log at, either a logging constant or its
            name ("DEBUG", "INFO", ...). Defaults to EVENTMANAGER_LOG_LEVEL, else WARNING.

    Returns:
        logging.Logger: The configured package logger.
    """
    if log_level is None:
        log_level = EventManagerConfig.from_env().log_level
    if isinstance(log_level, str):
        log_level = log_level.upper()

    logger = logging.getLogger(PACKAGE)
    for handler in list(logger.handlers):
        if getattr(handler, "_eventmanager_handler", False):
            logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(
        CustomFormatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S")
    )
    stream_handler._eventmanager_handler = True

    logger.addHandler(stream_handler)
    logger.setLevel(log_level)
    return logger
