import logging
import sys

__all__ = [
    "MAIN_LOGGER_NAME",
    "get_main_logger",
    "attach_stream_handler",
    "log_levels",
]

MAIN_LOGGER_NAME = "strdust-main"

fmt = logging.Formatter(fmt="%(name)s:\t[%(levelname)s]\t%(message)s")


class MainStreamHandler(logging.StreamHandler):
    def __init__(self):
        super().__init__(sys.stderr)
        self.setFormatter(fmt)


def get_main_logger(level: int | None = None) -> logging.Logger:
    logger = logging.getLogger(MAIN_LOGGER_NAME)
    if level is not None:
        logger.setLevel(level)
    return logger


def attach_stream_handler(level: int, logger_: logging.Logger) -> logging.Handler:
    """
    Attach a stderr handler to the logger, re-using (and re-levelling) one attached by a previous call, so that
    repeated invocations within the same process do not duplicate every message.
    """

    ch = next((h for h in logger_.handlers if isinstance(h, MainStreamHandler)), None)
    if ch is None:
        ch = MainStreamHandler()
        logger_.addHandler(ch)

    ch.setLevel(level)
    return ch


log_levels = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
