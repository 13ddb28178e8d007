import logging
import sys

from strdust.logger import MainStreamHandler, attach_stream_handler, get_main_logger, MAIN_LOGGER_NAME


def test_attach_stream_handler_once():
    lg = logging.getLogger("strdust-test-handlers")
    other = logging.StreamHandler(sys.stderr)
    lg.addHandler(other)

    try:
        h1 = attach_stream_handler(logging.INFO, lg)
        h2 = attach_stream_handler(logging.DEBUG, lg)

        assert h1 is h2
        assert isinstance(h1, MainStreamHandler)
        assert h1.level == logging.DEBUG
        assert [h for h in lg.handlers if isinstance(h, MainStreamHandler)] == [h1]
        assert other in lg.handlers  # handlers attached by someone else are left alone
    finally:
        for h in tuple(lg.handlers):
            lg.removeHandler(h)


def test_get_main_logger_level():
    lg = get_main_logger(logging.WARNING)
    assert lg.name == MAIN_LOGGER_NAME
    assert lg.level == logging.WARNING

    assert get_main_logger() is lg
    assert lg.level == logging.WARNING  # unchanged without an explicit level
