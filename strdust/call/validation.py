from logging import Logger

from ..exceptions import InputError

__all__ = [
    "LocusValidationError",
    "validate_locus",
]


# exceptions

class LocusValidationError(InputError):
    def __init__(self, error_str: str, hint_msg: str):
        self._error_str = error_str
        self._hint_msg = hint_msg
        super().__init__(error_str)

    def log_error(self, logger: Logger) -> None:
        logger.critical(self._error_str)
        logger.critical(self._hint_msg)


# functions

def validate_locus(line: int, start: int, end: int) -> None:
    """
    Validate a locus definition before genotyping.
    :param line: Line number, for logging errors in a BED file.
    :param start: Start coordinate; 0-based, inclusive.
    :param end: End coordinate; 0-based, exclusive.
    """

    if start < 0:
        raise LocusValidationError(
            f"BED format error: invalid start coordinate on line {line}: {start}",
            "BED: coordinates must be non-negative integers",
        )

    if start >= end:
        raise LocusValidationError(
            f"BED format error: invalid coordinates on line {line}: start ({start}) >= end ({end})",
            "BED: coordinates must be 0-based, half-open - [start, end)",
        )
