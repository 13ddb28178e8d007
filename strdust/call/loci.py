import re
import time

from logging import Logger
from typing import Iterable

from .params import CallParams
from .types import RepeatInterval
from .validation import LocusValidationError, validate_locus

__all__ = [
    "parse_region",
    "parse_loci_bed",
    "load_loci",
]

# patterns
RE_REGION = re.compile(r"^(?P<contig>[^:\s]+):(?P<start>[\d,]+)-(?P<end>[\d,]+)$")


def parse_region(region: str) -> RepeatInterval:
    """
    Parse a region string of the form contig:start-end (thousands separators allowed). Coordinates are taken as-is,
    with the same convention as a BED file.
    :param region: The region string.
    :return: The repeat interval described by the region string.
    """
    m = RE_REGION.match(region.strip())
    if m is None:
        raise LocusValidationError(
            f"Region format error: could not parse region '{region}'",
            "Region: must be formatted as contig:start-end, e.g. chr7:154654404-154654432",
        )

    start = int(m.group("start").replace(",", ""))
    end = int(m.group("end").replace(",", ""))
    validate_locus(1, start, end)
    return RepeatInterval(m.group("contig"), start, end)


def parse_loci_bed(loci_file: str) -> Iterable[tuple[int, tuple[str, ...]]]:
    with open(loci_file, "r") as tf:
        yield from (
            (t_idx, tuple(line.split("\t")))
            for t_idx, line in enumerate((s.strip() for s in tf), 1)
            if line and not line.startswith(("#", "track", "browser"))  # skip blank, comment and header lines
        )


def _interval_from_bed_fields(t_idx: int, t: tuple[str, ...]) -> RepeatInterval:
    if len(t) < 3:
        raise LocusValidationError(
            f"BED format error: expected at least 3 columns on line {t_idx}, got {len(t)}",
            "BED: lines must be tab-separated and start with contig, start, end",
        )

    try:
        start = int(t[1])
        end = int(t[2])
    except ValueError:
        raise LocusValidationError(
            f"BED format error: non-integer coordinates on line {t_idx}: {t[1]}, {t[2]}",
            "BED: coordinates must be 0-based, half-open integers - [start, end)",
        )

    validate_locus(t_idx, start, end)
    return RepeatInterval(t[0], start, end, locus_index=t_idx)


def load_loci(params: CallParams, logger: Logger) -> list[RepeatInterval]:
    """
    Load every locus to genotype, either from the region string or from the region BED file. All loci are loaded
    (and validated) up front, so a malformed record stops the run before any locus is genotyped.
    """

    load_start_time = time.perf_counter()

    loci: list[RepeatInterval]
    if params.region:
        loci = [parse_region(params.region)]
    else:
        loci = [_interval_from_bed_fields(t_idx, t) for t_idx, t in parse_loci_bed(params.region_file)]

    logger.info(f"Loaded {len(loci)} loci in {(time.perf_counter() - load_start_time):.2f}s")

    return loci
