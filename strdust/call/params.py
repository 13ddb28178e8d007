import logging
import pathlib

from pysam import AlignmentFile

from ..exceptions import ParamError
from ..logger import log_levels

__all__ = [
    "DEFAULT_MIN_LENGTH",
    "DEFAULT_SUPPORT",
    "DEFAULT_THREADS",
    "DEFAULT_FLANK_SIZE",
    "DEFAULT_JUNCTION_WINDOW",
    "CallParams",
]


DEFAULT_MIN_LENGTH: int = 5
DEFAULT_SUPPORT: int = 3
DEFAULT_THREADS: int = 8
DEFAULT_FLANK_SIZE: int = 10000
DEFAULT_JUNCTION_WINDOW: int = 10


def _is_valid_input_file(path: str) -> bool:
    return pathlib.Path(path).is_file() or path.startswith("http")


class CallParams:
    def __init__(
        self,

        logger: logging.Logger,

        read_file: str,
        reference_file: str,
        region: str | None = None,
        region_file: str | None = None,
        sample_id: str | None = None,
        min_length: int = DEFAULT_MIN_LENGTH,
        support: int = DEFAULT_SUPPORT,
        flank_size: int = DEFAULT_FLANK_SIZE,
        junction_window: int = DEFAULT_JUNCTION_WINDOW,
        somatic: bool = False,
        unphased: bool = False,
        find_outliers: bool = False,
        skip_failed_alignments: bool = False,
        # ---
        log_level: int = logging.WARNING,
        threads: int = DEFAULT_THREADS,
    ):
        for desc, path in (("alignment", read_file), ("reference", reference_file)):
            if not _is_valid_input_file(path):
                raise ParamError(f"path to {desc} file {path} is not valid")

        if region and region_file:
            raise ParamError("specify either a region (-r) or a region file (-R), not both")
        if not region and not region_file:
            raise ParamError("specify one of region (-r) or region file (-R)")
        if region_file and not _is_valid_input_file(region_file):
            raise ParamError(f"path to region file {region_file} is not valid")

        if support < 1:
            raise ParamError(f"support must be at least 1 (got {support})")
        if threads < 1:
            raise ParamError(f"threads must be at least 1 (got {threads})")
        if flank_size < 1:
            raise ParamError(f"flank size must be at least 1 (got {flank_size})")
        if junction_window < 0:
            raise ParamError(f"junction window must not be negative (got {junction_window})")

        if find_outliers and not unphased:
            logger.warning("--find-outliers is only effective with --unphased")

        self.read_file: str = read_file
        self.reference_file: str = reference_file
        self.region: str | None = region
        self.region_file: str | None = region_file
        self.min_length: int = min_length
        self.support: int = support
        self.flank_size: int = flank_size
        self.junction_window: int = junction_window
        self.somatic: bool = somatic
        self.unphased: bool = unphased
        self.find_outliers: bool = find_outliers
        self.skip_failed_alignments: bool = skip_failed_alignments
        # ---
        self.log_level: int = log_level
        self.threads: int = threads

        self._sample_id_orig: str | None = sample_id
        self.sample_id: str = sample_id or self._get_read_file_sample_id(logger)

    def _get_read_file_sample_id(self, logger: logging.Logger) -> str:
        with AlignmentFile(self.read_file, reference_filename=self.reference_file) as bf:
            # noinspection PyTypeChecker
            bfh = bf.header.to_dict()

        sns: set[str] = {e.get("SM") for e in bfh.get("RG", ()) if e.get("SM")}

        if len(sns) == 1:
            return sns.pop()

        if len(sns) > 1:
            sns_str = "', '".join(sorted(sns))
            logger.warning(f"Found more than one sample ID in alignment file: '{sns_str}'")

        # Fall back to the alignment file name, minus its extension
        return pathlib.Path(self.read_file.rstrip("/")).name.rsplit(".", 1)[0]

    @property
    def is_single_worker(self) -> bool:
        return self.threads == 1 or self.region is not None

    @classmethod
    def from_args(cls, logger: logging.Logger, p_args):
        return cls(
            logger,
            p_args.bam,
            p_args.fasta,
            region=p_args.region,
            region_file=p_args.region_file,
            sample_id=p_args.sample,
            min_length=p_args.minlen,
            support=p_args.support,
            flank_size=p_args.flank_size,
            junction_window=p_args.junction_window,
            somatic=p_args.somatic,
            unphased=p_args.unphased,
            find_outliers=p_args.find_outliers,
            skip_failed_alignments=p_args.skip_failed_alignments,
            # ---
            log_level=log_levels[p_args.log_level],
            threads=p_args.threads,
        )

    def to_dict(self, as_inputted: bool = False):
        return {
            "read_file": self.read_file,
            "reference_file": self.reference_file,
            "region": self.region,
            "region_file": self.region_file,
            "sample_id": self._sample_id_orig if as_inputted else self.sample_id,
            "min_length": self.min_length,
            "support": self.support,
            "flank_size": self.flank_size,
            "junction_window": self.junction_window,
            "somatic": self.somatic,
            "unphased": self.unphased,
            "find_outliers": self.find_outliers,
            "skip_failed_alignments": self.skip_failed_alignments,
            "log_level": self.log_level,
            "threads": self.threads,
        }
