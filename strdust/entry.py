from __future__ import annotations

import argparse
import sys

from typing import Callable, Optional

from strdust import __version__
from strdust.call.params import (
    DEFAULT_FLANK_SIZE,
    DEFAULT_JUNCTION_WINDOW,
    DEFAULT_MIN_LENGTH,
    DEFAULT_SUPPORT,
    DEFAULT_THREADS,
)
from strdust.call.validation import LocusValidationError
from strdust.exceptions import ParamError, InputError, GenotypingError
from strdust.logger import get_main_logger, attach_stream_handler, log_levels


def add_call_parser_args(call_parser):
    call_parser.add_argument(
        "fasta",
        type=str,
        help="Path to a reference genome, FASTA-formatted and indexed.")

    call_parser.add_argument(
        "bam",
        type=str,
        help="Indexed BAM/CRAM file with reads to genotype from. Reads should be haplotagged (HP tags) unless "
             "--unphased is passed.")

    call_parser.add_argument(
        "--region", "-r",
        type=str,
        help="A single region to genotype, formatted as contig:start-end.")

    call_parser.add_argument(
        "--region-file", "-R",
        type=str,
        help="Specifies a BED file with all loci to genotype.")

    call_parser.add_argument(
        "--minlen", "-m",
        type=int,
        default=DEFAULT_MIN_LENGTH,
        help="Minimum length of an insertion, relative to the reference with the repeat removed, to be considered as "
             "a repeat allele candidate.")

    call_parser.add_argument(
        "--support", "-s",
        type=int,
        default=DEFAULT_SUPPORT,
        help="Minimum number of reads with a repeat allele candidate needed to call a haplotype.")

    call_parser.add_argument(
        "--threads", "-t",
        type=int,
        default=DEFAULT_THREADS,
        help="Number of worker threads to use when genotyping. Ignored when a single region is passed via --region.")

    call_parser.add_argument(
        "--sample",
        type=str,
        help="Set a sample ID, or override the alignment file sample ID.")

    call_parser.add_argument(
        "--somatic",
        action="store_true",
        help="Also report every read's repeat allele candidate, per haplotype, for detecting somatic variation.")

    call_parser.add_argument(
        "--unphased",
        action="store_true",
        help="Ignore HP tags and split all reads' repeat allele candidates into two clusters instead.")

    call_parser.add_argument(
        "--find-outliers",
        action="store_true",
        help="Identify poorly supported outlier expansions (only with --unphased). These are reported in an extra "
             "output column instead of being merged into a homozygous call.")

    call_parser.add_argument(
        "--flank-size",
        type=int,
        default=DEFAULT_FLANK_SIZE,
        help="Number of reference bases on each side of the locus to align reads against.")

    call_parser.add_argument(
        "--junction-window",
        type=int,
        default=DEFAULT_JUNCTION_WINDOW,
        help="Maximum distance, in bases, between an insertion and the locus junction for the insertion to be used.")

    call_parser.add_argument(
        "--skip-failed-alignments",
        action="store_true",
        help="If passed, reads which fail to align are skipped with a warning instead of aborting the run.")

    # BEGIN FILE OUTPUT ARGUMENTS ======================================================================================

    call_parser.add_argument(
        "--json", "-j",
        type=str,
        help="Path to write JSON-formatted calls to. If left blank, no JSON file will be written. If the value is set "
             "to 'stdout', JSON will be written to stdout, after the TSV unless TSV output is disabled.")

    call_parser.add_argument(
        "--indent-json", "-i",
        action="store_true",
        help="If passed alongside --json [x], the JSON output will be indented to be more human readable but "
             "less compact.")

    call_parser.add_argument(
        "--vcf",
        type=str,
        help="Path to write VCF-formatted calls to.")

    call_parser.add_argument(
        "--no-tsv",
        action="store_true",
        help="If passed, no TSV call output will be written to stdout.")

    # END FILE OUTPUT ARGUMENTS ========================================================================================


def _exec_call(p_args) -> None:
    from strdust.call import call_sample, CallParams
    logger = get_main_logger(log_levels[p_args.log_level])
    call_sample(
        CallParams.from_args(logger, p_args),
        json_path=p_args.json,
        indent_json=p_args.indent_json,
        vcf_path=p_args.vcf,
        output_tsv=not p_args.no_tsv,
    )


def main(args: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="A genotyper for short tandem repeats from long reads.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter)

    parser.add_argument("--version", "-v", action="version", version=__version__)

    subparsers = parser.add_subparsers()

    def _make_subparser(arg: str, help_text: str, exec_func: Callable, arg_func: Callable):
        sp = subparsers.add_parser(arg, help=help_text, formatter_class=argparse.ArgumentDefaultsHelpFormatter)
        sp.add_argument("--log-level", type=str, default="info", choices=tuple(log_levels))
        sp.set_defaults(func=exec_func)
        arg_func(sp)

    _make_subparser(
        "call",
        help_text="Genotype tandem repeat loci from (haplotagged) long reads.",
        exec_func=_exec_call,
        arg_func=add_call_parser_args)

    args = args or sys.argv[1:]
    p_args = parser.parse_args(args)

    if hasattr(p_args, "log_level"):
        ll = log_levels[p_args.log_level]
        logger = get_main_logger(ll)
        attach_stream_handler(ll, logger)
    else:
        logger = get_main_logger()

    if not getattr(p_args, "func", None):
        p_args = parser.parse_args(("--help",))

    try:
        logger.info(f"strdust version {__version__}")
        p_args.func(p_args)
        return 0
    except LocusValidationError as e:
        e.log_error(logger)
        return 1
    except ParamError as e:
        logger.critical(f"Parameter error: {e}")
        return 1
    except InputError as e:
        logger.critical(f"Input error: {e}")
        return 1
    except GenotypingError as e:
        logger.critical(f"Genotyping error: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
