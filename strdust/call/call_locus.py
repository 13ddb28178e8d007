from __future__ import annotations

import logging
import time

from pysam import AlignmentFile, FastaFile
from typing import Callable, Iterable

from ..exceptions import AlignmentFailure
from ..utils import cat_strs
from .align import LocusAligner
from .consensus import consensus
from .cs_tag import parse_cs
from .params import CallParams
from .reads import HAPLOTYPES, get_overlapping_reads, get_unphased_reads
from .reference import make_compressed_reference
from .somatic import join_haplotype_insertions, somatic_field
from .types import CompressedReference, GenotypeRecord, HaplotypeConsensus, RepeatInterval
from .unphased import call_unphased

__all__ = [
    "AlignerFactory",
    "get_read_candidates",
    "genotype_locus",
]


CALL_WARN_TIME = 10  # seconds

AlignerFactory = Callable[[CompressedReference], LocusAligner]


def get_read_candidates(
    aligner: LocusAligner,
    read_seqs: Iterable[str],
    compressed_ref: CompressedReference,
    params: CallParams,
    logger_: logging.Logger,
    locus_log_str: str,
) -> list[str]:
    """
    Align reads to the compressed reference and collect at most one junction insertion candidate per read. If a
    read has several alignments crossing the junction, their insertions are concatenated in alignment order.
    """

    candidates: list[str] = []

    for read_idx, read_seq in enumerate(read_seqs):
        try:
            paths = aligner.align(read_seq)
        except AlignmentFailure as e:
            if not params.skip_failed_alignments:
                raise AlignmentFailure(f"{locus_log_str} - {e}") from e
            logger_.warning("%s - skipping read #%d: %s", locus_log_str, read_idx, e)
            continue

        read_insertions = [
            c for path in paths
            if (c := parse_cs(path, params.min_length, compressed_ref.junction, params.junction_window)) is not None
        ]
        if read_insertions:
            candidates.append(cat_strs(read_insertions))

    return candidates


def genotype_locus(
    locus: RepeatInterval,
    bam: AlignmentFile,
    ref: FastaFile,
    params: CallParams,
    # ---
    logger_: logging.Logger,
    locus_log_str: str,
    # ---
    aligner_factory: AlignerFactory = LocusAligner,
) -> GenotypeRecord:
    """
    Genotype a single repeat locus. Raises ContigNotFound or ReferenceBoundsError if the locus cannot be genotyped,
    and MalformedAlignmentTag or AlignmentFailure if the aligner misbehaves.
    :param locus: The repeat interval to genotype; this span is excised from the local reference.
    :param bam: Indexed alignment file, haplotagged (HP tags) unless params.unphased is set.
    :param ref: Indexed reference FASTA.
    :param params: Call parameters.
    :param logger_: Logger to write locus-level messages to.
    :param locus_log_str: Prefix for locus-level log messages.
    :param aligner_factory: Builds an aligner for the compressed reference.
    :return: The genotype record for this locus.
    """

    call_timer = time.perf_counter()

    contig, start, end = locus.contig, locus.start, locus.end

    read_seqs: dict[int, list[str]]
    if params.unphased:
        read_seqs = {0: get_unphased_reads(bam, contig, start, end)}
    else:
        read_seqs = get_overlapping_reads(bam, contig, start, end)

    compressed_ref = make_compressed_reference(ref, contig, start, end, params.flank_size)

    n_reads = sum(map(len, read_seqs.values()))
    logger_.debug(
        "%s - got %d overlapping reads (%s)", locus_log_str, n_reads, {k: len(v) for k, v in read_seqs.items()})

    aligner: LocusAligner | None = aligner_factory(compressed_ref) if n_reads else None

    candidates: dict[int, list[str]] = {
        k: (get_read_candidates(aligner, v, compressed_ref, params, logger_, locus_log_str) if aligner else [])
        for k, v in read_seqs.items()
    }

    calls: tuple[HaplotypeConsensus, HaplotypeConsensus]
    haplotype_candidates: tuple[list[str], list[str]]

    outliers: list[str] = []

    if params.unphased:
        calls, haplotype_candidates, outliers = call_unphased(candidates[0], params.support, params.find_outliers)
        if outliers:
            logger_.debug("%s - %d outlier candidates", locus_log_str, len(outliers))
    else:
        haplotype_candidates = (candidates[HAPLOTYPES[0]], candidates[HAPLOTYPES[1]])
        calls = (
            consensus(haplotype_candidates[0], params.support),
            consensus(haplotype_candidates[1], params.support),
        )

    logger_.debug(
        "%s - %s candidates; calls: %s",
        locus_log_str,
        "/".join(str(len(hc)) for hc in haplotype_candidates),
        "/".join(str(c.length) if c else "." for c in calls),
    )

    call_time = time.perf_counter() - call_timer
    if call_time > CALL_WARN_TIME:
        logger_.warning("%s - locus call time exceeded %ds; took %.2fs", locus_log_str, CALL_WARN_TIME, call_time)

    return GenotypeRecord(
        contig=contig,
        start=start,
        end=end,
        hap1=calls[0],
        hap2=calls[1],
        somatic_seqs=somatic_field(*haplotype_candidates) if params.somatic else None,
        outlier_seqs=join_haplotype_insertions(outliers) if params.unphased and params.find_outliers else None,
    )
