from __future__ import annotations

from pysam import AlignedSegment, AlignmentFile

from ..exceptions import ContigNotFound
from .types import HaplotypeReadSet

__all__ = [
    "HAPLOTYPES",
    "get_phase",
    "get_overlapping_reads",
    "get_unphased_reads",
]


HAPLOTYPES: tuple[int, int] = (1, 2)


def get_phase(segment: AlignedSegment) -> int:
    """
    Haplotype phase from the HP tag of a haplotagged alignment; 0 if the read is unphased.
    """
    if segment.has_tag("HP"):
        return int(segment.get_tag("HP"))
    return 0


def _fetch_overlapping(bam: AlignmentFile, contig: str, start: int, end: int):
    # get_tid returns -1 rather than raising for contigs absent from the header
    if bam.get_tid(contig) < 0:
        raise ContigNotFound(contig)
    yield from bam.fetch(contig, start, end)


def get_overlapping_reads(bam: AlignmentFile, contig: str, start: int, end: int) -> HaplotypeReadSet:
    """
    Collect the sequences of all reads overlapping [start, end), bucketed by haplotype. Unphased reads are dropped.
    :return: Dictionary with exactly the keys 1 and 2; each value may be empty.
    """

    seqs: HaplotypeReadSet = {hp: [] for hp in HAPLOTYPES}

    for segment in _fetch_overlapping(bam, contig, start, end):
        if (qs := segment.query_sequence) is None:  # secondary alignments may not store a sequence
            continue
        if (phase := get_phase(segment)) in seqs:
            seqs[phase].append(qs)

    return seqs


def get_unphased_reads(bam: AlignmentFile, contig: str, start: int, end: int) -> list[str]:
    """
    Collect the sequences of all reads overlapping [start, end), regardless of any haplotype tags.
    """
    return [qs for segment in _fetch_overlapping(bam, contig, start, end) if (qs := segment.query_sequence)]
