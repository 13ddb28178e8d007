from __future__ import annotations

from pysam import FastaFile

from ..exceptions import ReferenceBoundsError
from .params import DEFAULT_FLANK_SIZE
from .types import CompressedReference

__all__ = [
    "LEFT_FLANK_GAP",
    "make_compressed_reference",
]


# The left flank stops this many bases short of the repeat start (i.e. it ends at start - 2, inclusive).
LEFT_FLANK_GAP: int = 1


def make_compressed_reference(
    ref: FastaFile,
    contig: str,
    start: int,
    end: int,
    flank_size: int = DEFAULT_FLANK_SIZE,
) -> CompressedReference:
    """
    Build a locus-local reference with the repeat region excised: flank_size bases upstream of the repeat, directly
    followed by flank_size bases downstream of it. Reads carrying the repeat will align to this with the repeat
    sequence as an insertion at the junction.
    :param ref: Indexed reference FASTA.
    :param contig: Contig name, as named in the reference.
    :param start: Repeat start; 0-based, inclusive.
    :param end: Repeat end; 0-based, exclusive.
    :param flank_size: Number of bases to take on each side.
    :return: The compressed reference, with the junction offset at flank_size.
    """

    if contig not in ref.references:
        raise ReferenceBoundsError(f"contig {contig} not found in reference")

    left_start = start - LEFT_FLANK_GAP - flank_size
    left_end = start - LEFT_FLANK_GAP
    right_start = end
    right_end = end + flank_size

    contig_length = ref.get_reference_length(contig)

    # pysam clamps silently when fetching past the ends of a contig, so this must be checked here
    if left_start < 0 or right_end > contig_length:
        raise ReferenceBoundsError(
            f"flanks out of range for {contig} (length {contig_length}, {flank_size=}): [{left_start}, {left_end}) "
            f"+ [{right_start}, {right_end})")

    left_seq = ref.fetch(contig, left_start, left_end)
    right_seq = ref.fetch(contig, right_start, right_end)

    return CompressedReference(seq=left_seq + right_seq, junction=len(left_seq))
