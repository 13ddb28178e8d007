from __future__ import annotations

import mappy

from ..exceptions import AlignmentFailure
from .types import AlignmentPath, CompressedReference

__all__ = [
    "MAPPY_PRESET",
    "LocusAligner",
]


MAPPY_PRESET: str = "map-ont"


class LocusAligner:
    """
    Aligns reads against a single compressed reference, producing cs-tagged alignment paths.
    """

    def __init__(self, reference: CompressedReference, preset: str = MAPPY_PRESET):
        self._aligner = mappy.Aligner(seq=reference.seq, preset=preset)
        if not self._aligner:
            raise AlignmentFailure(f"unable to build alignment index for compressed reference ({len(reference)} bp)")

    def align(self, read_seq: str) -> list[AlignmentPath]:
        try:
            return [
                AlignmentPath(hit.r_st, hit.cs) for hit in self._aligner.map(read_seq, cs=True) if hit.is_primary
            ]
        except (TypeError, ValueError, RuntimeError) as e:
            raise AlignmentFailure(f"unable to align read of length {len(read_seq)}: {repr(e)}") from e
