from __future__ import annotations

import sys

from typing import TYPE_CHECKING, Iterable, TextIO

if TYPE_CHECKING:
    from ..types import GenotypeRecord, HaplotypeConsensus

__all__ = [
    "NO_CALL",
    "format_tsv_line",
    "output_tsv",
]


NO_CALL = "."


def _call_fields(call: HaplotypeConsensus) -> tuple[str, str]:
    return (str(call.length), call.seq) if call else (NO_CALL, NO_CALL)


def format_tsv_line(res: GenotypeRecord) -> str:
    return "\t".join((
        res.contig,
        str(res.start),
        NO_CALL,
        *_call_fields(res.hap1),
        *_call_fields(res.hap2),
        *((res.somatic_seqs,) if res.somatic_seqs is not None else ()),
        *((res.outlier_seqs or NO_CALL,) if res.outlier_seqs is not None else ()),
    )) + "\n"


def output_tsv(results: Iterable[GenotypeRecord], stream: TextIO | None = None):
    stream = stream or sys.stdout
    for res in results:
        stream.write(format_tsv_line(res))
    stream.flush()
