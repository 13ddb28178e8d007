from __future__ import annotations

from typing import Iterable

__all__ = [
    "SOMATIC_READ_SEP",
    "SOMATIC_HAPLOTYPE_SEP",
    "join_haplotype_insertions",
    "somatic_field",
]


SOMATIC_READ_SEP = ","
SOMATIC_HAPLOTYPE_SEP = "|"


def join_haplotype_insertions(candidates: Iterable[str | None]) -> str:
    """
    Join every read-level insertion call of one haplotype (not just the consensus); reads without one are left out.
    """
    return SOMATIC_READ_SEP.join(c for c in candidates if c)


def somatic_field(hap1_candidates: Iterable[str | None], hap2_candidates: Iterable[str | None]) -> str:
    return SOMATIC_HAPLOTYPE_SEP.join(map(join_haplotype_insertions, (hap1_candidates, hap2_candidates)))
