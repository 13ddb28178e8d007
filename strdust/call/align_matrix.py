from __future__ import annotations

import numpy as np
import parasail

from numpy.typing import NDArray
from typing import Sequence

__all__ = [
    "edit_bases",
    "edit_matrix",
    "edit_distance",
    "edit_distance_matrix",
]


edit_match_score: int = 0
edit_mismatch_penalty: int = 1
edit_indel_penalty: int = 1

# IUPAC codes are included so that reads with ambiguous base calls still score; they only match themselves.
edit_bases: str = "ACGTRYSWKMBDHVN"

# Scoring every substitution and every gap base as -1 makes a global alignment score the negative edit distance.
edit_matrix = parasail.matrix_create(edit_bases, edit_match_score, -1 * edit_mismatch_penalty)


def edit_distance(s1: str, s2: str) -> int:
    if s1 == s2:
        return 0
    if not s1 or not s2:
        return max(len(s1), len(s2))
    # Always assign parasail results to variables due to funky memory allocation behaviour
    r = parasail.nw_striped_sat(s1, s2, edit_indel_penalty, edit_indel_penalty, edit_matrix)
    return -1 * r.score


def edit_distance_matrix(seqs: Sequence[str]) -> NDArray[np.int_]:
    n_seqs = len(seqs)
    dm = np.zeros((n_seqs, n_seqs), dtype=np.int_)

    # symmetrical, so only compute the upper triangle
    for i in range(n_seqs - 1):
        for j in range(i + 1, n_seqs):
            dm[i, j] = dm[j, i] = edit_distance(seqs[i], seqs[j])

    return dm
