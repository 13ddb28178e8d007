from __future__ import annotations

import numpy as np
import statistics

from collections import Counter
from typing import Iterable, Optional, Sequence

from .align_matrix import edit_distance_matrix
from .types import HaplotypeCall

__all__ = [
    "length_tolerance",
    "group_by_length",
    "best_representative",
    "consensus",
]


# Candidates whose lengths differ by at most max(min_length_tolerance, length_tolerance_frac * length) are treated as
# describing the same allele.
min_length_tolerance: int = 2
length_tolerance_frac: float = 0.05


def length_tolerance(length: int) -> int:
    return max(min_length_tolerance, round(length * length_tolerance_frac))


def group_by_length(seqs: Iterable[str]) -> list[list[str]]:
    """
    Single-linkage grouping of sequences by length. Sequences are sorted by (length, sequence) first, so the grouping
    does not depend on the order the sequences are passed in.
    :param seqs: Non-empty sequences to group.
    :return: Groups, ordered from shortest to longest.
    """

    groups: list[list[str]] = []
    prev_len: int | None = None

    for s in sorted(seqs, key=lambda x: (len(x), x)):
        if prev_len is not None and len(s) - prev_len <= length_tolerance(prev_len):
            groups[-1].append(s)
        else:
            groups.append([s])
        prev_len = len(s)

    return groups


def best_representative(seqs: Sequence[str]) -> Optional[str]:
    """
    Slightly different from a true consensus - returns the string with the minimum total edit distance to all other
    strings of the group (the medoid). Ties are broken by how often the exact string occurs, then lexicographically,
    so the result is reproducible.
    :param seqs: Sequences to find the best representative of.
    :return: One of the passed sequences, or None if none were passed.
    """

    if not seqs:
        return None

    counts = Counter(seqs)
    if len(counts) == 1:
        return seqs[0]

    distinct = sorted(counts)
    weights = np.fromiter((counts[s] for s in distinct), dtype=np.int_)
    total_distances = edit_distance_matrix(distinct) @ weights

    best_idx = min(range(len(distinct)), key=lambda i: (total_distances[i], -weights[i], distinct[i]))
    return distinct[best_idx]


def _group_key(group: list[str]) -> tuple[int, int]:
    return len(group), statistics.median_low(map(len, group))


def consensus(candidates: Iterable[str | None], support: int) -> Optional[HaplotypeCall]:
    """
    Reduce the per-read insertion candidates of one haplotype to a single representative call.
    :param candidates: One candidate (or None, for reads without a junction insertion) per read.
    :param support: Minimum number of reads with a usable candidate needed to make a call.
    :return: The call, or None if there is not enough support.
    """

    seqs = [c for c in candidates if c]
    if not seqs or len(seqs) < support:
        return None

    groups = group_by_length(seqs)

    # largest group wins; ties go to the longer allele, then to the lexicographically first representative
    best_key = max(map(_group_key, groups))
    rep = min(best_representative(g) for g in groups if _group_key(g) == best_key)

    return HaplotypeCall(rep)
