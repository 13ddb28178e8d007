from __future__ import annotations

import numpy as np
import statistics

from sklearn.cluster import AgglomerativeClustering
from typing import Iterable, NamedTuple

from .align_matrix import edit_distance_matrix
from .consensus import consensus
from .types import HaplotypeConsensus

__all__ = [
    "split_candidates",
    "UnphasedCall",
    "call_unphased",
]


def _cluster_key(cluster: list[str]) -> tuple[int, list[str]]:
    return statistics.median_low(map(len, cluster)), cluster


def split_candidates(seqs: Iterable[str]) -> tuple[list[str], list[str]]:
    """
    Split insertion candidates from unphased reads into two putative haplotypes by average-linkage clustering on
    their pairwise edit distances.
    :return: The two clusters, shorter allele first. The second is empty if all candidates are identical.
    """

    seqs_s = sorted(seqs, key=lambda x: (len(x), x))
    distinct = sorted(set(seqs_s))
    if len(distinct) < 2:
        return seqs_s, []

    # only align distinct sequences, then expand back out to one row/column per candidate
    distinct_idx = {s: i for i, s in enumerate(distinct)}
    idx = np.fromiter((distinct_idx[s] for s in seqs_s), dtype=np.int_)
    dm = edit_distance_matrix(distinct)[np.ix_(idx, idx)]

    labels = AgglomerativeClustering(n_clusters=2, metric="precomputed", linkage="average").fit(dm).labels_

    c1, c2 = sorted(([s for s, lb in zip(seqs_s, labels) if lb == ci] for ci in (0, 1)), key=_cluster_key)
    return c1, c2


class UnphasedCall(NamedTuple):
    calls: tuple[HaplotypeConsensus, HaplotypeConsensus]
    clusters: tuple[list[str], list[str]]  # candidates of haplotype 1 and haplotype 2
    outliers: list[str]  # only filled in when looking for outliers


def call_unphased(candidates: Iterable[str | None], support: int, find_outliers: bool = False) -> UnphasedCall:
    """
    Call both haplotypes of a locus from the candidates of unphased reads.
    :param candidates: One candidate (or None) per read.
    :param support: Minimum number of candidates needed to call a haplotype.
    :param find_outliers: If exactly one cluster has enough support, call the locus from that cluster alone and
                          report the candidates of the other one as outliers.
    """

    seqs = [c for c in candidates if c]
    if len(seqs) < support:
        return UnphasedCall((None, None), (seqs, []), [])

    c1, c2 = split_candidates(seqs)
    n_supported = (len(c1) >= support) + (len(c2) >= support)

    if n_supported == 1 and find_outliers:
        supported, outliers = (c1, c2) if len(c1) >= support else (c2, c1)
        hom = consensus(supported, support)
        return UnphasedCall((hom, hom), (c1, c2), outliers)

    if n_supported < 2:
        # one cluster is only noise; call as homozygous from everything
        hom = consensus(seqs, support)
        return UnphasedCall((hom, hom), (c1, c2), [])

    calls = sorted((consensus(c1, support), consensus(c2, support)), key=lambda c: (c.length, c.seq))
    return UnphasedCall((calls[0], calls[1]), (c1, c2), [])
