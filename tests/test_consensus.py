import numpy as np
import pytest
import random

from strdust.call.align_matrix import edit_distance, edit_distance_matrix
from strdust.call.consensus import length_tolerance, group_by_length, best_representative, consensus
from strdust.call.types import HaplotypeCall

CAG_4 = "CAG" * 4
CAG_10 = "CAG" * 10


@pytest.mark.parametrize("s1,s2,dist", [
    ("ACGT", "ACGT", 0),
    ("", "", 0),
    ("", "ACG", 3),
    ("ACGT", "", 4),
    ("ACGT", "ACCT", 1),
    ("AAAAAAAA", "ACAAAATA", 2),
])
def test_edit_distance(s1: str, s2: str, dist: int):
    assert edit_distance(s1, s2) == dist
    assert edit_distance(s2, s1) == dist


def test_edit_distance_indels():
    assert edit_distance(CAG_4, CAG_10) > 0
    assert edit_distance(CAG_4, CAG_10) > edit_distance(CAG_4, CAG_4 + "CAG")


def test_edit_distance_matrix():
    seqs = [CAG_4, "CAGCTGCAGCAG", CAG_10]
    dm = edit_distance_matrix(seqs)
    assert dm.shape == (3, 3)
    assert np.all(np.diag(dm) == 0)
    assert np.array_equal(dm, dm.T)
    assert dm[0, 1] == 1


@pytest.mark.parametrize("length,tol", [
    (0, 2),
    (10, 2),
    (40, 2),
    (100, 5),
    (1000, 50),
])
def test_length_tolerance(length: int, tol: int):
    assert length_tolerance(length) == tol


def test_group_by_length():
    seqs = ["A" * 12, "A" * 10, "A" * 30, "A" * 11, "A" * 31]
    assert group_by_length(seqs) == [["A" * 10, "A" * 11, "A" * 12], ["A" * 30, "A" * 31]]
    assert group_by_length([]) == []


def test_best_representative():
    assert best_representative([]) is None
    assert best_representative([CAG_4]) == CAG_4
    assert best_representative([CAG_4, CAG_4, "CAGCTGCAGCAG"]) == CAG_4

    # equal total distances and counts; lexicographically first wins
    assert best_representative(["CAGCTG", "CAGCAG"]) == "CAGCAG"


def test_consensus_support():
    assert consensus([], 3) is None
    assert consensus([CAG_4, CAG_4], 3) is None
    assert consensus([CAG_4, CAG_4, None, ""], 3) is None
    assert consensus([CAG_4, CAG_4, CAG_4], 3) == HaplotypeCall(CAG_4)
    assert consensus([CAG_4], 1) == HaplotypeCall(CAG_4)


def test_consensus_five_reads():
    c = consensus([CAG_4] * 5, 3)
    assert c == HaplotypeCall(CAG_4)
    assert c.length == 12


def test_consensus_largest_group():
    # three reads support the short allele, two a much longer one
    assert consensus([CAG_10, CAG_4, CAG_10, CAG_4, CAG_4], 3) == HaplotypeCall(CAG_4)
    assert consensus([CAG_10, CAG_4, CAG_10, CAG_10, CAG_4], 3) == HaplotypeCall(CAG_10)


def test_consensus_group_tie():
    # equal group sizes; the longer allele wins
    assert consensus([CAG_4, CAG_10, CAG_4, CAG_10], 3) == HaplotypeCall(CAG_10)


def test_consensus_noisy_reads():
    seqs = [CAG_10, CAG_10, "CAGCAGCAGCTGCAGCAGCAGCAGCAGCAG", CAG_10[:-1], CAG_10 + "C"]
    assert consensus(seqs, 3) == HaplotypeCall(CAG_10)


def test_consensus_order_independence():
    seqs = [CAG_10, CAG_10, "CAGCAGCAGCTGCAGCAGCAGCAGCAGCAG", CAG_10[:-1], CAG_10 + "C", CAG_4, CAG_4]
    rng = random.Random(1)
    expected = consensus(seqs, 3)
    for _ in range(10):
        rng.shuffle(seqs)
        assert consensus(seqs, 3) == expected
