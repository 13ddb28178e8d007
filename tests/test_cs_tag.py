import pytest

from strdust.call.cs_tag import tokenize_cs, parse_cs
from strdust.call.types import AlignmentPath
from strdust.exceptions import MalformedAlignmentTag

JUNCTION = 10000


def test_tokenize_cs():
    assert list(tokenize_cs(":32*nt:10-gga:5+aaa:10")) == [
        (":", "32"), ("*", "nt"), (":", "10"), ("-", "gga"), (":", "5"), ("+", "aaa"), (":", "10"),
    ]
    assert list(tokenize_cs("")) == []


@pytest.mark.parametrize("cs", [
    "~ac10gt",  # intron operation; not part of short-form cs tags
    "=ACGT",  # long-form match
    ":10x",
    ":",
    "+",
    ":10+ac1:5",
    "*a-:3",
])
def test_tokenize_cs_malformed(cs: str):
    with pytest.raises(MalformedAlignmentTag):
        list(tokenize_cs(cs))


@pytest.mark.parametrize("cs,res", [
    # no insertions at all
    (":20000", None),
    # insertion right at the junction
    (":10000+cagcagcagcag:10000", "CAGCAGCAGCAG"),
    # window edges (inclusive)
    (":9990+cagcagcag:10010", "CAGCAGCAG"),
    (":10010+cagcagcag:9990", "CAGCAGCAG"),
    (":9989+cagcagcag:10011", None),
    (":10011+cagcagcag:9989", None),
    # length must be strictly greater than min_length (5)
    (":10000+cagca:10000", None),
    (":10000+cagcag:10000", "CAGCAG"),
    # mismatches advance one reference base per pair
    (":9998*ag*ct+cagcagcag:100", "CAGCAGCAG"),
    (":9980*ag*ct+cagcagcag:100", None),
    # deletions advance by their length
    (":9980-aaaaaaaaaaaaaaaaaaaa+cagcagcag:100", "CAGCAGCAG"),
    (":9995-aaaaaaaaaaaaaaaaaaaa+cagcagcag:100", None),
    # insertions do not advance the reference position
    (":9995+tttttttttt+cagcagcag:100", "TTTTTTTTTTCAGCAGCAG"),
    # all qualifying insertions are concatenated in order; short or distant ones are left out
    (":9995+aaaaaa:5+cccccc:10", "AAAAAACCCCCC"),
    (":9995+aa:5+cccccc:10", "CCCCCC"),
    (":100+gggggggggg:9895+cccccc:10", "CCCCCC"),
])
def test_parse_cs(cs: str, res: str | None):
    assert parse_cs(AlignmentPath(0, cs), 5, JUNCTION) == res


def test_parse_cs_target_start():
    # the alignment starts partway along the compressed reference
    assert parse_cs(AlignmentPath(9000, ":1000+cagcagcag:50"), 5, JUNCTION) == "CAGCAGCAG"
    assert parse_cs(AlignmentPath(9500, ":1000+cagcagcag:50"), 5, JUNCTION) is None


def test_parse_cs_window_and_min_length():
    path = AlignmentPath(0, ":10020+cagcagcagcag:100")
    assert parse_cs(path, 5, JUNCTION) is None
    assert parse_cs(path, 5, JUNCTION, window=20) == "CAGCAGCAGCAG"
    assert parse_cs(path, 12, JUNCTION, window=20) is None
    assert parse_cs(path, 11, JUNCTION, window=20) == "CAGCAGCAGCAG"


def test_parse_cs_malformed():
    with pytest.raises(MalformedAlignmentTag):
        parse_cs(AlignmentPath(0, ":10000+cagcagcag~gt12ag:100"), 5, JUNCTION)
