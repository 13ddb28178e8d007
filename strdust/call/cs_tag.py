from __future__ import annotations

from typing import Iterable, Iterator

from ..exceptions import MalformedAlignmentTag
from ..utils import cat_strs
from .params import DEFAULT_JUNCTION_WINDOW
from .types import AlignmentPath

__all__ = [
    "CS_OP_MATCH",
    "CS_OP_MISMATCH",
    "CS_OP_INSERTION",
    "CS_OP_DELETION",
    "tokenize_cs",
    "parse_cs",
]


CS_OP_MATCH = ":"  # :N    - N matching bases
CS_OP_MISMATCH = "*"  # *xy  - ref base x substituted by read base y
CS_OP_INSERTION = "+"  # +seq - bases present in the read only
CS_OP_DELETION = "-"  # -seq - bases present in the reference only

CS_OPS = frozenset((CS_OP_MATCH, CS_OP_MISMATCH, CS_OP_INSERTION, CS_OP_DELETION))


def tokenize_cs(cs: str) -> Iterator[tuple[str, str]]:
    """
    Split a short-form cs tag into (operation, body) tokens, e.g. ':32*nt:10-gga:5+aaa:10' into
    (':', '32'), ('*', 'nt'), (':', '10'), ('-', 'gga'), (':', '5'), ('+', 'aaa'), (':', '10').
    Any symbol other than the four short-form operations raises MalformedAlignmentTag.
    """

    i = 0
    n = len(cs)

    while i < n:
        op = cs[i]
        if op not in CS_OPS:
            raise MalformedAlignmentTag(f"unexpected operation '{op}' at position {i} in cs tag: {cs}")

        j = i + 1
        while j < n and cs[j] not in CS_OPS:
            j += 1

        body = cs[i + 1:j]
        if not body:
            raise MalformedAlignmentTag(f"empty '{op}' operation at position {i} in cs tag: {cs}")

        if op == CS_OP_MATCH:
            if not body.isdigit():
                raise MalformedAlignmentTag(f"non-numeric match length '{body}' at position {i} in cs tag: {cs}")
        elif not body.isalpha():
            raise MalformedAlignmentTag(f"unexpected '{op}' operation body '{body}' at position {i} in cs tag: {cs}")

        yield op, body
        i = j


def _iter_junction_insertions(
    path: AlignmentPath, min_length: int, window_low: int, window_high: int
) -> Iterable[str]:
    ref_pos = path.target_start

    for op, body in tokenize_cs(path.cs):
        if op == CS_OP_MATCH:
            # consumes the reference (and the read)
            ref_pos += int(body)
        elif op == CS_OP_MISMATCH:
            # consumes the reference (and the read); each substituted base is written as a (ref, read) pair
            ref_pos += len(body) // 2
        elif op == CS_OP_DELETION:
            # consumes the reference only
            ref_pos += len(body)
        elif len(body) > min_length and window_low <= ref_pos <= window_high:
            # insertion: consumes the read only
            yield body


def parse_cs(
    path: AlignmentPath,
    min_length: int,
    junction: int,
    window: int = DEFAULT_JUNCTION_WINDOW,
) -> str | None:
    """
    Extract the insertion sequence a read carries at the junction of a compressed reference.
    :param path: Alignment of the read against the compressed reference.
    :param min_length: Insertions must be strictly longer than this to count.
    :param junction: Offset in the compressed reference where the repeat was excised.
    :param window: Insertions must start within +/- this many bases of the junction.
    :return: All qualifying insertions of the read concatenated in order (uppercased), or None if there are none.
    """
    insertions = tuple(_iter_junction_insertions(path, min_length, junction - window, junction + window))
    return cat_strs(insertions).upper() if insertions else None
