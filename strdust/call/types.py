from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, TypedDict

__all__ = [
    "RepeatInterval",
    "CompressedReference",
    "HaplotypeReadSet",
    "AlignmentPath",
    "HaplotypeCall",
    "HaplotypeConsensus",
    "GenotypeRecord",
    "GenotypeRecordDict",
]


@dataclass(frozen=True)
class RepeatInterval:
    contig: str
    start: int  # 0-based, inclusive
    end: int  # 0-based, exclusive
    locus_index: int = field(default=1, compare=False)  # 1-indexed line number in the locus source; for logging

    def __str__(self) -> str:
        return f"{self.contig}:{self.start}-{self.end}"


@dataclass(frozen=True)
class CompressedReference:
    seq: str
    junction: int  # offset in seq where the excised repeat used to be

    def __len__(self) -> int:
        return len(self.seq)


# key: haplotype (1 or 2), value: read sequences
HaplotypeReadSet = dict[int, list[str]]


@dataclass(frozen=True)
class AlignmentPath:
    target_start: int  # 0-based start of the alignment on the compressed reference
    cs: str  # short-form cs tag


@dataclass(frozen=True)
class HaplotypeCall:
    seq: str

    @property
    def length(self) -> int:
        return len(self.seq)


HaplotypeConsensus = Optional[HaplotypeCall]


class GenotypeRecordDict(TypedDict):
    contig: str
    start: int
    end: int
    hap1_length: Optional[int]
    hap1_seq: Optional[str]
    hap2_length: Optional[int]
    hap2_seq: Optional[str]
    somatic_seqs: Optional[str]
    outlier_seqs: Optional[str]


@dataclass(frozen=True)
class GenotypeRecord:
    contig: str
    start: int
    end: int
    hap1: HaplotypeConsensus
    hap2: HaplotypeConsensus
    somatic_seqs: Optional[str] = None
    outlier_seqs: Optional[str] = None  # only set when outliers are being looked for

    @property
    def sort_key(self) -> tuple[str, int, int]:
        return self.contig, self.start, self.end

    @property
    def calls(self) -> tuple[HaplotypeConsensus, HaplotypeConsensus]:
        return self.hap1, self.hap2

    def to_dict(self) -> GenotypeRecordDict:
        return {
            "contig": self.contig,
            "start": self.start,
            "end": self.end,
            "hap1_length": self.hap1.length if self.hap1 else None,
            "hap1_seq": self.hap1.seq if self.hap1 else None,
            "hap2_length": self.hap2.length if self.hap2 else None,
            "hap2_seq": self.hap2.seq if self.hap2 else None,
            "somatic_seqs": self.somatic_seqs,
            "outlier_seqs": self.outlier_seqs,
        }
