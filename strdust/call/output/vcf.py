from __future__ import annotations

import sys

from pathlib import Path
from pysam import FastaFile, VariantHeader
from typing import Iterable, TextIO

from strdust import __version__
from ..reference import LEFT_FLANK_GAP
from ..types import GenotypeRecord, HaplotypeConsensus

__all__ = [
    "build_vcf_header",
    "genotype_alleles",
    "format_vcf_line",
    "VCFWriter",
]


VCF_INFO_RB = "RB"
VCF_INFO_SEQS = "SEQS"
VCF_INFO_OUTLIERS = "OUTLIERS"

VCF_MISSING = "."


def build_vcf_header(sample_id: str, reference_file: str) -> VariantHeader:
    vh = VariantHeader()  # automatically sets VCF version to 4.2

    vh.add_meta("source", f"strdust-{__version__}")

    # Add an absolute path to the reference genome
    vh.add_meta("reference", f"file://{str(Path(reference_file).resolve().absolute())}")

    # Add all contigs from the reference genome file + lengths
    with FastaFile(reference_file) as rf:
        for contig in rf.references:
            vh.contigs.add(contig, length=rf.get_reference_length(contig))

    # Set up VCF info fields
    vh.info.add(VCF_INFO_RB, ".", "Integer", "Repeat allele length in bases, for each called haplotype")
    vh.info.add(VCF_INFO_SEQS, ".", "String", "Read-level repeat allele sequences (haplotypes separated by |)")
    vh.info.add(VCF_INFO_OUTLIERS, ".", "String", "Poorly supported outlier repeat allele sequences")

    # Set up basic VCF formats
    vh.formats.add("GT", 1, "String", "Genotype")

    # Add the sample
    vh.add_sample(sample_id)

    return vh


def genotype_alleles(
    ref_seq: str, calls: Iterable[HaplotypeConsensus]
) -> tuple[tuple[str, ...], tuple[int | None, ...]]:
    """
    Build the allele list (REF first, then each distinct called sequence differing from it) and the matching
    genotype indices; haplotypes without a call get None.
    """

    alts: list[str] = []
    gt: list[int | None] = []

    for call in calls:
        if call is None:
            gt.append(None)
        elif call.seq == ref_seq:
            gt.append(0)
        else:
            if call.seq not in alts:
                alts.append(call.seq)
            gt.append(alts.index(call.seq) + 1)

    return (ref_seq, *alts), tuple(gt)


def format_vcf_line(res: GenotypeRecord, ref_seq: str, phased: bool = True) -> str:
    alleles, gt = genotype_alleles(ref_seq, res.calls)

    info: list[str] = []
    if rb := [str(c.length) for c in res.calls if c is not None]:
        info.append(f"{VCF_INFO_RB}={','.join(rb)}")
    if res.somatic_seqs is not None:
        info.append(f"{VCF_INFO_SEQS}={res.somatic_seqs or VCF_MISSING}")
    if res.outlier_seqs is not None:
        info.append(f"{VCF_INFO_OUTLIERS}={res.outlier_seqs or VCF_MISSING}")

    return "\t".join((
        res.contig,
        str(res.start - LEFT_FLANK_GAP + 1),  # VCF is 1-based; alleles include the base before the repeat
        VCF_MISSING,  # ID
        alleles[0],
        ",".join(alleles[1:]) or VCF_MISSING,
        VCF_MISSING,  # QUAL
        VCF_MISSING,  # FILTER
        ";".join(info) or VCF_MISSING,
        "GT",
        ("|" if phased else "/").join(VCF_MISSING if g is None else str(g) for g in gt),
    )) + "\n"


class VCFWriter:
    def __init__(self, vcf_path: str, sample_id: str, reference_file: str, phased: bool = True):
        self._phased: bool = phased
        self._ref = FastaFile(reference_file)

        self._fh: TextIO = sys.stdout if vcf_path == "stdout" else open(vcf_path, "w")
        self._fh.write(str(build_vcf_header(sample_id, reference_file)))

    def write_records(self, results: Iterable[GenotypeRecord]) -> None:
        for res in results:
            ref_seq = self._ref.fetch(res.contig, res.start - LEFT_FLANK_GAP, res.end).upper()
            self._fh.write(format_vcf_line(res, ref_seq, self._phased))
        self._fh.flush()

    def close(self) -> None:
        if self._fh is not sys.stdout:
            self._fh.close()
        self._ref.close()
