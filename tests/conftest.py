import pathlib
import pysam
import pytest
import random

from fakes import CONTIG_LENGTH, REPEAT_START, REPEAT_UNIT, REPEAT_COPIES


def _random_seq(rng: random.Random, n: int) -> str:
    return "".join(rng.choice("ACGT") for _ in range(n))


@pytest.fixture(scope="session")
def reference_seqs() -> dict[str, str]:
    rng = random.Random(42)
    chr1 = _random_seq(rng, CONTIG_LENGTH)
    repeat = REPEAT_UNIT * REPEAT_COPIES
    chr1 = chr1[:REPEAT_START] + repeat + chr1[REPEAT_START + len(repeat):]
    return {
        "chr1": chr1,
        "chr2": _random_seq(rng, CONTIG_LENGTH),
    }


@pytest.fixture(scope="session")
def reference_fasta(tmp_path_factory, reference_seqs) -> pathlib.Path:
    fasta_path = tmp_path_factory.mktemp("ref") / "ref.fa"

    with open(fasta_path, "w") as fh:
        for contig, seq in reference_seqs.items():
            fh.write(f">{contig}\n")
            for i in range(0, len(seq), 60):
                fh.write(seq[i:i+60] + "\n")

    pysam.faidx(str(fasta_path))
    return fasta_path


@pytest.fixture
def dummy_bam(tmp_path) -> pathlib.Path:
    # only needs to exist; reads come from fake alignment files
    p = tmp_path / "reads.bam"
    p.touch()
    return p
