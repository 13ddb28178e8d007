import argparse
import logging
import pysam
import pytest

from strdust.call.params import CallParams
from strdust.exceptions import ParamError

logger = logging.getLogger(__name__)


def _write_bam(path, read_groups: list[dict]):
    header = {
        "HD": {"VN": "1.6", "SO": "coordinate"},
        "SQ": [{"SN": "chr1", "LN": 30000}, {"SN": "chr2", "LN": 30000}],
    }
    if read_groups:
        header["RG"] = read_groups
    with pysam.AlignmentFile(str(path), "wb", header=header):
        pass


def test_params_defaults(reference_fasta, dummy_bam):
    params = CallParams(logger, str(dummy_bam), str(reference_fasta), region="chr1:15000-15030", sample_id="S")
    assert params.min_length == 5
    assert params.support == 3
    assert params.threads == 8
    assert params.flank_size == 10000
    assert params.junction_window == 10
    assert not params.somatic
    assert not params.unphased
    assert not params.skip_failed_alignments
    assert params.is_single_worker


def test_params_single_worker(reference_fasta, dummy_bam, tmp_path):
    bed = tmp_path / "loci.bed"
    bed.touch()

    params = CallParams(logger, str(dummy_bam), str(reference_fasta), region_file=str(bed), sample_id="S")
    assert not params.is_single_worker

    params = CallParams(logger, str(dummy_bam), str(reference_fasta), region_file=str(bed), sample_id="S", threads=1)
    assert params.is_single_worker


@pytest.mark.parametrize("kwargs", [
    {},  # no region or region file
    {"region": "chr1:1-2", "region_file": "loci.bed"},
    {"region_file": "does-not-exist.bed"},
    {"region": "chr1:1-2", "support": 0},
    {"region": "chr1:1-2", "threads": 0},
    {"region": "chr1:1-2", "flank_size": 0},
    {"region": "chr1:1-2", "junction_window": -1},
])
def test_params_invalid(reference_fasta, dummy_bam, kwargs: dict):
    with pytest.raises(ParamError):
        CallParams(logger, str(dummy_bam), str(reference_fasta), sample_id="S", **kwargs)


def test_params_missing_files(reference_fasta, dummy_bam, tmp_path):
    with pytest.raises(ParamError):
        CallParams(logger, str(tmp_path / "missing.bam"), str(reference_fasta), region="chr1:1-2", sample_id="S")
    with pytest.raises(ParamError):
        CallParams(logger, str(dummy_bam), str(tmp_path / "missing.fa"), region="chr1:1-2", sample_id="S")


def test_params_sample_id(reference_fasta, tmp_path):
    bam = tmp_path / "HG002.hp.bam"

    _write_bam(bam, [{"ID": "rg1", "SM": "NA24385"}])
    params = CallParams(logger, str(bam), str(reference_fasta), region="chr1:1-2")
    assert params.sample_id == "NA24385"
    assert params.to_dict()["sample_id"] == "NA24385"
    assert params.to_dict(as_inputted=True)["sample_id"] is None

    # explicitly passed sample IDs take precedence
    params = CallParams(logger, str(bam), str(reference_fasta), region="chr1:1-2", sample_id="S")
    assert params.sample_id == "S"

    # no read group; falls back to the file name
    _write_bam(bam, [])
    params = CallParams(logger, str(bam), str(reference_fasta), region="chr1:1-2")
    assert params.sample_id == "HG002.hp"


def test_params_from_args(reference_fasta, dummy_bam):
    p_args = argparse.Namespace(
        bam=str(dummy_bam),
        fasta=str(reference_fasta),
        region="chr1:15000-15030",
        region_file=None,
        sample="S",
        minlen=8,
        support=2,
        flank_size=2000,
        junction_window=5,
        somatic=True,
        unphased=False,
        find_outliers=False,
        skip_failed_alignments=True,
        log_level="debug",
        threads=4,
    )

    params = CallParams.from_args(logger, p_args)
    assert params.to_dict() == {
        "read_file": str(dummy_bam),
        "reference_file": str(reference_fasta),
        "region": "chr1:15000-15030",
        "region_file": None,
        "sample_id": "S",
        "min_length": 8,
        "support": 2,
        "flank_size": 2000,
        "junction_window": 5,
        "somatic": True,
        "unphased": False,
        "find_outliers": False,
        "skip_failed_alignments": True,
        "log_level": logging.DEBUG,
        "threads": 4,
    }


def test_params_find_outliers(reference_fasta, dummy_bam, caplog):
    with caplog.at_level(logging.WARNING, logger=__name__):
        params = CallParams(
            logger, str(dummy_bam), str(reference_fasta), region="chr1:1-2", sample_id="S", find_outliers=True)
    assert params.find_outliers
    assert "--find-outliers is only effective with --unphased" in caplog.text

    caplog.clear()

    with caplog.at_level(logging.WARNING, logger=__name__):
        CallParams(
            logger, str(dummy_bam), str(reference_fasta), region="chr1:1-2", sample_id="S", unphased=True,
            find_outliers=True)
    assert "--find-outliers" not in caplog.text
