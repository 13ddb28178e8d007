from .json_report import output_json_report
from .tsv import format_tsv_line, output_tsv
from .vcf import build_vcf_header, VCFWriter

__all__ = [
    "output_json_report",
    "format_tsv_line",
    "output_tsv",
    "build_vcf_header",
    "VCFWriter",
]
