from __future__ import annotations

from .call_locus import genotype_locus
from .call_sample import call_sample
from .params import CallParams

__all__ = [
    "call_sample",
    "CallParams",
    "genotype_locus",
]
