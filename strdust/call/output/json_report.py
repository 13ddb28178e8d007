from __future__ import annotations

import orjson
import sys

from datetime import timedelta
from typing import Iterable

from strdust import __version__

from ..params import CallParams
from ..types import GenotypeRecord

__all__ = [
    "dumps_report",
    "build_json_report",
    "output_json_report",
]


def dumps_report(report: dict, indent: bool = False) -> bytes:
    return orjson.dumps(report, option=orjson.OPT_NON_STR_KEYS | (orjson.OPT_INDENT_2 if indent else 0))


def build_json_report(params: CallParams, time_taken: timedelta, results: Iterable[GenotypeRecord]) -> dict:
    return {
        "sample_id": params.sample_id,
        "caller": {
            "name": "strdust",
            "version": __version__,
        },
        "parameters": params.to_dict(as_inputted=True),
        "runtime": time_taken.total_seconds(),
        "results": [r.to_dict() for r in results],
    }


def output_json_report(
    params: CallParams,
    time_taken: timedelta,
    results: Iterable[GenotypeRecord],
    json_path: str,
    indent_json: bool,
):
    json_report = build_json_report(params, time_taken, results)

    if json_path == "stdout":
        sys.stdout.buffer.write(dumps_report(json_report, indent_json))
        sys.stdout.write("\n")
        sys.stdout.flush()
    else:
        with open(json_path, "wb") as jf:
            jf.write(dumps_report(json_report, indent_json))
            jf.write(b"\n")
