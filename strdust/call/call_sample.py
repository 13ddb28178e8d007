from __future__ import annotations

import logging
import multiprocessing.dummy as mpd
import operator
import pysam
import queue
import threading

from datetime import datetime
from typing import Callable, Iterable, Optional, TextIO

from ..exceptions import ContigNotFound, GenotypingError, ReferenceBoundsError
from ..logger import get_main_logger
from .align import LocusAligner
from .call_locus import AlignerFactory, genotype_locus
from .loci import load_loci
from .output import output_json_report, output_tsv as output_tsv_fn, VCFWriter
from .params import CallParams
from .types import GenotypeRecord, RepeatInterval

__all__ = [
    "ReportedContigs",
    "ResultCollector",
    "LocusCounter",
    "open_handles",
    "locus_worker",
    "call_sample",
]


# TODO: Parameterize
LOG_PROGRESS_INTERVAL: int = 120  # seconds

get_sort_key = operator.attrgetter("sort_key")

HandleFactory = Callable[[CallParams], tuple[pysam.FastaFile, pysam.AlignmentFile]]
RecordSink = Callable[[GenotypeRecord], None]


class ReportedContigs:
    """
    Contigs which have already been reported as missing from the alignment file during this run, so that each one is
    only reported once no matter how many loci (or workers) run into it.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._contigs: set[str] = set()

    def report(self, contig: str) -> bool:
        """
        Record a contig as reported.
        :return: Whether this is the first report of the contig (i.e., whether the caller should log it).
        """
        with self._lock:
            if contig in self._contigs:
                return False
            self._contigs.add(contig)
            return True

    def __contains__(self, contig: str) -> bool:
        with self._lock:
            return contig in self._contigs

    def __len__(self) -> int:
        with self._lock:
            return len(self._contigs)


class ResultCollector:
    def __init__(self):
        self._lock = threading.Lock()
        self._results: list[GenotypeRecord] = []

    def append(self, res: GenotypeRecord) -> None:
        with self._lock:
            self._results.append(res)

    def sorted_results(self) -> list[GenotypeRecord]:
        # workers finish loci in no particular order, so this sort is what makes the output deterministic
        with self._lock:
            return sorted(self._results, key=get_sort_key)


class LocusCounter:
    def __init__(self):
        self._lock = threading.Lock()
        self._value: int = 0

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def open_handles(params: CallParams) -> tuple[pysam.FastaFile, pysam.AlignmentFile]:
    return (
        pysam.FastaFile(params.reference_file),
        pysam.AlignmentFile(params.read_file, reference_filename=params.reference_file),
    )


def locus_worker(
    worker_id: int,
    params: CallParams,
    locus_queue: queue.Queue,
    sink: RecordSink,
    reported_contigs: ReportedContigs,
    locus_counter: LocusCounter,
    abort_event: threading.Event,
    handle_factory: HandleFactory = open_handles,
    aligner_factory: AlignerFactory = LocusAligner,
) -> int:
    lg = get_main_logger()

    sample_id = params.sample_id

    # Each worker has its own file handles; they are not shared across threads.
    ref, bf = handle_factory(params)

    n_results: int = 0

    try:
        while not abort_event.is_set():
            try:
                locus: RepeatInterval = locus_queue.get_nowait()
            except queue.Empty:
                lg.debug(f"worker {worker_id} encountered queue.Empty")
                break

            # String representation of locus for logging purposes
            locus_log_str: str = f"[w{worker_id}] {sample_id} locus {locus.locus_index}: {locus}"

            lg.debug(f"{locus_log_str} - working on locus")

            res: Optional[GenotypeRecord] = None

            try:
                res = genotype_locus(locus, bf, ref, params, lg, locus_log_str, aligner_factory=aligner_factory)
            except ContigNotFound as e:
                if reported_contigs.report(e.contig):
                    lg.error(str(e))
            except ReferenceBoundsError as e:
                lg.error(f"{locus_log_str} - skipping locus: {e}")
            except GenotypingError:
                abort_event.set()  # stop the other workers from picking up new loci
                raise

            locus_counter.increment()

            if res is not None:
                sink(res)
                n_results += 1

    finally:
        ref.close()
        bf.close()

    lg.debug(f"worker {worker_id} - finished with {n_results} locus results")

    return n_results


def progress_worker(
    sample_id: str,
    start_time: datetime,
    locus_counter: LocusCounter,
    num_loci: int,
    event: threading.Event,
    lg: logging.Logger,
):
    def _log():
        processed_loci = locus_counter.value
        n_seconds = (datetime.now() - start_time).total_seconds()
        loci_per_second = (processed_loci / n_seconds) if n_seconds else 0.0
        est_time_remaining = ((num_loci - processed_loci) / loci_per_second) if loci_per_second else float("inf")
        pct_done = (processed_loci / num_loci * 100) if num_loci else 100.0
        lg.info(f"{sample_id}: processed {processed_loci}/{num_loci} loci ({pct_done:.1f}%) in "
                f"{n_seconds:.1f} seconds (~{loci_per_second:.1f} l/s; est. time remaining: "
                f"{est_time_remaining:.0f}s)")

    timer: int = 0
    while not event.wait(1):
        timer += 1  # one second has elapsed
        if timer >= LOG_PROGRESS_INTERVAL:
            _log()  # log every {LOG_PROGRESS_INTERVAL} seconds
            timer = 0  # reset timer

    if num_loci:
        _log()


def call_sample(
    params: CallParams,
    json_path: Optional[str] = None,
    vcf_path: Optional[str] = None,
    indent_json: bool = False,
    output_tsv: bool = True,
    tsv_stream: Optional[TextIO] = None,
    # ---
    handle_factory: HandleFactory = open_handles,
    aligner_factory: AlignerFactory = LocusAligner,
) -> None:
    logger = get_main_logger()

    # Start the call timer
    start_time = datetime.now()

    logger.info(
        f"Starting STR genotyping; sample={params.sample_id}, minlen={params.min_length}, support={params.support}, "
        f"unphased={params.unphased}, somatic={params.somatic}")

    # Load (and validate) every locus before genotyping anything
    loci: list[RepeatInterval] = load_loci(params, logger)
    num_loci: int = len(loci)

    # Add all loci to the queue, allowing each worker to pull from the queue as it becomes freed up to do so.
    locus_queue: queue.Queue = queue.Queue()
    for locus in loci:
        locus_queue.put(locus)
    del loci

    vf: Optional[VCFWriter] = None
    if vcf_path is not None:
        vf = VCFWriter(vcf_path, params.sample_id, params.reference_file, phased=not params.unphased)

    # Only populated if we're outputting JSON; otherwise, we don't want to keep everything in memory at once.
    all_results: list[GenotypeRecord] = []

    def _write_results(results: Iterable[GenotypeRecord]) -> None:
        results = tuple(results)
        if json_path is not None:
            all_results.extend(results)
        if output_tsv:
            output_tsv_fn(results, tsv_stream)
        if vf is not None:
            vf.write_records(results)

    reported_contigs = ReportedContigs()
    locus_counter = LocusCounter()
    abort_event = threading.Event()
    finish_event = threading.Event()

    # Start the progress tracking thread
    progress_job = threading.Thread(
        target=progress_worker,
        daemon=True,
        args=(params.sample_id, start_time, locus_counter, num_loci, finish_event, logger))
    progress_job.start()

    try:
        worker_args = (locus_queue,)
        worker_kwargs = dict(
            reported_contigs=reported_contigs,
            locus_counter=locus_counter,
            abort_event=abort_event,
            handle_factory=handle_factory,
            aligner_factory=aligner_factory,
        )

        if params.is_single_worker:
            # Loci are genotyped in input order and each record is written as soon as it is done.
            locus_worker(1, params, *worker_args, sink=lambda r: _write_results((r,)), **worker_kwargs)
        else:
            logger.info(f"Using {params.threads} workers")

            collector = ResultCollector()

            with mpd.Pool(params.threads) as p:
                # Spin up the jobs
                jobs = [
                    p.apply_async(locus_worker, (i + 1, params, *worker_args), dict(sink=collector.append, **worker_kwargs))
                    for i in range(params.threads)
                ]

                # Wait for all jobs; re-raises the first fatal error from a worker, if any.
                for j in jobs:
                    j.get()

            _write_results(collector.sorted_results())

    finally:
        finish_event.set()
        progress_job.join()

        if vf is not None:
            vf.close()

    time_taken = datetime.now() - start_time

    if reported_contigs:
        logger.warning(f"Skipped loci on {len(reported_contigs)} contig(s) missing from the alignment file")

    logger.info(f"Finished STR genotyping in {time_taken.total_seconds():.1f}s")

    if json_path:
        output_json_report(params, time_taken, all_results, json_path, indent_json)
