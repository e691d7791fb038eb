"""Command line interface running leave-one-out evaluation of k+NN, RIA and RIONA
classifiers on a CSV dataset and writing OUT, STAT and kNN files.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from logging import getLogger
from logging import Logger
from typing import Optional
from typing import Sequence

from localrules._model import BaseModel
from localrules._params import resolve_k
from localrules._timing import PerformanceTimer
from localrules.classification import KPlusNNClassifier
from localrules.classification import RIAClassifier
from localrules.classification import RIONAClassifier
from localrules.dataset import Dataset
from localrules.dataset import read_csv
from localrules.distance import DistanceMode
from localrules.distance import MissingDistanceMode
from localrules.distance import NominalMetric
from localrules.evaluation import EvaluationResult
from localrules.evaluation import leave_one_out
from localrules.evaluation.metrics import ClassificationReport
from localrules.exceptions import InvalidInputError
from localrules.imputation import ClassConditionalImputer
from localrules import output

logger: Logger = getLogger("localrules")

MODES: dict[str, DistanceMode] = {"g": DistanceMode.GLOBAL, "l": DistanceMode.LOCAL}
NOMINAL_METRICS: dict[str, NominalMetric] = {
    "svdm": NominalMetric.SVDM,
    "svdmprime": NominalMetric.SVDM_PRIME,
}
MISSING_MODES: dict[str, MissingDistanceMode] = {
    "v1": MissingDistanceMode.VARIANT1,
    "v2": MissingDistanceMode.VARIANT2,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localrules",
        description=(
            "Leave-one-out evaluation of k+NN, RIA and RIONA classifiers on a CSV "
            "dataset with the label in the last column."
        ),
    )
    parser.add_argument("--data", required=True, help="path to the CSV dataset")
    parser.add_argument(
        "--alg", choices=("knn", "ria", "riona"), default="knn", type=str.lower
    )
    parser.add_argument("--k", default="3", help="neighbourhood size: integer or log2n")
    parser.add_argument("--mode", choices=tuple(MODES), default="g", type=str.lower)
    parser.add_argument(
        "--nomdist", choices=tuple(NOMINAL_METRICS), default="svdm", type=str.lower
    )
    parser.add_argument(
        "--missing", choices=tuple(MISSING_MODES), default="v1", type=str.lower
    )
    parser.add_argument(
        "--no-impute", action="store_true", help="skip class-conditional imputation"
    )
    parser.add_argument(
        "--no-header", action="store_true", help="first line holds data, not names"
    )
    parser.add_argument("--sep", default=",", help="columns separator")
    parser.add_argument(
        "--outdir", default="", help="directory for automatically named output files"
    )
    parser.add_argument("--out", default="", help="OUT file path (overrides --outdir)")
    parser.add_argument("--stat", default="", help="STAT file path (overrides --outdir)")
    parser.add_argument(
        "--knn-out", default="", help="kNN file path (overrides --outdir)"
    )
    parser.add_argument(
        "--n-jobs", type=int, default=None, help="number of parallel joblib jobs"
    )
    parser.add_argument(
        "--all",
        action="store_true",
        help="run k+NN for k=1,3,log2n and RIONA for --k (requires --outdir)",
    )
    parser.add_argument(
        "--all-ria", action="store_true", help="with --all, run also RIA (slow)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


class _Run:
    """Settings and timings shared by all evaluations of a single invocation"""

    def __init__(self, args: argparse.Namespace, dataset: Dataset, k: int, k_tag: str):
        self.args: argparse.Namespace = args
        self.dataset: Dataset = dataset
        self.k: int = k
        self.k_tag: str = k_tag
        self.mode: DistanceMode = MODES[args.mode]
        self.nominal_metric: NominalMetric = NOMINAL_METRICS[args.nomdist]
        self.missing_mode: MissingDistanceMode = MISSING_MODES[args.missing]
        self.dataset_tag: str = output.dataset_tag_from_path(args.data)
        self.times_ms: dict[str, float] = {}

    def tag(self, alg: str, k_tag: Optional[str] = None) -> str:
        return output.build_tag(
            alg,
            self.dataset_tag,
            self.k_tag if k_tag is None else k_tag,
            self.mode,
            self.nominal_metric,
            self.missing_mode,
        )

    def knn(self, k: int, k_tag: str, neighbors_path: str):
        model = KPlusNNClassifier(
            k=k,
            mode=self.mode,
            nominal_metric=self.nominal_metric,
            missing_mode=self.missing_mode,
        )
        result: EvaluationResult = leave_one_out(model, self.dataset, self.args.n_jobs)
        logger.info(
            "kNN k=%s: accuracy=%.4f, time=%.0f ms",
            k_tag,
            result.accuracy,
            result.wall_time_ms,
        )
        if neighbors_path != "":
            with PerformanceTimer() as timer:
                output.write_neighbors(neighbors_path, result.predictions)
            logger.info(
                "Saved kNN file: %s (write %.0f ms)", neighbors_path, timer.milliseconds
            )

    def rules(self, alg: str, out_path: str, stat_path: str):
        model: BaseModel
        if alg == "ria":
            model = RIAClassifier(
                mode=self.mode,
                nominal_metric=self.nominal_metric,
                missing_mode=self.missing_mode,
            )
        else:
            model = RIONAClassifier(
                k=self.k,
                mode=self.mode,
                nominal_metric=self.nominal_metric,
                missing_mode=self.missing_mode,
            )
        result: EvaluationResult = leave_one_out(model, self.dataset, self.args.n_jobs)
        with PerformanceTimer() as metrics_timer:
            report_cid: ClassificationReport = result.report_cid
            report_ncid: ClassificationReport = result.report_ncid
        logger.info(
            "%s accuracy (CId): %.4f, accuracy (NCId): %.4f, time=%.0f ms",
            alg.upper(),
            report_cid.accuracy,
            report_ncid.accuracy,
            result.wall_time_ms,
        )
        with PerformanceTimer() as write_timer:
            output.write_predictions(out_path, self.dataset, result.predictions)
        logger.info("Saved OUT file: %s", out_path)

        if stat_path == "":
            return
        times_ms: dict[str, float] = dict(self.times_ms)
        times_ms["CONTEXT"] = (
            result.prediction_times.context_building_time.total_seconds() * 1000.0
        )
        times_ms["CLASSIFY"] = result.wall_time_ms
        times_ms["METRICS"] = metrics_timer.milliseconds
        times_ms["WRITE"] = write_timer.milliseconds
        meta: dict[str, str] = {
            "ALG": alg.upper(),
            "DATA": self.args.data,
            "N": str(len(self.dataset)),
            "FEATURES": str(self.dataset.feature_count),
            "MODE": self.mode.value,
            "NOMINAL_METRIC": self.nominal_metric.value,
            "MISSING_MODE": self.missing_mode.value,
            "K": self.k_tag,
        }
        output.write_stats(
            stat_path,
            f"STAT_{alg.upper()}",
            meta,
            self.dataset,
            self.mode,
            self.nominal_metric,
            self.missing_mode,
            times_ms,
            report_cid,
            report_ncid,
        )
        logger.info("Saved STAT file: %s", stat_path)


def _run_all(run: _Run, out_dir: str):
    k_log2: int = resolve_k("log2n", len(run.dataset))
    for k, k_tag in ((1, "1"), (3, "3"), (k_log2, "log2n")):
        run.knn(k, k_tag, output.knn_name(out_dir, run.tag("knn", k_tag)))

    tag: str = run.tag("riona")
    run.rules("riona", output.out_name(out_dir, tag), output.stat_name(out_dir, tag))

    if run.args.all_ria:
        tag = run.tag("ria")
        run.rules("ria", output.out_name(out_dir, tag), output.stat_name(out_dir, tag))


def _run_single(run: _Run, parser: argparse.ArgumentParser):
    args: argparse.Namespace = run.args
    out_path, stat_path, knn_path = args.out, args.stat, args.knn_out
    if args.outdir != "":
        tag: str = run.tag(args.alg)
        if args.alg == "knn":
            knn_path = knn_path or output.knn_name(args.outdir, tag)
        else:
            out_path = out_path or output.out_name(args.outdir, tag)
            stat_path = stat_path or output.stat_name(args.outdir, tag)

    if args.alg == "knn":
        run.knn(run.k, run.k_tag, knn_path)
        return
    if out_path == "":
        parser.error(f"--alg {args.alg} requires --out or --outdir")
    run.rules(args.alg, out_path, stat_path)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser: argparse.ArgumentParser = build_parser()
    args: argparse.Namespace = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    if args.all and args.outdir == "":
        parser.error("--all requires --outdir")
    if args.outdir != "":
        os.makedirs(args.outdir, exist_ok=True)

    try:
        with PerformanceTimer() as load_timer:
            dataset: Dataset = read_csv(
                args.data, sep=args.sep or ",", has_header=not args.no_header
            )
        k: int = resolve_k(args.k, len(dataset))
        k_tag: str = "log2n" if args.k.strip().lower() in ("log2n", "log2") else str(k)

        with PerformanceTimer() as impute_timer:
            if not args.no_impute:
                dataset = ClassConditionalImputer().impute(dataset)

        logger.info("Loaded: n=%d, features=%d", len(dataset), dataset.feature_count)
        logger.info(
            "Mode=%s, Nominal=%s, Missing=%s", args.mode, args.nomdist, args.missing
        )
        logger.info("k=%d (k argument=%s)", k, args.k)

        run = _Run(args, dataset, k, k_tag)
        run.times_ms["LOAD"] = load_timer.milliseconds
        run.times_ms["IMPUTE"] = impute_timer.milliseconds
        if args.all:
            _run_all(run, args.outdir)
        else:
            _run_single(run, parser)
    except (InvalidInputError, OSError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
