"""Contains writers of evaluation results files and their naming scheme.

Three kinds of files are produced:

* ``OUT_<tag>.csv`` - classified records with their true and predicted labels,
* ``STAT_<tag>.txt`` - run metadata, timings, attributes statistics and reports,
* ``kNN_<tag>.txt`` - neighbours of every classified record.
"""
from __future__ import annotations

import os
import re
from datetime import datetime
from typing import Iterable
from typing import Optional
from typing import Sequence

import pandas as pd

from localrules.dataset import Dataset
from localrules.distance import DistanceMode
from localrules.distance import MissingDistanceMode
from localrules.distance import NominalMetric
from localrules.distance import NumericStats
from localrules.evaluation.metrics import ClassificationReport
from localrules.voting import Prediction

TIMES_KEYS: tuple[str, ...] = ("LOAD", "IMPUTE", "CONTEXT", "CLASSIFY", "METRICS", "WRITE")

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def dataset_tag_from_path(path: str) -> str:
    """Returns dataset name used in output files names: file name without the
    ".data" suffix or without the extension, with characters not allowed in file
    names replaced by "_".
    """
    name: str = os.path.basename(path)
    if name.lower().endswith(".data"):
        name = name[: -len(".data")]
    else:
        name = os.path.splitext(name)[0]
    return _INVALID_FILENAME_CHARS.sub("_", name)


def build_tag(
    alg: str,
    dataset_tag: str,
    k_tag: str,
    mode: DistanceMode,
    nominal_metric: NominalMetric,
    missing_mode: MissingDistanceMode,
) -> str:
    mode_tag: str = "g" if DistanceMode(mode) == DistanceMode.GLOBAL else "l"
    metric_tag: str = (
        "svdmprime" if NominalMetric(nominal_metric) == NominalMetric.SVDM_PRIME else "svdm"
    )
    missing_tag: str = (
        "v2" if MissingDistanceMode(missing_mode) == MissingDistanceMode.VARIANT2 else "v1"
    )
    return f"{alg}_{dataset_tag}_k{k_tag}_{mode_tag}_{metric_tag}_{missing_tag}"


def out_name(out_dir: str, tag: str) -> str:
    return os.path.join(out_dir, f"OUT_{tag}.csv")


def stat_name(out_dir: str, tag: str) -> str:
    return os.path.join(out_dir, f"STAT_{tag}.txt")


def knn_name(out_dir: str, tag: str) -> str:
    return os.path.join(out_dir, f"kNN_{tag}.txt")


def _ensure_parent_dir(path: str):
    parent: str = os.path.dirname(path)
    if parent != "":
        os.makedirs(parent, exist_ok=True)


def write_predictions(path: str, dataset: Dataset, predictions: Sequence[Prediction]):
    """Writes OUT file: header ``id,<attributes>,RId,CId,NCId`` and one row per
    record in dataset order. Missing values are written as empty cells.

    Args:
        path (str): output path, parent directories are created
        dataset (Dataset): classified dataset
        predictions (Sequence[Prediction]): predictions in dataset records order
    """
    if len(predictions) != len(dataset):
        raise ValueError(
            f"Got {len(predictions)} predictions for dataset of size {len(dataset)}"
        )
    # columns keyed by position, attributes names may clash with the fixed ones
    columns: list = [dataset.ids]
    for j, attribute in enumerate(dataset.attributes):
        if attribute.is_numeric:
            columns.append(dataset.numeric_matrix[:, j])
        else:
            columns.append([record.values[j] for record in dataset])
    columns.append([p.true_label for p in predictions])
    columns.append([p.cid for p in predictions])
    columns.append([p.ncid for p in predictions])
    df: pd.DataFrame = pd.DataFrame(dict(enumerate(columns)))
    df.columns = (
        ["id"] + [attribute.name for attribute in dataset.attributes] + ["RId", "CId", "NCId"]
    )
    _ensure_parent_dir(path)
    df.to_csv(path, index=False, na_rep="", lineterminator="\n")


def write_neighbors(path: str, predictions: Iterable[Prediction]):
    """Writes kNN file, one line per classified record:
    ``testId;neighbourId1:distance1;...;neighbourIdK:distanceK``

    Args:
        path (str): output path, parent directories are created
        predictions (Iterable[Prediction]): k+NN predictions carrying neighbours
    """
    _ensure_parent_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        for prediction in predictions:
            parts: list[str] = [str(prediction.record_id)]
            parts.extend(
                f"{neighbor.id}:{neighbor.distance!r}" for neighbor in prediction.neighbors
            )
            f.write(";".join(parts) + "\n")


def _report_to_lines(name: str, report: ClassificationReport) -> list[str]:
    lines: list[str] = [
        f"== {name} ==",
        f"Accuracy: {report.accuracy:.6f}",
        f"BalancedPrecision: {report.balanced_precision:.6f}",
        f"BalancedRecall:    {report.balanced_recall:.6f}",
        f"BalancedF1:        {report.balanced_f1:.6f}",
        "",
        report.confusion_to_string(),
        "Per-class metrics:",
        "Class\tSupport\tTP\tFP\tFN\tPrecision\tRecall\tF1",
    ]
    for metrics in report.per_class:
        lines.append(
            f"{metrics.label}\t{metrics.support}\t{metrics.tp}\t{metrics.fp}\t"
            f"{metrics.fn}\t{metrics.precision:.6f}\t{metrics.recall:.6f}\t"
            f"{metrics.f1:.6f}"
        )
    lines.append("")
    return lines


def write_stats(
    path: str,
    title: str,
    meta: dict[str, str],
    dataset: Dataset,
    mode: DistanceMode,
    nominal_metric: NominalMetric,
    missing_mode: MissingDistanceMode,
    times_ms: dict[str, float],
    report_cid: ClassificationReport,
    report_ncid: ClassificationReport,
    generated: Optional[datetime] = None,
):
    """Writes STAT file with run metadata, stage times in milliseconds (keys from
    TIMES_KEYS, absent ones are zeros), numerical attributes ranges, nominal
    attributes domain sizes and both CId and NCId reports.

    Args:
        path (str): output path, parent directories are created
        title (str): first line of the file
        meta (dict[str, str]): metadata written in insertion order
        dataset (Dataset): classified dataset (after imputation)
        mode (DistanceMode): distance mode
        nominal_metric (NominalMetric): nominal metric
        missing_mode (MissingDistanceMode): missing values mode
        times_ms (dict[str, float]): stage times
        report_cid (ClassificationReport): report of CId predictions
        report_ncid (ClassificationReport): report of NCId predictions
        generated (Optional[datetime], optional): generation time. Defaults to now.
    """
    generated = datetime.now() if generated is None else generated
    lines: list[str] = [title, f"Generated: {generated:%Y-%m-%d %H:%M:%S}", "", "META:"]
    lines.extend(f"{key}: {value}" for key, value in meta.items())
    lines.extend(["", "TIMES_MS:"])
    for key in TIMES_KEYS:
        lines.append(f"{key + ':':<10}{times_ms.get(key, 0.0):.0f}")
    lines.append(f"{'TOTAL:':<10}{sum(times_ms.get(key, 0.0) for key in TIMES_KEYS):.0f}")
    lines.extend(
        [
            "",
            "ATTRIBUTE_STATS:",
            f"DistanceMode: {DistanceMode(mode).value}",
            f"NominalMetric: {NominalMetric(nominal_metric).value}",
            f"MissingMode: {MissingDistanceMode(missing_mode).value}",
            "",
            "Numeric attributes (min, max, range):",
        ]
    )
    numerical_indexes: list[int] = dataset.numerical_indexes
    for j in numerical_indexes:
        stats = NumericStats.from_column(dataset.numeric_matrix[:, j])
        lines.append(
            f"{dataset.attributes[j].name}\tmin={stats.min!r}\tmax={stats.max!r}\t"
            f"range={stats.range!r}"
        )
    if len(numerical_indexes) == 0:
        lines.append("(none)")
    lines.extend(["", "Nominal attributes (domain size):"])
    nominal_indexes: list[int] = dataset.nominal_indexes
    for j in nominal_indexes:
        attribute = dataset.attributes[j]
        lines.append(f"{attribute.name}\tdomain={len(attribute.domain)}")
    if len(nominal_indexes) == 0:
        lines.append("(none)")
    lines.append("")
    lines.extend(_report_to_lines("CId", report_cid))
    lines.extend(_report_to_lines("NCId", report_ncid))

    _ensure_parent_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
