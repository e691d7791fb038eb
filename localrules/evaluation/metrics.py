"""Contains classification quality report computed with scikit-learn metrics."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from sklearn import metrics


@dataclass(frozen=True)
class ClassMetrics:
    label: str
    support: int
    tp: int
    fp: int
    fn: int
    precision: float
    recall: float
    f1: float


@dataclass(frozen=True, eq=False)
class ClassificationReport:
    """Accuracy, confusion matrix (rows - true labels, columns - predicted labels),
    per class metrics and their macro averages called balanced metrics.
    """

    classes: tuple[str, ...]
    confusion: np.ndarray
    total: int
    correct: int
    per_class: tuple[ClassMetrics, ...]
    balanced_precision: float
    balanced_recall: float
    balanced_f1: float

    @property
    def accuracy(self) -> float:
        return 0.0 if self.total == 0 else self.correct / self.total

    @staticmethod
    def from_labels(y_true: Sequence[str], y_pred: Sequence[str]) -> ClassificationReport:
        """
        Args:
            y_true (Sequence[str]): true labels
            y_pred (Sequence[str]): predicted labels

        Returns:
            ClassificationReport: report over the sorted union of both labels sets
        """
        y_true = np.asarray(y_true, dtype=str)
        y_pred = np.asarray(y_pred, dtype=str)
        classes: list[str] = sorted(set(y_true.tolist()) | set(y_pred.tolist()))
        if len(classes) == 0:
            return ClassificationReport(
                classes=(),
                confusion=np.zeros((0, 0), dtype=np.int64),
                total=0,
                correct=0,
                per_class=(),
                balanced_precision=0.0,
                balanced_recall=0.0,
                balanced_f1=0.0,
            )
        confusion: np.ndarray = metrics.confusion_matrix(y_true, y_pred, labels=classes)
        precision, recall, f1, support = metrics.precision_recall_fscore_support(
            y_true, y_pred, labels=classes, average=None, zero_division=0
        )
        tp: np.ndarray = np.diag(confusion)
        per_class = tuple(
            ClassMetrics(
                label=label,
                support=int(support[i]),
                tp=int(tp[i]),
                fp=int(confusion[:, i].sum() - tp[i]),
                fn=int(confusion[i, :].sum() - tp[i]),
                precision=float(precision[i]),
                recall=float(recall[i]),
                f1=float(f1[i]),
            )
            for i, label in enumerate(classes)
        )
        return ClassificationReport(
            classes=tuple(classes),
            confusion=confusion,
            total=int(y_true.shape[0]),
            correct=int(tp.sum()),
            per_class=per_class,
            balanced_precision=float(np.mean(precision)),
            balanced_recall=float(np.mean(recall)),
            balanced_f1=float(np.mean(f1)),
        )

    def confusion_to_string(self) -> str:
        lines: list[str] = [
            "Confusion matrix (rows=true, cols=pred):",
            "\t".join(["true\\pred", *self.classes]),
        ]
        for label, row in zip(self.classes, self.confusion):
            lines.append("\t".join([label, *(str(int(v)) for v in row)]))
        return "\n".join(lines) + "\n"
