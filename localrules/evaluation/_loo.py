from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from logging import getLogger
from logging import Logger
from typing import Optional

import numpy as np
from joblib import delayed
from joblib import effective_n_jobs
from joblib import Parallel

from localrules._induction import LocalRulesInducerMixin
from localrules._induction import PredictionTimes
from localrules._model import BaseModel
from localrules._timing import PerformanceTimer
from localrules.dataset import Dataset
from localrules.evaluation.metrics import ClassificationReport
from localrules.exceptions import InvalidInputError
from localrules.voting import Prediction

PROGRESS_LOG_INTERVAL: int = 1000

logger: Logger = getLogger(__name__)


@dataclass
class EvaluationResult:
    """Predictions in records order with timing information"""

    predictions: list[Prediction]
    prediction_times: PredictionTimes
    wall_time_ms: float = 0.0

    @cached_property
    def y_true(self) -> np.ndarray:
        return np.array([p.true_label for p in self.predictions], dtype=object)

    @cached_property
    def y_pred_cid(self) -> np.ndarray:
        return np.array([p.cid for p in self.predictions], dtype=object)

    @cached_property
    def y_pred_ncid(self) -> np.ndarray:
        return np.array([p.ncid for p in self.predictions], dtype=object)

    @cached_property
    def report_cid(self) -> ClassificationReport:
        return ClassificationReport.from_labels(self.y_true, self.y_pred_cid)

    @cached_property
    def report_ncid(self) -> ClassificationReport:
        return ClassificationReport.from_labels(self.y_true, self.y_pred_ncid)

    @property
    def accuracy(self) -> float:
        return self.report_cid.accuracy


def _predict_batch(
    model: BaseModel, dataset: Dataset, indices: np.ndarray
) -> tuple[list[Prediction], PredictionTimes]:
    inducer: LocalRulesInducerMixin = model.prepare(dataset)
    # each batch reports only its own times
    inducer.prediction_times = PredictionTimes()
    predictions: list[Prediction] = []
    for index in indices:
        predictions.append(inducer.predict_loo(dataset, int(index)))
        if (index + 1) % PROGRESS_LOG_INTERVAL == 0:
            logger.info("Progress: %d/%d", index + 1, len(dataset))
    return predictions, inducer.prediction_times


def leave_one_out(
    model: BaseModel, dataset: Dataset, n_jobs: Optional[int] = None
) -> EvaluationResult:
    """Classifies every dataset record with all other records as training set.

    Folds are independent, so with `n_jobs` other than None or 1 they are split into
    batches processed in parallel by joblib. An exception in any fold aborts the
    whole run.

    Args:
        model (BaseModel): classifier
        dataset (Dataset): dataset with at least two records
        n_jobs (Optional[int], optional): joblib number of jobs. Defaults to None
            (sequential).

    Returns:
        EvaluationResult: predictions in records order
    """
    if len(dataset) < 2:
        raise InvalidInputError(
            f"Leave-one-out requires at least two records, got {len(dataset)}"
        )
    logger.info(
        "Leave-one-out evaluation of %s on %d records",
        model.__class__.__name__,
        len(dataset),
    )
    with PerformanceTimer() as timer:
        model.prepare(dataset)
        jobs: int = effective_n_jobs(n_jobs)
        batches_count: int = 1 if jobs == 1 else min(len(dataset), jobs * 4)
        batches: list[np.ndarray] = np.array_split(np.arange(len(dataset)), batches_count)
        results = Parallel(n_jobs=n_jobs, prefer="processes")(
            delayed(_predict_batch)(model, dataset, batch) for batch in batches
        )
    predictions: list[Prediction] = [p for batch, _ in results for p in batch]
    prediction_times: PredictionTimes = sum(times for _, times in results)
    model.prepare(dataset).prediction_times = prediction_times
    logger.info("Leave-one-out evaluation finished in %.0f ms", timer.milliseconds)
    return EvaluationResult(
        predictions=predictions,
        prediction_times=prediction_times,
        wall_time_ms=timer.milliseconds,
    )


def train_test(model: BaseModel, train: Dataset, test: Dataset) -> EvaluationResult:
    """Fits model on the training dataset and classifies test records.

    Args:
        model (BaseModel): classifier
        train (Dataset): training dataset
        test (Dataset): test dataset with the same attributes

    Returns:
        EvaluationResult: predictions in test records order
    """
    train_names: list[str] = [a.name for a in train.attributes]
    test_names: list[str] = [a.name for a in test.attributes]
    if train_names != test_names:
        raise InvalidInputError(
            f"Train and test attributes differ: {train_names} != {test_names}"
        )
    with PerformanceTimer() as timer:
        model.fit(train)
        predictions: list[Prediction] = model.predict_records(list(test.records))
    return EvaluationResult(
        predictions=predictions,
        prediction_times=model.prediction_times,
        wall_time_ms=timer.milliseconds,
    )
