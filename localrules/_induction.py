from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from logging import getLogger
from logging import Logger
from typing import Any
from typing import Callable
from typing import Optional
from typing import Sequence

import numpy as np

from localrules._params import AlgorithmParams
from localrules._timing import PerformanceTimer
from localrules.cache import DistanceContextCache
from localrules.dataset import Dataset
from localrules.dataset import Record
from localrules.distance import DistanceContext
from localrules.distance import DistanceMode
from localrules.distance import MixedDistance
from localrules.exceptions import InvalidInputError
from localrules.rules import LocalRule
from localrules.voting import Prediction
from localrules.voting import vote


@dataclass
class PredictionTimes:
    context_building_time: timedelta = timedelta()
    consistency_checking_time: timedelta = timedelta()
    total_prediction_time: timedelta = timedelta()

    def __add__(self, other: PredictionTimes) -> PredictionTimes:
        if other == 0:
            return self
        if not isinstance(other, PredictionTimes):
            raise TypeError(f"Cannot add {type(other)} to PredictionTimes")
        return PredictionTimes(
            context_building_time=self.context_building_time + other.context_building_time,
            consistency_checking_time=(
                self.consistency_checking_time + other.consistency_checking_time
            ),
            total_prediction_time=self.total_prediction_time + other.total_prediction_time,
        )

    def __radd__(self, other: PredictionTimes) -> PredictionTimes:
        return self.__add__(other)

    def __repr__(self) -> str:
        return (
            f"context_building_time={self.context_building_time.total_seconds()}, "
            f"consistency_checking_time={self.consistency_checking_time.total_seconds()}, "
            f"total_prediction_time={self.total_prediction_time.total_seconds()}"
        )


@dataclass(frozen=True)
class Neighbourhood:
    """Positions of training records sorted ascending by (distance from query,
    record id, position) together with their distances.
    """

    rows: np.ndarray
    distances: np.ndarray

    def __len__(self) -> int:
        return self.rows.shape[0]

    def head(self, k: int) -> Neighbourhood:
        return Neighbourhood(rows=self.rows[:k], distances=self.distances[:k])


def sort_by_distance(
    context: DistanceContext, query: Record, rows: np.ndarray
) -> Neighbourhood:
    """Sorts dataset records at given positions by their distance from the query.
    Ties are broken by record id and then by position, so the order is total.
    """
    distances: np.ndarray = MixedDistance(context).to_rows(query, rows)
    order: np.ndarray = np.lexsort((rows, context.dataset.ids[rows], distances))
    return Neighbourhood(rows=rows[order], distances=distances[order])


class LocalRulesInducerMixin(ABC):
    """Classifies records by counting consistent local rules. For each candidate
    from the neighbourhood a rule spanning the query and the candidate is induced
    and verified against neighbourhood records with other labels.

    With pruning enabled only records not farther from the query than the candidate
    are verified, so the scan of the sorted neighbourhood stops at the candidate's
    distance. A record covered by the rule is not farther from the query than the
    candidate as long as every wildcard contributes to its distance no more than to
    the distance of the candidate. In
    LOCAL mode it may not: a candidate with missing numerical value contributes 1.0
    while a query value outside of the fold range may give a covered record a larger
    contribution. `enable_pruning=False` verifies against the whole neighbourhood.
    """

    def __init__(self, params: AlgorithmParams):
        self.params: AlgorithmParams = params
        self.prediction_times: PredictionTimes = PredictionTimes()
        self.cache: DistanceContextCache = DistanceContextCache()
        self.logger: Logger = getLogger(self.__class__.__name__)
        self._setup_timers()

    @abstractmethod
    def _select_neighbourhood(self, neighbourhood: Neighbourhood) -> Neighbourhood:
        """Selects records being both candidates and verification set"""

    @abstractmethod
    def _class_sizes(
        self, dataset: Dataset, training_rows: np.ndarray, neighbourhood: Neighbourhood
    ) -> dict[str, int]:
        """Class sizes used for normalizing support"""

    def prepare(self, dataset: Dataset):
        """Builds in advance distance context shared by all folds (GLOBAL mode)"""
        if self.params["mode"] == DistanceMode.GLOBAL:
            self._build_context(dataset, None)

    def predict_loo(self, dataset: Dataset, excluded_index: int) -> Prediction:
        """Classifies single dataset record using all other records as training set.

        Args:
            dataset (Dataset): dataset
            excluded_index (int): position of the classified record

        Returns:
            Prediction: prediction
        """
        if len(dataset) == 0:
            raise InvalidInputError("Dataset cannot be empty")
        if len(dataset) < 2:
            raise InvalidInputError("Leave-one-out requires at least two records")
        if not 0 <= excluded_index < len(dataset):
            raise InvalidInputError(
                f"Excluded index {excluded_index} out of range for dataset of "
                f"size {len(dataset)}"
            )
        context: DistanceContext = self._build_context(dataset, excluded_index)
        training_rows: np.ndarray = np.delete(np.arange(len(dataset)), excluded_index)
        query: Record = dataset[excluded_index]
        self.logger.debug("Classifying record %d (position %d)", query.id, excluded_index)
        return self._predict_query(context, query, training_rows)

    def predict_records(
        self, dataset: Dataset, records: Sequence[Record]
    ) -> list[Prediction]:
        """Classifies records from outside of the dataset using all dataset records
        as training set. A single distance context is used for all of them.
        """
        if len(dataset) == 0:
            raise InvalidInputError("Training dataset cannot be empty")
        context: DistanceContext = self._build_context(dataset, None)
        training_rows: np.ndarray = np.arange(len(dataset))
        return [self._predict_query(context, record, training_rows) for record in records]

    def _predict_query(
        self, context: DistanceContext, query: Record, training_rows: np.ndarray
    ) -> Prediction:
        neighbourhood: Neighbourhood = self._select_neighbourhood(
            sort_by_distance(context, query, training_rows)
        )
        support_counts: dict[str, int] = self._check_candidates(
            context, query, neighbourhood
        )
        class_sizes: dict[str, int] = self._class_sizes(
            context.dataset, training_rows, neighbourhood
        )
        return vote(query.id, query.label, support_counts, class_sizes)

    def _build_context(
        self, dataset: Dataset, leave_out_index: Optional[int]
    ) -> DistanceContext:
        return self.cache.get_or_build(
            dataset,
            self.params["mode"],
            self.params["nominal_metric"],
            self.params["missing_mode"],
            leave_out_index=leave_out_index,
        )

    def _check_candidates(
        self, context: DistanceContext, query: Record, neighbourhood: Neighbourhood
    ) -> dict[str, int]:
        query_codes: np.ndarray = context.encode(query)[1]
        rows, distances = neighbourhood.rows, neighbourhood.distances
        support_counts: dict[str, int] = {}
        for position, candidate_row in enumerate(rows):
            candidate: Record = context.dataset[candidate_row]
            rule = LocalRule(query, candidate, context, query_codes=query_codes)
            if self.params.get("enable_pruning", True):
                bound = int(np.searchsorted(distances, distances[position], side="right"))
            else:
                bound = rows.shape[0]
            if rule.is_consistent(rows[:bound]):
                support_counts[candidate.label] = support_counts.get(candidate.label, 0) + 1
        return support_counts

    def __getstate__(self) -> dict:
        state: dict = self.__dict__.copy()
        # timed wrappers are closures over the instance
        for method_name in (
            "_build_context",
            "_check_candidates",
            "predict_loo",
            "predict_records",
        ):
            state.pop(method_name, None)
        return state

    def __setstate__(self, state: dict):
        self.__dict__.update(state)
        self._setup_timers()

    def _setup_timers(self):
        self._setup_timer_for_method("_build_context", save_to="context_building_time")
        self._setup_timer_for_method(
            "_check_candidates", save_to="consistency_checking_time"
        )
        self._setup_timer_for_method("predict_loo", save_to="total_prediction_time")
        self._setup_timer_for_method("predict_records", save_to="total_prediction_time")

    def _setup_timer_for_method(self, method_name: str, save_to: str):
        method: Callable = getattr(self, method_name, None)
        if method is None:
            raise ValueError(
                f"LocalRulesInducerMixin requires {method_name} method to be implemented"
            )

        def wrapped_method(*args, **kwargs):
            with PerformanceTimer() as timer:
                result: Any = method(*args, **kwargs)
            # store time
            new_timedelta: timedelta = (
                getattr(self.prediction_times, save_to) + timer.timedelta
            )
            setattr(self.prediction_times, save_to, new_timedelta)
            return result

        setattr(self, method_name, wrapped_method)
