from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from logging import getLogger
from typing import Optional
from typing import Union

import numpy as np

from localrules.dataset import Dataset
from localrules.dataset import Record
from localrules.exceptions import InvalidInputError
from localrules.exceptions import InvalidStateError

RANGE_EPSILON: float = 1e-12


class DistanceMode(str, Enum):
    """Whether distance statistics are computed once over the whole dataset
    (GLOBAL) or rebuilt for each fold without the held-out record (LOCAL).
    """

    GLOBAL = "global"
    LOCAL = "local"


class NominalMetric(str, Enum):
    SVDM = "svdm"
    SVDM_PRIME = "svdm_prime"


class MissingDistanceMode(str, Enum):
    VARIANT1 = "v1"
    VARIANT2 = "v2"


_MISSING_VALUE_PENALTIES: dict[MissingDistanceMode, dict[NominalMetric, float]] = {
    MissingDistanceMode.VARIANT1: {NominalMetric.SVDM: 2.0, NominalMetric.SVDM_PRIME: 1.0},
    MissingDistanceMode.VARIANT2: {NominalMetric.SVDM: 2.0, NominalMetric.SVDM_PRIME: 1.0},
}


def missing_value_penalty(
    nominal_metric: NominalMetric, missing_mode: MissingDistanceMode
) -> float:
    """Nominal distance used when either value is missing or outside the domain.
    It is the maximum value the metric could take.
    """
    return _MISSING_VALUE_PENALTIES[MissingDistanceMode(missing_mode)][
        NominalMetric(nominal_metric)
    ]


@dataclass(frozen=True)
class NumericStats:
    min: float
    max: float
    range: float

    @staticmethod
    def from_column(column: np.ndarray) -> NumericStats:
        """
        Args:
            column (np.ndarray): values with NaN for missing ones

        Returns:
            NumericStats: stats, min = max = 0 for column without any value
        """
        present: np.ndarray = column[~np.isnan(column)]
        if present.shape[0] == 0:
            min_value, max_value = 0.0, 0.0
        else:
            min_value, max_value = float(np.min(present)), float(np.max(present))
        return NumericStats(
            min=min_value,
            max=max_value,
            range=max(RANGE_EPSILON, max_value - min_value),
        )


@dataclass(frozen=True, eq=False)
class NominalValueTable:
    """Learned SVDM distances between values of a single nominal attribute.

    `distances` has shape (V + 1, V + 1) where V is the domain size. Row and column
    V hold the penalty for missing or unseen values, so code -1 addresses it.
    """

    values: tuple[str, ...]
    distances: np.ndarray
    penalty: float
    _positions: dict[str, int] = field(init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(
            self, "_positions", {value: i for i, value in enumerate(self.values)}
        )

    def code(self, value: Optional[str]) -> int:
        if value is None:
            return -1
        return self._positions.get(value, -1)

    def distance(self, a: Optional[str], b: Optional[str]) -> float:
        return float(self.distances[self.code(a), self.code(b)])

    @staticmethod
    def learn(
        domain: tuple[str, ...],
        codes: np.ndarray,
        class_codes: np.ndarray,
        classes_count: int,
        nominal_metric: NominalMetric,
        penalty: float,
    ) -> NominalValueTable:
        """Estimates P(class | value) from given examples and computes pairwise value
        distances: sum over classes of absolute probabilities differences (halved
        for SVDM'). Values without examples have all probabilities equal to 0.

        Args:
            domain (tuple[str, ...]): attribute domain
            codes (np.ndarray): positions of examples values in domain, -1 if missing
            class_codes (np.ndarray): examples class indices
            classes_count (int): number of classes
            nominal_metric (NominalMetric): metric
            penalty (float): distance for missing values and values outside the domain

        Returns:
            NominalValueTable: table
        """
        values_count: int = len(domain)
        counts = np.zeros((values_count, classes_count), dtype=np.float64)
        present: np.ndarray = codes >= 0
        np.add.at(counts, (codes[present], class_codes[present]), 1.0)
        totals: np.ndarray = counts.sum(axis=1)
        observed: np.ndarray = totals > 0

        probabilities = np.zeros_like(counts)
        probabilities[observed] = counts[observed] / totals[observed, None]
        distances: np.ndarray = np.abs(
            probabilities[:, None, :] - probabilities[None, :, :]
        ).sum(axis=2)
        if nominal_metric == NominalMetric.SVDM_PRIME:
            distances /= 2.0
        np.fill_diagonal(distances, 0.0)

        table = np.full((values_count + 1, values_count + 1), penalty, dtype=np.float64)
        table[:values_count, :values_count] = distances
        table.setflags(write=False)
        return NominalValueTable(values=tuple(domain), distances=table, penalty=penalty)


AttributeMetric = Union[NumericStats, NominalValueTable]


class DistanceContext:
    """Fold scoped distance statistics: numerical ranges and nominal SVDM tables
    computed over a subset of dataset records. It shares records storage with the
    dataset it was built on.
    """

    def __init__(
        self,
        dataset: Dataset,
        mode: DistanceMode,
        nominal_metric: NominalMetric,
        missing_mode: MissingDistanceMode,
        attribute_metrics: tuple[AttributeMetric, ...],
        subset: np.ndarray,
    ):
        self.dataset: Dataset = dataset
        self.mode: DistanceMode = mode
        self.nominal_metric: NominalMetric = nominal_metric
        self.missing_mode: MissingDistanceMode = missing_mode
        self.attribute_metrics: tuple[AttributeMetric, ...] = attribute_metrics
        self.subset: np.ndarray = subset

    @property
    def feature_count(self) -> int:
        return len(self.attribute_metrics)

    def numeric_stats(self, attribute_index: int) -> NumericStats:
        metric = self._metric(attribute_index)
        if not isinstance(metric, NumericStats):
            raise InvalidStateError(
                f"Attribute {attribute_index} has no numerical statistics"
            )
        return metric

    def nominal_table(self, attribute_index: int) -> NominalValueTable:
        metric = self._metric(attribute_index)
        if not isinstance(metric, NominalValueTable):
            raise InvalidStateError(
                f"Attribute {attribute_index} has no learned nominal distance table"
            )
        return metric

    def value_distance(
        self, attribute_index: int, a: Optional[str], b: Optional[str]
    ) -> float:
        return self.nominal_table(attribute_index).distance(a, b)

    def encode(self, record: Record) -> tuple[np.ndarray, np.ndarray]:
        """Converts record to numerical values vector (NaN if missing) and nominal
        codes vector (-1 if missing or unseen) aligned with dataset matrices.
        """
        if len(record.values) != self.feature_count:
            raise InvalidInputError(
                f"Record {record.id} has {len(record.values)} values, "
                f"expected {self.feature_count}"
            )
        numeric = np.full(self.feature_count, np.nan, dtype=np.float64)
        codes = np.full(self.feature_count, -1, dtype=np.int64)
        for j, (metric, value) in enumerate(zip(self.attribute_metrics, record.values)):
            if value is None:
                continue
            if isinstance(metric, NumericStats):
                numeric[j] = value
            else:
                codes[j] = metric.code(value)
        return numeric, codes

    def _metric(self, attribute_index: int) -> AttributeMetric:
        if not 0 <= attribute_index < self.feature_count:
            raise InvalidStateError(
                f"Attribute index {attribute_index} out of range for context with "
                f"{self.feature_count} attributes"
            )
        return self.attribute_metrics[attribute_index]

    @staticmethod
    def build(
        dataset: Dataset,
        mode: DistanceMode = DistanceMode.GLOBAL,
        nominal_metric: NominalMetric = NominalMetric.SVDM,
        missing_mode: MissingDistanceMode = MissingDistanceMode.VARIANT1,
        leave_out_index: Optional[int] = None,
    ) -> DistanceContext:
        """Builds distance context for a single fold.

        Args:
            dataset (Dataset): dataset
            mode (DistanceMode, optional): in LOCAL mode record under
                `leave_out_index` is excluded from statistics. GLOBAL mode always
                uses all records. Defaults to DistanceMode.GLOBAL.
            nominal_metric (NominalMetric, optional): Defaults to NominalMetric.SVDM.
            missing_mode (MissingDistanceMode, optional): Defaults to
                MissingDistanceMode.VARIANT1.
            leave_out_index (Optional[int], optional): position of the held-out
                record. Defaults to None.

        Returns:
            DistanceContext: context
        """
        mode = DistanceMode(mode)
        nominal_metric = NominalMetric(nominal_metric)
        missing_mode = MissingDistanceMode(missing_mode)
        if leave_out_index is not None and not 0 <= leave_out_index < len(dataset):
            raise InvalidInputError(
                f"Leave out index {leave_out_index} out of range for dataset of "
                f"size {len(dataset)}"
            )

        subset: np.ndarray = np.arange(len(dataset))
        if mode == DistanceMode.LOCAL and leave_out_index is not None:
            subset = np.delete(subset, leave_out_index)

        penalty: float = missing_value_penalty(nominal_metric, missing_mode)
        classes, class_codes = np.unique(
            dataset.labels[subset].astype(str), return_inverse=True
        )
        metrics: list[AttributeMetric] = []
        for j, attribute in enumerate(dataset.attributes):
            if attribute.is_numeric:
                metrics.append(NumericStats.from_column(dataset.numeric_matrix[subset, j]))
            else:
                metrics.append(
                    NominalValueTable.learn(
                        attribute.domain,
                        dataset.nominal_codes[subset, j],
                        class_codes.reshape(-1),
                        len(classes),
                        nominal_metric,
                        penalty,
                    )
                )
        getLogger(DistanceContext.__name__).debug(
            "Built %s context on %d of %d records", mode.value, subset.shape[0], len(dataset)
        )
        return DistanceContext(
            dataset=dataset,
            mode=mode,
            nominal_metric=nominal_metric,
            missing_mode=missing_mode,
            attribute_metrics=tuple(metrics),
            subset=subset,
        )
