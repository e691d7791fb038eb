"""Contains class-conditional imputation of missing attribute values."""
from __future__ import annotations

from collections import Counter
from logging import getLogger
from logging import Logger

import numpy as np

from localrules.dataset import Dataset
from localrules.dataset import Record
from localrules.dataset import Value


class ClassConditionalImputer:
    """Replaces missing values with statistics computed within the record's class:
    the mean for numerical attributes and the most frequent value (first one in
    records order in case of ties) for nominal attributes.

    If no record of the class has a value, numerical attributes fall back to 0.0 and
    nominal attributes to the first value of the attribute's sorted domain (or an
    empty string if the domain is empty).
    """

    def __init__(self):
        self.logger: Logger = getLogger(self.__class__.__name__)

    def _class_statistics(self, dataset: Dataset, indices: np.ndarray) -> list[Value]:
        statistics: list[Value] = []
        for j, attribute in enumerate(dataset.attributes):
            if attribute.is_numeric:
                column: np.ndarray = dataset.numeric_matrix[indices, j]
                present: np.ndarray = column[~np.isnan(column)]
                statistics.append(float(present.mean()) if present.shape[0] > 0 else 0.0)
            else:
                counts: Counter = Counter(
                    dataset[i].values[j] for i in indices if dataset[i].values[j] is not None
                )
                if len(counts) > 0:
                    statistics.append(counts.most_common(1)[0][0])
                else:
                    statistics.append(attribute.domain[0] if len(attribute.domain) > 0 else "")
        return statistics

    def impute(self, dataset: Dataset) -> Dataset:
        """
        Args:
            dataset (Dataset): dataset, it is not modified

        Returns:
            Dataset: new dataset without missing values, nominal domains are
                recomputed
        """
        statistics: dict[str, list[Value]] = {
            label: self._class_statistics(
                dataset, np.flatnonzero(dataset.labels == label)
            )
            for label in dataset.classes
        }
        records: list[Record] = []
        imputed_count: int = 0
        for record in dataset:
            values: list[Value] = list(record.values)
            for j, value in enumerate(values):
                if value is None:
                    values[j] = statistics[record.label][j]
                    imputed_count += 1
            records.append(Record(id=record.id, values=tuple(values), label=record.label))
        self.logger.info("Imputed %d missing values", imputed_count)
        return Dataset.from_records(
            dataset.attributes, records, label_name=dataset.label_name
        )
