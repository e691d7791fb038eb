import numpy as np

from localrules.dataset import Record
from localrules.distance._context import DistanceContext
from localrules.distance._context import NumericStats

MISSING_NUMERIC_DISTANCE: float = 1.0


class MixedDistance:
    """Sum of per attribute contributions:

    * numerical: ``|a - b| / range``, exactly 1.0 when any value is missing,
    * nominal: learned value distance (which includes missing values penalty).

    Both the single pair and the vectorised form accumulate contributions in the
    same attribute order, so they produce identical values.
    """

    def __init__(self, context: DistanceContext):
        self.context: DistanceContext = context

    def __call__(self, a: Record, b: Record) -> float:
        total: float = 0.0
        for j, metric in enumerate(self.context.attribute_metrics):
            x, y = a.values[j], b.values[j]
            if isinstance(metric, NumericStats):
                if x is None or y is None:
                    total += MISSING_NUMERIC_DISTANCE
                else:
                    total += abs(x - y) / metric.range
            else:
                total += metric.distance(x, y)
        return total

    def to_rows(self, query: Record, rows: np.ndarray) -> np.ndarray:
        """Computes distances between query and dataset records at given positions.

        Args:
            query (Record): query record, does not have to belong to the dataset
            rows (np.ndarray): positions of dataset records

        Returns:
            np.ndarray: distances aligned with `rows`
        """
        numeric, codes = self.context.encode(query)
        dataset = self.context.dataset
        total = np.zeros(rows.shape[0], dtype=np.float64)
        for j, metric in enumerate(self.context.attribute_metrics):
            if isinstance(metric, NumericStats):
                contribution = np.abs(dataset.numeric_matrix[rows, j] - numeric[j]) / metric.range
                # NaN appears iff any of the values is missing
                contribution[np.isnan(contribution)] = MISSING_NUMERIC_DISTANCE
            else:
                contribution = metric.distances[codes[j], dataset.nominal_codes[rows, j]]
            total += contribution
        return total
