import numpy as np

from localrules._induction import LocalRulesInducerMixin
from localrules._induction import Neighbourhood
from localrules._params import NeighbourhoodParams
from localrules.dataset import Dataset


class RuleInducer(LocalRulesInducerMixin):
    """Counts consistent local rules within the k nearest training records. Both
    candidates and verification set are restricted to that neighbourhood.
    """

    def __init__(self, params: NeighbourhoodParams):
        super().__init__(params)
        self.params: NeighbourhoodParams = params

    def _select_neighbourhood(self, neighbourhood: Neighbourhood) -> Neighbourhood:
        k: int = max(1, min(self.params["k"], len(neighbourhood)))
        return neighbourhood.head(k)

    def _class_sizes(
        self, dataset: Dataset, training_rows: np.ndarray, neighbourhood: Neighbourhood
    ) -> dict[str, int]:
        return dataset.class_sizes(neighbourhood.rows)
