import numpy as np

from localrules._induction import LocalRulesInducerMixin
from localrules._induction import Neighbourhood
from localrules.dataset import Dataset


class RuleInducer(LocalRulesInducerMixin):
    """Counts consistent local rules over the whole training set. Every training
    record is a candidate and the whole training set is the verification set.
    """

    def _select_neighbourhood(self, neighbourhood: Neighbourhood) -> Neighbourhood:
        return neighbourhood

    def _class_sizes(
        self, dataset: Dataset, training_rows: np.ndarray, neighbourhood: Neighbourhood
    ) -> dict[str, int]:
        return dataset.class_sizes(training_rows)
