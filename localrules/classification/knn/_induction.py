from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from localrules._induction import LocalRulesInducerMixin
from localrules._induction import Neighbourhood
from localrules._induction import sort_by_distance
from localrules._params import NeighbourhoodParams
from localrules.dataset import Dataset
from localrules.dataset import Record
from localrules.distance import DistanceContext
from localrules.voting import Prediction
from localrules.voting import select_best_label


@dataclass(frozen=True)
class Neighbor:
    position: int
    id: int
    label: str
    distance: float


@dataclass(frozen=True)
class NeighborsPrediction(Prediction):
    """Prediction of the k+NN classifier. CId and NCId are both the majority label
    of the neighbourhood.
    """

    neighbors: tuple[Neighbor, ...] = ()


class NeighboursVoter(LocalRulesInducerMixin):
    """Majority vote among k nearest training records. No rules are induced."""

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

    def _predict_query(
        self, context: DistanceContext, query: Record, training_rows: np.ndarray
    ) -> NeighborsPrediction:
        dataset: Dataset = context.dataset
        neighbourhood: Neighbourhood = self._select_neighbourhood(
            sort_by_distance(context, query, training_rows)
        )
        votes: dict[str, int] = self._class_sizes(dataset, training_rows, neighbourhood)
        predicted: str = select_best_label(votes)
        neighbors: tuple[Neighbor, ...] = tuple(
            Neighbor(
                position=int(row),
                id=int(dataset.ids[row]),
                label=str(dataset.labels[row]),
                distance=float(distance),
            )
            for row, distance in zip(neighbourhood.rows, neighbourhood.distances)
        )
        return NeighborsPrediction(
            record_id=query.id,
            true_label=query.label,
            cid=predicted,
            ncid=predicted,
            support_counts=votes,
            normalized_support={
                label: count / len(neighbourhood) for label, count in votes.items()
            },
            neighbors=neighbors,
        )
