"""Contains local rules - generalizations of a (query, candidate) records pair
spanning the region between them. Numerical part of a rule premise is a conjunction
of closed interval conditions from
`decision-rules <https://github.com/ruleminer/decision-rules>`_ package, nominal part
is a set of acceptance radii measured with the learned value distance.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
from decision_rules.classification import ClassificationConclusion
from decision_rules.conditions import CompoundCondition
from decision_rules.conditions import ElementaryCondition
from decision_rules.conditions import LogicOperators

from localrules.dataset import Record
from localrules.distance import DistanceContext
from localrules.distance import NumericStats


class LocalRule:
    """Rule derived from a query and a candidate training record. For every
    attribute it holds either:

    * closed interval ``[min(q, c), max(q, c)]`` (numerical attribute),
    * acceptance radius ``r = d(q, c)`` around query value (nominal attribute),
    * nothing (wildcard) when query or candidate value is missing.

    Rule decision is the candidate label.
    """

    def __init__(
        self,
        query: Record,
        candidate: Record,
        context: DistanceContext,
        query_codes: Optional[np.ndarray] = None,
    ):
        """
        Args:
            query (Record): query record
            candidate (Record): candidate training record
            context (DistanceContext): fold distance context
            query_codes (Optional[np.ndarray], optional): query nominal codes as
                returned by `DistanceContext.encode`. Computed if not given.
        """
        self.query: Record = query
        self.context: DistanceContext = context
        self.conclusion = ClassificationConclusion(
            value=candidate.label, column_name=context.dataset.label_name
        )
        intervals: list[ElementaryCondition] = []
        self.radii: dict[int, float] = {}
        for j, metric in enumerate(context.attribute_metrics):
            q, c = query.values[j], candidate.values[j]
            if q is None or c is None:
                continue
            if isinstance(metric, NumericStats):
                intervals.append(
                    ElementaryCondition(
                        column_index=j,
                        left=float(min(q, c)),
                        right=float(max(q, c)),
                        left_closed=True,
                        right_closed=True,
                    )
                )
            else:
                self.radii[j] = metric.distance(q, c)
        self.premise = CompoundCondition(
            subconditions=intervals, logic_operator=LogicOperators.CONJUNCTION
        )
        self._intervals_columns: list[int] = [c.column_index for c in intervals]
        if query_codes is None:
            query_codes = context.encode(query)[1]
        self._query_codes: np.ndarray = query_codes

    @property
    def decision(self) -> str:
        return self.conclusion.value

    def is_wildcard(self, attribute_index: int) -> bool:
        return (
            attribute_index not in self.radii
            and attribute_index not in self._intervals_columns
        )

    def satisfies(self, record: Record) -> bool:
        """Checks whether record is covered by the rule. Wildcards are always
        satisfied, missing values never satisfy non-wildcard attributes.
        """
        for condition in self.premise.subconditions:
            value = record.values[condition.column_index]
            if value is None or not condition.left <= value <= condition.right:
                return False
        for j, radius in self.radii.items():
            value = record.values[j]
            if value is None:
                return False
            if self.context.value_distance(j, self.query.values[j], value) > radius:
                return False
        return True

    def covered_mask(self, rows: np.ndarray) -> np.ndarray:
        """Vectorised `satisfies` for dataset records at given positions

        Args:
            rows (np.ndarray): positions of records in context dataset

        Returns:
            np.ndarray: boolean mask aligned with `rows`
        """
        mask = np.ones(rows.shape[0], dtype=bool)
        if rows.shape[0] == 0:
            return mask
        dataset = self.context.dataset
        if len(self.premise.subconditions) > 0:
            X: np.ndarray = dataset.numeric_matrix[rows]
            mask &= self.premise.covered_mask(X).astype(bool)
            mask &= ~np.isnan(X[:, self._intervals_columns]).any(axis=1)
        for j, radius in self.radii.items():
            codes: np.ndarray = dataset.nominal_codes[rows, j]
            table = self.context.nominal_table(j)
            mask &= (codes >= 0) & (table.distances[self._query_codes[j], codes] <= radius)
        return mask

    def is_consistent(self, rows: np.ndarray) -> bool:
        """Checks that no record at given positions with a label different from the
        rule decision is covered by the rule.
        """
        labels: np.ndarray = self.context.dataset.labels[rows]
        rivals: np.ndarray = rows[~np.asarray(self.conclusion.positives_mask(labels), dtype=bool)]
        return not np.any(self.covered_mask(rivals))

    def __str__(self) -> str:
        names: list[str] = [a.name for a in self.context.dataset.attributes]
        parts: list[str] = [
            f"{names[c.column_index]} = <{c.left}, {c.right}>"
            for c in self.premise.subconditions
        ]
        parts += [
            f"d({names[j]}, {self.query.values[j]}) <= {radius}"
            for j, radius in self.radii.items()
        ]
        premise: str = " AND ".join(parts) if len(parts) > 0 else "TRUE"
        return f"IF {premise} THEN {self.conclusion.column_name} = {self.decision}"
