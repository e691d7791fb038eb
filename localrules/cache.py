"""Contains code for caching distance contexts. In GLOBAL mode statistics do not
depend on the held-out record, so a single context is built once and reused by all
folds instead of being rebuilt for every query.
"""
from __future__ import annotations

from typing import Optional

from localrules.dataset import Dataset
from localrules.distance import DistanceContext
from localrules.distance import DistanceMode
from localrules.distance import MissingDistanceMode
from localrules.distance import NominalMetric

_CacheKey = tuple[int, DistanceMode, NominalMetric, MissingDistanceMode]


class DistanceContextCache:
    """Cache for storing GLOBAL mode distance contexts to avoid rebuilding them.
    LOCAL mode contexts are specific to a single fold and are never stored.
    """

    def __init__(self):
        self.cache: dict[_CacheKey, tuple[Dataset, DistanceContext]] = {}

        self.hits_count: int = 0
        self.misses_count: int = 0

    @staticmethod
    def _key(
        dataset: Dataset,
        nominal_metric: NominalMetric,
        missing_mode: MissingDistanceMode,
    ) -> _CacheKey:
        return (id(dataset), DistanceMode.GLOBAL, nominal_metric, missing_mode)

    def get(
        self,
        dataset: Dataset,
        nominal_metric: NominalMetric,
        missing_mode: MissingDistanceMode,
    ) -> Optional[DistanceContext]:
        entry = self.cache.get(self._key(dataset, nominal_metric, missing_mode))
        # ids could be reused by other objects, so check identity of the dataset
        if entry is None or entry[0] is not dataset:
            self.misses_count += 1
            return None
        self.hits_count += 1
        return entry[1]

    def get_or_build(
        self,
        dataset: Dataset,
        mode: DistanceMode,
        nominal_metric: NominalMetric,
        missing_mode: MissingDistanceMode,
        leave_out_index: Optional[int] = None,
    ) -> DistanceContext:
        if mode == DistanceMode.LOCAL:
            self.misses_count += 1
            return DistanceContext.build(
                dataset, mode, nominal_metric, missing_mode, leave_out_index=leave_out_index
            )
        context: Optional[DistanceContext] = self.get(dataset, nominal_metric, missing_mode)
        if context is None:
            context = DistanceContext.build(dataset, mode, nominal_metric, missing_mode)
            self.set(context)
        return context

    def set(self, context: DistanceContext):
        if context.mode != DistanceMode.GLOBAL:
            raise ValueError("Only GLOBAL mode distance contexts could be cached")
        key = self._key(context.dataset, context.nominal_metric, context.missing_mode)
        self.cache[key] = (context.dataset, context)

    def clear(self):
        self.cache.clear()

    def __getstate__(self) -> dict:
        state: dict = self.__dict__.copy()
        # keys hold ids of datasets valid only in the current process
        state["cache"] = list(self.cache.values())
        return state

    def __setstate__(self, state: dict):
        entries: list[tuple[Dataset, DistanceContext]] = state.pop("cache")
        self.__dict__.update(state)
        self.cache = {}
        for _, context in entries:
            self.set(context)
