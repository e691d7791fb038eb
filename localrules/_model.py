from __future__ import annotations

from logging import getLogger
from logging import Logger
from typing import Any
from typing import Optional
from typing import Sequence
from typing import Type
from typing import Union

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator

from localrules._induction import LocalRulesInducerMixin
from localrules._induction import PredictionTimes
from localrules._params import adjust_params_on_dataset
from localrules.dataset import Dataset
from localrules.dataset import Record
from localrules.exceptions import InvalidInputError
from localrules.exceptions import InvalidStateError
from localrules.voting import Prediction


class BaseModel(BaseEstimator):

    _Inducer: Type[LocalRulesInducerMixin] = None

    def __init__(self, **algorithm_params: dict):
        if self._Inducer is None:
            raise NotImplementedError(
                "_Inducer field must point to valid class implementing "
                "LocalRulesInducerMixin."
            )

        self._params: dict[str, Any] = algorithm_params
        self.dataset: Optional[Dataset] = None
        self._inducer: LocalRulesInducerMixin = None
        self.logger: Logger = getLogger(self.__class__.__name__)

    def set_params(self, **params):
        self._params.update(params)
        self._inducer = None
        return self

    def get_params(self, deep=True) -> dict:
        return self._params

    @property
    def prediction_times(self) -> PredictionTimes:
        if self._inducer is None:
            return PredictionTimes()
        return self._inducer.prediction_times

    def get_inducer(self, training_size: int) -> LocalRulesInducerMixin:
        """Returns inducer configured for the training set of given size. It is
        reused as long as the adjusted parameters do not change, which keeps its
        distance contexts cache and timers.
        """
        adjusted_params: dict[str, Any] = adjust_params_on_dataset(
            self._params, training_size
        )
        if self._inducer is None or self._inducer.params != adjusted_params:
            if "k" in adjusted_params and adjusted_params["k"] != self._params["k"]:
                self.logger.info(
                    "Neighbourhood size %s clamped to %d",
                    self._params["k"],
                    adjusted_params["k"],
                )
            self._inducer = self._Inducer(adjusted_params)  # pylint: disable=not-callable
        return self._inducer

    def prepare(self, dataset: Dataset) -> LocalRulesInducerMixin:
        """Prepares inducer for leave-one-out evaluation on given dataset"""
        inducer: LocalRulesInducerMixin = self.get_inducer(max(1, len(dataset) - 1))
        if len(dataset) > 1:
            inducer.prepare(dataset)
        return inducer

    def predict_loo(self, dataset: Dataset, excluded_index: int) -> Prediction:
        """Classifies a single dataset record using all other records as the training
        set (single leave-one-out fold).

        Args:
            dataset (Dataset): dataset
            excluded_index (int): position of the classified record

        Returns:
            Prediction: prediction with both CId and NCId labels
        """
        return self.prepare(dataset).predict_loo(dataset, excluded_index)

    def fit(self, X: Union[pd.DataFrame, Dataset], y: pd.Series = None) -> BaseModel:
        """Stores training data. Local rules classifiers are lazy, all the work is
        done when predicting.

        Args:
            X (Union[pd.DataFrame, Dataset]): dataset or data
            y (pd.Series): label column, required if X is a DataFrame

        Returns:
            BaseModel: self
        """
        if isinstance(X, Dataset):
            dataset: Dataset = X
        else:
            if y is None:
                raise InvalidInputError("Labels are required when fitting on a DataFrame")
            dataset = Dataset.from_frame(X, y)
        if len(dataset) == 0:
            raise InvalidInputError("Training dataset cannot be empty")
        self.dataset = dataset
        self._inducer = None
        return self

    def predict_records(
        self, X: Union[pd.DataFrame, Sequence[Record]]
    ) -> list[Prediction]:
        """Classifies given records using the whole fitted dataset as training set

        Args:
            X (Union[pd.DataFrame, Sequence[Record]]): data with the same columns as
                the training data or records

        Returns:
            list[Prediction]: predictions
        """
        if self.dataset is None:
            raise InvalidStateError("Call fit() before predicting")
        if isinstance(X, pd.DataFrame):
            records: Sequence[Record] = self.dataset.records_from_frame(X)
        else:
            records = X
        return self.get_inducer(len(self.dataset)).predict_records(self.dataset, records)

    def predict(self, X: Union[pd.DataFrame, Sequence[Record]]) -> np.ndarray:
        """
        Returns:
            np.ndarray: labels with the highest support (CId)
        """
        return np.array([p.cid for p in self.predict_records(X)], dtype=object)

    def predict_normalized(self, X: Union[pd.DataFrame, Sequence[Record]]) -> np.ndarray:
        """
        Returns:
            np.ndarray: labels with the highest support normalized by class size (NCId)
        """
        return np.array([p.ncid for p in self.predict_records(X)], dtype=object)
