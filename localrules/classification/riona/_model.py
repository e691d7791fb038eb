from localrules._model import BaseModel
from localrules._params import DEFAULT_PARAMS_VALUES
from localrules.classification.riona._induction import RuleInducer
from localrules.distance import DistanceMode
from localrules.distance import MissingDistanceMode
from localrules.distance import NominalMetric


class RIONAClassifier(BaseModel):
    """Rule Induction with Optimal Neighbourhood Algorithm classifier. It works like
    RIA but both candidates and the verification set are restricted to the k
    nearest training records. NCId normalizes support by class sizes counted within
    that neighbourhood.

    With k = 1 it degenerates to the nearest neighbour classifier.
    """

    _Inducer = RuleInducer

    def __init__(
        self,
        k: int = DEFAULT_PARAMS_VALUES["k"],
        mode: DistanceMode = DEFAULT_PARAMS_VALUES["mode"],
        nominal_metric: NominalMetric = DEFAULT_PARAMS_VALUES["nominal_metric"],
        missing_mode: MissingDistanceMode = DEFAULT_PARAMS_VALUES["missing_mode"],
        enable_pruning: bool = DEFAULT_PARAMS_VALUES["enable_pruning"],
    ):
        """
        Args:
            k (int, optional): neighbourhood size, clamped to [1, training set size].
                Defaults to DEFAULT_PARAMS_VALUES["k"].
            mode (DistanceMode, optional): Defaults to DEFAULT_PARAMS_VALUES["mode"].
            nominal_metric (NominalMetric, optional): Defaults to
                DEFAULT_PARAMS_VALUES["nominal_metric"].
            missing_mode (MissingDistanceMode, optional): Defaults to
                DEFAULT_PARAMS_VALUES["missing_mode"].
            enable_pruning (bool, optional): Defaults to
                DEFAULT_PARAMS_VALUES["enable_pruning"].
        """
        # pylint: disable=unused-argument
        params: dict = locals()
        params.pop("self")
        params.pop("__class__", None)
        super().__init__(**params)
