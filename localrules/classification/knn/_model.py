from localrules._model import BaseModel
from localrules._params import DEFAULT_PARAMS_VALUES
from localrules.classification.knn._induction import NeighboursVoter
from localrules.distance import DistanceMode
from localrules.distance import MissingDistanceMode
from localrules.distance import NominalMetric


class KPlusNNClassifier(BaseModel):
    """Plain k nearest neighbours classifier using the same mixed distance as the
    local rules classifiers. Neighbours are ordered by distance and then by record
    id, the majority label wins and ties go to the lexicographically smallest label.
    Predictions keep the neighbours list.
    """

    _Inducer = NeighboursVoter

    def __init__(
        self,
        k: int = DEFAULT_PARAMS_VALUES["k"],
        mode: DistanceMode = DEFAULT_PARAMS_VALUES["mode"],
        nominal_metric: NominalMetric = DEFAULT_PARAMS_VALUES["nominal_metric"],
        missing_mode: MissingDistanceMode = DEFAULT_PARAMS_VALUES["missing_mode"],
    ):
        # pylint: disable=unused-argument
        params: dict = locals()
        params.pop("self")
        params.pop("__class__", None)
        super().__init__(**params)
