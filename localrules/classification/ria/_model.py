from localrules._model import BaseModel
from localrules._params import DEFAULT_PARAMS_VALUES
from localrules.classification.ria._induction import RuleInducer
from localrules.distance import DistanceMode
from localrules.distance import MissingDistanceMode
from localrules.distance import NominalMetric


class RIAClassifier(BaseModel):
    """Rule Induction Algorithm classifier. For a query record every training record
    is a candidate: a local rule spanning the query and the candidate is built and
    counted as support for the candidate's label if no training record with a
    different label is covered by it.

    It predicts two labels: CId with the highest support and NCId with the highest
    support divided by the class size in the training set.
    """

    _Inducer = RuleInducer

    def __init__(
        self,
        mode: DistanceMode = DEFAULT_PARAMS_VALUES["mode"],
        nominal_metric: NominalMetric = DEFAULT_PARAMS_VALUES["nominal_metric"],
        missing_mode: MissingDistanceMode = DEFAULT_PARAMS_VALUES["missing_mode"],
        enable_pruning: bool = DEFAULT_PARAMS_VALUES["enable_pruning"],
    ):
        """
        Args:
            mode (DistanceMode, optional): GLOBAL computes distance statistics once
                over the whole dataset, LOCAL rebuilds them for every leave-one-out
                fold without the classified record. Defaults to
                DEFAULT_PARAMS_VALUES["mode"].
            nominal_metric (NominalMetric, optional): SVDM or its halved variant
                SVDM'. Defaults to DEFAULT_PARAMS_VALUES["nominal_metric"].
            missing_mode (MissingDistanceMode, optional): missing values distance
                variant. Defaults to DEFAULT_PARAMS_VALUES["missing_mode"].
            enable_pruning (bool, optional): verify rules only against records not
                farther from the query than the candidate. Disabling it gives the
                same results slower. Defaults to
                DEFAULT_PARAMS_VALUES["enable_pruning"].
        """
        # pylint: disable=unused-argument
        params: dict = locals()
        params.pop("self")
        params.pop("__class__", None)
        super().__init__(**params)
