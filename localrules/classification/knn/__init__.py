from localrules.classification.knn._induction import Neighbor
from localrules.classification.knn._induction import NeighborsPrediction
from localrules.classification.knn._model import KPlusNNClassifier

__all__ = ["KPlusNNClassifier", "Neighbor", "NeighborsPrediction"]
