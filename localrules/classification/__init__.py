from localrules.classification.knn import KPlusNNClassifier
from localrules.classification.ria import RIAClassifier
from localrules.classification.riona import RIONAClassifier

__all__ = ["RIAClassifier", "RIONAClassifier", "KPlusNNClassifier"]
