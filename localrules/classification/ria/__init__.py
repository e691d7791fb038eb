from localrules.classification.ria._model import RIAClassifier

__all__ = ["RIAClassifier"]
