from localrules.classification.riona._model import RIONAClassifier

__all__ = ["RIONAClassifier"]
