"""
Package implementing RIA and RIONA classifiers based on local rules consistency
checking with mixed numerical and nominal attributes distance (SVDM).

Both global (whole training set) and local (leave-one-out fold) statistics for the
distance are supported, together with leave-one-out evaluation and report writers.
"""
from localrules.classification import KPlusNNClassifier
from localrules.classification import RIAClassifier
from localrules.classification import RIONAClassifier
from localrules.dataset import Attribute
from localrules.dataset import AttributeKind
from localrules.dataset import Dataset
from localrules.dataset import Record
from localrules.dataset import read_csv
from localrules.distance import DistanceMode
from localrules.distance import MissingDistanceMode
from localrules.distance import NominalMetric
from localrules.exceptions import InvalidInputError
from localrules.exceptions import InvalidStateError
from localrules.voting import Prediction
