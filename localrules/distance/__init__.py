from localrules.distance._context import AttributeMetric
from localrules.distance._context import DistanceContext
from localrules.distance._context import DistanceMode
from localrules.distance._context import MissingDistanceMode
from localrules.distance._context import NominalMetric
from localrules.distance._context import NominalValueTable
from localrules.distance._context import NumericStats
from localrules.distance._context import RANGE_EPSILON
from localrules.distance._context import missing_value_penalty
from localrules.distance._mixed import MISSING_NUMERIC_DISTANCE
from localrules.distance._mixed import MixedDistance

__all__ = [
    "AttributeMetric",
    "DistanceContext",
    "DistanceMode",
    "MissingDistanceMode",
    "NominalMetric",
    "NominalValueTable",
    "NumericStats",
    "RANGE_EPSILON",
    "missing_value_penalty",
    "MISSING_NUMERIC_DISTANCE",
    "MixedDistance",
]
