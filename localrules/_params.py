import math
from typing import TypedDict
from typing import Union

from localrules.distance import DistanceMode
from localrules.distance import MissingDistanceMode
from localrules.distance import NominalMetric
from localrules.exceptions import InvalidInputError

DEFAULT_K: int = 3


class AlgorithmParams(TypedDict):
    mode: DistanceMode
    nominal_metric: NominalMetric
    missing_mode: MissingDistanceMode
    enable_pruning: bool


class NeighbourhoodParams(AlgorithmParams):
    k: int


DEFAULT_PARAMS_VALUES: NeighbourhoodParams = NeighbourhoodParams(
    mode=DistanceMode.GLOBAL,
    nominal_metric=NominalMetric.SVDM,
    missing_mode=MissingDistanceMode.VARIANT1,
    enable_pruning=True,
    k=DEFAULT_K,
)


def adjust_params_on_dataset(
    params: AlgorithmParams,
    training_size: int,
) -> AlgorithmParams:
    """Returns copy of params with enum values parsed and neighbourhood size (if
    present) clamped to [1, training_size].
    """
    new_params: AlgorithmParams = params.copy()
    new_params["mode"] = DistanceMode(params["mode"])
    new_params["nominal_metric"] = NominalMetric(params["nominal_metric"])
    new_params["missing_mode"] = MissingDistanceMode(params["missing_mode"])
    if "k" in params:
        new_params["k"] = max(1, min(int(params["k"]), training_size))
    return new_params


def resolve_k(k: Union[str, int, None], n: int) -> int:
    """Resolves neighbourhood size given by user.

    Accepts integers (values below 1 are clamped to 1) and "log2n" (or its alias
    "log2") meaning log2 of the dataset size rounded to the nearest integer, at
    least 1. Empty value means DEFAULT_K.

    Args:
        k (Union[str, int, None]): neighbourhood size or "log2n"
        n (int): dataset size

    Returns:
        int: neighbourhood size
    """
    if k is None:
        return DEFAULT_K
    if isinstance(k, int):
        return max(1, k)
    value: str = k.strip().lower()
    if value == "":
        return DEFAULT_K
    if value in ("log2n", "log2"):
        if n <= 1:
            return 1
        return max(1, round(math.log2(n)))
    try:
        return max(1, int(value))
    except ValueError as e:
        raise InvalidInputError(f"Invalid neighbourhood size: '{k}'") from e
