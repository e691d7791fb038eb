import os
import pathlib
from typing import Optional
from typing import Sequence

from localrules.dataset import Attribute
from localrules.dataset import AttributeKind
from localrules.dataset import Dataset
from localrules.dataset import read_csv
from localrules.dataset import Record
from localrules.dataset import Value

dir_path: pathlib.Path = pathlib.Path(os.path.dirname(os.path.realpath(__file__)))


def dataset_path(problem_type: str, dataset_name: str) -> pathlib.Path:
    return dir_path / "datasets" / problem_type / dataset_name / "data.csv"


def read_dataset(problem_type: str, dataset_name: str) -> Dataset:
    return read_csv(str(dataset_path(problem_type, dataset_name)))


def make_dataset(
    rows: Sequence[tuple[Sequence[Value], str]],
    kinds: str,
    names: Optional[Sequence[str]] = None,
) -> Dataset:
    """Builds dataset from (values, label) pairs. `kinds` holds one letter per
    attribute: "n" for numerical and "c" for nominal ones.
    """
    names = names or [f"a{j}" for j in range(len(kinds))]
    attributes: list[Attribute] = [
        Attribute(
            name, AttributeKind.NUMERIC if kind == "n" else AttributeKind.NOMINAL
        )
        for name, kind in zip(names, kinds)
    ]
    records: list[Record] = [
        Record(id=i, values=tuple(values), label=label)
        for i, (values, label) in enumerate(rows)
    ]
    return Dataset.from_records(attributes, records)
