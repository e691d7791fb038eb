"""Contains immutable containers for records described by mixed numerical and
nominal attributes and a CSV loader producing them.

Cell values are represented as a three state union: ``float`` for numerical
attributes, ``str`` for nominal ones and ``None`` for missing values.
"""
from __future__ import annotations

import io
import math
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Iterable
from typing import Iterator
from typing import Optional
from typing import Sequence
from typing import Union

import numpy as np
import pandas as pd

from localrules import _helpers
from localrules.exceptions import InvalidInputError

Value = Union[float, str, None]

DEFAULT_MISSING_TOKENS: tuple[str, ...] = ("", "?", "NA", "N/A", "null", "NULL", "-")
DEFAULT_LABEL_NAME: str = "class"


class AttributeKind(str, Enum):
    NUMERIC = "numeric"
    NOMINAL = "nominal"


@dataclass(frozen=True)
class Attribute:
    """Attribute description. Nominal attributes carry their domain - sorted tuple
    of all values observed at load time.
    """

    name: str
    kind: AttributeKind
    domain: tuple[str, ...] = ()

    @property
    def is_numeric(self) -> bool:
        return self.kind == AttributeKind.NUMERIC

    @property
    def is_nominal(self) -> bool:
        return self.kind == AttributeKind.NOMINAL


@dataclass(frozen=True)
class Record:
    id: int
    values: tuple[Value, ...]
    label: str


@dataclass(frozen=True, eq=False)
class Dataset:
    """Ordered sequence of attributes and records. Every record has exactly one
    value per attribute and records ids are unique. Derived numpy views of the
    data are computed lazily and shared by all distance contexts built on the
    dataset.
    """

    attributes: tuple[Attribute, ...]
    records: tuple[Record, ...]
    label_name: str = DEFAULT_LABEL_NAME

    def __post_init__(self):
        object.__setattr__(self, "attributes", tuple(self.attributes))
        object.__setattr__(self, "records", tuple(self.records))
        self._validate()

    def _validate(self):
        domains: list[Optional[frozenset[str]]] = [
            frozenset(attribute.domain) if attribute.is_nominal else None
            for attribute in self.attributes
        ]
        seen_ids: set[int] = set()
        for record in self.records:
            if record.id in seen_ids:
                raise InvalidInputError(f"Duplicated record id: {record.id}")
            seen_ids.add(record.id)
            if len(record.values) != self.feature_count:
                raise InvalidInputError(
                    f"Record {record.id} has {len(record.values)} values, "
                    f"expected {self.feature_count}"
                )
            if not isinstance(record.label, str) or record.label == "":
                raise InvalidInputError(f"Record {record.id} has no label")
            for attribute, domain, value in zip(self.attributes, domains, record.values):
                if value is None:
                    continue
                if attribute.is_numeric:
                    if isinstance(value, bool) or not isinstance(value, (int, float)):
                        raise InvalidInputError(
                            f"Record {record.id}: value {value!r} of numerical "
                            f"attribute '{attribute.name}' is not a number"
                        )
                    if math.isnan(value):
                        raise InvalidInputError(
                            f"Record {record.id}: NaN in attribute '{attribute.name}', "
                            "use None for missing values"
                        )
                elif value not in domain:
                    raise InvalidInputError(
                        f"Record {record.id}: value {value!r} is not in the domain "
                        f"of nominal attribute '{attribute.name}'"
                    )

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, index: int) -> Record:
        return self.records[index]

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    @property
    def feature_count(self) -> int:
        return len(self.attributes)

    @property
    def numerical_indexes(self) -> list[int]:
        return [j for j, attribute in enumerate(self.attributes) if attribute.is_numeric]

    @property
    def nominal_indexes(self) -> list[int]:
        return [j for j, attribute in enumerate(self.attributes) if attribute.is_nominal]

    @cached_property
    def labels(self) -> np.ndarray:
        return np.array([record.label for record in self.records], dtype=object)

    @cached_property
    def ids(self) -> np.ndarray:
        return np.array([record.id for record in self.records], dtype=np.int64)

    @cached_property
    def classes(self) -> tuple[str, ...]:
        return tuple(sorted(set(self.labels.tolist())))

    @cached_property
    def numeric_matrix(self) -> np.ndarray:
        """
        Returns:
            np.ndarray: float matrix of shape (n, m) with numerical values, NaN for
                missing values and for nominal attributes columns
        """
        matrix = np.full((len(self), self.feature_count), np.nan, dtype=np.float64)
        for j in self.numerical_indexes:
            for i, record in enumerate(self.records):
                value = record.values[j]
                if value is not None:
                    matrix[i, j] = value
        return matrix

    @cached_property
    def nominal_codes(self) -> np.ndarray:
        """
        Returns:
            np.ndarray: int matrix of shape (n, m) with positions of nominal values
                in their attribute domain, -1 for missing values and for numerical
                attributes columns
        """
        codes = np.full((len(self), self.feature_count), -1, dtype=np.int64)
        for j in self.nominal_indexes:
            positions: dict[str, int] = {
                value: position for position, value in enumerate(self.attributes[j].domain)
            }
            for i, record in enumerate(self.records):
                value = record.values[j]
                if value is not None:
                    codes[i, j] = positions[value]
        return codes

    def class_sizes(self, indices: Optional[np.ndarray] = None) -> dict[str, int]:
        """Count records of each class, optionally only among given positions"""
        labels: np.ndarray = self.labels if indices is None else self.labels[indices]
        classes, counts = np.unique(labels.astype(str), return_counts=True)
        return {str(c): int(count) for c, count in zip(classes, counts)}

    @staticmethod
    def from_records(
        attributes: Sequence[Attribute],
        records: Iterable[Record],
        label_name: str = DEFAULT_LABEL_NAME,
    ) -> Dataset:
        """Creates dataset recomputing nominal attributes domains from given records.

        Args:
            attributes (Sequence[Attribute]): attributes, their domains are ignored
            records (Iterable[Record]): records
            label_name (str, optional): name of the decision attribute.

        Returns:
            Dataset: dataset
        """
        records = tuple(records)
        new_attributes: list[Attribute] = []
        for j, attribute in enumerate(attributes):
            domain: tuple[str, ...] = ()
            if attribute.is_nominal:
                domain = tuple(
                    sorted(
                        {
                            record.values[j]
                            for record in records
                            if j < len(record.values) and record.values[j] is not None
                        }
                    )
                )
            new_attributes.append(Attribute(attribute.name, attribute.kind, domain))
        return Dataset(tuple(new_attributes), records, label_name=label_name)

    @staticmethod
    def from_frame(
        X: pd.DataFrame, y: pd.Series, ids: Optional[Sequence[int]] = None
    ) -> Dataset:
        """Creates dataset from pandas objects inferring attributes kinds. Column is
        numerical if every non-missing value in it parses as a real number.

        Args:
            X (pd.DataFrame): data
            y (pd.Series): labels
            ids (Optional[Sequence[int]], optional): records ids. Defaults to
                consecutive integers starting from 0.

        Returns:
            Dataset: dataset
        """
        if X.shape[0] != len(y):
            raise InvalidInputError(
                f"Data has {X.shape[0]} rows but there are {len(y)} labels"
            )
        if ids is None:
            ids = range(X.shape[0])
        numerical_mask: np.ndarray = _helpers.get_numerical_mask(X)
        attributes: list[Attribute] = [
            Attribute(
                str(name),
                AttributeKind.NUMERIC if is_numeric else AttributeKind.NOMINAL,
            )
            for name, is_numeric in zip(X.columns, numerical_mask)
        ]
        columns: list[list[Value]] = [
            _column_values(X.iloc[:, j], attribute) for j, attribute in enumerate(attributes)
        ]
        records: list[Record] = []
        for i, (record_id, label) in enumerate(zip(ids, y.tolist())):
            if _helpers.is_missing(label) or str(label).strip() == "":
                raise InvalidInputError(f"Empty label at row {i + 1}")
            records.append(
                Record(
                    id=int(record_id),
                    values=tuple(column[i] for column in columns),
                    label=str(label),
                )
            )
        label_name: str = DEFAULT_LABEL_NAME if y.name is None else str(y.name)
        return Dataset.from_records(attributes, records, label_name=label_name)

    def records_from_frame(self, X: pd.DataFrame) -> list[Record]:
        """Converts rows of given dataframe to records described by this dataset's
        attributes. Nominal values do not have to belong to attributes domains. Rows
        get consecutive ids starting from 0 and empty labels.

        Args:
            X (pd.DataFrame): data with the same columns as this dataset

        Returns:
            list[Record]: records
        """
        if X.shape[1] != self.feature_count:
            raise InvalidInputError(
                f"Data has {X.shape[1]} columns, expected {self.feature_count}"
            )
        columns: list[list[Value]] = []
        for j, attribute in enumerate(self.attributes):
            column: pd.Series = X.iloc[:, j]
            if attribute.is_numeric:
                parsed = pd.to_numeric(column, errors="coerce")
                if (parsed.isna() & column.notna()).any():
                    raise InvalidInputError(
                        f"Non numerical value in numerical attribute '{attribute.name}'"
                    )
            columns.append(_column_values(column, attribute))
        return [
            Record(id=i, values=tuple(column[i] for column in columns), label="")
            for i in range(X.shape[0])
        ]

    def to_frame(self) -> pd.DataFrame:
        """
        Returns:
            pd.DataFrame: attributes values and the decision column indexed by ids
        """
        df = pd.DataFrame(
            [list(record.values) for record in self.records],
            columns=[attribute.name for attribute in self.attributes],
            index=pd.Index(self.ids, name="id"),
        )
        for attribute in self.attributes:
            if attribute.is_numeric:
                df[attribute.name] = df[attribute.name].astype(np.float64)
        df[self.label_name] = self.labels
        return df


def _column_values(column: pd.Series, attribute: Attribute) -> list[Value]:
    if attribute.is_numeric:
        parsed: pd.Series = pd.to_numeric(column, errors="coerce")
        return [None if pd.isna(value) else float(value) for value in parsed.tolist()]
    return [
        None if _helpers.is_missing(value) else str(value) for value in column.tolist()
    ]


def read_csv(
    path: str,
    sep: str = ",",
    has_header: bool = True,
    missing_tokens: Sequence[str] = DEFAULT_MISSING_TOKENS,
) -> Dataset:
    """Reads dataset from a CSV file where the last column holds labels. Whitespace
    only lines are ignored, values are stripped and tokens from `missing_tokens`
    (compared case insensitive) mark missing values.

    Args:
        path (str): path to the file
        sep (str, optional): columns separator. Defaults to ",".
        has_header (bool, optional): whether the first line holds column names.
            Without header attributes are named "f1", "f2", ... Defaults to True.
        missing_tokens (Sequence[str], optional): tokens representing missing
            values. Defaults to DEFAULT_MISSING_TOKENS.

    Returns:
        Dataset: dataset with ids being consecutive integers starting from 0
    """
    with open(path, "r", encoding="utf-8") as f:
        lines: list[str] = [line.strip() for line in f if line.strip() != ""]
    if len(lines) < (2 if has_header else 1):
        raise InvalidInputError(f"CSV file {path} has no data rows")

    try:
        df: pd.DataFrame = pd.read_csv(
            io.StringIO("\n".join(lines)),
            sep=sep,
            header=None,
            dtype=str,
            keep_default_na=False,
            engine="python",
        )
    except pd.errors.ParserError as e:
        raise InvalidInputError(f"CSV file {path} has wrong column count: {e}") from e

    expected_columns: int = df.shape[1]
    if expected_columns < 2:
        raise InvalidInputError(
            "CSV file must have at least one attribute and one label column"
        )
    # fields absent from short rows are the only NaN values
    short_rows: np.ndarray = np.flatnonzero(df.isna().any(axis=1).to_numpy())
    if short_rows.size > 0:
        row: pd.Series = df.iloc[short_rows[0]]
        raise InvalidInputError(
            f"Row {short_rows[0] + 1} has wrong column count (got "
            f"{int(row.notna().sum())}, expected {expected_columns}). "
            f"Line='{sep.join(row.dropna())}'"
        )

    df = df.apply(lambda column: column.str.strip())
    if has_header:
        names: list[str] = df.iloc[0].tolist()
        df = df.iloc[1:].reset_index(drop=True)
        df.columns = names
    else:
        df.columns = [f"f{j}" for j in range(1, expected_columns)] + [DEFAULT_LABEL_NAME]

    X: pd.DataFrame = df.iloc[:, :-1]
    y: pd.Series = df.iloc[:, -1]
    lowered_tokens: set[str] = {token.lower() for token in missing_tokens}
    missing_mask: pd.DataFrame = X.apply(lambda column: column.str.lower().isin(lowered_tokens))
    X = X.astype(object).where(~missing_mask, None)
    return Dataset.from_frame(X, y)
