import math

import numpy as np
import pandas as pd
import pytest
import utils

from localrules.dataset import Attribute
from localrules.dataset import AttributeKind
from localrules.dataset import Dataset
from localrules.dataset import read_csv
from localrules.dataset import Record
from localrules.exceptions import InvalidInputError


@pytest.fixture
def mixed_dataset() -> Dataset:
    return utils.read_dataset(problem_type="classification", dataset_name="mixed")


def test_read_csv(mixed_dataset: Dataset):
    assert len(mixed_dataset) == 16
    assert mixed_dataset.feature_count == 4
    assert [a.name for a in mixed_dataset.attributes] == ["age", "income", "color", "size"]
    assert [a.kind for a in mixed_dataset.attributes] == [
        AttributeKind.NUMERIC,
        AttributeKind.NUMERIC,
        AttributeKind.NOMINAL,
        AttributeKind.NOMINAL,
    ]
    assert mixed_dataset.attributes[2].domain == ("blue", "green", "red")
    assert mixed_dataset.attributes[3].domain == ("large", "medium", "small")
    assert mixed_dataset.ids.tolist() == list(range(16))
    assert mixed_dataset.classes == ("no", "yes")
    assert mixed_dataset.class_sizes() == {"no": 8, "yes": 8}
    assert mixed_dataset[0].values == (25.0, 50.5, "red", "small")


def test_missing_values(mixed_dataset: Dataset):
    assert mixed_dataset[1].values[1] is None
    assert mixed_dataset[4].values[2] is None
    assert mixed_dataset[10].values[0] is None
    # "NA" token
    assert mixed_dataset[13].values[3] is None

    assert np.isnan(mixed_dataset.numeric_matrix[1, 1])
    assert mixed_dataset.nominal_codes[4, 2] == -1
    assert mixed_dataset.nominal_codes[0, 2] == 2
    # nominal columns of numeric matrix and numeric columns of codes are empty
    assert np.isnan(mixed_dataset.numeric_matrix[:, 2]).all()
    assert (mixed_dataset.nominal_codes[:, 0] == -1).all()


def test_class_sizes_of_subset(mixed_dataset: Dataset):
    assert mixed_dataset.class_sizes(np.array([0, 1, 2])) == {"no": 1, "yes": 2}


def test_read_csv_without_header(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("1.5,a,x\n2.5,b,y\n", encoding="utf-8")
    dataset: Dataset = read_csv(str(path), has_header=False)

    assert [a.name for a in dataset.attributes] == ["f1", "f2"]
    assert dataset.attributes[0].is_numeric
    assert dataset.attributes[1].is_nominal
    assert dataset.labels.tolist() == ["x", "y"]


def test_read_csv_with_custom_separator(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a;b;class\n1;?;x\n2;u;y\n", encoding="utf-8")
    dataset: Dataset = read_csv(str(path), sep=";")

    assert dataset[0].values == (1.0, None)
    assert dataset.attributes[1].domain == ("u",)


def test_mixed_column_is_nominal(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,class\n1,x\n2,y\nthree,x\n", encoding="utf-8")
    dataset: Dataset = read_csv(str(path))

    assert dataset.attributes[0].is_nominal
    assert dataset.attributes[0].domain == ("1", "2", "three")


def test_wrong_column_count(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,b,class\n1,2,x\n1,x\n", encoding="utf-8")
    with pytest.raises(InvalidInputError, match="column count"):
        read_csv(str(path))

    path.write_text("a,b,class\n1,2,x\n1,2,3,x\n", encoding="utf-8")
    with pytest.raises(InvalidInputError, match="column count"):
        read_csv(str(path))


def test_quoted_field_with_separator(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text('a,b,class\n1,"red, dark",x\n2,blue,y\n', encoding="utf-8")
    dataset: Dataset = read_csv(str(path))

    assert [a.name for a in dataset.attributes] == ["a", "b"]
    assert dataset[0].values == (1.0, "red, dark")
    assert dataset.attributes[1].domain == ("blue", "red, dark")


def test_empty_label(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,class\n1,x\n2,\n", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        read_csv(str(path))


def test_file_without_data(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,class\n\n", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        read_csv(str(path))


def test_validation():
    attributes = (
        Attribute("n", AttributeKind.NUMERIC),
        Attribute("c", AttributeKind.NOMINAL, domain=("u", "v")),
    )
    with pytest.raises(InvalidInputError, match="Duplicated"):
        Dataset(attributes, (Record(0, (1.0, "u"), "x"), Record(0, (2.0, "v"), "y")))
    with pytest.raises(InvalidInputError, match="domain"):
        Dataset(attributes, (Record(0, (1.0, "w"), "x"),))
    with pytest.raises(InvalidInputError, match="NaN"):
        Dataset(attributes, (Record(0, (math.nan, "u"), "x"),))
    with pytest.raises(InvalidInputError, match="not a number"):
        Dataset(attributes, (Record(0, ("1.0", "u"), "x"),))
    with pytest.raises(InvalidInputError, match="values"):
        Dataset(attributes, (Record(0, (1.0,), "x"),))
    with pytest.raises(InvalidInputError, match="label"):
        Dataset(attributes, (Record(0, (1.0, "u"), ""),))


def test_from_frame():
    X = pd.DataFrame({"n": [1.0, None, 3.0], "c": ["u", "v", None]})
    y = pd.Series(["x", "y", "x"], name="target")
    dataset: Dataset = Dataset.from_frame(X, y)

    assert dataset.label_name == "target"
    assert dataset.attributes[0].is_numeric
    assert dataset.attributes[1].domain == ("u", "v")
    assert dataset[1].values == (None, "v")
    assert dataset[2].values == (3.0, None)

    df: pd.DataFrame = dataset.to_frame()
    assert df.index.tolist() == [0, 1, 2]
    assert df["target"].tolist() == ["x", "y", "x"]
    assert df["n"].dtype == np.float64


def test_records_from_frame(mixed_dataset: Dataset):
    X = pd.DataFrame(
        {"age": [30.0], "income": [None], "color": ["purple"], "size": ["small"]}
    )
    records = mixed_dataset.records_from_frame(X)

    assert len(records) == 1
    # values outside of the training domain are allowed in queries
    assert records[0].values == (30.0, None, "purple", "small")
    with pytest.raises(InvalidInputError):
        mixed_dataset.records_from_frame(X.iloc[:, :2])
