import shutil

import numpy as np
import pandas as pd
import pytest
import utils
from sklearn import metrics

from localrules._params import adjust_params_on_dataset
from localrules._params import DEFAULT_PARAMS_VALUES
from localrules._params import resolve_k
from localrules.classification import KPlusNNClassifier
from localrules.classification import RIAClassifier
from localrules.classification import RIONAClassifier
from localrules.cli import main
from localrules.dataset import Dataset
from localrules.distance import DistanceMode
from localrules.distance import MissingDistanceMode
from localrules.distance import NominalMetric
from localrules.evaluation import ClassificationReport
from localrules.evaluation import EvaluationResult
from localrules.evaluation import leave_one_out
from localrules.evaluation import train_test
from localrules.exceptions import InvalidInputError
from localrules.imputation import ClassConditionalImputer
from localrules import output


@pytest.fixture
def mixed_dataset() -> Dataset:
    return utils.read_dataset(problem_type="classification", dataset_name="mixed")


def test_leave_one_out(mixed_dataset: Dataset):
    model = RIONAClassifier(k=5)
    result: EvaluationResult = leave_one_out(model, mixed_dataset)

    assert len(result.predictions) == 16
    assert [p.record_id for p in result.predictions] == list(range(16))
    assert result.y_true.tolist() == mixed_dataset.labels.tolist()
    assert result.predictions == [model.predict_loo(mixed_dataset, i) for i in range(16)]
    assert result.accuracy == pytest.approx(
        metrics.accuracy_score(result.y_true.astype(str), result.y_pred_cid.astype(str))
    )
    assert result.prediction_times.total_prediction_time.total_seconds() > 0.0


def test_leave_one_out_in_parallel(mixed_dataset: Dataset):
    sequential: EvaluationResult = leave_one_out(RIAClassifier(), mixed_dataset)
    parallel: EvaluationResult = leave_one_out(RIAClassifier(), mixed_dataset, n_jobs=2)

    assert parallel.predictions == sequential.predictions


def test_leave_one_out_errors():
    single = utils.make_dataset([(("a",), "A")], kinds="c")
    with pytest.raises(InvalidInputError):
        leave_one_out(RIAClassifier(), single)


def test_train_test(mixed_dataset: Dataset):
    train = Dataset.from_records(mixed_dataset.attributes, mixed_dataset.records[:12])
    test = Dataset.from_records(mixed_dataset.attributes, mixed_dataset.records[12:])
    result: EvaluationResult = train_test(RIAClassifier(), train, test)

    assert [p.record_id for p in result.predictions] == [12, 13, 14, 15]
    assert result.y_true.tolist() == ["yes", "no", "yes", "no"]


def test_classification_report():
    y_true = ["a", "a", "b", "b", "c", "c", "c"]
    y_pred = ["a", "b", "b", "b", "c", "a", "c"]
    report = ClassificationReport.from_labels(y_true, y_pred)

    assert report.classes == ("a", "b", "c")
    np.testing.assert_array_equal(
        report.confusion, metrics.confusion_matrix(y_true, y_pred, labels=["a", "b", "c"])
    )
    assert report.total == 7
    assert report.correct == 5
    assert report.accuracy == pytest.approx(metrics.accuracy_score(y_true, y_pred))
    assert report.balanced_recall == pytest.approx(
        metrics.balanced_accuracy_score(y_true, y_pred)
    )
    assert report.balanced_f1 == pytest.approx(
        metrics.f1_score(y_true, y_pred, average="macro")
    )
    a, b, c = report.per_class
    assert (a.support, a.tp, a.fp, a.fn) == (2, 1, 1, 1)
    assert (b.support, b.tp, b.fp, b.fn) == (2, 2, 1, 0)
    assert (c.support, c.tp, c.fp, c.fn) == (3, 2, 0, 1)
    assert b.precision == pytest.approx(2 / 3)
    assert c.recall == pytest.approx(2 / 3)


def test_classification_report_zero_division():
    report = ClassificationReport.from_labels(["a", "a"], ["b", "b"])

    assert report.classes == ("a", "b")
    assert report.accuracy == 0.0
    assert report.per_class[0].precision == 0.0
    assert report.per_class[1].recall == 0.0
    assert report.balanced_f1 == 0.0

    empty = ClassificationReport.from_labels([], [])
    assert empty.accuracy == 0.0
    assert empty.classes == ()


def test_imputer(mixed_dataset: Dataset):
    imputed: Dataset = ClassConditionalImputer().impute(mixed_dataset)

    assert all(None not in record.values for record in imputed)
    # input dataset is left untouched
    assert mixed_dataset[1].values[1] is None
    # mean of incomes of "no" records with income
    no_incomes = [72.25, 65.0, 55.5, 61.0, 70.5, 85.0, 77.0]
    assert imputed[1].values[1] == pytest.approx(np.mean(no_incomes))
    # "red" is the most frequent color among "yes" records
    assert imputed[4].values[2] == "red"
    assert imputed[13].values[3] == "large"
    assert imputed.ids.tolist() == mixed_dataset.ids.tolist()


def test_imputer_fallbacks():
    dataset = utils.make_dataset(
        [((None, None), "A"), ((2.0, "u"), "B"), ((4.0, "v"), "B"), ((None, "v"), "B")],
        kinds="nc",
    )
    imputed: Dataset = ClassConditionalImputer().impute(dataset)

    # class A has no values at all
    assert imputed[0].values == (0.0, "u")
    assert imputed[3].values == (3.0, "v")


def test_imputer_mode_ties_go_to_first_value():
    dataset = utils.make_dataset(
        [(("v",), "A"), (("u",), "A"), ((None,), "A")],
        kinds="c",
    )
    assert ClassConditionalImputer().impute(dataset)[2].values == ("v",)


@pytest.mark.parametrize(
    "k, n, expected",
    [
        (None, 10, 3),
        ("", 10, 3),
        (5, 10, 5),
        (0, 10, 1),
        ("7", 10, 7),
        ("-2", 10, 1),
        ("log2n", 16, 4),
        ("LOG2", 10, 3),
        ("log2n", 1, 1),
    ],
)
def test_resolve_k(k, n: int, expected: int):
    assert resolve_k(k, n) == expected


def test_resolve_k_invalid():
    with pytest.raises(InvalidInputError):
        resolve_k("many", 10)


def test_adjust_params_on_dataset():
    params = dict(DEFAULT_PARAMS_VALUES)
    params.update(mode="local", nominal_metric="svdm_prime", missing_mode="v2", k=50)
    adjusted = adjust_params_on_dataset(params, training_size=9)

    assert adjusted["mode"] == DistanceMode.LOCAL
    assert adjusted["nominal_metric"] == NominalMetric.SVDM_PRIME
    assert adjusted["missing_mode"] == MissingDistanceMode.VARIANT2
    assert adjusted["k"] == 9
    assert params["k"] == 50


def test_output_names():
    assert output.dataset_tag_from_path("data/nursery.data") == "nursery"
    assert output.dataset_tag_from_path("iris.csv") == "iris"
    assert output.dataset_tag_from_path("archive.tar.csv") == "archive.tar"
    assert output.dataset_tag_from_path("datasets/mixed/data.csv") == "data"

    tag = output.build_tag(
        "riona",
        "nursery",
        "log2n",
        DistanceMode.LOCAL,
        NominalMetric.SVDM_PRIME,
        MissingDistanceMode.VARIANT2,
    )
    assert tag == "riona_nursery_klog2n_l_svdmprime_v2"
    tag = output.build_tag(
        "knn",
        "iris",
        "3",
        DistanceMode.GLOBAL,
        NominalMetric.SVDM,
        MissingDistanceMode.VARIANT1,
    )
    assert tag == "knn_iris_k3_g_svdm_v1"
    assert output.out_name("out", tag).endswith("OUT_knn_iris_k3_g_svdm_v1.csv")
    assert output.stat_name("out", tag).endswith("STAT_knn_iris_k3_g_svdm_v1.txt")
    assert output.knn_name("out", tag).endswith("kNN_knn_iris_k3_g_svdm_v1.txt")


def test_write_predictions(mixed_dataset: Dataset, tmp_path):
    result: EvaluationResult = leave_one_out(RIONAClassifier(k=3), mixed_dataset)
    path = tmp_path / "nested" / "OUT.csv"
    output.write_predictions(str(path), mixed_dataset, result.predictions)

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "id,age,income,color,size,RId,CId,NCId"
    assert len(lines) == 17
    assert lines[2].startswith("1,32.0,,blue,large,no,")

    df = pd.read_csv(path, keep_default_na=False)
    assert df["RId"].tolist() == mixed_dataset.labels.tolist()
    assert df["CId"].tolist() == result.y_pred_cid.tolist()
    assert df["NCId"].tolist() == result.y_pred_ncid.tolist()


def test_write_neighbors(mixed_dataset: Dataset, tmp_path):
    result: EvaluationResult = leave_one_out(KPlusNNClassifier(k=2), mixed_dataset)
    path = tmp_path / "kNN.txt"
    output.write_neighbors(str(path), result.predictions)

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 16
    first = result.predictions[0]
    assert lines[0] == ";".join(
        ["0"] + [f"{n.id}:{n.distance!r}" for n in first.neighbors]
    )
    assert all(len(line.split(";")) == 3 for line in lines)


def test_write_stats(mixed_dataset: Dataset, tmp_path):
    result: EvaluationResult = leave_one_out(RIAClassifier(), mixed_dataset)
    path = tmp_path / "STAT.txt"
    output.write_stats(
        str(path),
        "STAT_RIA",
        {"ALG": "RIA", "N": "16"},
        mixed_dataset,
        DistanceMode.GLOBAL,
        NominalMetric.SVDM,
        MissingDistanceMode.VARIANT1,
        {"LOAD": 1.0, "CLASSIFY": 10.4},
        result.report_cid,
        result.report_ncid,
    )

    text = path.read_text(encoding="utf-8")
    assert text.startswith("STAT_RIA\nGenerated: ")
    assert "META:\nALG: RIA\nN: 16\n" in text
    assert "CLASSIFY: 10\n" in text
    assert "TOTAL:    11\n" in text
    assert "age\tmin=23.0\tmax=60.0\trange=37.0" in text
    assert "color\tdomain=3" in text
    assert "== CId ==" in text and "== NCId ==" in text
    assert f"Accuracy: {result.report_cid.accuracy:.6f}" in text
    assert "Class\tSupport\tTP\tFP\tFN\tPrecision\tRecall\tF1" in text


def test_cli(tmp_path):
    # output names are tagged with the data file name
    data = str(tmp_path / "mixed.csv")
    shutil.copy(utils.dataset_path("classification", "mixed"), data)
    out_dir = tmp_path / "out"

    assert main(["--data", data, "--alg", "riona", "--k", "log2n", "--outdir", str(out_dir)]) == 0
    assert (out_dir / "OUT_riona_mixed_klog2n_g_svdm_v1.csv").exists()
    assert (out_dir / "STAT_riona_mixed_klog2n_g_svdm_v1.txt").exists()

    assert main(
        ["--data", data, "--all", "--all-ria", "--mode", "l", "--outdir", str(out_dir)]
    ) == 0
    for name in (
        "kNN_knn_mixed_k1_l_svdm_v1.txt",
        "kNN_knn_mixed_k3_l_svdm_v1.txt",
        "kNN_knn_mixed_klog2n_l_svdm_v1.txt",
        "OUT_riona_mixed_k3_l_svdm_v1.csv",
        "STAT_ria_mixed_k3_l_svdm_v1.txt",
    ):
        assert (out_dir / name).exists(), name


def test_cli_errors(tmp_path):
    assert main(["--data", str(tmp_path / "missing.csv"), "--alg", "knn"]) == 1
    with pytest.raises(SystemExit):
        main(["--data", str(tmp_path / "missing.csv"), "--all"])
