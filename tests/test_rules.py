import numpy as np
import pytest
import utils

from localrules.dataset import Dataset
from localrules.dataset import Record
from localrules.distance import DistanceContext
from localrules.distance import DistanceMode
from localrules.rules import LocalRule


@pytest.fixture
def dataset() -> Dataset:
    return utils.make_dataset(
        [
            ((1.0, "a"), "A"),
            ((5.0, "a"), "A"),
            ((3.0, "b"), "B"),
            ((None, "a"), "B"),
            ((2.0, None), "A"),
            ((4.0, "c"), "B"),
        ],
        kinds="nc",
    )


def test_interval_and_radius(dataset: Dataset):
    context = DistanceContext.build(dataset)
    rule = LocalRule(dataset[0], dataset[1], context)

    assert rule.decision == "A"
    assert not rule.is_wildcard(0)
    assert not rule.is_wildcard(1)
    condition = rule.premise.subconditions[0]
    assert (condition.left, condition.right) == (1.0, 5.0)
    assert rule.radii == {1: 0.0}

    assert rule.satisfies(Record(id=100, values=(3.0, "a"), label="B"))
    assert not rule.satisfies(Record(id=100, values=(6.0, "a"), label="B"))
    assert not rule.satisfies(Record(id=100, values=(None, "a"), label="B"))
    assert not rule.satisfies(Record(id=100, values=(3.0, None), label="B"))


def test_wildcards(dataset: Dataset):
    context = DistanceContext.build(dataset)
    rule = LocalRule(dataset[3], dataset[4], context)

    assert rule.is_wildcard(0)
    assert rule.is_wildcard(1)
    assert len(rule.premise.subconditions) == 0
    assert rule.covered_mask(np.arange(len(dataset))).all()
    assert rule.satisfies(Record(id=100, values=(None, None), label="A"))
    assert str(rule) == "IF TRUE THEN class = A"


def test_covered_mask_agrees_with_satisfies(dataset: Dataset):
    rows = np.arange(len(dataset))
    for mode in DistanceMode:
        for query_index in range(len(dataset)):
            context = DistanceContext.build(dataset, mode=mode, leave_out_index=query_index)
            query: Record = dataset[query_index]
            for candidate in dataset:
                rule = LocalRule(query, candidate, context)
                expected = [rule.satisfies(record) for record in dataset]
                np.testing.assert_array_equal(rule.covered_mask(rows), expected)


def test_consistency(dataset: Dataset):
    context = DistanceContext.build(dataset)
    rows = np.arange(len(dataset))

    # record 3 has value "a" but its numerical value is missing
    assert LocalRule(dataset[0], dataset[1], context).is_consistent(rows)
    # [1, 3] with radius d(a, b) covers record 0 labelled A
    assert not LocalRule(dataset[0], dataset[2], context).is_consistent(rows)
    assert LocalRule(dataset[0], dataset[2], context).is_consistent(np.array([2, 3, 5]))
    assert LocalRule(dataset[0], dataset[0], context).is_consistent(rows)
