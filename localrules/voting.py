"""Contains prediction type and utility functions turning support tallies of
consistent local rules into predicted labels.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Prediction:
    """Result of classifying a single record.

    Attributes:
        record_id (int): id of the classified record
        true_label (str): label of the classified record
        cid (str): label with the highest support
        ncid (str): label with the highest support normalized by class size
        support_counts (dict[str, int]): number of consistent rules per label
        normalized_support (dict[str, float]): support divided by class size
    """

    record_id: int
    true_label: str
    cid: str
    ncid: str
    support_counts: dict[str, int]
    normalized_support: dict[str, float]


def is_label_better_than_current_best(
    new: tuple[str, float], current_best: tuple[Optional[str], float]
) -> bool:
    label, score = new
    best_label, best_score = current_best

    if best_label is None:
        return True
    # compare by score
    found_better: bool = score > best_score
    if not found_better and score == best_score:
        # prefer lexicographically smaller labels
        found_better = label < best_label
    return found_better


def select_best_label(scores: dict[str, float]) -> Optional[str]:
    """Returns label with maximum score, ties are broken by choosing the
    lexicographically smallest label. None for empty scores.
    """
    best: tuple[Optional[str], float] = (None, float("-inf"))
    for label, score in scores.items():
        if is_label_better_than_current_best((label, score), best):
            best = (label, score)
    return best[0]


def vote(
    record_id: int,
    true_label: str,
    support_counts: dict[str, int],
    class_sizes: dict[str, int],
) -> Prediction:
    """Selects CId and NCId labels. Only classes with positive size take part in the
    voting, so labels absent from the training set (or the neighbourhood) are never
    predicted.

    Args:
        record_id (int): id of classified record
        true_label (str): label of classified record
        support_counts (dict[str, int]): consistent rules count per label
        class_sizes (dict[str, int]): number of records per label in the set the
            rules were taken from

    Returns:
        Prediction: prediction
    """
    classes: list[str] = sorted(label for label, size in class_sizes.items() if size > 0)
    support: dict[str, int] = {label: support_counts.get(label, 0) for label in classes}
    normalized: dict[str, float] = {
        label: support[label] / class_sizes[label] for label in classes
    }
    return Prediction(
        record_id=record_id,
        true_label=true_label,
        cid=select_best_label(support),
        ncid=select_best_label(normalized),
        support_counts=support,
        normalized_support=normalized,
    )
