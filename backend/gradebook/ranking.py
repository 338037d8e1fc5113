"""
ranking.py — Class ranking with standard competition tie handling.

Students with identical final scores share a rank and the next distinct
score resumes at ``previous_rank + number_tied`` (1st, 1st, 3rd).
A ranking is only meaningful once every peer score in the scope is known.
"""

from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

import numpy as np
from scipy.stats import rankdata


RankEntry = Union[Tuple[Any, float], Dict[str, Any]]


def ordinal_label(n: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 21 -> '21st'."""
    n = int(n)
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def competition_ranks(scores: Sequence[float]) -> List[int]:
    """Ranks aligned with ``scores`` (rank 1 = highest)."""
    if len(scores) == 0:
        return []
    values = -np.asarray(scores, dtype=float)
    return [int(r) for r in rankdata(values, method="min")]


def _unpack(entry: RankEntry) -> Tuple[Any, float]:
    if isinstance(entry, dict):
        return entry.get("student_id"), float(entry.get("final_score"))
    student_id, score = entry
    return student_id, float(score)


def rank_students(entries: Iterable[RankEntry]) -> List[Dict[str, Any]]:
    """
    Rank ``(student_id, final_score)`` pairs (or dicts with those keys).

    Returns dicts sorted by rank, equal scores in input order.
    """
    pairs = [_unpack(e) for e in entries]
    if not pairs:
        return []

    ranks = competition_ranks([score for _, score in pairs])
    order = sorted(range(len(pairs)), key=lambda i: ranks[i])

    return [
        {
            "student_id": pairs[i][0],
            "final_score": pairs[i][1],
            "rank": ranks[i],
            "rank_label": ordinal_label(ranks[i]),
        }
        for i in order
    ]
