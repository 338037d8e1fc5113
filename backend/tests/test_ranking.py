"""
Tests for gradebook/ranking.py — competition ranking and ordinal labels.
"""

import os
import sys
from itertools import permutations

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from gradebook.ranking import competition_ranks, ordinal_label, rank_students


class TestRankStudents:

    def test_ties_share_rank_and_next_rank_skips(self):
        ranked = rank_students([("a", 90), ("b", 80), ("c", 80), ("d", 60)])
        assert [r["rank"] for r in ranked] == [1, 2, 2, 4]

    def test_not_dense(self):
        ranks = competition_ranks([90, 90, 70])
        assert ranks == [1, 1, 3]

    def test_sorted_descending(self):
        ranked = rank_students([("low", 40), ("high", 95), ("mid", 70)])
        assert [r["student_id"] for r in ranked] == ["high", "mid", "low"]
        assert ranked[0]["rank"] == 1

    def test_equal_scores_rank_identically_under_permutation(self):
        entries = [("a", 85), ("b", 85), ("c", 70)]
        for perm in permutations(entries):
            by_id = {r["student_id"]: r["rank"] for r in rank_students(perm)}
            assert by_id == {"a": 1, "b": 1, "c": 3}

    def test_accepts_dicts(self):
        ranked = rank_students([
            {"student_id": "s1", "final_score": 70.5},
            {"student_id": "s2", "final_score": 88},
        ])
        assert ranked[0] == {"student_id": "s2", "final_score": 88.0, "rank": 1, "rank_label": "1st"}

    def test_empty(self):
        assert rank_students([]) == []
        assert competition_ranks([]) == []

    def test_single_student(self):
        ranked = rank_students([("only", 12)])
        assert ranked[0]["rank"] == 1


class TestOrdinalLabel:

    @pytest.mark.parametrize("n,label", [
        (1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"),
        (11, "11th"), (12, "12th"), (13, "13th"),
        (21, "21st"), (22, "22nd"), (23, "23rd"),
        (101, "101st"), (111, "111th"), (112, "112th"),
    ])
    def test_labels(self, n, label):
        assert ordinal_label(n) == label
