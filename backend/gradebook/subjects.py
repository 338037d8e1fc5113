"""
subjects.py — Per-subject performance aggregation for one student.
"""

from typing import Any, Dict, Iterable, Mapping

import pandas as pd

from gradebook.scoring import as_number


def subject_averages(records: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    """
    Mean final score per subject id.

    Records without a computed final score are ignored; a subject with no
    valid scores is left out rather than reported as 0.
    """
    rows = [
        {"subject_id": r.get("subject_id"), "final_score": as_number(r.get("final_score"))}
        for r in records
    ]
    df = pd.DataFrame(rows, columns=["subject_id", "final_score"]).dropna()
    if df.empty:
        return {}

    means = df.groupby("subject_id", sort=False)["final_score"].mean()
    return {str(subject_id): float(mean) for subject_id, mean in means.items()}
