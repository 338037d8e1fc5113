"""
narrative.py — Template-based text generation for insights.

Transforms computed figures into human-readable sentences. Plain f-string
templates, no model involved.
"""

from typing import List


NOT_ENOUGH_DATA = "Not enough data to generate a performance summary."
SUMMARY_ERROR = "An error occurred while generating the performance summary."


# ── Risk factors ───────────────────────────────────────────────────

def factor_low_average() -> str:
    return "Low overall average"


def factor_struggling_subject(subject: str) -> str:
    return f"Struggling in {subject}"


def factor_declining_trend() -> str:
    return "Recent performance declining"


# ── Anomaly Narratives ─────────────────────────────────────────────

def narrate_sudden_drop(student: str, subject: str, previous: float, current: float) -> str:
    return (
        f"{student}'s score in {subject} dropped by {abs(current - previous):.1f}% "
        f"from {previous:.1f}% to {current:.1f}%"
    )


def narrate_sudden_improvement(student: str, subject: str, previous: float, current: float) -> str:
    return (
        f"{student}'s score in {subject} improved by {current - previous:.1f}% "
        f"from {previous:.1f}% to {current:.1f}%"
    )


def narrate_inconsistent_performance(student: str, subject: str, std_dev: float) -> str:
    return (
        f"{student} shows highly variable performance in {subject} "
        f"(standard deviation: {std_dev:.1f}%)"
    )


# ── Class Summary ──────────────────────────────────────────────────

def narrate_class_overview(student_count: int, subject_count: int) -> str:
    return (
        f"Class performance analysis based on {student_count} students "
        f"across {subject_count} subjects."
    )


def narrate_class_average(mean: float) -> str:
    return f"The overall class average is {mean:.1f}%."


def narrate_top_subjects(subjects: List[str]) -> str:
    return f"The class is performing particularly well in {', '.join(subjects)}."


def narrate_improvement_areas(subjects: List[str]) -> str:
    return f"Areas needing attention include {', '.join(subjects)}."


def narrate_at_risk_count(count: int) -> str:
    return (
        f"There are {count} students at risk of underperforming "
        f"who may need additional support."
    )


def narrate_top_performer_count(count: int) -> str:
    return (
        f"{count} students are demonstrating exceptional performance "
        f"in one or more subjects."
    )


def generate_class_summary(
    student_count: int,
    subject_count: int,
    class_average: float,
    top_subjects: List[str],
    improvement_areas: List[str],
    at_risk_count: int,
    top_performer_count: int,
) -> str:
    """Combine the class figures into a single paragraph."""
    sentences = [
        narrate_class_overview(student_count, subject_count),
        narrate_class_average(class_average),
    ]
    if top_subjects:
        sentences.append(narrate_top_subjects(top_subjects))
    if improvement_areas:
        sentences.append(narrate_improvement_areas(improvement_areas))
    sentences.append(narrate_at_risk_count(at_risk_count))
    sentences.append(narrate_top_performer_count(top_performer_count))
    return " ".join(sentences)
