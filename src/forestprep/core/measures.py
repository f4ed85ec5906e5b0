"""Human-readable labels for summary measure codes."""

from typing import Dict

MEASURE_LABELS: Dict[str, str] = {
    "OR": "Odds Ratio",
    "RD": "Risk Difference",
    "RR": "Risk Ratio",
    "ASD": "Arcsine Difference",
    "SMD": "Std. Mean Difference",
    "ROM": "Ratio of Means",
    "MD": "Mean Difference",
    "HR": "Hazard Ratio",
    "IRR": "Incidence Rate Ratio",
    "IRD": "Incidence Rate Difference",
    "DOR": "Diagnostic Odds Ratio",
}

# Measures pooled on the log scale
RELATIVE_MEASURES = frozenset({"OR", "RR", "HR", "ROM", "IRR", "DOR"})


def is_relative_effect(sm: str) -> bool:
    return sm.upper() in RELATIVE_MEASURES


def measure_label(sm: str, backtransformed: bool = True) -> str:
    """Return the display label for a summary measure code.

    Ratio measures that are not backtransformed are prefixed with
    ``"Log "``.  Unknown codes are returned unchanged.
    """
    label = MEASURE_LABELS.get(sm.upper())
    if label is None:
        return sm
    if not backtransformed and is_relative_effect(sm):
        return f"Log {label}"
    return label
