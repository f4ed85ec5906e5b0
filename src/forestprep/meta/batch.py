"""Batch re-analysis of every outcome in a review.

A :class:`ReviewStore` holds study-level effect estimates keyed by
comparison and outcome number, in the layout of a Cochrane review
export.  :func:`summarize_all` re-runs the per-outcome meta-analysis for
selected (or all) comparison/outcome pairs and collects the summaries
in a :class:`SummaryCollection` that prints them one after another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Union

import numpy as np
import pandas as pd
from pydantic import BaseModel

from ..config.settings import settings
from ..core.errors import InvalidArgument, InvalidInputKind
from ..core.measures import is_relative_effect, measure_label
from ..core.models import CombineMethod
from ..utils.logging import get_logger
from .analyzer import EffectSize, MetaAnalyzer
from .formatting import format_interval, format_n, format_percent, format_pt

logger = get_logger(__name__)

Identifier = Union[int, str]

REQUIRED_COLUMNS = ("comp_no", "outcome_no", "studlab", "effect", "se")

SEPARATOR = "\n\n*****\n\n"


@dataclass
class ReviewStore:
    """Study-level data of a systematic review.

    Each row is one study result with ``comp_no``, ``outcome_no``,
    ``studlab``, ``effect`` and ``se``.  Optional columns
    ``comp_name``, ``outcome_name`` and ``sm`` (summary measure) are
    used for headings.
    """

    data: pd.DataFrame

    def __post_init__(self) -> None:
        missing = [c for c in REQUIRED_COLUMNS if c not in self.data.columns]
        if missing:
            raise InvalidArgument(f"Review data lacks required columns: {', '.join(missing)}")

    def comparisons(self) -> List[Identifier]:
        return pd.unique(self.data["comp_no"]).tolist()

    def outcomes(self, comp_no: Identifier) -> List[Identifier]:
        rows = self.data[self.data["comp_no"] == comp_no]
        return pd.unique(rows["outcome_no"]).tolist()

    def slice(self, comp_no: Identifier, outcome_no: Identifier) -> pd.DataFrame:
        mask = (self.data["comp_no"] == comp_no) & (self.data["outcome_no"] == outcome_no)
        return self.data[mask]


class PooledEstimate(BaseModel):
    effect: float
    ci_lower: float
    ci_upper: float
    z_score: float
    p_value: float


class OutcomeSummary(BaseModel):
    """Result of a single-outcome meta-analysis."""

    comp_no: Identifier
    outcome_no: Identifier
    comp_name: Optional[str] = None
    outcome_name: Optional[str] = None
    sm: str = ""
    backtransformed: bool = True
    level: float = 0.95
    k: int
    fixed: Optional[PooledEstimate] = None
    random: Optional[PooledEstimate] = None
    Q: float = float("nan")
    Q_df: int = 0
    Q_pvalue: float = float("nan")
    tau_squared: float = float("nan")
    tau: float = float("nan")
    I_squared: float = float("nan")

    def _heading(self) -> str:
        comp = f"Comparison {self.comp_no}"
        if self.comp_name:
            comp += f": {self.comp_name}"
        outcome = f"Outcome {self.outcome_no}"
        if self.outcome_name:
            outcome += f": {self.outcome_name}"
        return f"{comp}\n{outcome}"

    def _estimate_line(self, label: str, estimate: PooledEstimate) -> str:
        values = np.array([estimate.effect, estimate.ci_lower, estimate.ci_upper])
        if self.backtransformed and is_relative_effect(self.sm):
            values = np.exp(values)
        effect = format_n(values[0], 4, lab_na="--")
        ci = format_interval(values[1], values[2], 4, lab_na="--")
        z = format_n(estimate.z_score, 2, lab_na="--")
        p = format_pt(estimate.p_value, 4, lab_na="--")
        return f"{label:<22}{effect:>10} {ci:>20} {z:>7} {p:>8}"

    def __str__(self) -> str:
        lines = [self._heading(), "", f"Number of studies combined: k = {self.k}", ""]
        header_sm = self.sm or "TE"
        level = f"{round(self.level * 100)}%-CI"
        lines.append(f"{'':<22}{header_sm:>10} {level:>20} {'z':>7} {'p-value':>8}")
        if self.fixed is not None:
            lines.append(self._estimate_line("Fixed effect model", self.fixed))
        if self.random is not None:
            lines.append(self._estimate_line("Random effects model", self.random))
        if self.k > 1:
            lines += [
                "",
                "Quantifying heterogeneity:",
                f" tau^2 = {format_pt(self.tau_squared, 4, lab_na='--')}; "
                f"tau = {format_pt(self.tau, 4, lab_na='--')}; "
                f"I^2 = {format_percent(self.I_squared, 1, lab_na='--')}",
                "",
                "Test of heterogeneity:",
                f" Q = {format_n(self.Q, 2, lab_na='--')}, d.f. = {self.Q_df}, "
                f"p-value = {format_pt(self.Q_pvalue, 4, lab_na='--')}",
            ]
        if self.sm:
            lines += ["", f"Details: {measure_label(self.sm, self.backtransformed)}"]
        return "\n".join(lines)


class SummaryCollection(list):
    """Ordered summaries that print with a separator line between entries."""

    def __str__(self) -> str:
        return SEPARATOR.join(str(summary) for summary in self)


def _first(rows: pd.DataFrame, column: str) -> Optional[str]:
    if column not in rows.columns:
        return None
    values = rows[column].dropna()
    return str(values.iloc[0]) if len(values) else None


def analyse_outcome(
    store: ReviewStore,
    comp_no: Identifier,
    outcome_no: Identifier,
    method: Optional[CombineMethod] = None,
    level: Optional[float] = None,
    backtransformed: bool = True,
) -> OutcomeSummary:
    """Meta-analyse one outcome of one comparison.

    Args:
        store: Review data.
        comp_no: Comparison number.
        outcome_no: Outcome number within the comparison.
        method: Show only this pooling method; ``None`` shows both.
        level: Confidence level; defaults to the configured level.
        backtransformed: Show ratio measures on the natural scale.

    Returns:
        The :class:`OutcomeSummary` of the outcome.
    """
    rows = store.slice(comp_no, outcome_no)
    if rows.empty:
        raise InvalidArgument(f"No studies for comparison {comp_no}, outcome {outcome_no}")
    analyzer = MetaAnalyzer(level=settings.level if level is None else level)
    effect_sizes = [
        EffectSize(study_id=str(row.studlab), effect=float(row.effect), se=float(row.se))
        for row in rows.itertuples(index=False)
    ]
    methods = [CombineMethod(method)] if method is not None else [CombineMethod.FIXED, CombineMethod.RANDOM]
    pooled = {}
    for m in methods:
        result = analyzer.compute_pooled_effect(effect_sizes, method=m)
        pooled[m.value] = PooledEstimate(
            effect=result["pooled_effect"],
            ci_lower=result["ci_lower"],
            ci_upper=result["ci_upper"],
            z_score=result["z_score"],
            p_value=result["p_value"],
        )
    het = analyzer.assess_heterogeneity(effect_sizes)
    logger.debug(f"Analysed comparison {comp_no}, outcome {outcome_no} with {len(effect_sizes)} studies")
    return OutcomeSummary(
        comp_no=comp_no,
        outcome_no=outcome_no,
        comp_name=_first(rows, "comp_name"),
        outcome_name=_first(rows, "outcome_name"),
        sm=_first(rows, "sm") or "",
        backtransformed=backtransformed,
        level=analyzer.level,
        k=len(effect_sizes),
        fixed=pooled.get("fixed"),
        random=pooled.get("random"),
        **het,
    )


def summarize_all(
    store: ReviewStore,
    comp_nos: Optional[Iterable[Identifier]] = None,
    outcome_nos: Optional[Iterable[Identifier]] = None,
    analyse: Callable[..., Any] = analyse_outcome,
    **options: Any,
) -> SummaryCollection:
    """Redo the meta-analyses of all (or selected) outcomes of a review.

    Comparisons default to every comparison in the store, in order of
    first appearance; outcomes default to every outcome recorded for
    each comparison.  An explicit ``outcome_nos`` applies to every
    selected comparison.  ``options`` are passed on to ``analyse``.
    """
    if not isinstance(store, ReviewStore):
        raise InvalidInputKind(f"Argument 'store' must be a ReviewStore, not {type(store).__name__}.")
    comparisons = list(comp_nos) if comp_nos is not None else store.comparisons()
    selected_outcomes = list(outcome_nos) if outcome_nos is not None else None
    summaries = SummaryCollection()
    for comp_no in comparisons:
        outcomes = selected_outcomes if selected_outcomes is not None else store.outcomes(comp_no)
        for outcome_no in outcomes:
            summaries.append(analyse(store, comp_no, outcome_no, **options))
    logger.info(f"Summarised {len(summaries)} meta-analyses from {len(comparisons)} comparisons")
    return summaries
