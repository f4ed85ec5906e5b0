"""Inverse-variance meta-analysis of a single outcome.

This module defines the :class:`MetaAnalyzer` class used by the batch
summarizer to redo per-outcome meta-analyses.  It implements fixed
effect and random effects pooling (DerSimonian–Laird estimator for the
between-study variance) and the usual heterogeneity statistics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
from scipy import stats

from ..core.errors import InvalidArgument
from ..core.models import CombineMethod
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class EffectSize:
    """Representation of a study's effect estimate and its standard error."""

    study_id: str
    effect: float
    se: float
    sample_size: Optional[int] = None

    @property
    def weight(self) -> float:
        return 1.0 / (self.se ** 2) if self.se > 0 else 0.0


class MetaAnalyzer:
    """Pool effect sizes with fixed effect or random effects models."""

    def __init__(self, level: float = 0.95) -> None:
        if not 0 < level < 1:
            raise InvalidArgument("Argument 'level' must be between 0 and 1.")
        self.level = level

    @staticmethod
    def _usable(effect_sizes: List[EffectSize]) -> List[EffectSize]:
        return [
            es for es in effect_sizes
            if np.isfinite(es.effect) and np.isfinite(es.se) and es.se > 0
        ]

    def compute_pooled_effect(
        self,
        effect_sizes: List[EffectSize],
        method: CombineMethod = CombineMethod.RANDOM,
    ) -> Dict:
        """Compute the pooled effect size across a set of studies.

        Args:
            effect_sizes: List of individual study effect sizes.
            method: Pooling approach, fixed effect or random effects.

        Returns:
            A dictionary with the pooled estimate, its standard error,
            confidence limits, z-score and p-value.  Estimates are NaN
            when no study has a usable standard error.
        """
        method = CombineMethod(method)
        usable = self._usable(effect_sizes)
        if len(usable) < len(effect_sizes):
            logger.warning(f"Ignoring {len(effect_sizes) - len(usable)} studies without a usable standard error")
        if not usable:
            nan = float("nan")
            return {
                "pooled_effect": nan,
                "standard_error": nan,
                "ci_lower": nan,
                "ci_upper": nan,
                "z_score": nan,
                "p_value": nan,
                "method": method.value,
                "n_studies": 0,
            }
        effects = np.array([es.effect for es in usable])
        ses = np.array([es.se for es in usable])
        weights = 1.0 / (ses ** 2)
        if method is CombineMethod.RANDOM:
            tau_squared = self._estimate_tau_squared(effects, weights)
            weights = 1.0 / (ses ** 2 + tau_squared)
        pooled_effect = np.sum(weights * effects) / np.sum(weights)
        pooled_se = np.sqrt(1.0 / np.sum(weights))
        z_crit = stats.norm.ppf(1 - (1 - self.level) / 2)
        z_score = pooled_effect / pooled_se if pooled_se > 0 else 0.0
        p_value = 2 * stats.norm.sf(abs(z_score))
        return {
            "pooled_effect": float(pooled_effect),
            "standard_error": float(pooled_se),
            "ci_lower": float(pooled_effect - z_crit * pooled_se),
            "ci_upper": float(pooled_effect + z_crit * pooled_se),
            "z_score": float(z_score),
            "p_value": float(p_value),
            "method": method.value,
            "n_studies": len(usable),
        }

    @staticmethod
    def _q_statistic(effects: np.ndarray, weights: np.ndarray) -> float:
        pooled = np.sum(weights * effects) / np.sum(weights)
        return float(np.sum(weights * (effects - pooled) ** 2))

    def _estimate_tau_squared(self, effects: np.ndarray, weights: np.ndarray) -> float:
        """Estimate between-study variance (tau²) using DerSimonian–Laird."""
        Q = self._q_statistic(effects, weights)
        df = len(effects) - 1
        c = np.sum(weights) - np.sum(weights ** 2) / np.sum(weights)
        tau_squared = max(0.0, (Q - df) / c) if c > 0 else 0.0
        return float(tau_squared)

    def assess_heterogeneity(self, effect_sizes: List[EffectSize]) -> Dict:
        """Compute heterogeneity statistics (Q, I², tau², tau).

        I² is returned as a fraction.  Statistics that are undefined for
        fewer than two studies are NaN.
        """
        usable = self._usable(effect_sizes)
        k = len(usable)
        if k < 2:
            nan = float("nan")
            return {"Q": nan, "Q_df": max(k - 1, 0), "Q_pvalue": nan, "I_squared": nan, "tau_squared": nan, "tau": nan}
        effects = np.array([es.effect for es in usable])
        weights = 1.0 / (np.array([es.se for es in usable]) ** 2)
        Q = self._q_statistic(effects, weights)
        df = k - 1
        Q_pvalue = float(stats.chi2.sf(Q, df))
        I_squared = max(0.0, (Q - df) / Q) if Q > 0 else 0.0
        tau_squared = self._estimate_tau_squared(effects, weights)
        return {
            "Q": Q,
            "Q_df": df,
            "Q_pvalue": Q_pvalue,
            "I_squared": float(I_squared),
            "tau_squared": tau_squared,
            "tau": float(np.sqrt(tau_squared)),
        }
