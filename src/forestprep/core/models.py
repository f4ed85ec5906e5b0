"""Core domain models for combined meta-analyses and their display settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from ..config.settings import settings


class CombineMethod(str, Enum):
    """Pooling method whose summaries a combined analysis displays."""

    FIXED = "fixed"
    RANDOM = "random"


class ColumnKey(str, Enum):
    """Closed set of columns known to the forest plot table."""

    NAME = "name"
    K = "k"
    EFFECT = "effect"
    CI = "ci"
    SE = "se"
    ZVAL = "zval"
    PVAL = "pval"
    QB = "qb"
    PVAL_QB = "pval_qb"
    TAU2 = "tau2"
    TAU = "tau"
    I2 = "i2"


Column = Union[ColumnKey, str]


def column_name(column: Column) -> str:
    """Return the plain string key of a column."""
    return column.value if isinstance(column, ColumnKey) else str(column)


_TRUE = {"true", "t", "yes", "1"}


def as_flag(value: Any) -> bool:
    """Interpret a table cell as a boolean; text such as ``"False"`` is false."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE
    if value is None or pd.isna(value):
        return False
    return bool(value)


@dataclass
class CombinedAnalysis:
    """Result of merging several (subgroup) meta-analyses into one table.

    ``data`` holds one row per displayed sub-analysis.  Required columns
    are ``name`` and ``is_subgroup``; pooled effect and heterogeneity
    columns (``effect``, ``ci_lower``, ``ci_upper``, ``se``, ``zval``,
    ``pval``, ``tau2``, ``tau``, ``i2``, ``i2_lower``, ``i2_upper``) are
    optional and treated as missing when absent.  Tables with subgroup
    rows also carry the interaction tests for both pooling methods
    (``qb_fixed``, ``pval_qb_fixed``, ``qb_random``, ``pval_qb_random``).
    An optional ``analysis`` column names the source meta-analysis of
    each row; otherwise ``name`` is used.
    """

    data: pd.DataFrame
    combine_method: CombineMethod = CombineMethod.RANDOM
    effect_measure: str = ""
    backtransformed: bool = True
    k_w: Optional[List[int]] = None
    k_w_orig: Optional[List[int]] = None

    def __post_init__(self) -> None:
        if "is_subgroup" in self.data.columns and self.data["is_subgroup"].dtype != bool:
            self.data = self.data.copy()
            self.data["is_subgroup"] = self.data["is_subgroup"].map(as_flag).astype(bool)

    @property
    def has_subgroups(self) -> bool:
        if "is_subgroup" not in self.data.columns:
            return False
        return bool(self.data["is_subgroup"].any())

    @property
    def group_column(self) -> str:
        return "analysis" if "analysis" in self.data.columns else "name"


class FormattingConfig(BaseModel):
    """Rounding and notation settings for every formattable statistic.

    The p-value and I2 defaults are two and one digits below the global
    settings respectively, matching the compact layout of combined
    forest plots.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    digits: int = Field(default_factory=lambda: settings.digits_forest, ge=0)
    digits_se: int = Field(default_factory=lambda: settings.digits_se, ge=0)
    digits_zval: int = Field(default_factory=lambda: settings.digits_zval, ge=0)
    digits_pval: int = Field(default_factory=lambda: max(settings.digits_pval - 2, 2), ge=1)
    digits_pval_q: int = Field(default_factory=lambda: max(settings.digits_pval_q - 2, 2), ge=1)
    digits_q: int = Field(default_factory=lambda: settings.digits_q, ge=0)
    digits_tau2: int = Field(default_factory=lambda: settings.digits_tau2, ge=0)
    digits_tau: int = Field(default_factory=lambda: settings.digits_tau, ge=0)
    digits_i2: int = Field(default_factory=lambda: max(settings.digits_i2 - 1, 0), ge=0)
    scientific_pval: bool = Field(default_factory=lambda: settings.scientific_pval)
    big_mark: str = Field(default_factory=lambda: settings.big_mark)


@dataclass(frozen=True)
class RenderRequest:
    """Everything a forest plot renderer needs for a combined analysis."""

    left_cols: List[Column]
    left_labs: List[str]
    right_cols: List[Column]
    right_labs: List[str]
    formatting: FormattingConfig
    overall: bool
    subgroup: bool
    hetstat: Union[bool, str]
    overall_hetstat: bool
    lab_na: str
    smlab: str
    calcwidth_pooled: bool
    analysis: CombinedAnalysis
    extra_render_args: Mapping[str, Any] = field(default_factory=dict)

    @property
    def columns(self) -> Sequence[Column]:
        return [*self.left_cols, *self.right_cols]

    @property
    def labels(self) -> Sequence[str]:
        return [*self.left_labs, *self.right_labs]
