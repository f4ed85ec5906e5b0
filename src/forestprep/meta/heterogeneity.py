"""Selection of the test for subgroup interaction."""

from __future__ import annotations

import numpy as np
import pandas as pd

from ..core.models import CombineMethod, as_flag


def _column(data: pd.DataFrame, name: str) -> pd.Series:
    if name in data.columns:
        return data[name]
    return pd.Series(np.nan, index=data.index, dtype=float)


def select_interaction_test(data: pd.DataFrame, combine_method: CombineMethod) -> pd.DataFrame:
    """Copy Q-between and its p-value from the branch of the pooling method.

    Only subgroup rows receive a value; other rows stay missing.  Tables
    without subgroup rows are returned as an unchanged copy.
    """
    out = data.copy()
    if "is_subgroup" not in out.columns:
        return out
    is_subgroup = out["is_subgroup"].map(as_flag).astype(bool)
    if not is_subgroup.any():
        return out
    suffix = "fixed" if CombineMethod(combine_method) is CombineMethod.FIXED else "random"
    out["qb"] = _column(out, f"qb_{suffix}").where(is_subgroup, np.nan)
    out["pval_qb"] = _column(out, f"pval_qb_{suffix}").where(is_subgroup, np.nan)
    return out
