"""Plain-text table rendering of a forest plot request."""

from __future__ import annotations

from typing import List

import numpy as np
import pandas as pd

from ..core.measures import is_relative_effect
from ..core.models import RenderRequest, column_name
from .formatting import is_missing, format_interval, format_n, format_pt


def _numeric(data: pd.DataFrame, name: str) -> pd.Series:
    if name not in data.columns:
        return pd.Series(np.nan, index=data.index, dtype=float)
    return pd.to_numeric(data[name], errors="coerce")


def _passthrough(data: pd.DataFrame, name: str, lab_na: str) -> List[str]:
    if name not in data.columns:
        return [lab_na] * len(data)
    return [lab_na if is_missing(v) else str(v) for v in data[name]]


def render_table(request: RenderRequest) -> pd.DataFrame:
    """Return the displayed forest plot columns as a frame of strings.

    Column headings are the resolved labels.  Effects of ratio measures
    are shown on the natural scale when the analysis is backtransformed.
    """
    analysis = request.analysis
    data = analysis.data
    fmt = request.formatting
    lab_na = request.lab_na

    effect = _numeric(data, "effect")
    lower = _numeric(data, "ci_lower")
    upper = _numeric(data, "ci_upper")
    if analysis.backtransformed and is_relative_effect(analysis.effect_measure):
        effect, lower, upper = np.exp(effect), np.exp(lower), np.exp(upper)

    columns = []
    for column in request.columns:
        key = column_name(column)
        if key == "effect":
            values = format_n(effect, fmt.digits, lab_na, fmt.big_mark)
        elif key == "ci":
            values = format_interval(lower, upper, fmt.digits, lab_na, fmt.big_mark)
        elif key == "se":
            values = format_n(_numeric(data, "se"), fmt.digits_se, lab_na, fmt.big_mark)
        elif key == "zval":
            values = format_n(_numeric(data, "zval"), fmt.digits_zval, lab_na)
        elif key == "pval":
            values = format_pt(_numeric(data, "pval"), fmt.digits_pval, lab_na, scientific=fmt.scientific_pval)
        else:
            values = _passthrough(data, key, lab_na)
        columns.append(values)
    # Built by position so that repeated headings keep every column
    frame = pd.DataFrame(dict(enumerate(columns)), index=data.index)
    frame.columns = list(request.labels)
    return frame
