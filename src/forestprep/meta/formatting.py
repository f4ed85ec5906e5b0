"""Numeric formatting for forest plot tables.

Every formatter accepts either a scalar or a sequence (list, array or
``pandas.Series``) and returns a ``str`` or a ``list[str]`` accordingly.
Missing values (``None``, ``NaN``, ``pd.NA``) never raise; they are
rendered as the configured missing-value label.  Returned strings carry
no alignment padding: column alignment is the renderer's job.
"""

from __future__ import annotations

from typing import Any, Callable, List, Union

import numpy as np
import pandas as pd

from ..core.models import FormattingConfig

Formatted = Union[str, List[str]]


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _is_vector(values: Any) -> bool:
    return isinstance(values, (list, tuple, np.ndarray, pd.Series, pd.Index))


def _apply(values: Any, func: Callable[[Any], str]) -> Formatted:
    if _is_vector(values):
        return [func(v) for v in values]
    return func(values)


def _fixed(value: float, digits: int, big_mark: str = "") -> str:
    if big_mark:
        return f"{value:,.{digits}f}".replace(",", big_mark)
    return f"{value:.{digits}f}"


def rm_space(values: Any) -> Formatted:
    """Strip alignment padding from formatted strings."""
    return _apply(values, lambda v: str(v).strip())


def format_n(values: Any, digits: int, lab_na: str = "", big_mark: str = "") -> Formatted:
    """Format numbers with a fixed number of decimals."""

    def _one(value: Any) -> str:
        if is_missing(value):
            return lab_na
        return _fixed(round(float(value), digits), digits, big_mark).strip()

    return _apply(values, _one)


def format_pt(
    values: Any,
    digits: int,
    lab_na: str = "",
    scientific: bool = False,
    big_mark: str = "",
) -> Formatted:
    """Format p-values and other small non-negative statistics.

    Zero prints as ``"0"`` and values below ``10 ** -digits`` print as
    ``"< 0.001"`` (for ``digits=3``).  With ``scientific=True`` non-zero
    values use exponent notation, e.g. ``1.23e-05``.
    """
    threshold = 10.0 ** -digits
    if digits > 0:
        below = "< 0." + "0" * (digits - 1) + "1"
    else:
        below = "< 1"

    def _one(value: Any) -> str:
        if is_missing(value):
            return lab_na
        x = float(value)
        if x == 0:
            return "0"
        if scientific:
            return f"{x:.{digits}e}"
        if x < threshold:
            return below
        return _fixed(round(x, digits), digits, big_mark).strip()

    return _apply(values, _one)


def format_percent(values: Any, digits: int, lab_na: str = "") -> Formatted:
    """Format a fraction as a percentage, e.g. ``0.6789`` -> ``"67.9%"``.

    The percent sign is only added to values that are present, so a
    missing I2 renders as exactly ``lab_na``.
    """

    def _one(value: Any) -> str:
        if is_missing(value):
            return lab_na
        return _fixed(round(100 * float(value), digits), digits).strip() + "%"

    return _apply(values, _one)


def format_count(values: Any, lab_na: str = "") -> Formatted:
    """Format study counts as plain integers."""

    def _one(value: Any) -> str:
        if is_missing(value):
            return lab_na
        return str(int(value))

    return _apply(values, _one)


def format_interval(lower: Any, upper: Any, digits: int, lab_na: str = "", big_mark: str = "") -> Formatted:
    """Format confidence limits as ``"[lower; upper]"``."""

    def _one(lo: Any, hi: Any) -> str:
        if is_missing(lo) or is_missing(hi):
            return lab_na
        return f"[{format_n(lo, digits, big_mark=big_mark)}; {format_n(hi, digits, big_mark=big_mark)}]"

    if _is_vector(lower):
        return [_one(lo, hi) for lo, hi in zip(lower, upper)]
    return _one(lower, upper)


def format_combined_table(
    data: pd.DataFrame,
    formatting: FormattingConfig,
    lab_na: str = "",
    has_subgroups: bool = False,
) -> pd.DataFrame:
    """Return a copy of ``data`` with heterogeneity columns as display strings.

    Effect, standard error, z-value and p-value columns are left numeric;
    the renderer formats them with the digit counts carried in
    ``formatting``.
    """
    out = data.copy()
    if has_subgroups:
        out["qb"] = format_n(out["qb"], formatting.digits_q, lab_na)
        out["pval_qb"] = rm_space(
            format_pt(
                out["pval_qb"],
                formatting.digits_pval_q,
                lab_na=lab_na,
                scientific=formatting.scientific_pval,
            )
        )
    for column, digits in (("tau2", formatting.digits_tau2), ("tau", formatting.digits_tau)):
        if column in out.columns:
            out[column] = rm_space(format_pt(out[column], digits, lab_na=lab_na, big_mark=formatting.big_mark))
    for column in ("i2", "i2_lower", "i2_upper"):
        if column in out.columns:
            out[column] = rm_space(format_percent(out[column], formatting.digits_i2, lab_na))
    if "k" in out.columns:
        out["k"] = format_count(out["k"], lab_na)
    return out
