"""Column selection and labelling for combined forest plots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from ..core.models import Column, ColumnKey, column_name

DEFAULT_RIGHT_COLS: tuple = (ColumnKey.EFFECT, ColumnKey.CI)

# One entry per ColumnKey; None means the raw key is used as label.
DEFAULT_LABELS: Dict[ColumnKey, Optional[str]] = {
    ColumnKey.NAME: None,  # depends on subgroup structure
    ColumnKey.K: "Number of\nStudies",
    ColumnKey.EFFECT: None,
    ColumnKey.CI: None,
    ColumnKey.SE: None,
    ColumnKey.ZVAL: None,
    ColumnKey.PVAL: None,
    ColumnKey.QB: "Q.b",
    ColumnKey.PVAL_QB: "Interaction\nP-value",
    ColumnKey.TAU2: "Between-study\nvariance",
    ColumnKey.TAU: "Between-study\nSD",
    ColumnKey.I2: "I2",
}

# Columns that move to the right-hand side when requested on both sides
_RIGHT_WINS = (ColumnKey.PVAL_QB, ColumnKey.K)


@dataclass(frozen=True)
class ResolvedColumns:
    left_cols: List[Column]
    left_labs: List[str]
    right_cols: List[Column]
    right_labs: List[str]


def _as_key(column: Column) -> Column:
    try:
        return ColumnKey(column_name(column))
    except ValueError:
        return column


def default_label(column: Column, has_subgroups: bool) -> str:
    """Return the built-in heading for a column."""
    key = _as_key(column)
    if key is ColumnKey.NAME:
        return "Subgroup" if has_subgroups else "Meta-Analysis"
    if isinstance(key, ColumnKey):
        label = DEFAULT_LABELS[key]
        if label is not None:
            return label
    return column_name(column)


def default_left_cols(has_subgroups: bool) -> List[Column]:
    cols: List[Column] = [ColumnKey.NAME, ColumnKey.K]
    if has_subgroups:
        cols.append(ColumnKey.PVAL_QB)
    return cols


def _moved_right(right_cols: Sequence[Column]) -> set:
    right = {column_name(c) for c in right_cols}
    return {key.value for key in _RIGHT_WINS if key.value in right}


def deduplicate(left_cols: Sequence[Column], right_cols: Sequence[Column]) -> List[Column]:
    """Drop interaction p-value and study count from the left if shown on the right."""
    dropped = _moved_right(right_cols)
    return [c for c in left_cols if column_name(c) not in dropped]


def resolve_labels(
    cols: Sequence[Column],
    labels: Optional[Sequence[Optional[str]]],
    has_subgroups: bool,
) -> List[str]:
    """Fill missing labels (or ``None`` entries) with default headings.

    A label list shorter than ``cols`` labels the leading columns only.
    """
    labels = list(labels or [])
    labels += [None] * (len(cols) - len(labels))
    return [
        label if label is not None else default_label(col, has_subgroups)
        for col, label in zip(cols, labels)
    ]


def resolve_columns(
    left_cols: Optional[Sequence[Column]],
    right_cols: Union[Sequence[Column], bool],
    has_subgroups: bool,
    left_labs: Optional[Sequence[Optional[str]]] = None,
    right_labs: Optional[Sequence[Optional[str]]] = None,
) -> ResolvedColumns:
    """Decide the ordered left and right columns and their headings.

    Args:
        left_cols: Explicit left-hand columns, or ``None`` for the
            default ``[name, k]`` (plus ``pval_qb`` with subgroups).
        right_cols: Right-hand columns, or ``False`` for none.
        has_subgroups: Whether any row stems from a subgroup analysis.
        left_labs: Optional headings for the left columns.
        right_labs: Optional headings for the right columns.

    Returns:
        The resolved columns with one heading per column.
    """
    left = [_as_key(c) for c in left_cols] if left_cols is not None else default_left_cols(has_subgroups)
    right: List[Column] = [] if right_cols is False else [_as_key(c) for c in right_cols]
    # Labels follow their column when it moves to the right-hand side
    left_pairs = list(zip(left, resolve_labels(left, left_labs, has_subgroups)))
    if right_cols is not False:
        dropped = _moved_right(right)
        left_pairs = [(c, label) for c, label in left_pairs if column_name(c) not in dropped]
    return ResolvedColumns(
        left_cols=[c for c, _ in left_pairs],
        left_labs=[label for _, label in left_pairs],
        right_cols=right,
        right_labs=resolve_labels(right, right_labs, has_subgroups),
    )
