"""Preparation of combined meta-analyses for forest plot display.

:func:`build_combined_summary` takes a :class:`CombinedAnalysis`,
validates the display options, and runs a short pipeline: recompute
per-analysis counts, resolve columns and headings, pick the interaction
test of the pooling method, and turn heterogeneity statistics into
display strings.  The result is a :class:`RenderRequest` for a forest
plot renderer.  The input analysis is never modified.
"""

from __future__ import annotations

from dataclasses import replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

import numpy as np
from pydantic import ValidationError

from ..core.errors import IncompatibleArgument, InvalidArgument, InvalidInputKind
from ..core.measures import measure_label
from ..core.models import (
    Column,
    CombinedAnalysis,
    CombineMethod,
    FormattingConfig,
    RenderRequest,
    column_name,
)
from ..utils.logging import get_logger
from .columns import DEFAULT_RIGHT_COLS, default_left_cols, resolve_columns
from .formatting import format_combined_table
from .heterogeneity import select_interaction_test

logger = get_logger(__name__)

HETSTAT_CHOICES = ("study", "common", "fixed", "random")

_FORBIDDEN_PASSTHROUGH = ("comb_fixed", "comb_random")


def _check_logical(value: Any, name: str) -> None:
    if not isinstance(value, (bool, np.bool_)):
        raise InvalidArgument(f"Argument '{name}' must be a logical value (True or False).")


def _check_char(value: Any, name: str) -> None:
    if not isinstance(value, str):
        raise InvalidArgument(f"Argument '{name}' must be a character string.")


def _check_hetstat(value: Any) -> None:
    if value is None or isinstance(value, (bool, np.bool_)):
        return
    if not isinstance(value, str) or value not in HETSTAT_CHOICES:
        raise InvalidArgument(
            f"Argument 'hetstat' must be a logical value or one of {', '.join(HETSTAT_CHOICES)}."
        )


def _check_labels(cols: Union[Sequence[Column], bool], labels: Optional[Sequence[Any]], name: str) -> None:
    if labels is None or cols is False:
        return
    if len(labels) > len(cols):
        raise InvalidArgument(
            f"Argument '{name}' has more labels than columns ({len(cols)})."
        )


def _partial_match(key: str, target: str) -> bool:
    key = key.lower().replace(".", "_")
    return bool(key) and target.startswith(key)


def check_passthrough(extra_render_args: Mapping[str, Any]) -> None:
    """Reject renderer options that combined analyses fix themselves."""
    for key, value in extra_render_args.items():
        if _partial_match(key, "hetstat") and value:
            raise IncompatibleArgument("Argument 'hetstat' must be False for combined analyses.")
        for target in _FORBIDDEN_PASSTHROUGH:
            if _partial_match(key, target):
                raise IncompatibleArgument(f"Argument '{target}' cannot be used with combined analyses.")


def _formatting_config(options: Dict[str, Any]) -> FormattingConfig:
    given = {
        name: int(value) if isinstance(value, np.integer) else value
        for name, value in options.items()
        if value is not None
    }
    try:
        return FormattingConfig(**given)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise InvalidArgument(f"Argument '{field}': {error['msg']}") from exc


def recompute_counts(analysis: CombinedAnalysis) -> CombinedAnalysis:
    """Count rows per source analysis in order of first appearance."""
    counts = analysis.data.groupby(analysis.group_column, sort=False).size()
    return replace(analysis, k_w=[int(n) for n in counts.tolist()], k_w_orig=analysis.k_w)


def default_smlab(analysis: CombinedAnalysis) -> str:
    """Summary heading such as ``"Random Effects Model\\n(Mean Difference)"``."""
    if CombineMethod(analysis.combine_method) is CombineMethod.FIXED:
        smlab = "Fixed Effect Model"
    else:
        smlab = "Random Effects Model"
    if analysis.effect_measure:
        smlab += f"\n({measure_label(analysis.effect_measure, analysis.backtransformed)})"
    return smlab


def build_combined_summary(
    analysis: CombinedAnalysis,
    left_cols: Optional[Sequence[Column]] = None,
    left_labs: Optional[Sequence[Optional[str]]] = None,
    right_cols: Union[Sequence[Column], bool] = DEFAULT_RIGHT_COLS,
    right_labs: Optional[Sequence[Optional[str]]] = None,
    overall: bool = False,
    subgroup: bool = False,
    hetstat: Union[bool, str, None] = None,
    overall_hetstat: bool = False,
    lab_na: str = "",
    digits: Optional[int] = None,
    digits_se: Optional[int] = None,
    digits_zval: Optional[int] = None,
    digits_pval: Optional[int] = None,
    digits_pval_q: Optional[int] = None,
    digits_q: Optional[int] = None,
    digits_tau2: Optional[int] = None,
    digits_tau: Optional[int] = None,
    digits_i2: Optional[int] = None,
    scientific_pval: Optional[bool] = None,
    big_mark: Optional[str] = None,
    smlab: Optional[str] = None,
    calcwidth_pooled: Optional[bool] = None,
    extra_render_args: Optional[Mapping[str, Any]] = None,
) -> RenderRequest:
    """Validate options and prepare a combined analysis for rendering.

    Args:
        analysis: The combined analysis to display.
        left_cols: Left-hand columns; defaults depend on subgroup rows.
        left_labs: Headings for ``left_cols``; ``None`` entries use defaults.
        right_cols: Right-hand columns, or ``False`` for none.
        right_labs: Headings for ``right_cols``.
        overall: Show overall summaries.
        subgroup: Show subgroup summaries.
        hetstat: Placement of heterogeneity statistics; ``None`` selects
            ``False`` for subgroup tables and ``"study"`` otherwise.
        overall_hetstat: Show heterogeneity for the overall summary.
        lab_na: Label for missing values.
        digits, digits_se, digits_zval, digits_pval, digits_pval_q,
            digits_q, digits_tau2, digits_tau, digits_i2: Minimal number
            of significant digits per statistic; ``None`` uses the
            configured default.
        scientific_pval: Print p-values in scientific notation.
        big_mark: Thousands separator.
        smlab: Summary heading; defaults to the pooling method and
            effect measure.
        calcwidth_pooled: Whether pooled labels count towards the width
            of the label column; defaults to ``overall``.
        extra_render_args: Further options handed to the renderer.

    Returns:
        A :class:`RenderRequest` holding a new, formatted analysis.

    Raises:
        InvalidInputKind: ``analysis`` is not a :class:`CombinedAnalysis`.
        InvalidArgument: An option has the wrong type, length or range.
        IncompatibleArgument: ``extra_render_args`` enables heterogeneity
            rows or selects a pooling method.
    """
    if not isinstance(analysis, CombinedAnalysis):
        raise InvalidInputKind(
            f"Argument 'analysis' must be a CombinedAnalysis, not {type(analysis).__name__}."
        )
    _check_logical(overall, "overall")
    _check_logical(subgroup, "subgroup")
    _check_logical(overall_hetstat, "overall_hetstat")
    _check_char(lab_na, "lab_na")
    _check_hetstat(hetstat)
    if smlab is not None:
        _check_char(smlab, "smlab")
    if calcwidth_pooled is not None:
        _check_logical(calcwidth_pooled, "calcwidth_pooled")
    if right_cols is not False and (isinstance(right_cols, (bool, str)) or right_cols is None):
        raise InvalidArgument("Argument 'right_cols' must be a sequence of columns or False.")
    has_subgroups = analysis.has_subgroups
    _check_labels(
        left_cols if left_cols is not None else default_left_cols(has_subgroups),
        left_labs,
        "left_labs",
    )
    _check_labels(right_cols, right_labs, "right_labs")
    formatting = _formatting_config(
        {
            "digits": digits,
            "digits_se": digits_se,
            "digits_zval": digits_zval,
            "digits_pval": digits_pval,
            "digits_pval_q": digits_pval_q,
            "digits_q": digits_q,
            "digits_tau2": digits_tau2,
            "digits_tau": digits_tau,
            "digits_i2": digits_i2,
            "scientific_pval": scientific_pval,
            "big_mark": big_mark,
        }
    )
    extra = dict(extra_render_args or {})
    check_passthrough(extra)

    if hetstat is None:
        hetstat = False if has_subgroups else "study"
    if calcwidth_pooled is None:
        calcwidth_pooled = overall

    working = recompute_counts(analysis)
    resolved = resolve_columns(left_cols, right_cols, has_subgroups, left_labs, right_labs)
    logger.debug(
        "Resolved forest plot columns",
        extra={
            "left_cols": [column_name(c) for c in resolved.left_cols],
            "right_cols": [column_name(c) for c in resolved.right_cols],
        },
    )
    data = select_interaction_test(working.data, working.combine_method)
    data = format_combined_table(data, formatting, lab_na=lab_na, has_subgroups=has_subgroups)
    working = replace(working, data=data)

    if smlab is None:
        smlab = default_smlab(working)

    logger.info(
        f"Prepared combined analysis with {len(data)} rows",
        extra={
            "layout": "subgroup" if has_subgroups else "meta-analysis",
            "combine_method": CombineMethod(working.combine_method).value,
        },
    )
    return RenderRequest(
        left_cols=resolved.left_cols,
        left_labs=resolved.left_labs,
        right_cols=resolved.right_cols,
        right_labs=resolved.right_labs,
        formatting=formatting,
        overall=bool(overall),
        subgroup=bool(subgroup),
        hetstat=hetstat,
        overall_hetstat=bool(overall_hetstat),
        lab_na=lab_na,
        smlab=smlab,
        calcwidth_pooled=bool(calcwidth_pooled),
        analysis=working,
        extra_render_args=MappingProxyType(extra),
    )


def forest_combined(
    analysis: CombinedAnalysis,
    renderer: Optional[Callable[[RenderRequest], Any]] = None,
    **options: Any,
) -> Any:
    """Build the render request and pass it to ``renderer``.

    The default renderer produces a table of display strings (see
    :func:`forestprep.meta.table.render_table`).
    """
    request = build_combined_summary(analysis, **options)
    if renderer is None:
        from .table import render_table

        renderer = render_table
    return renderer(request)
