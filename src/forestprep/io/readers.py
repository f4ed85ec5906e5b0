"""Loaders for combined analyses and review data stored on disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

import pandas as pd

from ..core.errors import InvalidArgument
from ..core.models import CombinedAnalysis, CombineMethod
from ..meta.batch import ReviewStore
from ..utils.logging import get_logger

logger = get_logger(__name__)

REQUIRED_COMBINED_COLUMNS = ("name", "is_subgroup")


def combined_from_frame(
    data: pd.DataFrame,
    combine_method: Union[CombineMethod, str] = CombineMethod.RANDOM,
    effect_measure: str = "",
    backtransformed: bool = True,
) -> CombinedAnalysis:
    """Wrap a table of combined-analysis rows."""
    missing = [c for c in REQUIRED_COMBINED_COLUMNS if c not in data.columns]
    if missing:
        raise InvalidArgument(f"Combined analysis table lacks required columns: {', '.join(missing)}")
    try:
        method = CombineMethod(str(getattr(combine_method, "value", combine_method)).lower())
    except ValueError as exc:
        raise InvalidArgument(f"Unknown pooling method: {combine_method!r}") from exc
    return CombinedAnalysis(
        data=data.reset_index(drop=True),
        combine_method=method,
        effect_measure=effect_measure or "",
        backtransformed=backtransformed,
    )


def read_combined_csv(
    path: Path,
    combine_method: Union[CombineMethod, str] = CombineMethod.RANDOM,
    effect_measure: str = "",
    backtransformed: bool = True,
) -> CombinedAnalysis:
    """Read combined-analysis rows from a CSV file."""
    df = pd.read_csv(path)
    logger.debug(f"Read {len(df)} combined-analysis rows from {path}")
    return combined_from_frame(df, combine_method, effect_measure, backtransformed)


def read_combined_json(path: Path) -> CombinedAnalysis:
    """Read a combined analysis from JSON.

    The file holds an object with ``rows`` (a list of row objects) and
    optional ``combine_method``, ``effect_measure`` and
    ``backtransformed`` entries.
    """
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict) or "rows" not in payload:
        raise InvalidArgument(f"{path} does not contain a combined analysis object with 'rows'")
    return combined_from_frame(
        pd.DataFrame(payload["rows"]),
        payload.get("combine_method", CombineMethod.RANDOM),
        payload.get("effect_measure", ""),
        bool(payload.get("backtransformed", True)),
    )


def read_review_csv(path: Path) -> ReviewStore:
    """Read study-level review data from a CSV file."""
    df = pd.read_csv(path)
    logger.debug(f"Read {len(df)} study rows from {path}")
    return ReviewStore(data=df)
