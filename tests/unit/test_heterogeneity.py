"""Unit tests for the choice of interaction test."""

import numpy as np
import pandas as pd
import pytest

from forestprep.core.models import CombineMethod
from forestprep.meta.heterogeneity import select_interaction_test


def make_frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "name": ["Age 55", "Age 65", "All"],
            "is_subgroup": [True, True, False],
            "qb_fixed": [1.5, 2.5, 9.9],
            "pval_qb_fixed": [0.2, 0.1, 0.9],
            "qb_random": [0.9, 1.1, 9.9],
            "pval_qb_random": [0.3, 0.4, 0.9],
        }
    )


class TestSelectInteractionTest:
    """Tests for copying Q-between from the pooling method's branch."""

    def test_fixed(self) -> None:
        out = select_interaction_test(make_frame(), CombineMethod.FIXED)
        assert out["qb"].iloc[:2].tolist() == pytest.approx([1.5, 2.5])
        assert out["pval_qb"].iloc[:2].tolist() == pytest.approx([0.2, 0.1])

    def test_random(self) -> None:
        out = select_interaction_test(make_frame(), CombineMethod.RANDOM)
        assert out["qb"].iloc[:2].tolist() == pytest.approx([0.9, 1.1])
        assert out["pval_qb"].iloc[:2].tolist() == pytest.approx([0.3, 0.4])

    def test_non_subgroup_rows_stay_missing(self) -> None:
        """Test rows outside subgroup analyses get no interaction test."""
        for method in CombineMethod:
            out = select_interaction_test(make_frame(), method)
            assert np.isnan(out["qb"].iloc[2])
            assert np.isnan(out["pval_qb"].iloc[2])

    def test_no_subgroups(self) -> None:
        """Test tables without subgroup rows are returned unchanged."""
        frame = make_frame()
        frame["is_subgroup"] = False
        out = select_interaction_test(frame, CombineMethod.FIXED)
        assert "qb" not in out.columns
        assert out is not frame

    def test_missing_branch_columns(self) -> None:
        """Test an absent source column yields missing values."""
        frame = make_frame().drop(columns=["qb_random", "pval_qb_random"])
        out = select_interaction_test(frame, CombineMethod.RANDOM)
        assert out["qb"].isna().all()

    def test_input_not_modified(self) -> None:
        frame = make_frame()
        select_interaction_test(frame, CombineMethod.FIXED)
        assert "qb" not in frame.columns
