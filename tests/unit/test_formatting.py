"""Unit tests for numeric formatting of forest plot statistics."""

import numpy as np
import pandas as pd
import pytest

from forestprep.core.models import FormattingConfig
from forestprep.meta.formatting import (
    format_combined_table,
    format_count,
    format_interval,
    format_n,
    format_percent,
    format_pt,
    rm_space,
)


class TestFormatPercent:
    """Tests for I2 percentage formatting."""

    def test_fraction_to_percent(self) -> None:
        """Test a fraction is scaled, rounded and suffixed."""
        assert format_percent(0.6789, 1) == "67.9%"

    def test_zero_digits(self) -> None:
        """Test rounding to whole percentages."""
        assert format_percent(0.6789, 0) == "68%"

    def test_missing_has_no_percent_sign(self) -> None:
        """Test a missing I2 renders as exactly the missing label."""
        assert format_percent(np.nan, 1) == ""
        assert format_percent(None, 1, lab_na="NA") == "NA"

    def test_vector(self) -> None:
        """Test sequences return one string per value."""
        assert format_percent([0.5, None, 0.0], 0, lab_na="-") == ["50%", "-", "0%"]


class TestFormatPT:
    """Tests for p-value style formatting."""

    def test_rounds_to_digits(self) -> None:
        """Test regular values are rounded with fixed decimals."""
        assert format_pt(0.0312, 2) == "0.03"
        assert format_pt(0.5, 4) == "0.5000"

    def test_small_values(self) -> None:
        """Test values below the precision are shown as an upper bound."""
        assert format_pt(0.00001, 4) == "< 0.0001"
        assert format_pt(0.004, 2) == "< 0.01"

    def test_zero(self) -> None:
        """Test exact zero is printed without decimals."""
        assert format_pt(0.0, 2) == "0"

    def test_scientific(self) -> None:
        """Test exponent notation."""
        assert format_pt(0.000123, 2, scientific=True) == "1.23e-04"

    def test_scientific_zero(self) -> None:
        """Test exact zero stays "0" in exponent notation."""
        assert format_pt(0.0, 2, scientific=True) == "0"
        assert format_pt([0.0, 0.5], 1, scientific=True) == ["0", "5.0e-01"]

    def test_big_mark(self) -> None:
        """Test thousands separators."""
        assert format_pt(12345.678, 2, big_mark=",") == "12,345.68"
        assert format_pt(12345.678, 2, big_mark="'") == "12'345.68"

    def test_missing(self) -> None:
        """Test missing values use the missing label."""
        assert format_pt(np.nan, 2, lab_na="n/a") == "n/a"
        assert format_pt(pd.Series([0.2, np.nan]), 2) == ["0.20", ""]


class TestFormatN:
    """Tests for fixed-decimal formatting."""

    def test_fixed_decimals(self) -> None:
        assert format_n(1.23456, 2) == "1.23"
        assert format_n(-0.5, 3) == "-0.500"

    def test_missing(self) -> None:
        assert format_n(None, 2, lab_na="--") == "--"


class TestFormatCount:
    """Tests for study count formatting."""

    def test_plain_integer(self) -> None:
        """Test counts drop any decimals."""
        assert format_count(3.0) == "3"
        assert format_count(np.int64(12)) == "12"

    def test_missing(self) -> None:
        assert format_count([2, None]) == ["2", ""]


class TestFormatInterval:
    """Tests for confidence interval text."""

    def test_interval(self) -> None:
        assert format_interval(-0.3, 0.05, 2) == "[-0.30; 0.05]"

    def test_missing_limit(self) -> None:
        assert format_interval([0.1, np.nan], [0.2, 0.3], 1, lab_na="NA") == ["[0.1; 0.2]", "NA"]


class TestRmSpace:
    """Tests for padding removal."""

    def test_strips(self) -> None:
        assert rm_space(["  1.2", "3 ", "4"]) == ["1.2", "3", "4"]
        assert rm_space(" 0.05 ") == "0.05"


class TestFormatCombinedTable:
    """Tests for formatting a combined-analysis table."""

    def _frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "name": ["A", "B"],
                "k": [3, 2],
                "tau2": [0.01234, np.nan],
                "tau": [0.1111, 0.0],
                "i2": [0.6789, np.nan],
                "i2_lower": [0.1, np.nan],
                "i2_upper": [0.9, np.nan],
                "qb": [4.2, np.nan],
                "pval_qb": [0.04, np.nan],
            }
        )

    def test_heterogeneity_columns(self) -> None:
        """Test tau2, tau, I2 and k become display strings."""
        out = format_combined_table(self._frame(), FormattingConfig(digits_i2=1), lab_na="NA")
        assert out["tau2"].tolist() == ["0.0123", "NA"]
        assert out["tau"].tolist() == ["0.1111", "0"]
        assert out["i2"].tolist() == ["67.9%", "NA"]
        assert out["i2_lower"].tolist() == ["10.0%", "NA"]
        assert out["i2_upper"].tolist() == ["90.0%", "NA"]
        assert out["k"].tolist() == ["3", "2"]

    def test_interaction_only_with_subgroups(self) -> None:
        """Test Q-between columns are only formatted for subgroup tables."""
        frame = self._frame()
        untouched = format_combined_table(frame, FormattingConfig())
        assert untouched["qb"].iloc[0] == pytest.approx(4.2)
        formatted = format_combined_table(frame, FormattingConfig(), has_subgroups=True)
        assert formatted["qb"].tolist() == ["4.20", ""]
        assert formatted["pval_qb"].tolist() == ["0.04", ""]

    def test_does_not_modify_input(self) -> None:
        """Test the input frame keeps its numeric values."""
        frame = self._frame()
        format_combined_table(frame, FormattingConfig(), has_subgroups=True)
        assert frame["i2"].iloc[0] == pytest.approx(0.6789)
        assert frame["k"].iloc[0] == 3
