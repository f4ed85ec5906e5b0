"""Unit tests for column resolution and default headings."""

from forestprep.core.models import ColumnKey
from forestprep.meta.columns import (
    DEFAULT_LABELS,
    DEFAULT_RIGHT_COLS,
    deduplicate,
    default_label,
    resolve_columns,
)


class TestDefaultColumns:
    """Tests for default left-hand columns."""

    def test_without_subgroups(self) -> None:
        """Test name and study count are shown by default."""
        resolved = resolve_columns(None, DEFAULT_RIGHT_COLS, has_subgroups=False)
        assert resolved.left_cols == ["name", "k"]
        assert resolved.left_labs == ["Meta-Analysis", "Number of\nStudies"]

    def test_with_subgroups(self) -> None:
        """Test the interaction p-value is added for subgroup tables."""
        resolved = resolve_columns(None, DEFAULT_RIGHT_COLS, has_subgroups=True)
        assert resolved.left_cols == [ColumnKey.NAME, ColumnKey.K, ColumnKey.PVAL_QB]
        assert resolved.left_labs == ["Subgroup", "Number of\nStudies", "Interaction\nP-value"]

    def test_right_defaults(self) -> None:
        """Test effect and confidence interval keep their keys as headings."""
        resolved = resolve_columns(None, DEFAULT_RIGHT_COLS, has_subgroups=False)
        assert resolved.right_cols == ["effect", "ci"]
        assert resolved.right_labs == ["effect", "ci"]


class TestDeduplication:
    """Tests for moving shared columns to the right-hand side."""

    def test_k_on_right_removed_from_default_left(self) -> None:
        resolved = resolve_columns(None, ["effect", "k"], has_subgroups=False)
        assert resolved.left_cols == ["name"]
        assert resolved.right_cols == ["effect", "k"]

    def test_k_on_right_removed_from_override(self) -> None:
        """Test explicit left columns are deduplicated as well."""
        resolved = resolve_columns(["name", "k", "i2"], ["k", "effect"], has_subgroups=False)
        assert resolved.left_cols == ["name", "i2"]

    def test_pval_qb_on_right(self) -> None:
        resolved = resolve_columns(None, ["effect", "ci", "pval_qb"], has_subgroups=True)
        assert resolved.left_cols == ["name", "k"]

    def test_other_columns_not_deduplicated(self) -> None:
        """Test only study count and interaction p-value move."""
        resolved = resolve_columns(["name", "i2"], ["i2"], has_subgroups=False)
        assert resolved.left_cols == ["name", "i2"]

    def test_idempotent(self) -> None:
        left = ["name", "k", "pval_qb"]
        right = ["k", "pval_qb"]
        once = deduplicate(left, right)
        assert deduplicate(once, right) == once == ["name"]

    def test_no_right_columns(self) -> None:
        """Test right_cols=False shows no right columns and keeps the left."""
        resolved = resolve_columns(["name", "k"], False, has_subgroups=False)
        assert resolved.right_cols == []
        assert resolved.right_labs == []
        assert resolved.left_cols == ["name", "k"]


class TestLabels:
    """Tests for heading resolution."""

    def test_label_table(self) -> None:
        assert default_label("qb", False) == "Q.b"
        assert default_label("tau2", False) == "Between-study\nvariance"
        assert default_label("tau", False) == "Between-study\nSD"
        assert default_label("i2", True) == "I2"

    def test_unknown_column_keeps_key(self) -> None:
        assert default_label("weight", False) == "weight"

    def test_every_key_has_entry(self) -> None:
        assert set(DEFAULT_LABELS) == set(ColumnKey)

    def test_explicit_labels_with_default_sentinel(self) -> None:
        """Test None entries fall back to default headings."""
        resolved = resolve_columns(
            ["name", "k", "tau2"],
            ["effect"],
            has_subgroups=False,
            left_labs=["Analysis", None, None],
            right_labs=["MD"],
        )
        assert resolved.left_labs == ["Analysis", "Number of\nStudies", "Between-study\nvariance"]
        assert resolved.right_labs == ["MD"]

    def test_short_label_list_labels_leading_columns(self) -> None:
        resolved = resolve_columns(["name", "k"], ["effect"], has_subgroups=False, left_labs=["Analysis"])
        assert resolved.left_labs == ["Analysis", "Number of\nStudies"]

    def test_label_follows_column_moved_right(self) -> None:
        """Test headings after a moved column stay on their own column."""
        resolved = resolve_columns(
            ["name", "k", "i2"],
            ["effect", "ci", "k"],
            has_subgroups=False,
            left_labs=["Trial", "Studies", "Het"],
        )
        assert resolved.left_cols == ["name", "i2"]
        assert resolved.left_labs == ["Trial", "Het"]
        assert resolved.right_labs == ["effect", "ci", "Number of\nStudies"]
