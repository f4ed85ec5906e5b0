"""Meta‑analysis display utilities.

This package prepares combined (subgroup) meta‑analyses for forest plot
display: column selection and headings, choice of the interaction test,
and numeric formatting.  It also re-runs per-outcome meta‑analyses of a
review in batch and collects their printed summaries.

"""

from .analyzer import EffectSize, MetaAnalyzer  # noqa: F401
from .batch import OutcomeSummary, ReviewStore, SummaryCollection, analyse_outcome, summarize_all  # noqa: F401
from .columns import ResolvedColumns, resolve_columns  # noqa: F401
from .combined import build_combined_summary, forest_combined  # noqa: F401
from .formatting import format_combined_table, format_n, format_percent, format_pt  # noqa: F401
from .heterogeneity import select_interaction_test  # noqa: F401
from .table import render_table  # noqa: F401
