"""CLI application using Typer for forest plot table preparation."""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core.errors import ForestPrepError
from ..core.models import CombineMethod
from ..io.readers import read_combined_csv, read_combined_json, read_review_csv
from ..meta.batch import summarize_all
from ..meta.combined import build_combined_summary
from ..meta.table import render_table
from ..utils.logging import get_logger, set_log_level

app = typer.Typer(
    name="forestprep",
    help="Prepare combined meta-analyses for forest plots and summarise reviews",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug messages to stderr"),
) -> None:
    """Prepare combined meta-analyses for forest plots and summarise reviews."""
    if verbose:
        set_log_level("DEBUG")


def _split(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


@app.command()
def forest(
    path: Path = typer.Argument(..., help="CSV or JSON file with combined-analysis rows", exists=True),
    method: CombineMethod = typer.Option(CombineMethod.RANDOM, "--method", help="Pooling method shown (CSV input only)"),
    sm: str = typer.Option("", "--sm", help="Summary measure code, e.g. MD or OR (CSV input only)"),
    backtransf: bool = typer.Option(True, "--backtransf/--no-backtransf", help="Show ratio measures on natural scale"),
    left_cols: Optional[str] = typer.Option(None, "--left-cols", help="Comma-separated left columns"),
    right_cols: str = typer.Option("effect,ci", "--right-cols", help="Comma-separated right columns"),
    lab_na: str = typer.Option("", "--lab-na", help="Label for missing values"),
    digits: Optional[int] = typer.Option(None, "--digits", help="Digits for effects and confidence limits"),
    digits_pval_q: Optional[int] = typer.Option(None, "--digits-pval-q", help="Digits for interaction p-values"),
    digits_i2: Optional[int] = typer.Option(None, "--digits-i2", help="Digits for I2"),
    big_mark: Optional[str] = typer.Option(None, "--big-mark", help="Thousands separator"),
) -> None:
    """
    Show the forest plot table of a combined meta-analysis.

    Examples:
        forestprep forest subgroups.csv --method fixed --sm MD
        forestprep forest combined.json --left-cols name,k,i2
    """
    try:
        if path.suffix.lower() == ".json":
            analysis = read_combined_json(path)
        else:
            analysis = read_combined_csv(path, method, sm, backtransf)
        request = build_combined_summary(
            analysis,
            left_cols=_split(left_cols),
            right_cols=_split(right_cols) or False,
            lab_na=lab_na,
            digits=digits,
            digits_pval_q=digits_pval_q,
            digits_i2=digits_i2,
            big_mark=big_mark,
        )
    except ForestPrepError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)
    frame = render_table(request)
    table = Table(title=request.smlab)
    for label in frame.columns:
        table.add_column(Text(str(label)))
    for row in frame.itertuples(index=False):
        table.add_row(*[Text(str(v)) for v in row])
    console.print(table)


@app.command()
def summary(
    path: Path = typer.Argument(..., help="CSV file with study-level review data", exists=True),
    comp: Optional[List[str]] = typer.Option(None, "--comp", "-c", help="Comparison number (repeatable)"),
    outcome: Optional[List[str]] = typer.Option(None, "--outcome", "-o", help="Outcome number (repeatable)"),
    method: Optional[CombineMethod] = typer.Option(None, "--method", help="Show only this pooling method"),
) -> None:
    """Redo and print the meta-analyses of all (or selected) review outcomes."""
    try:
        store = read_review_csv(path)
        comp_nos = [_coerce(v) for v in comp] if comp else None
        outcome_nos = [_coerce(v) for v in outcome] if outcome else None
        summaries = summarize_all(store, comp_nos, outcome_nos, method=method)
    except ForestPrepError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)
    console.print(str(summaries), markup=False, highlight=False, soft_wrap=True)


def _coerce(value: str):
    return int(value) if value.isdigit() else value


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__
    console.print(f"forestprep v{__version__}")


if __name__ == "__main__":
    app()
