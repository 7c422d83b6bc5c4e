"""
CLI for the batch costing engine.

Commands:
    seacost batch FILE - Cost, yield and packaging for a batch form
    seacost dcf FILE - DCF valuation of a cash-flow projection
    seacost scenarios FILE - Probability-weighted scenario summary
    seacost ratios FILE - Financial ratios against seafood benchmarks
    seacost sensitivity FILE - One-factor sensitivity or tornado analysis
    seacost export FILE - Write all available results to JSON/CSV/Excel
    seacost config - Show current configuration
    seacost version - Print version
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, NoReturn, Optional

import orjson
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from seacost import __version__
from seacost.config import Settings, clear_settings_cache, get_settings
from seacost.costing.buildup import BatchCostSummary, compute_batch_cost
from seacost.exceptions import ConfigurationError, InputFileError, SeaCostError
from seacost.logging import setup_logging
from seacost.ratios.statements import FinancialStatement, benchmark_statement
from seacost.reports.export import AnalysisWorkbook, ReportExporter
from seacost.types import BatchInput, CashFlowProjection, ScenarioOutcome
from seacost.valuation.dcf import DCFEngine, projection_from_dict
from seacost.valuation.scenarios import ScenarioWeightingEngine
from seacost.valuation.sensitivity import SensitivityAnalyzer

app = typer.Typer(
    name="seacost",
    help="Seafood batch costing and financial analysis",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

INTERPRETATION_STYLES = {
    "excellent": "green",
    "good": "blue",
    "average": "yellow",
    "poor": "red",
}


def _get_settings_safe() -> Settings | None:
    """Get settings, returning None if configuration is invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except ConfigurationError:
        return None


def _require_settings() -> Settings:
    settings = _get_settings_safe()
    if settings is None:
        error_console.print(
            "[red]Error:[/red] Configuration is invalid. "
            "Run 'seacost config' to see what's wrong."
        )
        raise typer.Exit(1)
    setup_logging(settings.LOG_LEVEL)
    return settings


def _load_json(path: Path) -> Any:
    """Read a JSON input file."""
    try:
        return orjson.loads(path.read_bytes())
    except OSError as e:
        raise InputFileError(f"Cannot read input file: {e}", context={"path": str(path)}) from e
    except orjson.JSONDecodeError as e:
        raise InputFileError(f"Invalid JSON: {e}", context={"path": str(path)}) from e


def _fail(error: SeaCostError) -> NoReturn:
    error_console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def _require_object(value: Any, section: str, path: Path) -> dict[str, Any]:
    if not isinstance(value, dict):
        _fail(
            InputFileError(
                f"Expected a JSON object for {section}",
                context={"path": str(path), "section": section},
            )
        )
    return value


def _section(data: Any, key: str) -> Any:
    """Return data[key] for a dict payload, or the payload itself for a list."""
    if isinstance(data, dict):
        return data.get(key)
    return data


def _load_projections(data: Any, settings: Settings) -> list[CashFlowProjection]:
    rows = _section(data, "projections") or []
    default_rate = settings.DEFAULT_DISCOUNT_RATE
    if isinstance(data, dict) and data.get("discount_rate") is not None:
        default_rate = data["discount_rate"]
    return [
        projection_from_dict(row, period=i, default_discount_rate=default_rate)
        for i, row in enumerate(rows, start=1)
        if isinstance(row, dict)
    ]


def _load_scenarios(data: Any) -> list[ScenarioOutcome]:
    rows = _section(data, "scenarios") or []
    return [ScenarioOutcome.from_dict(row) for row in rows if isinstance(row, dict)]


def _print_batch(summary: BatchCostSummary) -> None:
    y = summary.yield_result
    p = summary.packaging

    table = Table(title="Batch Cost", show_header=True)
    table.add_column("Item", style="cyan")
    table.add_column("Amount", justify="right", style="green")
    table.add_column("Share", justify="right")
    for name, amount, pct in summary.breakdown:
        table.add_row(name.replace("_", " ").title(), f"{amount:,.2f}", f"{pct:.1f}%")
    table.add_row("[bold]Total[/bold]", f"[bold]{summary.total_cost:,.2f}[/bold]", "")
    table.add_row("Cost per kg", f"{summary.cost_per_kg:,.2f}", "")
    console.print(table)

    warning = "\n[yellow]Finished weight exceeds input weight, check the entries.[/yellow]" if y.weight_gain else ""
    console.print(
        Panel(
            f"[bold]Final weight:[/bold] {y.final_weight:,.2f} kg\n"
            f"[bold]Loss:[/bold] {y.loss:,.2f} kg ({y.loss_pct:.1f}%)\n"
            f"[bold]Yield:[/bold] {y.yield_pct:.1f}%\n"
            f"[bold]Packaging:[/bold] {p.bags} bags, {p.gelatin_kg:.2f} kg gelatin, {p.boxes} boxes"
            f"{warning}",
            title="[bold cyan]Yield & Packaging[/bold cyan]",
            border_style="cyan",
        )
    )

    pr = summary.pricing
    estimate = ""
    if summary.processing is not None and y.final_weight <= 0:
        estimate = f"\n[dim]Priced on estimated weight {summary.processing.final_weight:,.2f} kg[/dim]"
    console.print(
        Panel(
            f"[bold]Selling price:[/bold] {pr.selling_price_per_kg:,.2f} per kg\n"
            f"[bold]Break-even:[/bold] {pr.break_even_price:,.2f} per kg\n"
            f"[bold]Profit:[/bold] {pr.profit_per_kg:,.2f} per kg ({pr.margin_at_current_price:.1f}%)\n"
            f"[bold]Recommended:[/bold] {pr.recommended_selling_price:,.2f} per kg "
            f"at {pr.recommended_margin:.0f}% margin\n"
            f"[bold]Market position:[/bold] {pr.market_position.value}"
            f"{estimate}",
            title="[bold green]Pricing[/bold green]",
            border_style="green",
        )
    )


@app.command()
def batch(
    input_file: Annotated[Path, typer.Argument(help="JSON batch form")],
) -> None:
    """Cost, yield and packaging for one batch."""
    settings = _require_settings()
    try:
        data = _load_json(input_file)
    except SeaCostError as e:
        _fail(e)

    data = _require_object(data, "input", input_file)
    # Either a bare batch form or a file with a "batch" section
    form = _require_object(data.get("batch", data), "batch", input_file)
    summary = compute_batch_cost(BatchInput.from_dict(form), settings)
    _print_batch(summary)


@app.command()
def dcf(
    input_file: Annotated[Path, typer.Argument(help="JSON with a projections list")],
    terminal_value: Annotated[
        Optional[float],
        typer.Option("--terminal-value", "-t", help="Terminal value (overrides file)"),
    ] = None,
) -> None:
    """Discount a cash-flow projection to enterprise value.

    If the file also carries a "cash_flows" list, NPV/IRR/payback metrics
    are printed for it.
    """
    settings = _require_settings()
    try:
        data = _load_json(input_file)
    except SeaCostError as e:
        _fail(e)

    projections = _load_projections(data, settings)
    if terminal_value is None and isinstance(data, dict):
        terminal_value = data.get("terminal_value")

    engine = DCFEngine()
    result = engine.calculate_dcf(projections, terminal_value or 0.0)

    table = Table(title="DCF Projection", show_header=True)
    for column in ("Period", "Revenue", "FCF", "Rate", "Present Value", "Cumulative"):
        table.add_column(column, justify="right")
    for p in result.projections:
        table.add_row(
            str(p.period),
            f"{p.revenue:,.0f}",
            f"{p.free_cash_flow:,.0f}",
            f"{p.discount_rate:.1f}%",
            f"{p.present_value:,.2f}",
            f"{p.cumulative_cash_flow:,.0f}",
        )
    console.print(table)
    console.print(
        Panel(
            f"[bold]Total PV:[/bold] {result.total_present_value:,.2f}\n"
            f"[bold]Terminal value:[/bold] {result.terminal_value:,.2f}\n"
            f"[bold]Enterprise value:[/bold] {result.enterprise_value:,.2f}",
            title="[bold green]Valuation[/bold green]",
            border_style="green",
        )
    )

    cash_flows = data.get("cash_flows") if isinstance(data, dict) else None
    if cash_flows:
        rate = data.get("discount_rate", settings.DEFAULT_DISCOUNT_RATE)
        npv = engine.npv_analysis(cash_flows, rate)
        irr = f"{npv.irr:.1f}%" if npv.irr is not None else "n/a"
        payback = str(npv.payback_period) if npv.payback_period is not None else "n/a"
        discounted = str(npv.discounted_payback) if npv.discounted_payback is not None else "n/a"
        console.print(
            Panel(
                f"[bold]NPV:[/bold] {npv.npv:,.2f}\n"
                f"[bold]IRR:[/bold] {irr}\n"
                f"[bold]Payback:[/bold] {payback} periods\n"
                f"[bold]Discounted payback:[/bold] {discounted} periods\n"
                f"[bold]Profitability index:[/bold] {npv.profitability_index:.2f}",
                title="[bold cyan]Investment Metrics[/bold cyan]",
                border_style="cyan",
            )
        )


@app.command()
def scenarios(
    input_file: Annotated[Path, typer.Argument(help="JSON scenario list")],
) -> None:
    """Probability-weighted revenue, net income, ROI and risk index."""
    settings = _require_settings()
    try:
        data = _load_json(input_file)
        outcomes = _load_scenarios(data)
        summary = ScenarioWeightingEngine(settings).summarize(outcomes)
    except SeaCostError as e:
        _fail(e)

    table = Table(title="Scenarios", show_header=True)
    for column in ("Scenario", "Probability", "Revenue", "Net Income", "ROI", "Risk"):
        table.add_column(column)
    for s in outcomes:
        table.add_row(
            s.label,
            f"{s.probability:.0f}%",
            f"{s.revenue:,.0f}",
            f"{s.net_income:,.0f}",
            f"{s.roi:.1f}%",
            s.risk_level.value,
        )
    console.print(table)
    console.print(
        Panel(
            f"[bold]Weighted revenue:[/bold] {summary.weighted_revenue:,.2f}\n"
            f"[bold]Weighted net income:[/bold] {summary.weighted_net_income:,.2f}\n"
            f"[bold]Weighted ROI:[/bold] {summary.weighted_roi:.1f}%\n"
            f"[bold]Risk index:[/bold] {summary.risk_index:.1f} (1 = low, 3 = high)",
            title="[bold green]Expected Outcome[/bold green]",
            border_style="green",
        )
    )


@app.command()
def ratios(
    input_file: Annotated[Path, typer.Argument(help="JSON financial statement")],
) -> None:
    """Financial ratios classified against seafood-industry benchmarks.

    The file holds a "current" statement and optionally a "previous" one
    for trends; a flat statement object is also accepted.
    """
    _require_settings()
    try:
        data = _load_json(input_file)
    except SeaCostError as e:
        _fail(e)

    data = _require_object(data, "input", input_file)
    current = FinancialStatement.from_dict(
        _require_object(data.get("current", data), "current", input_file)
    )
    previous = None
    if "previous" in data:
        previous = FinancialStatement.from_dict(
            _require_object(data["previous"], "previous", input_file)
        )

    table = Table(title="Financial Ratios", show_header=True)
    for column in ("Ratio", "Category", "Value", "Benchmark", "Rating", "Trend"):
        table.add_column(column)
    for r in benchmark_statement(current, previous):
        style = INTERPRETATION_STYLES[r.interpretation.value]
        table.add_row(
            r.name,
            r.category,
            f"{r.value:,.2f}",
            f"{r.benchmark:,.2f}",
            f"[{style}]{r.interpretation.value}[/{style}]",
            r.trend.value,
        )
    console.print(table)


@app.command()
def sensitivity(
    input_file: Annotated[Path, typer.Argument(help="JSON with a projections list")],
    parameter: Annotated[
        Optional[str],
        typer.Option("--parameter", "-p", help="Parameter to perturb; omit for a tornado"),
    ] = None,
    delta: Annotated[
        float,
        typer.Option("--delta", "-d", help="Perturbation in percent"),
    ] = 10.0,
    metric: Annotated[
        str,
        typer.Option("--metric", "-m", help="free_cash_flow or present_value"),
    ] = "present_value",
    period: Annotated[
        int,
        typer.Option("--period", help="1-based projection row used as base case"),
    ] = 1,
) -> None:
    """One-factor sensitivity of a projection period."""
    settings = _require_settings()
    try:
        data = _load_json(input_file)
        projections = _load_projections(data, settings)
        if not 1 <= period <= len(projections):
            raise InputFileError(
                "Projection period out of range",
                context={"path": str(input_file), "period": period, "available": len(projections)},
            )
        base_case = projections[period - 1]
        analyzer = SensitivityAnalyzer()

        if parameter:
            point = analyzer.perturb(base_case, parameter, delta, metric)
            console.print(
                f"[bold]{point.parameter_name}[/bold] {point.perturbation_pct:+.1f}% -> "
                f"{point.metric} {point.base_value:,.2f} => {point.perturbed_value:,.2f} "
                f"([bold]{point.output_delta:+,.2f}[/bold])"
            )
            return

        bars = analyzer.tornado(base_case, delta_pct=delta, metric=metric)
    except SeaCostError as e:
        _fail(e)

    table = Table(title=f"Tornado ({metric}, +/-{abs(delta):.0f}%)", show_header=True)
    for column in ("Parameter", "Low", "High", "Swing"):
        table.add_column(column, justify="right")
    for bar in bars:
        table.add_row(
            bar.parameter_name,
            f"{bar.low_delta:+,.2f}",
            f"{bar.high_delta:+,.2f}",
            f"{bar.swing:,.2f}",
        )
    console.print(table)


@app.command()
def export(
    input_file: Annotated[Path, typer.Argument(help="JSON with any of batch/projections/scenarios/statement")],
    fmt: Annotated[
        str,
        typer.Option("--format", "-f", help="json, csv or xlsx"),
    ] = "json",
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Output directory"),
    ] = None,
    title: Annotated[
        str,
        typer.Option("--title", help="Report title"),
    ] = "Batch Analysis",
) -> None:
    """Compute every section present in the file and export it."""
    settings = _require_settings()
    effective_output_dir = output_dir if output_dir is not None else settings.OUTPUT_DIR

    if fmt not in ("json", "csv", "xlsx"):
        error_console.print(f"[red]Error:[/red] Unknown format: {fmt}")
        raise typer.Exit(1)

    try:
        data = _load_json(input_file)
        if not isinstance(data, dict):
            raise InputFileError("Expected a JSON object", context={"path": str(input_file)})

        workbook = AnalysisWorkbook(title=title)

        if isinstance(data.get("batch"), dict):
            workbook.batch_summary = compute_batch_cost(BatchInput.from_dict(data["batch"]), settings)

        projections = _load_projections(data, settings)
        if projections:
            workbook.dcf_result = DCFEngine().calculate_dcf(projections, data.get("terminal_value"))
            workbook.tornado = SensitivityAnalyzer().tornado(projections[0])

        outcomes = _load_scenarios(data)
        if outcomes:
            workbook.scenarios = outcomes
            workbook.scenario_summary = ScenarioWeightingEngine(settings).summarize(outcomes)

        if isinstance(data.get("statement"), dict):
            previous = data.get("previous_statement")
            workbook.ratios = benchmark_statement(
                FinancialStatement.from_dict(data["statement"]),
                FinancialStatement.from_dict(previous) if isinstance(previous, dict) else None,
            )

        exporter = ReportExporter()
        if fmt == "json":
            paths = [exporter.export_json(workbook, effective_output_dir / f"{workbook.slug}.json")]
        elif fmt == "csv":
            paths = exporter.export_csv(workbook, effective_output_dir)
        else:
            paths = [exporter.export_excel(workbook, effective_output_dir / f"{workbook.slug}.xlsx")]
    except SeaCostError as e:
        _fail(e)

    console.print(f"[bold]Report ID:[/bold] {workbook.report_id}")
    for path in paths:
        console.print(f"[dim]Wrote:[/dim] {path}")


@app.command()
def config() -> None:
    """Show current configuration."""
    console.print()
    console.print("[bold]Costing Engine Configuration[/bold]")
    console.print()

    settings = _get_settings_safe()
    if settings is None:
        error_console.print("[red]Configuration is invalid.[/red]")
        error_console.print()
        error_console.print("Check that:")
        error_console.print("  - PACKAGING_* values are greater than 0")
        error_console.print("  - RATIO_GOOD_THRESHOLD <= RATIO_EXCELLENT_THRESHOLD")
        error_console.print("  - RISK_WEIGHT_LOW < RISK_WEIGHT_MEDIUM < RISK_WEIGHT_HIGH")
        error_console.print()
        error_console.print("See .env.example for a template.")
        raise typer.Exit(1)

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in settings.display().items():
        table.add_row(key, str(value))
    console.print(table)
    console.print()


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"seacost version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
