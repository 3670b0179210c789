"""Rich renderers for breakdowns, schedules and dashboards.

Transforms SDK models into formatted Rich tables.
"""

from decimal import Decimal
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fieldpay.sdk.schedule import work_days
from fieldpay.sdk.schemas import AggregateSummary, CheckInResult, PayPeriod, TaxBreakdown


def render_breakdown(console: Console, breakdown: TaxBreakdown, title: str = "Daily Breakdown") -> None:
    """Render a GST breakdown as an invoice-style table."""
    table = Table(title=title, box=box.ROUNDED, show_header=False)
    table.add_column("", style="bold", min_width=28)
    table.add_column("Amount", justify="right", min_width=12)

    table.add_row("[bold]TAXABLE[/bold]", "")
    table.add_row("  Day rate", _fmt(breakdown.day_rate_total))
    table.add_row("  Truck", _fmt(breakdown.truck_rate_total))
    table.add_row("  [dim]Taxable subtotal[/dim]", f"[dim]{_fmt(breakdown.taxable_subtotal)}[/dim]")
    table.add_row("  GST (5%)", _fmt(breakdown.gst_amount))
    table.add_row("  After-tax subtotal", _fmt(breakdown.after_tax_subtotal))
    table.add_row("", "")

    table.add_row("[bold]NON-TAXABLE[/bold]", "")
    table.add_row("  Travel", _fmt(breakdown.travel_reimbursement))
    table.add_row("  Subsistence", _fmt(breakdown.subsistence))
    table.add_row("  Additional charges", _fmt(breakdown.additional_charges))
    table.add_row("  [dim]Non-taxable total[/dim]", f"[dim]{_fmt(breakdown.non_taxable_total)}[/dim]")
    table.add_row("", "")

    table.add_row(
        "[bold green]GRAND TOTAL[/bold green]",
        f"[bold green]{_fmt(breakdown.grand_total)}[/bold green]",
    )

    console.print(table)


def render_checkin(console: Console, result: CheckInResult) -> None:
    """Render a saved check-in, warnings first."""
    _render_warnings(console, result.warnings)
    render_breakdown(
        console,
        result.breakdown,
        title=f"Check-in {result.trial_id}: {result.entry_date.isoformat()}",
    )


def render_schedule(
    console: Console,
    periods: List[PayPeriod],
    current: Optional[PayPeriod] = None,
    following: Optional[PayPeriod] = None,
) -> None:
    """Render a pay schedule; the current period is highlighted."""
    table = Table(title="Pay Schedule", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Work start")
    table.add_column("Cutoff")
    table.add_column("Submit by")
    table.add_column("Payment")
    table.add_column("Days", justify="right")
    table.add_column("Work days", justify="right")
    table.add_column("Type", style="dim")

    for period in periods:
        style = "bold cyan" if current is not None and period.period_number == current.period_number else None
        table.add_row(
            str(period.period_number),
            period.work_start.isoformat(),
            period.cutoff_date.isoformat(),
            period.submission_date.isoformat(),
            period.payment_date.isoformat() if period.payment_date else "-",
            str(period.days_in_period),
            str(work_days(period)),
            period.type,
            style=style,
        )

    console.print(table)
    if following is not None:
        console.print(f"Next period starts {following.work_start.isoformat()} (period {following.period_number})")


def render_dashboard(console: Console, summary: AggregateSummary, trial_id: str) -> None:
    """Render trial dashboard numbers and the daily series."""
    table = Table(title=f"Trial Dashboard: {trial_id}", box=box.ROUNDED, show_header=False)
    table.add_column("", style="bold", min_width=24)
    table.add_column("Value", justify="right", min_width=12)

    table.add_row("Total earned", _fmt(summary.total_earned))
    table.add_row("Days worked", str(summary.days_worked))
    table.add_row("Trial day", f"{summary.current_day} ({summary.trial_days_remaining} remaining)")
    table.add_row("Average per day", _fmt(summary.average_daily_earnings))
    table.add_row("Projected total", _fmt(summary.projected_total))
    table.add_row("Completion", f"{summary.completion_rate}%")
    table.add_row("Efficiency score", str(summary.efficiency_score))
    table.add_row("Hours", f"{summary.total_hours} (avg {summary.avg_hours_per_day})")
    if summary.best_day:
        table.add_row("Best day", f"{summary.best_day.entry_date.isoformat()} {_fmt(summary.best_day.earnings)}")

    metrics = summary.performance_metrics
    on_track = "[green]yes[/green]" if metrics.on_track else "[yellow]no[/yellow]"
    table.add_row("Consistency", metrics.consistency)
    table.add_row("Productivity", metrics.productivity)
    table.add_row("On track", on_track)

    console.print(table)

    series = Table(title="Daily Earnings", box=box.SIMPLE)
    series.add_column("Day", justify="right")
    series.add_column("Earned", justify="right")
    for day_number, amount in enumerate(summary.weekly_series, start=1):
        series.add_row(str(day_number), _fmt(amount) if amount else "[dim]-[/dim]")
    console.print(series)


def _render_warnings(console: Console, warnings: List[str]) -> None:
    for warning in warnings:
        console.print(Panel(
            f"[yellow]{warning}[/yellow]",
            title="Note",
            border_style="yellow"
        ))


def _fmt(amount: Optional[Decimal]) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"${amount:,.2f}"
