"""Field Pay CLI - GST breakdowns, pay schedules and trial dashboards."""

import json
from datetime import timedelta

import click
from rich.console import Console

from fieldpay import __version__
from fieldpay.sdk import (
    InvalidInputError,
    JsonEntryRepository,
    ProfileNotFoundError,
    ProfileValidationError,
    WeekdayConfig,
    build_dashboard,
    compute_daily_breakdown,
    current_period,
    load_contractor_profile,
    make_trial_window,
    next_period,
    parse_date,
    resolve_schedule,
    submit_daily_entry,
    upcoming_deadlines,
)

from .profile_commands import profile as profile_group
from .renderers.breakdown_renderer import (
    render_breakdown,
    render_checkin,
    render_dashboard,
    render_schedule,
)
from .settings_commands import settings as settings_group

TRIAL_LENGTH_DAYS = 15


@click.group()
@click.version_option(version=__version__, prog_name="field-pay")
def cli():
    """Field Pay - GST and pay-period tools for Alberta field contractors.

    Commands for pricing a day of work, planning invoice deadlines,
    logging check-ins and reviewing trial performance.

    Configuration is loaded from (in order):

    \b
    1. FIELD_PAY_CONFIG_PATH environment variable
    2. settings.json 'profile' key
    3. ~/.config/field-pay/profile.yaml (XDG default)

    Rates in profile.yaml are used wherever an option is not given.
    Run 'field-pay profile init' to create one.
    """
    pass


cli.add_command(profile_group)
cli.add_command(settings_group)


def _profile():
    """Load the contractor profile, defaults if none exists."""
    try:
        return load_contractor_profile(require_exists=False)
    except (ProfileNotFoundError, ProfileValidationError) as e:
        raise click.ClickException(str(e))


def _echo_json(model) -> None:
    click.echo(json.dumps(model.model_dump(mode="json"), indent=2))


def work_options(func):
    """Options shared by commands that price a day of work."""
    options = [
        click.option("--day-rate", type=str, help="Labour day rate (default: profile rate)"),
        click.option("--truck-rate", type=str, help="Truck/equipment rate (default: profile rate)"),
        click.option("--truck/--no-truck", "truck_used", default=None,
                     help="Whether the truck was used (default: when a truck rate is set)"),
        click.option("--kms", type=str, help="Travel distance in km"),
        click.option("--rate-per-km", type=str, help="Travel reimbursement per km"),
        click.option("--subsistence", type=str, help="Per-diem amount"),
        click.option("--additional", type=str, help="Additional non-taxable charges"),
        click.option("--hours", type=str, help="Hours worked (default: 8)"),
        click.option("--not-worked", is_flag=True, help="Record a day off (all totals zero)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _work_payload(profile, day_rate, truck_rate, truck_used, kms, rate_per_km,
                  subsistence, additional, hours, not_worked) -> dict:
    """Merge command-line values over the profile rate card."""
    rates = profile.rates
    payload = {
        "worked": not not_worked,
        "day_rate": day_rate if day_rate is not None else rates.day_rate,
        "truck_rate": truck_rate if truck_rate is not None else rates.truck_rate,
        "travel_kms": kms if kms is not None else rates.travel_kms,
        "rate_per_km": rate_per_km if rate_per_km is not None else rates.rate_per_km,
        "subsistence": subsistence if subsistence is not None else rates.subsistence,
        "additional_charges": additional,
        "hours_worked": hours,
    }
    payload["day_rate_used"] = day_rate is not None or rates.day_rate > 0
    if truck_used is None:
        truck_used = truck_rate is not None or rates.truck_rate > 0
    payload["truck_used"] = truck_used
    return payload


@cli.command()
@work_options
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def breakdown(day_rate, truck_rate, truck_used, kms, rate_per_km, subsistence,
              additional, hours, not_worked, output_format):
    """Calculate the GST breakdown for one day of work.

    Only the day rate and truck are taxable (5% GST). Travel, subsistence
    and additional charges are reimbursed without tax.

    \b
    Examples:
      field-pay breakdown --day-rate 450 --truck-rate 150 --kms 45 --subsistence 75
      field-pay breakdown --format json
    """
    payload = _work_payload(_profile(), day_rate, truck_rate, truck_used, kms,
                            rate_per_km, subsistence, additional, hours, not_worked)
    try:
        result = compute_daily_breakdown(payload)
    except InvalidInputError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        _echo_json(result)
    else:
        render_breakdown(Console(), result)


@cli.command()
@click.argument("start_date")
@click.option("--mode", type=click.Choice(["canonical", "weekday", "custom"]),
              help="Cadence mode (default: profile schedule.mode)")
@click.option("--length", "period_length_days", type=int, help="Days per period (default: 14)")
@click.option("--count", "period_count", type=int, help="Number of periods (default: 26)")
@click.option("--cutoff-weekday", help="Weekday logging closes (weekday mode)")
@click.option("--submission-weekday", help="Weekday invoices are due (weekday mode)")
@click.option("--cutoff-date", help="Cutoff date YYYY-MM-DD (custom mode)")
@click.option("--submission-date", help="Submission date YYYY-MM-DD (custom mode)")
@click.option("--upcoming", is_flag=True, help="Only show periods due in the next 30 days")
@click.option("--today", help="Treat this date as today (YYYY-MM-DD)")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def schedule(start_date, mode, period_length_days, period_count, cutoff_weekday,
             submission_weekday, cutoff_date, submission_date, upcoming, today, output_format):
    """Generate the pay-period schedule starting at START_DATE.

    An unusable manual configuration falls back to the default bi-weekly
    cadence with a note.

    \b
    Examples:
      field-pay schedule 2024-01-01 --count 3
      field-pay schedule 2024-01-01 --mode weekday --cutoff-weekday thu --submission-weekday fri
      field-pay schedule 2024-01-01 --upcoming --today 2024-01-10
    """
    settings = _profile().schedule
    try:
        weekday_config = WeekdayConfig(
            cutoff_weekday=cutoff_weekday or settings.cutoff_weekday,
            submission_weekday=submission_weekday or settings.submission_weekday,
            cutoff_date=parse_date(cutoff_date, "cutoff_date") if cutoff_date else None,
            submission_date=parse_date(submission_date, "submission_date") if submission_date else None,
        )
        now = parse_date(today, "today") if today else None
        periods, used_fallback = resolve_schedule(
            start_date,
            period_length_days or settings.period_length_days,
            period_count or settings.period_count,
            mode or settings.mode,
            weekday_config,
        )
    except InvalidInputError as e:
        raise click.ClickException(str(e))

    if used_fallback:
        click.echo("Note: schedule settings were not usable; using the default bi-weekly cadence.", err=True)

    shown = upcoming_deadlines(periods, now) if upcoming else periods

    if output_format == "json":
        click.echo(json.dumps({
            "used_fallback": used_fallback,
            "periods": [p.model_dump(mode="json") for p in shown],
        }, indent=2))
        return

    if not shown:
        click.echo("No submission deadlines in the next 30 days.")
        return
    render_schedule(Console(), shown, current=current_period(periods, now), following=next_period(periods, now))


@cli.command()
@click.argument("trial_id")
@click.argument("entry_date")
@work_options
@click.option("--client-total", help="Total shown by the client, checked against the server total")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def checkin(trial_id, entry_date, day_rate, truck_rate, truck_used, kms, rate_per_km,
            subsistence, additional, hours, not_worked, client_total, output_format):
    """Log one day of work for TRIAL_ID on ENTRY_DATE (YYYY-MM-DD).

    Logging the same date again replaces the earlier entry.

    \b
    Examples:
      field-pay checkin trial-1 2024-01-03 --day-rate 450 --kms 45
      field-pay checkin trial-1 2024-01-04 --not-worked
    """
    payload = _work_payload(_profile(), day_rate, truck_rate, truck_used, kms,
                            rate_per_km, subsistence, additional, hours, not_worked)
    try:
        result = submit_daily_entry(JsonEntryRepository(), trial_id, entry_date, payload, client_total)
    except InvalidInputError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        _echo_json(result)
    else:
        render_checkin(Console(), result)


@cli.command()
@click.argument("trial_id")
@click.option("--start", "start_date", required=True, help="Trial start date (YYYY-MM-DD)")
@click.option("--end", "end_date", help=f"Trial end date (default: start + {TRIAL_LENGTH_DAYS} days)")
@click.option("--rate-per-km", help="Override the travel rate for every day")
@click.option("--today", help="Treat this date as today (YYYY-MM-DD)")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def dashboard(trial_id, start_date, end_date, rate_per_km, today, output_format):
    """Show trial dashboard analytics for TRIAL_ID.

    \b
    Examples:
      field-pay dashboard trial-1 --start 2024-01-01
      field-pay dashboard trial-1 --start 2024-01-01 --today 2024-01-10 --format json
    """
    profile = _profile()
    try:
        start = parse_date(start_date, "start")
        end = parse_date(end_date, "end") if end_date else start + timedelta(days=TRIAL_LENGTH_DAYS)
        window = make_trial_window(start, end)
        summary = build_dashboard(
            JsonEntryRepository(),
            trial_id,
            window,
            rate_per_km=rate_per_km,
            now=parse_date(today, "today") if today else None,
            thresholds=profile.performance,
        )
    except ValueError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        _echo_json(summary)
    else:
        render_dashboard(Console(), summary, trial_id)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
