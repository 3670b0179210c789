"""Profile CLI commands for Field Pay.

Manages the contractor profile (profile.yaml) - rate card, pay cadence
and dashboard thresholds.
"""

import click
import yaml

from fieldpay.sdk import (
    default_profile,
    get_profile_path,
    load_contractor_profile,
    save_profile,
    format_gst_number,
    ProfileValidationError,
)


@click.group()
def profile():
    """Manage the contractor profile (profile.yaml)."""
    pass


@profile.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
def profile_init(force):
    """Create a starter profile.yaml with every supported key."""
    path = get_profile_path(require_exists=False)
    if path.exists() and not force:
        raise click.ClickException(f"Profile already exists: {path}\nUse --force to overwrite.")

    saved = save_profile(default_profile(), path)
    click.echo(f"Created profile: {saved}")
    click.echo("Edit rates and schedule, then run 'field-pay profile show' to check it.")


@profile.command("show")
def profile_show():
    """Show the active profile and whether it is valid."""
    path = get_profile_path(require_exists=False)
    click.echo(f"Profile path: {path}")

    if not path.exists():
        click.echo("No profile found (using defaults). Create one with: field-pay profile init")
        return

    try:
        contractor = load_contractor_profile(require_exists=True)
    except yaml.YAMLError as e:
        raise click.ClickException(f"Invalid YAML in {path}: {e}")
    except ProfileValidationError as e:
        click.echo()
        click.echo("Validation Errors (profile is invalid):")
        for error in e.errors:
            click.echo(f"  ! {error}")
        raise click.ClickException("Profile has validation errors. Fix them before continuing.")

    click.echo()
    if contractor.name:
        click.echo(f"Contractor: {contractor.name}")
    if contractor.gst_number:
        click.echo(f"GST number: {format_gst_number(contractor.gst_number)}")

    click.echo()
    click.echo(yaml.dump(contractor.model_dump(mode="json"), default_flow_style=False, sort_keys=False))
