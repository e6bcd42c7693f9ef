"""CLI entry point for polishai - polish text and inspect licenses from a terminal."""

from __future__ import annotations

import logging
import sys

import click

from polishai import __version__
from polishai.modes import MODE_PROMPTS, Mode

# -- CLI group --------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="polishai")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """PolishAI text polishing and license tools."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    ctx.ensure_object(dict)


def _services(ctx: click.Context):
    """Services from the environment, unless a caller injected them in ctx.obj."""
    services = ctx.obj.get("services")
    if services is None:
        from polishai.config import Settings
        from polishai.services import Services

        services = Services(Settings.from_env())
        ctx.obj["services"] = services
    return services


# -- modes -----------------------------------------------------------------------------


@cli.command()
def modes():
    """List the transformation modes and their instructions."""
    for mode in Mode:
        click.secho(mode.value, fg="green", bold=True)
        click.echo(f"  {MODE_PROMPTS[mode]}\n")


# -- polish ----------------------------------------------------------------------------


@cli.command()
@click.argument("text")
@click.option(
    "-m",
    "--mode",
    type=click.Choice([m.value for m in Mode]),
    default=Mode.GRAMMAR.value,
    show_default=True,
    help="Transformation mode",
)
@click.option("--custom-prompt", default=None, help="Instructions for --mode custom")
@click.pass_context
def polish(ctx: click.Context, text: str, mode: str, custom_prompt: str | None):
    """Polish TEXT (use - to read from stdin)."""
    if text == "-":
        text = click.get_text_stream("stdin").read()
    if not text.strip():
        click.secho("Error: no text to polish", fg="red", err=True)
        sys.exit(1)

    from polishai.config import ConfigurationError
    from polishai.polisher import PolishError

    try:
        result = _services(ctx).polisher.polish(text, Mode(mode), custom_prompt)
    except (PolishError, ConfigurationError) as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(result.polished)
    if len(text) > result.input_length:
        click.secho(
            f"Note: input truncated to {result.input_length} characters", fg="yellow", err=True
        )


# -- check-license ---------------------------------------------------------------------


@cli.command("check-license")
@click.argument("email")
@click.pass_context
def check_license_cmd(ctx: click.Context, email: str):
    """Show whether EMAIL holds an active license (read-only)."""
    from polishai.utils import normalize_email

    normalized = normalize_email(email)
    if not normalized:
        click.secho("Error: email is required", fg="red", err=True)
        sys.exit(1)

    from polishai.config import ConfigurationError
    from polishai.licenses import LicenseStoreError

    try:
        record = _services(ctx).licenses.find_active(normalized)
    except (LicenseStoreError, ConfigurationError) as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    if record is None:
        click.secho(f"No active license for {normalized}", fg="yellow")
        return

    click.secho(f"Active license for {normalized}", fg="green")
    click.echo(f"  Created:       {record.created_at or '(unknown)'}")
    click.echo(f"  Last verified: {record.last_verified or '(never)'}")
    if record.stripe_session_id:
        click.echo(f"  Checkout:      {record.stripe_session_id}")
