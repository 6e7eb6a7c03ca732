# Overview: Flask CLI command group for store bootstrap and inspection.

# backend/offline_stock/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask store <command>
#
# - python -m flask store init
#   Run pending schema steps and the seed gate (both idempotent).
# - python -m flask store status
#   Show backend, schema version and seed marker.
# - python -m flask store snapshot
#   Write a whole-store snapshot to STORE_SNAPSHOT_PATH now.

import click
from flask.cli import with_appcontext

from .errors import MigrationError
from .models.metadata import SEED_VERSION_KEY
from .services import migration_service, seed_service, snapshot_service
from .services.metadata_service import get_metadata
from .store import describe_store


@click.group('store')
def store_group():
    """Store lifecycle commands."""


@store_group.command('init')
@with_appcontext
def init_store_command():
    """
    Bring the store to the latest schema and seed baseline data.

    Safe to run any number of times.
    """
    click.echo("START Initializing store...")

    try:
        applied = migration_service.run_migrations()
    except MigrationError as e:
        click.echo(f"FAIL {e}")
        raise click.Abort()

    if applied:
        click.echo(f"PASS Applied schema steps: {', '.join(str(v) for v in applied)}")
    else:
        click.echo(f"PASS Schema already at version {migration_service.latest_version()}")

    if seed_service.ensure_seed_data():
        click.echo(f"PASS Seeded baseline data ({seed_service.SEED_VERSION})")
    else:
        click.echo(f"PASS Seed data already at {seed_service.SEED_VERSION}")

    click.echo("DONE Store ready")


@store_group.command('status')
@with_appcontext
def status_command():
    """Show schema version and seed marker."""
    info = describe_store()
    current = migration_service.current_schema_version()
    latest = migration_service.latest_version()

    click.echo(f"Backend:        {info['backend']} ({info['database']})")
    click.echo(f"Schema version: {current} / {latest}")
    click.echo(f"Seed version:   {get_metadata(SEED_VERSION_KEY) or '-'}")
    click.echo(f"Snapshot path:  {info['snapshot_path'] or '-'}")
    if current < latest:
        click.echo("WARN  Pending schema steps; run 'flask store init'")


@store_group.command('snapshot')
@with_appcontext
def snapshot_command():
    """Write a snapshot immediately."""
    try:
        snapshot_service.save_snapshot(force=True)
    except ValueError as e:
        click.echo(f"FAIL {e}")
        raise click.Abort()
    click.echo(f"PASS Snapshot written to {describe_store()['snapshot_path']}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(store_group)
