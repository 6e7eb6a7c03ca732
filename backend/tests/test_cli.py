from offline_stock.cli import init_store_command, snapshot_command, status_command
from offline_stock.migrations import LATEST_VERSION


def test_init_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(init_store_command)

    assert result.exit_code == 0
    assert f"Schema already at version {LATEST_VERSION}" in result.output
    assert "Seed data already at" in result.output


def test_status_reports_versions(app):
    result = app.test_cli_runner().invoke(status_command)

    assert result.exit_code == 0
    assert f"Schema version: {LATEST_VERSION} / {LATEST_VERSION}" in result.output


def test_snapshot_without_path_fails(app):
    result = app.test_cli_runner().invoke(snapshot_command)

    assert result.exit_code != 0
    assert "FAIL STORE_SNAPSHOT_PATH is not configured" in result.output
