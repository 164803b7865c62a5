"""CLI - verifies the sync and definitions commands end to end against a SQLite file."""

import pytest
from typer.testing import CliRunner

from catalog_sync import cli
from catalog_sync.config import Settings
from catalog_sync.core.domain_types import TargetKind
from catalog_sync.core.service_definitions import load_service_definitions
from catalog_sync.infrastructure.static_snapshot import StaticSnapshotFile

runner = CliRunner()


@pytest.fixture
def cli_settings(tmp_path, monkeypatch):
    settings = Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
        snapshot_path=str(tmp_path / "servicos.js"),
        sync_targets=[TargetKind.DATABASE, TargetKind.STATIC_FILE],
        remote_api_password="",
        store_reconnect_delay_ms=0,
        log_format="text",
    )
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "setup_logging", lambda level, fmt: None)
    return settings


def test_sync_configured_targets(cli_settings):
    result = runner.invoke(cli.app, ["sync"])
    assert result.exit_code == 0, result.output
    assert "Catalog in sync" in result.output

    entries = StaticSnapshotFile(cli_settings.snapshot_path).read_entries()
    assert len(entries) == len(load_service_definitions())


def test_sync_is_idempotent_across_invocations(cli_settings):
    runner.invoke(cli.app, ["sync", "-t", "database"])
    result = runner.invoke(cli.app, ["sync", "-t", "database"])
    assert result.exit_code == 0
    assert f"unchanged={len(load_service_definitions())}" in result.output


def test_sync_json_output(cli_settings):
    result = runner.invoke(cli.app, ["sync", "--target", "database", "--json"])
    assert result.exit_code == 0
    assert '"has_record_errors": false' in result.output


def test_sync_exits_nonzero_on_target_failure(cli_settings):
    result = runner.invoke(cli.app, ["sync", "-t", "database", "-t", "remote_api"])
    assert result.exit_code == 1
    assert "Sync finished with failures" in result.output


def test_definitions_lists_catalog(cli_settings):
    result = runner.invoke(cli.app, ["definitions"])
    assert result.exit_code == 0
    assert "Service definitions" in result.output
