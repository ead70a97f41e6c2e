"""Smoke tests for module imports and basic functionality."""
from __future__ import annotations


def test_imports():
    """All main modules should be importable."""
    import accounts.account
    import accounts.identity
    import cli.main
    import common.config_loader
    import common.errors
    import engine.allocation_engine
    import engine.dividend_engine
    import engine.return_engine
    import market.reference
    import market.simulator
    import market.universe
    import portfolio.formation
    import portfolio.holding
    import portfolio.portfolio
    import portfolio.presets
    import reporting.summary
    import session.timers
    import session.workspace
    import storage.backend
    import storage.portfolio_store


def test_cli_main_help(capsys, monkeypatch):
    """CLI should show help without error."""
    from cli.main import main

    monkeypatch.setattr("sys.argv", ["goalfolio", "--help"])
    try:
        main()
    except SystemExit as e:
        assert e.code == 0

    captured = capsys.readouterr()
    assert "preset" in captured.out or "formation" in captured.out


def test_config_loader():
    """Config loader should work."""
    from common.config_loader import load_all

    cfg = load_all()

    assert cfg.settings is not None
    assert cfg.universe is not None
    assert cfg.formations is not None
    assert cfg.presets is not None


def test_data_dir_env_override(monkeypatch, tmp_path):
    """GOALFOLIO_DATA_DIR should win over the settings file."""
    from common.config_loader import DATA_DIR_ENV, load_all

    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))

    assert load_all().settings.data_dir == tmp_path


def test_workspace_construction():
    """Should be able to build a workspace from config."""
    from common.config_loader import load_all
    from session.workspace import Workspace
    from storage.backend import MemoryBackend

    ws = Workspace.from_config(load_all(), backend=MemoryBackend())

    assert ws.portfolio.formation.code == "533"
    assert len(ws.universe) > 0
    assert ws.summary()["total_value"] == 0
    ws.close()
