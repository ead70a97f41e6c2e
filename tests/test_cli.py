"""End-to-end tests for the CLI, one invocation per command."""
from __future__ import annotations

import pytest

from accounts.identity import SESSION_KEY
from cli.main import build_parser, run
from storage.backend import JsonFileBackend
from storage.portfolio_store import PortfolioStore


@pytest.fixture
def goalfolio(tmp_path, capsys):
    """Run one CLI command against a temporary data directory and return (code, stdout)."""

    def invoke(*argv: str):
        args = build_parser().parse_args(["--data-dir", str(tmp_path), *argv])
        code = run(args)
        return code, capsys.readouterr().out

    return invoke


@pytest.fixture
def registered(goalfolio):
    code, _ = goalfolio("register", "--email", "ann@example.com", "--password", "secret1", "--name", "Ann")
    assert code == 0
    return goalfolio


class TestAccounts:
    """Tests for the sign-in commands."""

    def test_guest(self, goalfolio):
        """whoami without a session reports a guest."""
        code, out = goalfolio("whoami")

        assert code == 0
        assert "Guest" in out

    def test_register_persists_session(self, registered):
        """The session should carry over to the next invocation."""
        _, out = registered("whoami")

        assert "ann@example.com" in out

    def test_logout_then_bad_login(self, registered):
        """A wrong password is reported with a non-zero exit."""
        registered("logout")

        code, out = registered("login", "--email", "ann@example.com", "--password", "wrong12")

        assert code == 1
        assert "incorrect" in out

    def test_short_password(self, goalfolio):
        """Validation errors are printed, not raised."""
        code, out = goalfolio("register", "--email", "a@b.c", "--password", "123", "--name", "A")

        assert code == 1
        assert out.startswith("Error:")

    def test_unreadable_autosave_does_not_block_commands(self, registered, tmp_path):
        """A saved lineup with a bad date is ignored instead of crashing every command."""
        backend = JsonFileBackend(tmp_path)
        user_id = backend.load(SESSION_KEY)["id"]
        holding = {
            "id": "defender-0", "ticker": "KO", "risk_tier": "low", "position_type": "defender",
            "slot_index": 0, "shares": 1, "purchase_price": 60, "purchase_date": "not-a-date",
            "current_price": 60, "dividend_yield": 3.0,
        }
        backend.dump(PortfolioStore.key_for(user_id), [{
            "id": "x", "user_id": user_id, "name": "autosave", "formation": "533",
            "holdings": [holding], "created_at": "2025-01-01", "updated_at": "2025-01-01",
            "is_autosave": True,
        }])

        code, out = registered("whoami")

        assert code == 0
        assert "ann@example.com" in out


class TestLineup:
    """Tests for lineup commands across invocations."""

    def test_lineup_commands_require_sign_in(self, goalfolio):
        """Editing the lineup as a guest is refused."""
        code, out = goalfolio("add", "--position", "defender", "--slot", "0", "--ticker", "KO", "--shares", "10")

        assert code == 1
        assert "Not signed in" in out

    def test_add_survives_restart(self, registered):
        """A holding added in one run shows up in the next via autosave."""
        code, out = registered(
            "add", "--position", "defender", "--slot", "0", "--ticker", "KO",
            "--shares", "10", "--price", "60", "--date", "2024-01-01",
        )
        assert code == 0
        assert "defender-0" in out

        _, out = registered("lineup")

        assert "KO" in out
        assert "10 sh" in out

    def test_edit_and_remove(self, registered):
        """Edits keep unspecified fields; remove clears the slot."""
        registered("add", "--position", "forward", "--slot", "1", "--ticker", "TSLA", "--shares", "3", "--price", "200")

        code, out = registered("edit", "forward-1", "--shares", "5")
        assert code == 0
        assert "5 shares @ $200.00" in out

        assert registered("remove", "forward-1")[0] == 0
        code, out = registered("remove", "forward-1")
        assert code == 1

    def test_formation_and_preset(self, registered):
        """Switching formation and applying presets persist between runs."""
        registered("formation", "542")
        _, out = registered("formations")
        assert "* 542" in out

        code, out = registered("preset", "growth tech")
        assert code == 0
        assert "11 holdings" in out

        _, out = registered("lineup")
        assert "4-5-2" in out
        assert "(empty)" not in out

    def test_unknown_formation(self, registered):
        """Unknown codes are reported as errors."""
        code, out = registered("formation", "999")

        assert code == 1
        assert "Unknown formation" in out


class TestReports:
    """Tests for the reporting commands."""

    def test_stocks_search(self, goalfolio):
        """Search prints matching stocks only."""
        _, out = goalfolio("stocks", "coca")

        assert "KO" in out
        assert "AAPL" not in out

    def test_stats_on_preset(self, registered):
        """Stats should print totals, tiers and the holdings table."""
        registered("preset", "Stable Dividend")

        code, out = registered("stats", "--table")

        assert code == 0
        assert "Current value" in out
        assert "defender" in out
        assert "SCHD" in out

    def test_stats_empty_in_krw(self, goalfolio):
        """Stats on an empty lineup report zeros."""
        code, out = goalfolio("stats", "--currency", "KRW")

        assert code == 0
        assert "₩0" in out

    def test_dividends(self, registered):
        """The monthly projection lists all twelve months."""
        registered("preset", "Stable Dividend")

        code, out = registered("dividends", "--prorated")

        assert code == 0
        assert "Jan" in out and "Dec" in out
        assert "Projected total" in out


class TestSavedPortfolios:
    """Tests for save, list, load and delete."""

    def test_save_list_load_delete(self, registered):
        """A saved lineup can be listed, loaded back and deleted."""
        registered("preset", "Growth Tech")
        code, out = registered("save", "Tech")
        assert code == 0
        pid = out.strip().split()[-1]

        registered("formation", "533")
        _, out = registered("list")
        assert "Tech" in out
        assert "autosave" not in out

        code, out = registered("load", pid)
        assert code == 0
        assert "11 holdings" in out

        assert registered("delete", pid)[0] == 0
        _, out = registered("list")
        assert "No saved portfolios." in out

    def test_save_as_guest(self, goalfolio):
        """Guests cannot save."""
        code, out = goalfolio("save", "Mine")

        assert code == 1
        assert "Sign in" in out


def test_help(capsys):
    """--help should list the commands."""
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["--help"])

    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "formation" in out
    assert "dividends" in out
