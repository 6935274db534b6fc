"""
Smoke tests for the typer CLI against the per-test database.
"""

import pytest
from typer.testing import CliRunner

from vocab_srs.cli.main import app
from vocab_srs.db import database

runner = CliRunner()


@pytest.fixture
def cli_db(make_items, session_factory, monkeypatch):
    ids = make_items([1, 2, 3])
    monkeypatch.setattr(database, "SessionLocal", session_factory)
    return ids


def test_stats_for_new_learner(cli_db):
    result = runner.invoke(app, ["stats", "alice"])

    assert result.exit_code == 0
    assert "Total XP" in result.output
    assert "New available" in result.output


def test_today_lists_new_items(cli_db):
    result = runner.invoke(app, ["today", "alice", "--new-limit", "2"])

    assert result.exit_code == 0
    assert "0 due, 2 new/learning" in result.output


def test_reset_needs_confirmation(cli_db):
    result = runner.invoke(app, ["reset", "alice"], input="n\n")
    assert result.exit_code != 0


def test_reset_with_yes(cli_db):
    result = runner.invoke(app, ["reset", "alice", "--yes"])

    assert result.exit_code == 0
    assert "Removed 0 reviews" in result.output


@pytest.mark.parametrize(
    "args",
    [
        ["today", "alice", "--new-limit=-1"],
        ["today", "alice", "--due-limit=-3"],
        ["stats", "alice", "--daily-new-limit=-1"],
    ],
)
def test_negative_limits_exit_cleanly(cli_db, args):
    result = runner.invoke(app, args)

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Traceback" not in result.output
