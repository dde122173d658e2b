"""CLI tests via click's CliRunner."""
from __future__ import annotations
import json
import pytest
from click.testing import CliRunner
import sessionctl.cli.bootstrap as bootstrap
from sessionctl.cli.main import cli
from sessionctl.memory.flags import InMemoryKeyValueStore
from sessionctl.models.errors import StorageError


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setattr(bootstrap, "configure_logging", lambda **kw: None)
    monkeypatch.setenv("SESSIONCTL_DB_PATH", str(tmp_path / "cli.db"))
    monkeypatch.setenv("SESSIONCTL_TIME_UNIT", "0")
    return CliRunner()


class TestRunCommand:
    def test_guided_then_standard(self, runner):
        r = runner.invoke(cli, ["run", "enter", "join", "leave", "join"])
        assert r.exit_code == 0, r.output
        lines = r.output.splitlines()
        assert lines[0] == "[TUTORIAL] NotInSession"
        assert "Strategy: guided" in lines
        assert "[TUTORIAL] Leaving" in lines
        assert "InSession" in lines
        assert "final=Joined" in r.output
        assert "strategy=standard" in r.output

    def test_flag_persists_between_runs(self, runner):
        runner.invoke(cli, ["run", "enter", "join", "leave"])
        r = runner.invoke(cli, ["run", "enter"])
        assert r.exit_code == 0, r.output
        assert "Strategy: standard" in r.output
        assert "[TUTORIAL]" not in r.output

    def test_ephemeral_does_not_persist(self, runner):
        runner.invoke(cli, ["run", "--ephemeral", "enter", "join", "leave"])
        r = runner.invoke(cli, ["flags", "show"])
        assert "first_run_complete: no" in r.output

    def test_illegal_step_skipped(self, runner):
        r = runner.invoke(cli, ["run", "--no-first-run", "join", "enter"])
        assert r.exit_code == 0, r.output
        assert "[SKIP] join not allowed from NotInSession (allowed: enter)" in r.output
        assert "1 applied  1 skipped" in r.output

    def test_no_first_run_renders_plain(self, runner):
        r = runner.invoke(cli, ["run", "--no-first-run", "enter"])
        assert r.exit_code == 0, r.output
        assert "Strategy: standard" in r.output
        assert "[TUTORIAL]" not in r.output

    def test_forced_first_run_renders_prefixed(self, runner):
        runner.invoke(cli, ["run", "enter", "join", "leave"])
        r = runner.invoke(cli, ["run", "--first-run", "enter"])
        assert r.exit_code == 0, r.output
        assert "Strategy: guided" in r.output
        assert "[TUTORIAL] InSession" in r.output

    def test_unknown_step_rejected(self, runner):
        r = runner.invoke(cli, ["run", "teleport"])
        assert r.exit_code != 0

    def test_bad_time_unit_env(self, runner, monkeypatch):
        monkeypatch.setenv("SESSIONCTL_TIME_UNIT", "soon")
        r = runner.invoke(cli, ["run", "enter"])
        assert r.exit_code == 1


class TestFlagsCommands:
    def test_show_and_reset(self, runner):
        runner.invoke(cli, ["run", "enter", "join", "leave"])
        assert "first_run_complete: yes" in runner.invoke(cli, ["flags", "show"]).output
        r = runner.invoke(cli, ["flags", "reset"])
        assert r.exit_code == 0
        out = runner.invoke(cli, ["flags", "show"]).output
        assert "first_run_complete: no" in out
        assert "next strategy:      guided" in out


def test_config_command(runner, tmp_path):
    r = runner.invoke(cli, ["config"])
    assert r.exit_code == 0
    data = json.loads(r.output)
    assert data["time_unit"] == 0.0
    assert data["db_path"] == str(tmp_path / "cli.db")


class TrackingStore(InMemoryKeyValueStore):
    def __init__(self):
        super().__init__()
        self.closed = False

    def close(self):
        self.closed = True


class UnreadableStore(TrackingStore):
    def has(self, key):
        raise StorageError("unreadable")

    def delete(self, key):
        raise StorageError("read-only")


class TestStoreClosedOnError:
    @pytest.fixture
    def store(self, monkeypatch):
        s = UnreadableStore()
        monkeypatch.setattr(bootstrap, "open_store", lambda cfg, ephemeral=False: s)
        return s

    def test_flags_show(self, runner, store):
        r = runner.invoke(cli, ["flags", "show"])
        assert r.exit_code == 1
        assert store.closed

    def test_flags_reset(self, runner, store):
        r = runner.invoke(cli, ["flags", "reset"])
        assert r.exit_code == 1
        assert store.closed

    def test_run_when_controller_cannot_start(self, runner, store):
        r = runner.invoke(cli, ["run", "enter"])
        assert r.exit_code == 1
        assert store.closed
