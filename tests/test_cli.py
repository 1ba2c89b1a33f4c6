"""Tests for the command line interface (local-only mode)."""

import pytest
from click.testing import CliRunner

from fit_sync.cli import main
from fit_sync.store import LocalStore


@pytest.fixture
def runner(tmp_path):
    env = {
        "FIT_SYNC_DATA_DIR": str(tmp_path / "data"),
        "FIT_SYNC_SUPABASE_URL": "",
        "FIT_SYNC_SUPABASE_ANON_KEY": "",
    }
    return CliRunner(env=env)


@pytest.fixture
def initialized(runner):
    result = runner.invoke(main, ["init"])
    assert result.exit_code == 0, result.output
    return runner


def load_store(tmp_path):
    store = LocalStore(tmp_path / "data")
    store.load()
    return store


def test_commands_require_init(runner):
    result = runner.invoke(main, ["trainings", "list"])
    assert result.exit_code == 1
    assert "not initialized" in result.output


def test_init(runner, tmp_path):
    result = runner.invoke(main, ["init"])
    assert result.exit_code == 0
    assert (tmp_path / "data" / "fit_sync.db").exists()


def test_add_and_list_trainings(initialized, tmp_path):
    result = initialized.invoke(main, ["trainings", "add", "Push Day"])
    assert result.exit_code == 0, result.output

    result = initialized.invoke(main, ["trainings", "list"])
    assert result.exit_code == 0
    assert "Push Day" in result.output
    assert "Total: 1 training(s)" in result.output

    assert [t.title for t in load_store(tmp_path).trainings] == ["Push Day"]


def test_session_flow(initialized, tmp_path):
    initialized.invoke(main, ["trainings", "add", "Push"])
    training = load_store(tmp_path).trainings[0]

    result = initialized.invoke(main, ["exercises", "add", training.id[:8], "Bench"])
    assert result.exit_code == 0, result.output
    bench = load_store(tmp_path).trainings[0].exercises[0]

    for weight in ("60", "72.5"):
        result = initialized.invoke(
            main, ["sets", "add", training.id[:8], bench.id[:8], "-w", weight, "-r", "5"]
        )
        assert result.exit_code == 0, result.output

    result = initialized.invoke(main, ["session", "begin", training.id[:8]])
    assert result.exit_code == 0, result.output
    assert load_store(tmp_path).trainings[0].is_session_active

    result = initialized.invoke(main, ["session", "end", training.id[:8]])
    assert result.exit_code == 0, result.output
    assert "Bench: max 72.5 kg" in result.output

    stored = load_store(tmp_path).trainings[0]
    assert not stored.is_session_active
    assert len(stored.sessions) == 1

    result = initialized.invoke(main, ["history"])
    assert "Push" in result.output


def test_unknown_training(initialized):
    result = initialized.invoke(main, ["session", "begin", "nope"])
    assert result.exit_code == 1


def test_timer_settings(initialized, tmp_path):
    result = initialized.invoke(main, ["timer", "set", "--disabled", "--seconds", "120"])
    assert result.exit_code == 0, result.output

    settings = load_store(tmp_path).timer_settings
    assert settings.rest_timer_enabled is False
    assert settings.rest_timer_seconds == 120


def test_sync_status_without_remote(initialized):
    result = initialized.invoke(main, ["sync", "status"])
    assert result.exit_code == 0, result.output
    assert "disabled" in result.output


def test_sync_now_requires_remote(initialized):
    result = initialized.invoke(main, ["sync", "now"])
    assert result.exit_code == 1
    assert "No Supabase project configured" in result.output


USER = "user-1"


@pytest.fixture
def remote_runner(tmp_path, monkeypatch, remote, auth):
    """Runner whose app talks to the in-memory remote with a cached login."""

    async def restore_session():
        auth.restore(USER)
        return auth.current_session()

    auth.restore_session = restore_session
    monkeypatch.setattr("fit_sync.app.SupabaseAuthProvider", lambda http, kv: auth)
    monkeypatch.setattr(
        "fit_sync.app.SupabaseUserDataClient", lambda http, auth_provider: remote
    )

    runner = CliRunner(
        env={
            "FIT_SYNC_DATA_DIR": str(tmp_path / "data"),
            "FIT_SYNC_SUPABASE_URL": "https://project.supabase.co",
            "FIT_SYNC_SUPABASE_ANON_KEY": "anon-key",
            "FIT_SYNC_DEBOUNCE_SECONDS": "0.01",
        }
    )
    assert runner.invoke(main, ["init"]).exit_code == 0
    return runner


def test_sync_now_reconciles_once(remote_runner, remote):
    result = remote_runner.invoke(main, ["sync", "now"])

    assert result.exit_code == 0, result.output
    assert "In sync" in result.output
    assert remote.fetch_calls == 1
    assert remote.upsert_calls == 1


def test_login_when_already_signed_in(remote_runner, remote):
    result = remote_runner.invoke(main, ["account", "login", "-e", "lifter@example.com"])

    assert result.exit_code == 0, result.output
    assert "Already signed in" in result.output
    assert remote.fetch_calls == 1


def test_edits_reach_remote_before_exit(remote_runner, remote):
    result = remote_runner.invoke(main, ["trainings", "add", "Push"])

    assert result.exit_code == 0, result.output
    assert [t["title"] for t in remote.rows[USER]["trainings"]] == ["Push"]
    assert remote.fetch_calls == 0
