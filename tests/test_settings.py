from __future__ import annotations

from turn_games.settings import Settings, load_settings


def clear_env(monkeypatch):
    for name in (
        "TURN_GAMES_SESSIONS_DIR",
        "TURN_GAMES_POLL_TIMEOUT",
        "TURN_GAMES_POLL_INTERVAL",
        "TURN_GAMES_AGENT_TIMEOUT",
        "TURN_GAMES_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)

    assert load_settings() == Settings()


def test_config_file(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    config = tmp_path / "custom.toml"
    config.write_text(
        "[storage]\nsessions_dir = \"games\"\n"
        "[polling]\ntimeout_seconds = 30\ninterval_seconds = 0.5\n"
        "[agent]\ntimeout_seconds = 2\n"
        "[logging]\nlevel = \"debug\"\n",
        encoding="utf-8",
    )

    settings = load_settings(config_path=str(config))

    assert settings == Settings(
        sessions_dir="games",
        poll_timeout_seconds=30.0,
        poll_interval_seconds=0.5,
        agent_timeout_seconds=2.0,
        log_level="DEBUG",
    )


def test_environment_beats_config_and_argument_beats_environment(tmp_path, monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.toml").write_text("[polling]\ntimeout_seconds = 30\n", encoding="utf-8")
    monkeypatch.setenv("TURN_GAMES_POLL_TIMEOUT", "7")
    monkeypatch.setenv("TURN_GAMES_SESSIONS_DIR", "from-env")

    settings = load_settings(sessions_dir="from-arg")

    assert settings.poll_timeout_seconds == 7.0
    assert settings.sessions_dir == "from-arg"
