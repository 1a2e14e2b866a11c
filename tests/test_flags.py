import argparse

import pytest

from mcpd import flags
from mcpd.flags import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_LOG_PATH,
    DEFAULT_RUNTIME_VARS_FILE,
    ENV_RUNTIME_FILE,
    ENV_VAR_CONFIG_FILE,
    ENV_VAR_LOG_LEVEL,
    ENV_VAR_LOG_PATH,
)


@pytest.fixture
def home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    return tmp_path


def _parse(args=None):
    parser = argparse.ArgumentParser()
    flags.init_flags(parser)
    return parser.parse_args(args or [])


@pytest.mark.parametrize(
    "value, expected",
    [
        ("  /custom/path/config.toml  ", "/custom/path/config.toml"),
        ("", DEFAULT_CONFIG_FILE),
        ("   ", DEFAULT_CONFIG_FILE),
    ],
)
def test_default_config_file_from_env(monkeypatch, value, expected):
    monkeypatch.setenv(ENV_VAR_CONFIG_FILE, value)
    assert flags.default_config_file() == expected


def test_default_config_file_when_env_missing(monkeypatch):
    monkeypatch.delenv(ENV_VAR_CONFIG_FILE, raising=False)
    assert flags.default_config_file() == ".mcpd.toml"


@pytest.mark.parametrize("value", ["", "   ", DEFAULT_RUNTIME_VARS_FILE])
def test_default_runtime_file_resolves_user_dir(monkeypatch, home, value):
    monkeypatch.setenv(ENV_RUNTIME_FILE, value)
    expected = str(home / ".config" / "mcpd" / "secrets.dev.toml")
    assert flags.default_runtime_file() == expected


def test_default_runtime_file_from_env(monkeypatch, home):
    monkeypatch.setenv(ENV_RUNTIME_FILE, "  /custom/path/config.toml  ")
    assert flags.default_runtime_file() == "/custom/path/config.toml"


def test_default_runtime_file_honours_xdg(monkeypatch, tmp_path):
    monkeypatch.delenv(ENV_RUNTIME_FILE, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    assert flags.default_runtime_file() == str(tmp_path / "xdg" / "mcpd" / "secrets.dev.toml")


@pytest.mark.parametrize(
    "path_value, level_value, expected_path, expected_level",
    [
        ("  /var/log/mcpd.log  ", "  debug  ", "/var/log/mcpd.log", "DEBUG"),
        ("   ", "   ", DEFAULT_LOG_PATH, DEFAULT_LOG_LEVEL),
        ("", "", DEFAULT_LOG_PATH, DEFAULT_LOG_LEVEL),
    ],
)
def test_default_logger_values(monkeypatch, path_value, level_value, expected_path, expected_level):
    monkeypatch.setenv(ENV_VAR_LOG_PATH, path_value)
    monkeypatch.setenv(ENV_VAR_LOG_LEVEL, level_value)
    assert flags.default_log_path() == expected_path
    assert flags.default_log_level() == expected_level


def test_default_logger_values_when_env_missing(monkeypatch):
    monkeypatch.delenv(ENV_VAR_LOG_PATH, raising=False)
    monkeypatch.delenv(ENV_VAR_LOG_LEVEL, raising=False)
    assert flags.default_log_level() == "info"
    assert flags.default_log_path() == ""


@pytest.mark.parametrize(
    "env_value, args, expected",
    [
        ("/env/path/config.toml", ["--config-file", "/flag/path/config.toml"], "/flag/path/config.toml"),
        ("/env/only/path.toml", [], "/env/only/path.toml"),
        ("", [], DEFAULT_CONFIG_FILE),
    ],
)
def test_config_file_precedence(monkeypatch, home, env_value, args, expected):
    monkeypatch.setenv(ENV_VAR_CONFIG_FILE, env_value)
    assert _parse(args).config_file == expected


@pytest.mark.parametrize(
    "env_value, args, expected_suffix",
    [
        ("/env/path/runtime.toml", ["--runtime-file", "/flag/path/runtime.toml"], None),
        ("/env/only/runtime.toml", [], None),
    ],
)
def test_runtime_file_precedence_explicit(monkeypatch, home, env_value, args, expected_suffix):
    monkeypatch.setenv(ENV_RUNTIME_FILE, env_value)
    expected = args[1] if args else env_value
    assert _parse(args).runtime_file == expected


@pytest.mark.parametrize("env_value", ["", DEFAULT_RUNTIME_VARS_FILE])
def test_runtime_file_precedence_default(monkeypatch, home, env_value):
    monkeypatch.setenv(ENV_RUNTIME_FILE, env_value)
    expected = str(home / ".config" / "mcpd" / "secrets.dev.toml")
    assert _parse().runtime_file == expected


@pytest.mark.parametrize(
    "env_path, env_level, args, expected_path, expected_level",
    [
        (
            "/env/log/path.log",
            "WARN",
            ["--log-path", "/flag/log/path.log", "--log-level", "DEBUG"],
            "/flag/log/path.log",
            "DEBUG",
        ),
        ("/env/only/path.log", "INFO", [], "/env/only/path.log", "INFO"),
        ("", "", [], DEFAULT_LOG_PATH, DEFAULT_LOG_LEVEL),
        ("   ", "   ", [], DEFAULT_LOG_PATH, DEFAULT_LOG_LEVEL),
    ],
)
def test_logger_flags_precedence(monkeypatch, home, env_path, env_level, args, expected_path, expected_level):
    monkeypatch.setenv(ENV_VAR_LOG_PATH, env_path)
    monkeypatch.setenv(ENV_VAR_LOG_LEVEL, env_level)
    ns = _parse(args)
    assert ns.log_path == expected_path
    assert ns.log_level == expected_level


def test_init_flags_all_flags_win(monkeypatch, home):
    monkeypatch.setenv(ENV_VAR_CONFIG_FILE, "/env/config.toml")
    monkeypatch.setenv(ENV_RUNTIME_FILE, "/env/runtime.toml")
    monkeypatch.setenv(ENV_VAR_LOG_PATH, "/env/log/path.log")
    monkeypatch.setenv(ENV_VAR_LOG_LEVEL, "warn")
    ns = _parse(
        [
            "--config-file", "/flag/config.toml",
            "--runtime-file", "/flag/runtime.toml",
            "--log-path", "/flag/log.log",
            "--log-level", "debug",
        ]
    )
    assert (ns.config_file, ns.runtime_file, ns.log_path, ns.log_level) == (
        "/flag/config.toml",
        "/flag/runtime.toml",
        "/flag/log.log",
        "debug",
    )


def test_init_flags_env_values(monkeypatch, home):
    monkeypatch.setenv(ENV_VAR_CONFIG_FILE, "/env/only/config.toml")
    monkeypatch.setenv(ENV_RUNTIME_FILE, "/env/only/runtime.toml")
    monkeypatch.setenv(ENV_VAR_LOG_PATH, "/env/only/log.log")
    monkeypatch.setenv(ENV_VAR_LOG_LEVEL, "INFO")
    ns = _parse()
    assert (ns.config_file, ns.runtime_file, ns.log_path, ns.log_level) == (
        "/env/only/config.toml",
        "/env/only/runtime.toml",
        "/env/only/log.log",
        "INFO",
    )


def test_init_flags_defaults(monkeypatch, home):
    for name in (ENV_VAR_CONFIG_FILE, ENV_RUNTIME_FILE, ENV_VAR_LOG_PATH, ENV_VAR_LOG_LEVEL):
        monkeypatch.setenv(name, "")
    ns = _parse()
    assert ns.config_file == ".mcpd.toml"
    assert ns.runtime_file == str(home / ".config" / "mcpd" / "secrets.dev.toml")
    assert ns.log_path == ""
    assert ns.log_level == "info"


def test_init_flags_returns_parser(monkeypatch, home):
    parser = argparse.ArgumentParser()
    assert flags.init_flags(parser) is parser