"""Command line flags for config, runtime, and log files, with defaults taken from the environment."""

from __future__ import annotations

import argparse
import os

from mcpd.exec_context import ExecutionContextError, user_specific_config_dir

ENV_VAR_CONFIG_FILE = "MCPD_CONFIG_FILE"
ENV_RUNTIME_FILE = "MCPD_RUNTIME_FILE"
ENV_VAR_LOG_PATH = "MCPD_LOG_PATH"
ENV_VAR_LOG_LEVEL = "MCPD_LOG_LEVEL"

DEFAULT_CONFIG_FILE = ".mcpd.toml"
DEFAULT_RUNTIME_VARS_FILE = "secrets.dev.toml"
DEFAULT_LOG_PATH = ""
DEFAULT_LOG_LEVEL = "info"

FLAG_NAME_CONFIG_FILE = "config-file"
FLAG_NAME_RUNTIME_FILE = "runtime-file"
FLAG_NAME_LOG_PATH = "log-path"
FLAG_NAME_LOG_LEVEL = "log-level"


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def default_config_file() -> str:
    """Return the config file path from the environment, or the default name."""
    return _env(ENV_VAR_CONFIG_FILE) or DEFAULT_CONFIG_FILE


def default_runtime_file() -> str:
    """Return the runtime file path from the environment, or the user config directory default.

    A value equal to the default file name also resolves to the user config directory.
    """
    value = _env(ENV_RUNTIME_FILE)
    if value and value != DEFAULT_RUNTIME_VARS_FILE:
        return value
    try:
        directory = user_specific_config_dir()
    except ExecutionContextError as exc:
        raise ExecutionContextError(
            f"error configuring default value for runtime vars file: {exc}"
        ) from exc
    return str(directory / DEFAULT_RUNTIME_VARS_FILE)


def default_log_path() -> str:
    """Return the log path from the environment, or the default (no log file)."""
    return _env(ENV_VAR_LOG_PATH) or DEFAULT_LOG_PATH


def default_log_level() -> str:
    """Return the upper-cased log level from the environment, or the default."""
    return _env(ENV_VAR_LOG_LEVEL).upper() or DEFAULT_LOG_LEVEL


def init_flags(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Register the shared flags on a parser, with defaults resolved from the environment."""
    config_default = default_config_file()
    runtime_default = default_runtime_file()

    parser.add_argument(
        f"--{FLAG_NAME_CONFIG_FILE}",
        dest="config_file",
        default=config_default,
        help="path to config file",
    )
    parser.add_argument(
        f"--{FLAG_NAME_RUNTIME_FILE}",
        dest="runtime_file",
        default=runtime_default,
        help=(
            "path to runtime (execution context) file that contains env vars, "
            "and arguments for your MCP servers"
        ),
    )
    parser.add_argument(
        f"--{FLAG_NAME_LOG_PATH}",
        dest="log_path",
        default=default_log_path(),
        help="log file path to use for log output",
    )
    parser.add_argument(
        f"--{FLAG_NAME_LOG_LEVEL}",
        dest="log_level",
        default=default_log_level(),
        help="log level for mcpd logs",
    )
    return parser