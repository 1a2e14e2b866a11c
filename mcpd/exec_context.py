"""Per-server runtime execution context: arguments and environment variables."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

import tomli_w

ENV_VAR_XDG_CONFIG_HOME = "XDG_CONFIG_HOME"
_APP_NAME = "MCPD"


class ExecutionContextError(Exception):
    """Raised when the execution context file cannot be read, changed or written."""


class UpsertResult(StrEnum):
    """The operation performed by an upsert."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    NOOP = "noop"


@dataclass
class ServerExecutionContext:
    """Arguments and environment variables used to run one MCP server."""

    name: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    def equals(self, other: ServerExecutionContext) -> bool:
        """Compare with another context, ignoring the order of arguments."""
        return (
            self.name == other.name
            and sorted(self.args) == sorted(other.args)
            and self.env == other.env
        )

    def is_empty(self) -> bool:
        """Report whether there are neither arguments nor environment variables."""
        return not self.args and not self.env

    def _copy(self, name: str | None = None) -> ServerExecutionContext:
        return ServerExecutionContext(
            name=self.name if name is None else name,
            args=list(self.args),
            env=dict(self.env),
        )

    def _to_toml(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.args:
            data["args"] = list(self.args)
        if self.env:
            data["env"] = dict(self.env)
        return data


def _export_arg(arg: str, server: str) -> str:
    flag, sep, _ = arg.partition("=")
    if not sep:
        return arg
    parsed = flag.lstrip("-").replace("-", "_").upper()
    return f"{flag}=${{{_APP_NAME}__{server}__ARG__{parsed}}}"


@dataclass
class ExecutionContextConfig:
    """Execution contexts for all configured MCP servers, keyed by server name."""

    servers: dict[str, ServerExecutionContext] = field(default_factory=dict)
    path: Path | None = None

    def export(self, path: str | Path) -> None:
        """Write a copy whose values are replaced by environment variable placeholders."""
        if not self.servers:
            raise ExecutionContextError(
                "export error, no servers defined in execution context config"
            )

        exported: dict[str, ServerExecutionContext] = {}
        for name, srv in self.servers.items():
            upper_name = name.replace("-", "_").upper()
            env = {
                key: f"${{{_APP_NAME}__{upper_name}__{key.upper()}}}" for key in srv.env
            }
            args = [_export_arg(arg, upper_name) for arg in srv.args]
            exported[name] = ServerExecutionContext(name=name, args=args, env=env)

        ExecutionContextConfig(servers=exported, path=Path(path)).save()

    def list(self) -> list[ServerExecutionContext]:
        """Return all server contexts sorted by name."""
        return sorted(self.servers.values(), key=lambda s: s.name)

    def get(self, name: str) -> ServerExecutionContext | None:
        """Return a copy of the named server's context, or None if it is absent."""
        name = name.strip()
        if not name:
            return None
        srv = self.servers.get(name)
        return srv._copy(name=name) if srv is not None else None

    def upsert(self, ec: ServerExecutionContext) -> UpsertResult:
        """Create, update or delete a server context and save any change.

        An empty context deletes an existing entry and is ignored otherwise.
        """
        if not ec.name.strip():
            raise ExecutionContextError("server name cannot be empty")

        current = self.servers.get(ec.name)

        if current is None and ec.is_empty():
            return UpsertResult.NOOP
        if current is not None and current.equals(ec):
            return UpsertResult.NOOP
        if ec.is_empty():
            del self.servers[ec.name]
            op = UpsertResult.DELETED
        elif current is not None:
            self.servers[ec.name] = ec._copy()
            op = UpsertResult.UPDATED
        else:
            self.servers[ec.name] = ec._copy()
            op = UpsertResult.CREATED

        try:
            self.save()
        except ExecutionContextError as exc:
            raise ExecutionContextError(
                f"error saving execution context config: {exc}"
            ) from exc
        return op

    def save(self) -> None:
        """Write the configuration to its file, creating the directory if needed."""
        if not self.path or not str(self.path).strip():
            raise ExecutionContextError("config file path not present")

        target = Path(self.path)
        try:
            target.parent.mkdir(mode=0o740, parents=True, exist_ok=True)
        except OSError as exc:
            raise ExecutionContextError(
                f"could not ensure execution context directory exists for '{target}': {exc}"
            ) from exc

        document = {"servers": {name: srv._to_toml() for name, srv in self.servers.items()}}
        payload = tomli_w.dumps(document).encode("utf-8")

        try:
            fd = os.open(target, os.O_RDWR | os.O_CREAT | os.O_TRUNC, 0o600)
        except OSError as exc:
            raise ExecutionContextError(f"could not create file '{target}': {exc}") from exc
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
        except OSError as exc:
            raise ExecutionContextError(
                f"could not encode execution context to file '{target}': {exc}"
            ) from exc


def _parse_server(name: str, data: Any, path: Path) -> ServerExecutionContext:
    if not isinstance(data, dict):
        raise ExecutionContextError(
            f"execution context file '{path}' could not be parsed: server '{name}' is not a table"
        )
    args = data.get("args", [])
    env = data.get("env", {})
    if not isinstance(args, list) or not all(isinstance(a, str) for a in args):
        raise ExecutionContextError(
            f"execution context file '{path}' could not be parsed: args of '{name}' must be strings"
        )
    if not isinstance(env, dict) or not all(isinstance(v, str) for v in env.values()):
        raise ExecutionContextError(
            f"execution context file '{path}' could not be parsed: env of '{name}' must be strings"
        )
    return ServerExecutionContext(name=name, args=list(args), env=dict(env))


def load_execution_context(path: str | Path) -> ExecutionContextConfig:
    """Load the execution context file, or start an empty one if it does not exist."""
    text = str(path).strip()
    if not text:
        raise ExecutionContextError("path cannot be empty")

    source = Path(text)
    try:
        source.stat()
    except FileNotFoundError:
        return ExecutionContextConfig(path=source)
    except OSError as exc:
        raise ExecutionContextError(
            f"failed to load execution context config: could not stat execution context "
            f"file '{source}': {exc}"
        ) from exc

    try:
        with source.open("rb") as fh:
            data = tomllib.load(fh)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ExecutionContextError(
            f"failed to load execution context config: execution context file "
            f"'{source}' could not be parsed: {exc}"
        ) from exc

    raw = data.get("servers", {})
    if not isinstance(raw, dict):
        raise ExecutionContextError(
            f"execution context file '{source}' could not be parsed: servers must be a table"
        )
    servers = {name: _parse_server(name, value, source) for name, value in raw.items()}
    return ExecutionContextConfig(servers=servers, path=source)


def app_dir_name() -> str:
    """Return the name of the application's directory for user-specific data."""
    return "mcpd"


def user_specific_config_dir() -> Path:
    """Return the user-specific configuration directory, honouring XDG_CONFIG_HOME."""
    xdg = os.environ.get(ENV_VAR_XDG_CONFIG_HOME, "").strip()
    if xdg:
        return Path(xdg) / app_dir_name()
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ExecutionContextError(f"failed to get user home directory: {exc}") from exc
    return home / ".config" / app_dir_name()