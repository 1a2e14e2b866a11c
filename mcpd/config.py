"""The project configuration file listing the MCP servers to run."""

from __future__ import annotations

import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

_VERSION_DELIMITER = "@"
_PREFIX_DELIMITER = "::"
_SKELETON = "servers = []"


class ConfigError(Exception):
    """Raised when the configuration file cannot be created, read, validated or saved."""


def strip_version(pkg: str) -> str:
    """Remove any trailing ``@version`` from a package identifier."""
    head, sep, _ = pkg.rpartition(_VERSION_DELIMITER)
    return head if sep else pkg


def strip_prefix(pkg: str) -> str:
    """Remove the leading ``runtime::`` prefix from a package identifier."""
    _, sep, tail = pkg.partition(_PREFIX_DELIMITER)
    return tail if sep else pkg


def _string_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"server entry field '{field_name}' must be a list of strings")
    return list(value)


@dataclass
class ServerEntry:
    """The configuration of a single versioned MCP server and its allowed tools."""

    name: str
    package: str
    tools: list[str] = field(default_factory=list)
    required_env_vars: list[str] = field(default_factory=list)
    required_args: list[str] = field(default_factory=list)

    def package_version(self) -> str:
        """Return the version part of the package, or the unprefixed package without one."""
        pkg = strip_prefix(self.package)
        _, sep, version = pkg.rpartition(_VERSION_DELIMITER)
        return version if sep else pkg

    def package_name(self) -> str:
        """Return the package without its runtime prefix and version."""
        return strip_prefix(strip_version(self.package))

    def _key(self) -> tuple[str, str]:
        return self.name, strip_version(self.package)

    def _to_toml(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "package": self.package,
            "tools": list(self.tools),
        }
        if self.required_env_vars:
            data["required_env"] = list(self.required_env_vars)
        if self.required_args:
            data["required_args"] = list(self.required_args)
        return data

    @classmethod
    def _from_toml(cls, data: Any) -> ServerEntry:
        if not isinstance(data, Mapping):
            raise ConfigError("server entry must be a table")
        name = data.get("name", "")
        package = data.get("package", "")
        if not isinstance(name, str) or not isinstance(package, str):
            raise ConfigError("server entry name and package must be strings")
        return cls(
            name=name,
            package=package,
            tools=_string_list(data.get("tools"), "tools"),
            required_env_vars=_string_list(data.get("required_env"), "required_env"),
            required_args=_string_list(data.get("required_args"), "required_args"),
        )


def _validate(servers: Iterable[ServerEntry]) -> None:
    servers = list(servers)

    seen_names: set[str] = set()
    for entry in servers:
        if entry.name in seen_names:
            raise ConfigError(f"duplicate server name '{entry.name}'")
        seen_names.add(entry.name)
        if not entry.name.strip():
            raise ConfigError("server entry has empty name")
        if not entry.package.strip():
            raise ConfigError("server entry has empty package")

    seen_keys: set[tuple[str, str]] = set()
    for entry in servers:
        key = entry._key()
        if key in seen_keys:
            raise ConfigError(
                f"duplicate server entry: name: '{key[0]}' package: '{key[1]}'"
            )
        seen_keys.add(key)


@dataclass
class Config:
    """The servers declared in the project configuration file."""

    servers: list[ServerEntry] = field(default_factory=list)
    path: Path | None = None

    def add_server(self, entry: ServerEntry) -> None:
        """Add a server and persist the configuration."""
        candidate = [*self.servers, entry]
        _validate(candidate)
        self.servers = candidate
        self.save()

    def remove_server(self, name: str) -> None:
        """Remove the server with the given name and persist the configuration."""
        name = name.strip()
        if not name:
            raise ConfigError("server name cannot be empty")

        remaining = [s for s in self.servers if s.name != name]
        if len(remaining) == len(self.servers):
            raise ConfigError(f"server '{name}' not found in config")

        _validate(remaining)
        self.servers = remaining
        self.save()

    def list_servers(self) -> list[ServerEntry]:
        """Return a copy of the configured server entries."""
        return list(self.servers)

    def save(self) -> None:
        """Write the configuration to the file it was loaded from."""
        if not self.path or not str(self.path).strip():
            raise ConfigError("config file path not present")
        document = {"servers": [entry._to_toml() for entry in self.servers]}
        try:
            Path(self.path).write_text(tomli_w.dumps(document), encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"failed to save updated config: {exc}") from exc


def init_config(path: str | Path) -> None:
    """Create a skeleton configuration file, refusing to overwrite one."""
    target = Path(path)
    try:
        target.stat()
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise ConfigError(f"failed to stat {target}: {exc}") from exc
    else:
        raise ConfigError(f"{target} already exists")

    try:
        target.write_text(_SKELETON, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to write {target}: {exc}") from exc


def load_config(path: str | Path) -> Config:
    """Read and validate a configuration file."""
    text = str(path).strip()
    if not text:
        raise ConfigError("path cannot be empty")

    source = Path(text)
    try:
        source.stat()
    except FileNotFoundError as exc:
        raise ConfigError("config file cannot be found, run: 'mcpd init'") from exc
    except OSError as exc:
        raise ConfigError(f"failed to stat config file ({text}): {exc}") from exc

    try:
        with source.open("rb") as fh:
            data = tomllib.load(fh)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(f"failed to decode config from file ({text}): {exc}") from exc

    if not data:
        raise ConfigError(f"config file is empty ({text})")

    raw_servers = data.get("servers", [])
    if not isinstance(raw_servers, list):
        raise ConfigError(f"failed to decode config from file ({text}): servers must be a list")

    servers = [ServerEntry._from_toml(item) for item in raw_servers]
    try:
        _validate(servers)
    except ConfigError as exc:
        raise ConfigError(f"failed to validate existing config ({text}): {exc}") from exc

    return Config(servers=servers, path=source)