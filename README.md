# mcpd

`mcpd` holds the building blocks for managing a set of MCP (Model Context
Protocol) servers: the project configuration file, the per-user execution
context (environment variables and arguments for each server), command line
argument handling, filtering helpers, thread-safe tracking of connected
clients and their health, and mapping of errors onto HTTP statuses.

It needs Python 3.11 or later and depends only on `tomli-w`.

## Project configuration (`mcpd.config`)

The project file (by default `.mcpd.toml`) lists the servers in use:

```toml
[[servers]]
name = "time"
package = "uvx::mcp-server-time@latest"
tools = ["get_current_time"]
```

```python
from mcpd.config import ServerEntry, init_config, load_config

init_config(".mcpd.toml")            # writes "servers = []"; fails if the file exists
cfg = load_config(".mcpd.toml")

cfg.add_server(ServerEntry(name="time", package="uvx::mcp-server-time@latest",
                           tools=["get_current_time"]))
for entry in cfg.list_servers():
    print(entry.name, entry.package_name(), entry.package_version())

cfg.remove_server("time")
```

Every change is validated (names and packages must be present, names must be
unique, and no two entries may share a name and an unversioned package) and
then written back to the file the configuration was loaded from. Problems are
raised as `ConfigError`. `strip_version` and `strip_prefix` remove the
`@version` suffix and the `runtime::` prefix from a package identifier.

## Execution context (`mcpd.exec_context`)

Secrets and arguments for each server live in a separate file, by default
`secrets.dev.toml` inside the user configuration directory
(`$XDG_CONFIG_HOME/mcpd`, or `~/.config/mcpd`), as returned by
`user_specific_config_dir()`.

```python
from mcpd.exec_context import (
    ServerExecutionContext,
    UpsertResult,
    load_execution_context,
    user_specific_config_dir,
)

ctx = load_execution_context(user_specific_config_dir() / "secrets.dev.toml")
result = ctx.upsert(ServerExecutionContext(name="time", args=["--tz=UTC"],
                                           env={"API_KEY": "placeholder"}))
assert result is UpsertResult.CREATED
```

A missing file gives an empty configuration that is created on the first
save. `upsert` reports whether the entry was created, updated, deleted (an
empty context replaces an existing one) or left alone (`NOOP`), and saves any
change. `get` returns a copy of one server's context or `None`; `list` returns
all of them sorted by name. `export` writes a copy to another path with every
environment value replaced by a `${MCPD__SERVER__KEY}` placeholder and every
`--flag=value` argument by `--flag=${MCPD__SERVER__ARG__FLAG}`. Errors are
raised as `ExecutionContextError`.

## Arguments (`mcpd.args`)

```python
from mcpd.args import merge_args, normalize_args, parse_arg, remove_matching_flags

normalize_args(["--foo", "bar", "-xz", "--", "ignored"])
# ['--foo=bar', '-x', '-z']

merge_args(["--config=dev.toml", "--verbose"], ["--config=prod.toml"])
# ['--config=prod.toml', '--verbose']

remove_matching_flags(["--foo", "--foo=bar", "--baz"], ["--foo"])
# ['--baz']

parse_arg("--env=NODE_ENV=production")
# ArgEntry(key='--env', value='NODE_ENV=production')
```

## Filtering (`mcpd.filter`)

Predicates compare normalized (trimmed, lower-cased) values taken from an item
by a provider function: `equals`, `equals_bool`, `partial`, `partial_all`,
`equals_any`, `has_only`, `has_all` and `has_any`.

```python
from mcpd.filter import equals, has_any, match, with_matcher

ok = match(
    server,
    {"name": "Time", "tags": "clock,utc"},
    with_matcher("name", equals(lambda s: s.name)),
    with_matcher("tags", has_any(lambda s: s.tags)),
)
```

Keys without a matcher are ignored; keys marked with `with_unsupported_keys`
make the match fail and are passed to the function set by `with_log_func`.
`match_requested_slice` checks a list of requested values against those
available, returning the normalized values sorted, and raises `ValueError`
when any are missing.

## Clients and health (`mcpd.client_manager`, `mcpd.health_tracker`)

`ClientManager` and `HealthTracker` are safe to share between threads.
`ClientManager` stores any client object together with its allowed tools
under a server name.

```python
from datetime import timedelta
from mcpd.health_tracker import HealthStatus, HealthTracker

tracker = HealthTracker(["time"])
tracker.update("time", HealthStatus.OK, timedelta(milliseconds=12))
print(tracker.status("time").status)    # ok
```

Each update stamps `last_checked` with the current UTC time; `last_successful`
moves only on an `OK` status. Asking about a server that is not tracked raises
`HealthNotTrackedError`.

## Errors (`mcpd.errors`)

The package's domain errors derive from `McpdError`. `map_error` turns any
exception (looking through causes and exception groups) into an `ApiError`
carrying the matching HTTP status: 400 for `BadRequestError`, 404 for
`ServerNotFoundError`, 403 for `ToolForbiddenError`, 502 for the tool list and
tool call failures, and 500 for anything else.

## Daemon helpers and flags (`mcpd.daemon`, `mcpd.flags`)

`is_valid_addr("localhost:8090")` validates a listen address and returns its
host and port, raising `ValueError` when it is invalid; the host may be empty
and the port may be a named TCP service. `parse_and_log_mcp_message` forwards
a line written by an MCP server on stderr to a `logging.Logger` at the level
it announces (`LEVEL:LOGGER:MESSAGE` or `LEVEL:MESSAGE`), with
`normalize_log_level` mapping names such as `warning` or `critical` onto
`LogLevel`.

`mcpd.flags.init_flags` adds the `--config-file`, `--runtime-file`,
`--log-path` and `--log-level` options to an `argparse.ArgumentParser`, taking
their defaults from `MCPD_CONFIG_FILE`, `MCPD_RUNTIME_FILE`, `MCPD_LOG_PATH`
and `MCPD_LOG_LEVEL` (see `default_config_file` and its siblings).

## What this package does not do

There is no command line program and no long-running daemon here. The package
does not start MCP server processes, connect to them, ping them on a schedule
or serve an HTTP API; it provides the configuration, bookkeeping and error
mapping that such a program would use.