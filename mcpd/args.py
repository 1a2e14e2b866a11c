"""Normalization and merging of command line flag arguments."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

OPTION_TERMINATOR = "--"
FLAG_PREFIX_LONG = "--"
FLAG_PREFIX_SHORT = "-"
FLAG_VALUE_SEPARATOR = "="


@dataclass(frozen=True)
class ArgEntry:
    """A parsed command line argument: a flag key and an optional value."""

    key: str
    value: str = ""

    def has_value(self) -> bool:
        """Report whether this is a key/value flag rather than a bool flag."""
        return bool(self.value.strip())

    def __str__(self) -> str:
        if self.has_value():
            return f"{self.key}{FLAG_VALUE_SEPARATOR}{self.value}"
        return self.key


def parse_arg(arg: str) -> ArgEntry:
    """Split an argument into its key and value, trimming both."""
    key, sep, value = arg.partition(FLAG_VALUE_SEPARATOR)
    return ArgEntry(key=key.strip(), value=value.strip() if sep else "")


def _is_not_flag(value: str) -> bool:
    value = value.strip()
    return not value.startswith(FLAG_PREFIX_SHORT) and not value.startswith(FLAG_PREFIX_LONG)


def normalize_args(raw_args: Iterable[str]) -> list[str]:
    """Extract and normalize flags from command line arguments.

    ``--flag value`` becomes ``--flag=value``, ``-f value`` becomes ``-f=value``,
    ``-xyz`` expands to ``-x``, ``-y``, ``-z``. Positional arguments are dropped
    and parsing stops at ``--``.
    """
    pending = deque(raw_args)
    normalized: list[str] = []

    while pending:
        arg = pending.popleft().strip()

        if arg == OPTION_TERMINATOR:
            break
        if _is_not_flag(arg):
            continue

        is_short_flag = arg.startswith(FLAG_PREFIX_SHORT) and not arg.startswith(FLAG_PREFIX_LONG)
        contains_value = FLAG_VALUE_SEPARATOR in arg

        if is_short_flag and len(arg) > 2 and not contains_value:
            normalized.extend(f"{FLAG_PREFIX_SHORT}{c}" for c in arg[1:])
            continue

        if contains_value:
            normalized.append(arg)
            continue

        if pending and _is_not_flag(pending[0]):
            arg = f"{arg}{FLAG_VALUE_SEPARATOR}{pending.popleft().strip()}"
        normalized.append(arg)

    return normalized


def remove_matching_flags(args: Iterable[str], to_remove: Iterable[str]) -> list[str]:
    """Drop every argument that is, or assigns a value to, one of the given flags."""
    remove = set(to_remove)
    return [
        arg
        for arg in args
        if not any(arg == flag or arg.startswith(flag + FLAG_VALUE_SEPARATOR) for flag in remove)
    ]


def merge_args(a: Iterable[str], b: Iterable[str]) -> list[str]:
    """Merge the flags of ``b`` into ``a``, with ``b`` winning on collisions.

    The order of ``a`` is preserved and new flags from ``b`` follow in order.
    """
    a = list(a)
    b = list(b)
    if not b:
        return a
    if not a:
        return b

    overrides = {entry.key: entry for entry in map(parse_arg, b)}
    result: list[str] = []
    processed: set[str] = set()

    for arg in a:
        entry = parse_arg(arg)
        override = overrides.get(entry.key)
        result.append(str(override) if override is not None else arg)
        processed.add(entry.key)

    result.extend(arg for arg in b if parse_arg(arg).key not in processed)
    return result