"""Generic predicates and matching of items against key/value filters."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

Predicate = Callable[[Any, str], bool]
LogFunc = Callable[[str, str], None]


@dataclass
class FilterOptions(Generic[T]):
    """Configuration for filtering behaviour."""

    matchers: dict[str, Predicate] = field(default_factory=dict)
    unsupported: set[str] = field(default_factory=set)
    log_func: LogFunc | None = None


Option = Callable[[FilterOptions], None]


def normalize_string(s: str) -> str:
    """Lowercase a value and strip surrounding whitespace."""
    return s.strip().lower()


def normalize_slice(values: Iterable[str]) -> list[str]:
    """Normalize every value with :func:`normalize_string`."""
    return [normalize_string(v) for v in values]


def new_options(*options: Option | None) -> FilterOptions:
    """Create default options and apply the given option functions."""
    opts: FilterOptions = FilterOptions()
    for option in options:
        if option is not None:
            option(opts)
    return opts


_TRUE_VALUES = frozenset({"1", "t", "true"})
_FALSE_VALUES = frozenset({"0", "f", "false"})


def _parse_bool(value: str) -> bool | None:
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return None


def equals(provider: Callable[[T], str]) -> Predicate:
    """Match when the provided value equals the filter value."""

    def predicate(item: T, value: str) -> bool:
        return normalize_string(provider(item)) == normalize_string(value)

    return predicate


def equals_bool(provider: Callable[[T], bool]) -> Predicate:
    """Match when the provided boolean equals the parsed filter value."""

    def predicate(item: T, value: str) -> bool:
        parsed = _parse_bool(normalize_string(value))
        if parsed is None:
            return False
        return provider(item) == parsed

    return predicate


def partial(provider: Callable[[T], str]) -> Predicate:
    """Match when the provided value contains the filter value."""

    def predicate(item: T, value: str) -> bool:
        return normalize_string(value) in normalize_string(provider(item))

    return predicate


def partial_all(provider: Callable[[T], Iterable[str]]) -> Predicate:
    """Match when every comma-separated filter value is a substring of some provided value."""

    def predicate(item: T, value: str) -> bool:
        required = normalize_slice(value.split(","))
        actual = normalize_slice(provider(item))
        return all(any(r in a for a in actual) for r in required)

    return predicate


def equals_any(*providers: Callable[[T], str]) -> Predicate:
    """Match when any provided value contains the filter value."""

    def predicate(item: T, value: str) -> bool:
        query = normalize_string(value)
        return any(query in normalize_string(p(item)) for p in providers)

    return predicate


def has_only(provider: Callable[[T], Iterable[str]]) -> Predicate:
    """Match when the provided values are a subset of the comma-separated filter values."""

    def predicate(item: T, value: str) -> bool:
        expected = set(normalize_slice(value.split(",")))
        return all(normalize_string(v) in expected for v in provider(item))

    return predicate


def has_all(provider: Callable[[T], Iterable[str]]) -> Predicate:
    """Match when the provided values include every comma-separated filter value."""

    def predicate(item: T, value: str) -> bool:
        required = normalize_slice(value.split(","))
        allowed = set(normalize_slice(provider(item)))
        return all(r in allowed for r in required)

    return predicate


def has_any(provider: Callable[[T], Iterable[str]]) -> Predicate:
    """Match when the provided values include any comma-separated filter value."""

    def predicate(item: T, value: str) -> bool:
        allowed = set(normalize_slice(value.split(",")))
        return any(normalize_string(v) in allowed for v in provider(item))

    return predicate


def with_matchers(matchers: Mapping[str, Predicate]) -> Option:
    """Add or override several matchers."""

    def apply(opts: FilterOptions) -> None:
        for key, predicate in matchers.items():
            opts.matchers[normalize_string(key)] = predicate

    return apply


def with_matcher(key: str, predicate: Predicate) -> Option:
    """Add or override one matcher."""

    def apply(opts: FilterOptions) -> None:
        opts.matchers[normalize_string(key)] = predicate

    return apply


def with_unsupported_keys(*keys: str) -> Option:
    """Mark keys as unsupported for filtering."""

    def apply(opts: FilterOptions) -> None:
        opts.unsupported.update(normalize_string(k) for k in keys)

    return apply


def with_log_func(log_func: LogFunc | None) -> Option:
    """Set the function called when an unsupported key is encountered."""

    def apply(opts: FilterOptions) -> None:
        if log_func is not None:
            opts.log_func = log_func

    return apply


def match(item: Any, filters: Mapping[str, str] | None, *options: Option | None) -> bool:
    """Apply filters to an item using the configured matchers.

    Returns False when an unsupported key is used or a matcher rejects the item.
    Keys without a matcher are ignored.
    """
    if filters is None:
        return True

    opts = new_options(*options)

    for key, value in filters.items():
        k = normalize_string(key)
        if not k:
            continue
        if k in opts.unsupported:
            if opts.log_func is not None:
                opts.log_func(k, value)
            return False
        matcher = opts.matchers.get(k)
        if matcher is None:
            continue
        if not matcher(item, value):
            return False
    return True


def match_requested_slice(requested: Iterable[str], available: Iterable[str]) -> list[str]:
    """Return the normalized requested values, all of which must be available.

    With nothing requested, every available value is returned. The result is sorted.
    Raises ValueError naming the missing values when any are not available.
    """
    available_set = {normalize_string(v) for v in available}
    requested = list(requested)

    if not requested:
        return sorted(available_set)

    requested_set: set[str] = set()
    missing: list[str] = []
    for value in requested:
        normalized = normalize_string(value)
        requested_set.add(normalized)
        if normalized not in available_set:
            missing.append(value)

    if not missing:
        return sorted(requested_set)
    if len(missing) == len(requested_set):
        raise ValueError("none of the requested values were found")
    raise ValueError(f"missing values: {', '.join(sorted(missing))}")