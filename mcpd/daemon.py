"""Daemon helpers: API address validation and relaying of MCP server log output."""

from __future__ import annotations

import logging
import re
import socket
from enum import IntEnum

LOGGING_TRACE = 5
logging.addLevelName(LOGGING_TRACE, "TRACE")

_NUMERIC_PORT = re.compile(r"[+-]?[0-9]+")

# Well-known TCP services that resolve even without a system services database.
_KNOWN_TCP_SERVICES = {
    "ftp": 21,
    "ftps": 990,
    "gopher": 70,
    "http": 80,
    "https": 443,
    "imap2": 143,
    "imap3": 220,
    "imaps": 993,
    "pop3": 110,
    "pop3s": 995,
    "smtp": 25,
    "submissions": 465,
    "ssh": 22,
    "telnet": 23,
}


class LogLevel(IntEnum):
    """Log levels, ordered from most to least verbose."""

    NO_LEVEL = 0
    TRACE = 1
    DEBUG = 2
    INFO = 3
    WARN = 4
    ERROR = 5
    OFF = 6


_LOGGING_LEVELS = {
    LogLevel.TRACE: LOGGING_TRACE,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

_LEVEL_NAMES = {
    "trace": LogLevel.TRACE,
    "debug": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "warn": LogLevel.WARN,
    "warning": LogLevel.WARN,
    "error": LogLevel.ERROR,
    "fatal": LogLevel.ERROR,
    "critical": LogLevel.ERROR,
    "off": LogLevel.OFF,
}


def _split_host_port(hostport: str) -> tuple[str, str]:
    i = hostport.rfind(":")
    if i < 0:
        raise ValueError(f"address {hostport}: missing port in address")

    if hostport.startswith("["):
        end = hostport.find("]")
        if end < 0:
            raise ValueError(f"address {hostport}: missing ']' in address")
        if end + 1 == len(hostport):
            raise ValueError(f"address {hostport}: missing port in address")
        if end + 1 != i:
            if hostport[end + 1] == ":":
                raise ValueError(f"address {hostport}: too many colons in address")
            raise ValueError(f"address {hostport}: missing port in address")
        host = hostport[1:end]
        j, k = 1, end + 1
    else:
        host = hostport[:i]
        if ":" in host:
            raise ValueError(f"address {hostport}: too many colons in address")
        j = k = 0

    if "[" in hostport[j:]:
        raise ValueError(f"address {hostport}: unexpected '[' in address")
    if "]" in hostport[k:]:
        raise ValueError(f"address {hostport}: unexpected ']' in address")

    return host, hostport[i + 1 :]


def _is_known_port(port: str) -> bool:
    if _NUMERIC_PORT.fullmatch(port):
        return True
    if port.lower() in _KNOWN_TCP_SERVICES:
        return True
    try:
        socket.getservbyname(port, "tcp")
    except (OSError, UnicodeError):
        return False
    return True


def is_valid_addr(addr: str) -> tuple[str, str]:
    """Validate a ``host:port`` address and return its host and port.

    The host may be empty; the port may be a number or a named TCP service.
    Raises ValueError for an invalid address.
    """
    try:
        host, port = _split_host_port(addr)
    except ValueError as exc:
        raise ValueError(f"invalid address format: {exc}") from exc

    if not port:
        raise ValueError("address missing port")
    if not _is_known_port(port):
        raise ValueError(f"invalid address port: {port}")

    return host, port


def normalize_log_level(level: str) -> LogLevel:
    """Map a level name, in any case, to a LogLevel; unknown names give NO_LEVEL."""
    return _LEVEL_NAMES.get(level.strip().lower(), LogLevel.NO_LEVEL)


def parse_and_log_mcp_message(logger: logging.Logger, line: str) -> None:
    """Log a line of MCP server stderr at the level it names.

    Lines of the form ``LEVEL:LOGGER:MESSAGE`` or ``LEVEL:MESSAGE`` are logged at
    that level; other non-empty lines are logged as info.
    """
    trimmed = line.strip()
    if not trimmed:
        return

    parts = trimmed.split(":", 2)
    if len(parts) < 2:
        logger.info(trimmed)
        return

    level = normalize_log_level(parts[0])
    message = parts[-1]

    if level is LogLevel.NO_LEVEL:
        logger.info(trimmed)
        return

    py_level = _LOGGING_LEVELS.get(level)
    if py_level is not None and logger.isEnabledFor(py_level):
        logger.log(py_level, message)