"""Domain errors and their mapping to HTTP API errors."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from http import HTTPStatus

_logger = logging.getLogger("mcpd.api")


class McpdError(Exception):
    """Base class for application domain errors."""

    base_message = "mcpd error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        message = f"{self.base_message}: {detail}" if detail else self.base_message
        super().__init__(message)


class BadRequestError(McpdError):
    base_message = "bad request"


class ServerNotFoundError(McpdError):
    base_message = "server not found"


class ToolsNotFoundError(McpdError):
    base_message = "tools not found"


class ToolForbiddenError(McpdError):
    base_message = "tool not allowed"


class ToolListFailedError(McpdError):
    base_message = "tool list failed"


class ToolCallFailedError(McpdError):
    base_message = "tool call failed"


class ToolCallFailedUnknownError(McpdError):
    base_message = "tool call failed (unknown error)"


class HealthNotTrackedError(McpdError):
    base_message = "server health is not being tracked"


class ApiError(Exception):
    """An error ready to be returned by the HTTP API."""

    def __init__(
        self,
        status: HTTPStatus | int,
        detail: str,
        errors: Iterable[BaseException] = (),
    ) -> None:
        super().__init__(detail)
        self.status = HTTPStatus(status)
        self.detail = detail
        self.errors = tuple(errors)

    @property
    def title(self) -> str:
        return self.status.phrase


def _is(error: BaseException, cls: type[BaseException]) -> bool:
    """Report whether ``error``, its causes or grouped errors include ``cls``."""
    stack: list[BaseException | None] = [error]
    seen: set[int] = set()
    while stack:
        current = stack.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, cls):
            return True
        if isinstance(current, BaseExceptionGroup):
            stack.extend(current.exceptions)
        stack.append(current.__cause__)
    return False


def map_error(error: BaseException) -> ApiError:
    """Map an application error to the API error that should be returned."""
    if _is(error, BadRequestError):
        return ApiError(HTTPStatus.BAD_REQUEST, str(error))
    if _is(error, ServerNotFoundError):
        return ApiError(HTTPStatus.NOT_FOUND, str(error))
    if _is(error, ToolForbiddenError):
        return ApiError(HTTPStatus.FORBIDDEN, str(error))
    if _is(error, ToolListFailedError):
        _logger.error("Tool list failed: %s", error)
        return ApiError(HTTPStatus.BAD_GATEWAY, "MCP server error listing tools", [error])
    if _is(error, ToolCallFailedError):
        _logger.error("Tool call failed: %s", error)
        return ApiError(HTTPStatus.BAD_GATEWAY, "MCP server error calling tool", [error])
    if _is(error, ToolCallFailedUnknownError):
        _logger.error("Tool call failed, unknown error: %s", error)
        return ApiError(
            HTTPStatus.BAD_GATEWAY, "MCP server unknown error calling tool", [error]
        )
    _logger.error("Unexpected error interacting with MCP server: %s", error)
    return ApiError(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error", [error])