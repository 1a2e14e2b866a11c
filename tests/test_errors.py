import logging
from http import HTTPStatus

import pytest

from mcpd.errors import (
    ApiError,
    BadRequestError,
    HealthNotTrackedError,
    McpdError,
    ServerNotFoundError,
    ToolCallFailedError,
    ToolCallFailedUnknownError,
    ToolForbiddenError,
    ToolListFailedError,
    ToolsNotFoundError,
    map_error,
)


def test_error_message_includes_detail():
    err = HealthNotTrackedError("server1")
    assert str(err) == "server health is not being tracked: server1"
    assert err.detail == "server1"


def test_error_message_without_detail():
    assert str(ToolCallFailedUnknownError()) == "tool call failed (unknown error)"


@pytest.mark.parametrize(
    "cls",
    [
        BadRequestError,
        ServerNotFoundError,
        ToolsNotFoundError,
        ToolForbiddenError,
        ToolListFailedError,
        ToolCallFailedError,
        ToolCallFailedUnknownError,
        HealthNotTrackedError,
    ],
)
def test_all_errors_share_base(cls):
    err = cls("x")
    assert isinstance(err, McpdError)
    assert err.detail == "x"
    assert str(err).endswith(": x")


@pytest.mark.parametrize(
    "error, status",
    [
        (BadRequestError("bad"), HTTPStatus.BAD_REQUEST),
        (ServerNotFoundError("srv"), HTTPStatus.NOT_FOUND),
        (ToolForbiddenError("tool"), HTTPStatus.FORBIDDEN),
        (ToolListFailedError("srv"), HTTPStatus.BAD_GATEWAY),
        (ToolCallFailedError("srv"), HTTPStatus.BAD_GATEWAY),
        (ToolCallFailedUnknownError("srv"), HTTPStatus.BAD_GATEWAY),
        (ValueError("boom"), HTTPStatus.INTERNAL_SERVER_ERROR),
    ],
)
def test_map_error_status(error, status):
    assert map_error(error).status == status


def test_client_errors_keep_message():
    err = ServerNotFoundError("github")
    mapped = map_error(err)
    assert mapped.detail == str(err)
    assert mapped.errors == ()


def test_gateway_errors_carry_cause():
    err = ToolListFailedError("srv")
    mapped = map_error(err)
    assert mapped.detail == "MCP server error listing tools"
    assert mapped.errors == (err,)


def test_call_failed_detail():
    assert map_error(ToolCallFailedError()).detail == "MCP server error calling tool"
    assert (
        map_error(ToolCallFailedUnknownError()).detail
        == "MCP server unknown error calling tool"
    )


def test_unknown_error_is_internal_and_logged(caplog):
    err = RuntimeError("boom")
    with caplog.at_level(logging.ERROR, logger="mcpd.api"):
        mapped = map_error(err)
    assert mapped.detail == "Internal server error"
    assert mapped.errors == (err,)
    assert any("boom" in record.getMessage() for record in caplog.records)


def test_wrapped_cause_is_matched():
    try:
        try:
            raise ServerNotFoundError("srv")
        except ServerNotFoundError as inner:
            raise RuntimeError("wrapper") from inner
    except RuntimeError as outer:
        mapped = map_error(outer)
    assert mapped.status == HTTPStatus.NOT_FOUND


def test_grouped_errors_are_matched_in_priority_order():
    group = ExceptionGroup("many", [ToolForbiddenError("t"), BadRequestError("b")])
    assert map_error(group).status == HTTPStatus.BAD_REQUEST


def test_api_error_title_from_status():
    err = ApiError(HTTPStatus.NOT_FOUND, "missing")
    assert err.title == HTTPStatus.NOT_FOUND.phrase
    assert str(err) == "missing"