"""Regression tests for the HTTP plugin connector wire protocol."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from app.connectors import (
    ConnectorConnectionError,
    ConnectorHTTPStatusError,
    ConnectorTimeoutError,
    HTTPPluginConnector,
    PluginProtocolError,
    connector_build_http_plugins,
)
from app.domain import SYNC_STATUS_ERROR, SYNC_STATUS_SUCCESS, SyncLogRecord


class _SyncLogRepositoryStub:
    """Sync log repository test double capturing inserted entries."""

    def __init__(self) -> None:
        self.inserted_records: list[SyncLogRecord] = []

    def db_sync_log_insert(self, record: SyncLogRecord) -> SyncLogRecord:
        """Capture entry and return it unchanged."""

        self.inserted_records.append(record)
        return record

    def db_sync_log_list_recent(self, limit: int) -> list[SyncLogRecord]:
        """Return captured entries newest first."""

        return list(reversed(self.inserted_records))[:limit]

    def db_sync_log_get_latest_success(self, connector_name: str) -> SyncLogRecord | None:
        """Not used by these tests."""

        return None


def _install_transport(
    monkeypatch: pytest.MonkeyPatch,
    connector: HTTPPluginConnector,
    handler,
) -> list[httpx.Request]:
    """Route connector HTTP traffic through a mock transport.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        connector: Connector under test.
        handler: Mock transport handler.

    Returns:
        list[httpx.Request]: Captured requests.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    captured_requests: list[httpx.Request] = []

    def _capturing_handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(_capturing_handler))
    monkeypatch.setattr(connector, "_connector_http_client", lambda: client)
    return captured_requests


def test_http_plugin_fetch_decodes_jobs_and_drops_repeated_ids(monkeypatch: pytest.MonkeyPatch) -> None:
    """Decode the `data` list with defaults and keep ids unique.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate decoding behavior.

    Raises:
        AssertionError: Raised when decoding deviates.
    """

    connector = HTTPPluginConnector(plugin_id="remotive", display_name="Remotive HTTP Plugin", base_url="http://plugin/")
    envelope = {
        "success": True,
        "count": 3,
        "data": [
            {
                "id": "remotive-1",
                "title": "Backend Engineer",
                "company": "Acme",
                "posted_date": "2024-03-01T08:00:00Z",
                "salary_min": 50000,
                "is_remote": True,
                "requirements": ["Python", 3],
                "fields": {"category": "dev"},
            },
            {"id": "remotive-2", "title": "Frontend Engineer"},
            {"id": "remotive-1", "title": "Backend Engineer (repost)"},
        ],
    }
    captured_requests = _install_transport(
        monkeypatch,
        connector,
        lambda request: httpx.Response(200, json=envelope),
    )

    jobs = connector.connector_fetch_jobs()

    assert [job.job_id for job in jobs] == ["remotive-1", "remotive-2"]
    assert jobs[0].posted_date == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
    assert jobs[0].salary_min == 50000
    assert jobs[0].is_remote is True
    assert jobs[0].requirements == ["Python"]
    assert jobs[0].fields == {"category": "dev"}
    assert jobs[1].company == ""
    assert jobs[1].posted_date.tzinfo is not None
    assert captured_requests[0].method == "GET"
    assert str(captured_requests[0].url) == "http://plugin/jobs"


def test_http_plugin_fetch_raises_protocol_error_on_unsuccessful_envelope(monkeypatch: pytest.MonkeyPatch) -> None:
    """Surface the remote error text when `success` is false.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate envelope validation.

    Raises:
        AssertionError: Raised when the envelope is accepted.
    """

    connector = HTTPPluginConnector(plugin_id="jooble", display_name="Jooble HTTP Plugin", base_url="http://plugin")
    _install_transport(
        monkeypatch,
        connector,
        lambda request: httpx.Response(200, json={"success": False, "error": "quota exceeded"}),
    )

    with pytest.raises(PluginProtocolError, match="plugin Jooble HTTP Plugin error: quota exceeded"):
        connector.connector_fetch_jobs()


def test_http_plugin_fetch_rejects_non_list_data(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reject envelopes whose `data` is not a list.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate data shape validation.

    Raises:
        AssertionError: Raised when invalid data is accepted.
    """

    connector = HTTPPluginConnector(plugin_id="eures", display_name="EURES HTTP Plugin", base_url="http://plugin")
    _install_transport(
        monkeypatch,
        connector,
        lambda request: httpx.Response(200, json={"success": True, "data": {"id": "x"}}),
    )

    with pytest.raises(PluginProtocolError, match="invalid data format"):
        connector.connector_fetch_jobs()


def test_http_plugin_fetch_ignores_non_finite_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    """Decode out-of-range and NaN salary numbers as absent bounds.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate lenient numeric decoding.

    Raises:
        AssertionError: Raised when non-finite numbers break the batch.
    """

    connector = HTTPPluginConnector(plugin_id="jooble", display_name="Jooble HTTP Plugin", base_url="http://plugin")
    body = b'{"success": true, "data": [{"id": "jooble-1", "salary_min": 1e400, "salary_max": NaN}]}'
    _install_transport(
        monkeypatch,
        connector,
        lambda request: httpx.Response(200, content=body, headers={"Content-Type": "application/json"}),
    )

    jobs = connector.connector_fetch_jobs()

    assert [job.job_id for job in jobs] == ["jooble-1"]
    assert jobs[0].salary_min is None
    assert jobs[0].salary_max is None


def test_http_plugin_fetch_skips_objects_without_id(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop job objects lacking an id and keep the rest of the batch.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate per-object leniency.

    Raises:
        AssertionError: Raised when one bad object discards the batch.
    """

    connector = HTTPPluginConnector(plugin_id="jooble", display_name="Jooble HTTP Plugin", base_url="http://plugin")
    envelope = {"success": True, "data": [{"id": "jooble-1"}, {"title": "no id"}, {"id": 7}, {"id": "jooble-2"}]}
    _install_transport(monkeypatch, connector, lambda request: httpx.Response(200, json=envelope))

    jobs = connector.connector_fetch_jobs()

    assert [job.job_id for job in jobs] == ["jooble-1", "jooble-2"]


def test_http_plugin_maps_non_2xx_to_status_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Raise a status error carrying the HTTP code and body preview.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate status error mapping.

    Raises:
        AssertionError: Raised when mapping deviates.
    """

    connector = HTTPPluginConnector(plugin_id="remoteok", display_name="RemoteOK HTTP Plugin", base_url="http://plugin")
    _install_transport(monkeypatch, connector, lambda request: httpx.Response(502, text="bad gateway"))

    with pytest.raises(ConnectorHTTPStatusError, match="HTTP 502: bad gateway") as error_info:
        connector.connector_fetch_jobs()

    assert error_info.value.status_code == 502


def test_http_plugin_maps_transport_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Raise a timeout error when the transport times out.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate timeout mapping.

    Raises:
        AssertionError: Raised when mapping deviates.
    """

    connector = HTTPPluginConnector(plugin_id="remoteok", display_name="RemoteOK HTTP Plugin", base_url="http://plugin")

    def _raise_timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    _install_transport(monkeypatch, connector, _raise_timeout)

    with pytest.raises(ConnectorTimeoutError):
        connector.connector_fetch_jobs()


def test_http_plugin_sync_posts_empty_body_and_returns_success(monkeypatch: pytest.MonkeyPatch) -> None:
    """Trigger the remote sync with an empty JSON object.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate sync request shape.

    Raises:
        AssertionError: Raised when request or result deviates.
    """

    repository = _SyncLogRepositoryStub()
    connector = HTTPPluginConnector(
        plugin_id="arbetsformedlingen",
        display_name="Arbetsförmedlingen HTTP Plugin",
        base_url="http://plugin",
        sync_log_repository=repository,
    )
    captured_requests = _install_transport(
        monkeypatch,
        connector,
        lambda request: httpx.Response(200, json={"success": True, "message": "sync started"}),
    )

    record = connector.connector_sync_jobs()

    assert record.status == SYNC_STATUS_SUCCESS
    assert record.connector_name == "arbetsformedlingen"
    assert captured_requests[0].method == "POST"
    assert str(captured_requests[0].url) == "http://plugin/sync"
    assert json.loads(captured_requests[0].content) == {}
    assert repository.inserted_records == []


def test_http_plugin_sync_records_error_entry_when_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    """Write a local error audit entry and re-raise when the plugin is down.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate error audit behavior.

    Raises:
        AssertionError: Raised when no error entry is written.
    """

    repository = _SyncLogRepositoryStub()
    connector = HTTPPluginConnector(
        plugin_id="indeed-chrome",
        display_name="Indeed Chrome HTTP Plugin",
        base_url="http://plugin",
        sync_log_repository=repository,
    )

    def _refuse_connection(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _install_transport(monkeypatch, connector, _refuse_connection)

    with pytest.raises(ConnectorConnectionError, match="connection refused"):
        connector.connector_sync_jobs()

    assert len(repository.inserted_records) == 1
    assert repository.inserted_records[0].status == SYNC_STATUS_ERROR
    assert repository.inserted_records[0].connector_name == "indeed-chrome"


def test_connector_build_http_plugins_skips_blank_urls() -> None:
    """Build one connector per non-blank URL with built-in display names.

    Returns:
        None: Assertions validate plugin set construction.

    Raises:
        AssertionError: Raised when blank URLs produce connectors.
    """

    connectors = connector_build_http_plugins(
        plugin_urls={"remotive": "http://localhost:8083/", "jooble": "  ", "custom": "http://custom:9000"},
    )

    assert [connector.connector_identify().connector_id for connector in connectors] == ["remotive", "custom"]
    assert connectors[0].connector_identify().display_name == "Remotive HTTP Plugin"
    assert connectors[1].connector_identify().display_name == "custom HTTP Plugin"


def test_http_plugin_rejects_blank_base_url() -> None:
    """Reject plugin construction without a base URL.

    Returns:
        None: Assertions validate input validation.

    Raises:
        AssertionError: Raised when blank URL is accepted.
    """

    with pytest.raises(ValueError):
        HTTPPluginConnector(plugin_id="remotive", display_name="Remotive HTTP Plugin", base_url=" ")
