"""Tests for the host-API StorageClient."""

from __future__ import annotations

import datetime as dt
from unittest.mock import MagicMock, patch

import httpx
import pytest

from src.models import NewLead, NewShowing
from src.services.storage import StorageError
from src.services.storage_client import (
    INITIAL_BACKOFF_SECONDS,
    MAX_RETRIES,
    StorageClient,
)

BASE_URL = "https://platform.test/internal"

# ── Helpers ──────────────────────────────────────────────────────────


def _mock_response(data: dict, status_code: int = 200) -> MagicMock:
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = data
    mock.text = str(data)
    return mock


def _unit(unit_id: str, agency: str = "agency-1") -> dict:
    return {"id": unit_id, "agencyId": agency, "unitNumber": unit_id.upper(), "price": 15000}


def _client() -> StorageClient:
    return StorageClient(base_url=BASE_URL, token="test-token")


class TestConstruction:
    def test_requires_base_url(self):
        with patch("src.services.storage_client.STORAGE_API_URL", None):
            with pytest.raises(StorageError, match="STORAGE_API_URL"):
                StorageClient()

    def test_sends_bearer_token(self):
        client = _client()
        assert client._client.headers["Authorization"] == "Bearer test-token"


# ── Tests: agency name ───────────────────────────────────────────────


class TestGetTenantName:
    def test_returns_name(self):
        client = _client()
        data = {"resource": {"id": "agency-1", "name": "Tulum Homes"}}
        with patch.object(client._client, "request", return_value=_mock_response(data)):
            assert client.get_tenant_name("agency-1") == "Tulum Homes"

    def test_caches_name(self):
        client = _client()
        data = {"resource": {"id": "agency-1", "name": "Tulum Homes"}}
        with patch.object(client._client, "request", return_value=_mock_response(data)) as mock_req:
            client.get_tenant_name("agency-1")
            client.get_tenant_name("agency-1")
            assert mock_req.call_count == 1

    def test_missing_agency_returns_none(self):
        client = _client()
        with patch.object(client._client, "request", return_value=_mock_response({}, 404)):
            assert client.get_tenant_name("agency-404") is None


# ── Tests: units and leads ───────────────────────────────────────────


class TestListUnits:
    def test_parses_collection(self):
        client = _client()
        data = {"collection": [_unit("u1"), _unit("u2")]}
        with patch.object(client._client, "request", return_value=_mock_response(data)) as mock_req:
            units = client.list_units("agency-1")
        assert [u.id for u in units] == ["u1", "u2"]
        assert mock_req.call_args[0] == ("GET", "/agencies/agency-1/units")

    def test_drops_units_of_other_agencies(self):
        client = _client()
        data = {"collection": [_unit("u1"), _unit("x1", agency="agency-2")]}
        with patch.object(client._client, "request", return_value=_mock_response(data)):
            units = client.list_units("agency-1")
        assert [u.id for u in units] == ["u1"]

    def test_units_are_not_cached(self):
        client = _client()
        data = {"collection": [_unit("u1")]}
        with patch.object(client._client, "request", return_value=_mock_response(data)) as mock_req:
            client.list_units("agency-1")
            client.list_units("agency-1")
            assert mock_req.call_count == 2


class TestWrites:
    def test_create_lead_posts_camel_case_body(self):
        client = _client()
        created = {"resource": {"id": "lead-1", "agencyId": "agency-1", "firstName": "Ana", "phone": "123"}}
        lead = NewLead(tenant_id="agency-1", first_name="Ana", phone="123")

        with patch.object(client._client, "request", return_value=_mock_response(created)) as mock_req:
            result = client.create_lead(lead)

        method, path = mock_req.call_args[0]
        body = mock_req.call_args[1]["json"]
        assert (method, path) == ("POST", "/agencies/agency-1/leads")
        assert body["agencyId"] == "agency-1"
        assert body["firstName"] == "Ana"
        assert result.id == "lead-1"

    def test_create_showing_serialises_datetime(self):
        client = _client()
        when = dt.datetime(2026, 3, 14, 10, 0, tzinfo=dt.UTC)
        created = {
            "resource": {
                "id": "s1", "leadId": "lead-1", "externalUnitId": "u1",
                "scheduledDate": "2026-03-14T10:00:00Z",
            }
        }
        showing = NewShowing(lead_id="lead-1", unit_id="u1", scheduled_date=when)

        with patch.object(client._client, "request", return_value=_mock_response(created)) as mock_req:
            result = client.create_showing(showing)

        body = mock_req.call_args[1]["json"]
        assert mock_req.call_args[0] == ("POST", "/leads/lead-1/showings")
        assert body["externalUnitId"] == "u1"
        assert body["scheduledDate"].startswith("2026-03-14T10:00:00")
        assert result.unit_id == "u1"


# ── Tests: retry logic ───────────────────────────────────────────────


class TestRetryLogic:
    @patch("src.services.storage_client.time.sleep")
    def test_retries_get_on_timeout(self, mock_sleep):
        client = _client()
        data = {"collection": []}
        with patch.object(
            client._client,
            "request",
            side_effect=[httpx.TimeoutException("timeout"), _mock_response(data)],
        ):
            assert client.list_units("agency-1") == []
        mock_sleep.assert_called_once_with(INITIAL_BACKOFF_SECONDS)

    @patch("src.services.storage_client.time.sleep")
    def test_retries_get_on_500_error(self, mock_sleep):
        client = _client()
        with patch.object(
            client._client,
            "request",
            side_effect=[_mock_response({}, 502), _mock_response({"collection": []})],
        ) as mock_req:
            client.list_leads("agency-1")
            assert mock_req.call_count == 2

    @patch("src.services.storage_client.time.sleep")
    def test_does_not_retry_on_400_error(self, mock_sleep):
        client = _client()
        with patch.object(client._client, "request", return_value=_mock_response({}, 400)):
            with pytest.raises(StorageError) as exc_info:
                client.list_units("agency-1")
        assert exc_info.value.status_code == 400
        mock_sleep.assert_not_called()

    @patch("src.services.storage_client.time.sleep")
    def test_raises_after_max_retries(self, mock_sleep):
        client = _client()
        with patch.object(
            client._client, "request", side_effect=httpx.TimeoutException("timeout"),
        ) as mock_req:
            with pytest.raises(StorageError):
                client.list_units("agency-1")
            assert mock_req.call_count == MAX_RETRIES
        assert mock_sleep.call_count == MAX_RETRIES - 1

    @patch("src.services.storage_client.time.sleep")
    def test_writes_are_not_retried(self, mock_sleep):
        client = _client()
        lead = NewLead(tenant_id="agency-1", first_name="Ana", phone="123")
        with patch.object(
            client._client, "request", side_effect=httpx.TimeoutException("timeout"),
        ) as mock_req:
            with pytest.raises(StorageError):
                client.create_lead(lead)
            assert mock_req.call_count == 1
        mock_sleep.assert_not_called()

    def test_invalid_json_raises_storage_error(self):
        client = _client()
        response = _mock_response({})
        response.json.side_effect = ValueError("not json")
        with patch.object(client._client, "request", return_value=response):
            with pytest.raises(StorageError, match="invalid JSON"):
                client.list_units("agency-1")
