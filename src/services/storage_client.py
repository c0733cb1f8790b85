"""HTTP client for the host application's tenant data API.

Implements the ``TenantStore`` contract over the internal REST endpoints:

    GET  /agencies/{tenant_id}               → {"resource": {...agency}}
    GET  /agencies/{tenant_id}/units         → {"collection": [...units]}
    GET  /agencies/{tenant_id}/leads         → {"collection": [...leads]}
    POST /agencies/{tenant_id}/leads         → {"resource": {...lead}}
    POST /leads/{lead_id}/showings           → {"resource": {...showing}}

Reads are retried with exponential backoff on timeouts and 5xx errors.
Writes are sent once: retrying a POST whose response was lost could create
a duplicate lead.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

import httpx

from src.config import STORAGE_API_TOKEN, STORAGE_API_URL
from src.models import Lead, NewLead, NewShowing, Showing, Unit
from src.services.cache import LRUCache
from src.services.storage import StorageError

logger = logging.getLogger(__name__)

# ── Retry configuration ─────────────────────────────────────────────
MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 0.5
REQUEST_TIMEOUT_SECONDS = 10.0
AGENCY_NAME_TTL_SECONDS = 300

_CK_AGENCY_NAME = "agency_name:"


class StorageClient:
    """``TenantStore`` backed by the host application's REST API.

    Only agency names are cached.  Units and leads are always fetched fresh:
    availability changes at any time, and a stale lead list would defeat
    contact deduplication.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        cache: LRUCache | None = None,
    ):
        base_url = base_url or STORAGE_API_URL
        if not base_url:
            raise StorageError("STORAGE_API_URL is not configured")
        token = token or STORAGE_API_TOKEN

        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url, headers=headers, timeout=REQUEST_TIMEOUT_SECONDS,
        )
        self._cache = cache or LRUCache(max_bytes=1024 * 1024, ttl_seconds=AGENCY_NAME_TTL_SECONDS)

    # ── Internal helpers ─────────────────────────────────────────────

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute a request; GETs are retried, writes are not."""
        attempts = MAX_RETRIES if method == "GET" else 1
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                response = self._client.request(method, path, json=json_body)
                if response.status_code >= 400:
                    raise StorageError(
                        f"{method} {path} failed with {response.status_code}: {response.text}",
                        status_code=response.status_code,
                    )
                try:
                    return response.json()
                except ValueError as exc:
                    raise StorageError(f"{method} {path} returned invalid JSON") from exc

            except httpx.HTTPError as exc:
                last_error = exc
                logger.warning(
                    "Storage API %s %s attempt %d/%d failed (%s)",
                    method, path, attempt, attempts, type(exc).__name__,
                )
            except StorageError as exc:
                if exc.status_code is None or exc.status_code < 500:
                    raise
                last_error = exc
                logger.warning(
                    "Storage API server error on %s %s attempt %d/%d",
                    method, path, attempt, attempts,
                )

            if attempt < attempts:
                time.sleep(INITIAL_BACKOFF_SECONDS * (2 ** (attempt - 1)))

        raise StorageError(f"Storage API request {method} {path} failed: {last_error}")

    # ── TenantStore ──────────────────────────────────────────────────

    def get_tenant_name(self, tenant_id: str) -> str | None:
        key = f"{_CK_AGENCY_NAME}{tenant_id}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            data = self._request("GET", f"/agencies/{tenant_id}")
        except StorageError as exc:
            if exc.status_code == 404:
                return None
            raise
        name = data.get("resource", {}).get("name")
        if name:
            self._cache.put(key, name)
        return name

    def list_units(self, tenant_id: str) -> list[Unit]:
        data = self._request("GET", f"/agencies/{tenant_id}/units")
        units = [Unit.model_validate(raw) for raw in data.get("collection", [])]
        foreign = [u.id for u in units if u.tenant_id != tenant_id]
        if foreign:
            logger.warning(
                "Dropping %d unit(s) not owned by agency %s: %s", len(foreign), tenant_id, foreign,
            )
        return [u for u in units if u.tenant_id == tenant_id]

    def list_leads(self, tenant_id: str) -> list[Lead]:
        data = self._request("GET", f"/agencies/{tenant_id}/leads")
        leads = [Lead.model_validate(raw) for raw in data.get("collection", [])]
        return [lead for lead in leads if lead.tenant_id == tenant_id]

    def create_lead(self, lead: NewLead) -> Lead:
        data = self._request(
            "POST",
            f"/agencies/{lead.tenant_id}/leads",
            json_body=lead.model_dump(mode="json", by_alias=True),
        )
        created = Lead.model_validate(data["resource"])
        logger.info("Created lead %s for agency %s", created.id, lead.tenant_id)
        return created

    def create_showing(self, showing: NewShowing) -> Showing:
        data = self._request(
            "POST",
            f"/leads/{showing.lead_id}/showings",
            json_body=showing.model_dump(mode="json", by_alias=True),
        )
        created = Showing.model_validate(data["resource"])
        logger.info("Created showing %s for lead %s", created.id, showing.lead_id)
        return created

    def close(self) -> None:
        self._client.close()


# ── Module-level singleton (thread-safe) ────────────────────────────
_client: StorageClient | None = None
_client_lock = threading.Lock()


def get_storage_client() -> StorageClient:
    """Return a module-level StorageClient singleton (double-checked locking)."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = StorageClient()
    return _client
