"""Persistence contract used by the domain tool functions, plus an in-memory store.

The host application owns units, leads and showings.  The orchestration core
only needs the tenant-scoped reads and the two writes below; any object with
these methods can be injected (``StorageClient`` talks to the host API over
HTTP, ``InMemoryTenantStore`` backs tests and the CLI).

Implementations signal failure by raising ``StorageError``.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Any, Protocol

from src.models import Lead, NewLead, NewShowing, Showing, Unit

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the persistence collaborator fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class TenantStore(Protocol):
    def get_tenant_name(self, tenant_id: str) -> str | None: ...

    def list_units(self, tenant_id: str) -> list[Unit]: ...

    def list_leads(self, tenant_id: str) -> list[Lead]: ...

    def create_lead(self, lead: NewLead) -> Lead: ...

    def create_showing(self, showing: NewShowing) -> Showing: ...


class InMemoryTenantStore:
    """Thread-safe, process-local ``TenantStore``.

    Writes are serialised with a lock so that concurrent scheduling requests
    see each other's leads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tenants: dict[str, str] = {}
        self._units: dict[str, Unit] = {}
        self._leads: dict[str, Lead] = {}
        self._showings: dict[str, Showing] = {}

    # ── Seeding ──────────────────────────────────────────────────────

    def add_tenant(self, tenant_id: str, name: str) -> None:
        with self._lock:
            self._tenants[tenant_id] = name

    def add_unit(self, unit: Unit) -> Unit:
        with self._lock:
            self._units[unit.id] = unit
        return unit

    @classmethod
    def from_json(cls, path: str | Path) -> InMemoryTenantStore:
        """Load a seed file shaped like ``{"agencies": [...], "units": [...]}``."""
        data: dict[str, Any] = json.loads(Path(path).read_text(encoding="utf-8"))
        store = cls()
        for agency in data.get("agencies", []):
            store.add_tenant(agency["id"], agency.get("name", ""))
        for raw in data.get("units", []):
            store.add_unit(Unit.model_validate(raw))
        logger.info(
            "Loaded %d agencies and %d units from %s",
            len(store._tenants), len(store._units), path,
        )
        return store

    # ── TenantStore ──────────────────────────────────────────────────

    def get_tenant_name(self, tenant_id: str) -> str | None:
        with self._lock:
            return self._tenants.get(tenant_id)

    def list_units(self, tenant_id: str) -> list[Unit]:
        with self._lock:
            return [u for u in self._units.values() if u.tenant_id == tenant_id]

    def list_leads(self, tenant_id: str) -> list[Lead]:
        with self._lock:
            return [lead for lead in self._leads.values() if lead.tenant_id == tenant_id]

    def create_lead(self, lead: NewLead) -> Lead:
        created = Lead(id=str(uuid.uuid4()), **lead.model_dump())
        with self._lock:
            self._leads[created.id] = created
        return created

    def create_showing(self, showing: NewShowing) -> Showing:
        with self._lock:
            if showing.lead_id not in self._leads:
                raise StorageError(f"Lead {showing.lead_id} does not exist")
            if showing.unit_id not in self._units:
                raise StorageError(f"Unit {showing.unit_id} does not exist")
            created = Showing(id=str(uuid.uuid4()), **showing.model_dump())
            self._showings[created.id] = created
        return created

    # ── Introspection ────────────────────────────────────────────────

    @property
    def showings(self) -> list[Showing]:
        with self._lock:
            return list(self._showings.values())
