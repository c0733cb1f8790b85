"""Tenant-scoped property tools executed on behalf of the chatbot model.

Every ``PropertyTools`` method takes the acting tenant (agency) id first and
only ever reads units and leads through that tenant's collection.  A unit id
that belongs to another agency is reported exactly like one that does not
exist.

Argument structs are pydantic models.  Their JSON schemas (camelCase, as the
model sees them) are declared to the model by ``src.tools.registry``, and the
same models validate the model's arguments before any method runs.

Each method returns a JSON-serialisable dict with a ``success`` flag and a
Spanish ``message`` the model can relay to the client.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.config import AGENCY_TIMEZONE
from src.models import Lead, NewLead, NewShowing, Unit
from src.services.storage import TenantStore

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 5
DESCRIPTION_PREVIEW_CHARS = 200
VIEWING_SLOTS = (
    "09:00", "10:00", "11:00", "12:00", "13:00",
    "14:00", "15:00", "16:00", "17:00", "18:00",
)

NO_RESULTS_MESSAGE = (
    "No encontré propiedades que coincidan con esos criterios. "
    "¿Te gustaría ampliar la búsqueda?"
)
UNIT_NOT_FOUND_MESSAGE = "No encontré esa propiedad. ¿Podrías verificar el número o ID?"
SCHEDULE_UNIT_NOT_FOUND_MESSAGE = (
    "No encontré esa propiedad en nuestro inventario. "
    "¿Podrías verificar cuál propiedad te interesa?"
)
SCHEDULE_FAILED_MESSAGE = (
    "Hubo un problema al agendar la cita. Por favor intenta de nuevo "
    "o contacta directamente a la agencia."
)

_SUMMARY_FIELDS = {
    "id", "unit_number", "price", "currency", "bedrooms", "bathrooms", "size",
    "size_unit", "address", "zone", "listing_type", "amenities", "description",
}


# ── Argument structs ─────────────────────────────────────────────────


class _ToolArgs(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        # Models often send "" for arguments they mean to omit
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SearchCriteria(_ToolArgs):
    """Buscar propiedades disponibles según precio, ubicación, recámaras o tipo de propiedad."""

    min_price: float | None = Field(None, ge=0, description="Precio mínimo en MXN")
    max_price: float | None = Field(None, ge=0, description="Precio máximo en MXN")
    bedrooms: int | None = Field(None, ge=0, description="Número de recámaras")
    property_type: str | None = Field(
        None, description="Tipo de propiedad: departamento, casa, estudio, penthouse",
    )
    location: str | None = Field(
        None, description="Ubicación o zona: Aldea Zama, La Veleta, Region 15, Centro, etc.",
    )
    listing_type: Literal["rent", "sale", "both"] | None = Field(
        None, description="Tipo de listado: rent (renta), sale (venta), both (ambos)",
    )
    limit: int = Field(
        DEFAULT_SEARCH_LIMIT, ge=1, le=50,
        description="Número máximo de resultados a mostrar (default: 5)",
    )

    @field_validator("limit", mode="before")
    @classmethod
    def _default_limit(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_SEARCH_LIMIT
        return value


class PropertyLookup(_ToolArgs):
    """Obtener detalles completos de una propiedad por su ID o número de unidad."""

    unit_id: str | None = Field(None, description="ID de la unidad")
    unit_number: str | None = Field(None, description="Número de la unidad")


class ViewingRequest(_ToolArgs):
    """Agendar una cita para ver una propiedad. Requiere nombre y teléfono del cliente."""

    unit_id: str | None = Field(None, description="ID de la propiedad a visitar")
    client_name: str = Field(..., min_length=1, description="Nombre completo del cliente")
    client_phone: str = Field(..., min_length=1, description="Teléfono del cliente")
    client_email: str | None = Field(None, description="Email del cliente")
    preferred_date: dt.date | None = Field(
        None, description="Fecha preferida en formato YYYY-MM-DD",
    )
    preferred_time: dt.time | None = Field(
        None, description="Hora preferida en formato HH:MM (24h)",
    )
    notes: str | None = Field(None, description="Notas adicionales sobre la visita")


class AvailableTimesQuery(_ToolArgs):
    """Obtener horarios disponibles para agendar citas en una fecha específica."""

    date: dt.date = Field(..., description="Fecha en formato YYYY-MM-DD")


# ── Helpers ──────────────────────────────────────────────────────────


def _digits(phone: str | None) -> str:
    return re.sub(r"\D", "", phone or "")


def _same_phone(left: str | None, right: str | None) -> bool:
    left_digits, right_digits = _digits(left), _digits(right)
    if left_digits and right_digits:
        return left_digits == right_digits
    # Phones without digits ("pendiente") compare as text
    left_text = (left or "").strip().casefold()
    return bool(left_text) and left_text == (right or "").strip().casefold()


def _matches_contact(lead: Lead, request: ViewingRequest) -> bool:
    """Same person if the phones match, or the email matches case-insensitively."""
    if _same_phone(lead.phone, request.client_phone):
        return True
    email = (request.client_email or "").lower()
    return bool(email) and (lead.email or "").lower() == email


def _split_name(full_name: str) -> tuple[str, str]:
    parts = full_name.split()
    return parts[0], " ".join(parts[1:])


def _location_text(unit: Unit) -> str:
    return " ".join(
        part or "" for part in (unit.unit_number, unit.address, unit.zone, unit.description)
    ).lower()


def _showing_datetime(
    preferred_date: dt.date | None,
    preferred_time: dt.time | None,
    tz: dt.tzinfo,
) -> dt.datetime:
    """Requested date (default: now) with the requested time of day applied."""
    if preferred_date is None:
        scheduled = dt.datetime.now(tz)
    else:
        scheduled = dt.datetime.combine(preferred_date, dt.time(), tzinfo=tz)
    if preferred_time is not None:
        scheduled = scheduled.replace(
            hour=preferred_time.hour, minute=preferred_time.minute, second=0, microsecond=0,
        )
    return scheduled


def _unit_summary(unit: Unit) -> dict[str, Any]:
    summary = unit.model_dump(mode="json", by_alias=True, include=_SUMMARY_FIELDS)
    if unit.description:
        summary["description"] = unit.description[:DESCRIPTION_PREVIEW_CHARS]
    return summary


# ── Tools ────────────────────────────────────────────────────────────


class PropertyTools:
    """Domain functions the chatbot model may call, bound to one store."""

    def __init__(self, store: TenantStore, *, timezone: dt.tzinfo | None = None):
        self._store = store
        self._tz = timezone or AGENCY_TIMEZONE

    def search_units(self, tenant_id: str, criteria: SearchCriteria) -> dict[str, Any]:
        """Available units matching *criteria*, capped at ``criteria.limit``."""
        matches = [
            unit for unit in self._store.list_units(tenant_id)
            if self._matches(unit, criteria)
        ]
        logger.debug("search_units(%s): %d match(es)", tenant_id, len(matches))

        if not matches:
            return {"success": True, "count": 0, "message": NO_RESULTS_MESSAGE}

        results = matches[: criteria.limit]
        return {
            "success": True,
            "count": len(results),
            "totalAvailable": len(matches),
            "properties": [_unit_summary(unit) for unit in results],
        }

    @staticmethod
    def _matches(unit: Unit, criteria: SearchCriteria) -> bool:
        if not unit.is_available:
            return False
        if unit.price is not None:
            if criteria.min_price is not None and unit.price < criteria.min_price:
                return False
            if criteria.max_price is not None and unit.price > criteria.max_price:
                return False
        if criteria.bedrooms is not None and unit.bedrooms != criteria.bedrooms:
            return False
        wanted = criteria.listing_type
        if wanted and wanted != "both" and unit.listing_type not in (None, wanted, "both"):
            return False
        if criteria.location and criteria.location.lower() not in _location_text(unit):
            return False
        if criteria.property_type:
            unit_type = (unit.property_type or unit.unit_number or "").lower()
            if criteria.property_type.lower() not in unit_type:
                return False
        return True

    def get_unit_details(self, tenant_id: str, lookup: PropertyLookup) -> dict[str, Any]:
        """Full details of one of the tenant's units, by id or unit number."""
        unit = self._find_unit(tenant_id, lookup.unit_id, lookup.unit_number)
        if unit is None:
            return {"success": False, "message": UNIT_NOT_FOUND_MESSAGE}
        return {
            "success": True,
            "property": unit.model_dump(mode="json", by_alias=True, exclude={"tenant_id"}),
        }

    def _find_unit(
        self, tenant_id: str, unit_id: str | None, unit_number: str | None = None,
    ) -> Unit | None:
        units = self._store.list_units(tenant_id)
        if unit_id:
            return next((u for u in units if u.id == unit_id and u.tenant_id == tenant_id), None)
        if unit_number:
            number = unit_number.lower()
            return next(
                (
                    u for u in units
                    if (u.unit_number or "").lower() == number and u.tenant_id == tenant_id
                ),
                None,
            )
        return None

    def schedule_viewing(self, tenant_id: str, request: ViewingRequest) -> dict[str, Any]:
        """Register a viewing request and hand it to a human agent for confirmation.

        Reuses the tenant's existing lead for this phone/email or creates
        one.  A showing is only created when a valid unit of this tenant was
        given.  Persistence failures come back as a rejection payload.
        """
        try:
            unit_id: str | None = None
            if request.unit_id:
                unit = self._find_unit(tenant_id, request.unit_id)
                if unit is None:
                    logger.info(
                        "schedule_viewing(%s): unit %s not in agency inventory",
                        tenant_id, request.unit_id,
                    )
                    return {"success": False, "message": SCHEDULE_UNIT_NOT_FOUND_MESSAGE}
                unit_id = unit.id

            lead = self._resolve_lead(tenant_id, request)

            if unit_id is not None:
                showing = self._store.create_showing(
                    NewShowing(
                        lead_id=lead.id,
                        unit_id=unit_id,
                        scheduled_date=_showing_datetime(
                            request.preferred_date, request.preferred_time, self._tz,
                        ),
                        notes=request.notes or "Cita agendada via chatbot",
                    )
                )
                logger.info(
                    "Showing %s scheduled for lead %s on unit %s", showing.id, lead.id, unit_id,
                )
        except Exception:
            logger.exception("schedule_viewing(%s) failed", tenant_id)
            return {"success": False, "message": SCHEDULE_FAILED_MESSAGE}

        return {
            "success": True,
            "message": (
                f"¡Perfecto! He registrado tu solicitud de visita para {request.client_name}. "
                f"Un agente se pondrá en contacto contigo pronto al {request.client_phone} "
                f"para confirmar la cita."
            ),
            "appointmentDetails": {
                "clientName": request.client_name,
                "clientPhone": request.client_phone,
                "preferredDate": request.preferred_date.isoformat() if request.preferred_date else None,
                "preferredTime": request.preferred_time.strftime("%H:%M") if request.preferred_time else None,
                "status": "pending_confirmation",
            },
        }

    def _resolve_lead(self, tenant_id: str, request: ViewingRequest) -> Lead:
        existing = next(
            (lead for lead in self._store.list_leads(tenant_id) if _matches_contact(lead, request)),
            None,
        )
        if existing is not None:
            logger.debug("Reusing lead %s for %s", existing.id, request.client_phone)
            return existing

        first_name, last_name = _split_name(request.client_name)
        return self._store.create_lead(
            NewLead(
                tenant_id=tenant_id,
                first_name=first_name,
                last_name=last_name,
                email=request.client_email,
                phone=request.client_phone,
                notes=f"Lead creado automáticamente por chatbot. {request.notes or ''}".strip(),
            )
        )


def get_available_times(query: AvailableTimesQuery) -> dict[str, Any]:
    """Fixed hourly viewing slots for *query.date*.  No persistence access."""
    day = query.date.isoformat()
    return {
        "success": True,
        "date": day,
        "availableTimes": list(VIEWING_SLOTS),
        "message": (
            f"Para el {day}, tenemos disponibilidad en los siguientes horarios: "
            f"{', '.join(VIEWING_SLOTS)}. ¿Cuál te conviene mejor?"
        ),
    }
