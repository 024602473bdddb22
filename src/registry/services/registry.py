# src/registry/services/registry.py
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError as SchemaValidationError

from src.registry.core.errors import DuplicateEntry, ValidationError
from src.registry.core.store import RegistryStore
from src.registry.models.supporter import Supporter
from src.registry.schemas.supporter import SupporterCreate, SupporterFilter

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def age_on(dob: date, on: date) -> int:
    """Whole years between ``dob`` and ``on``.

    One year is taken off when ``on`` falls before the birthday in its own
    year. A 29 February birthday therefore counts from 1 March in common years.
    """
    years = on.year - dob.year
    if (on.month, on.day) < (dob.month, dob.day):
        years -= 1
    return years


def _field_errors(exc: SchemaValidationError) -> dict[str, str]:
    fields: dict[str, str] = {}
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
        message = error.get("msg", "Invalid value")
        if error.get("type") == "missing":
            message = "This field is required"
        fields.setdefault(loc, message.removeprefix("Value error, "))
    return fields


class RegistryService:
    """Validated, write-once supporter ingestion plus filtered listing."""

    def __init__(
        self,
        store: RegistryStore,
        reference_date: date,
        today: Callable[[], date] = utc_today,
    ):
        self._store = store
        self._reference_date = reference_date
        self._today = today

    @property
    def reference_date(self) -> date:
        return self._reference_date

    def validate(self, payload: Mapping[str, Any]) -> SupporterCreate:
        if not isinstance(payload, Mapping):
            raise ValidationError("Submission must be a JSON object")
        try:
            data = SupporterCreate.model_validate(dict(payload))
        except SchemaValidationError as exc:
            raise ValidationError(fields=_field_errors(exc)) from exc
        if data.dob > self._today():
            raise ValidationError(fields={"dob": "Date of birth cannot be in the future"})
        return data

    async def submit(self, payload: Mapping[str, Any]) -> Supporter:
        data = self.validate(payload)
        today = self._today()
        supporter = Supporter(
            name=data.name,
            dob=data.dob.isoformat(),
            sex=data.sex.value,
            location=data.location,
            community=data.community,
            clan=data.clan,
            district=data.district,
            contact=data.contact,
            email=str(data.email) if data.email else None,
            current_age=age_on(data.dob, today),
            age_2029=age_on(data.dob, self._reference_date),
        )
        try:
            saved = await self._store.insert_supporter(supporter)
        except DuplicateEntry:
            logger.info("Rejected duplicate supporter submission for district %s", data.district)
            raise
        logger.info(
            "Supporter %s saved", saved.id,
            extra={"supporter_id": saved.id, "district": saved.district},
        )
        return saved

    async def list_supporters(self, filters: Optional[SupporterFilter] = None) -> list[Supporter]:
        return await self._store.list_supporters(filters or SupporterFilter())
