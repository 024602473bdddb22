# src/registry/services/reporting.py
import asyncio
import csv
import io
import logging

from src.registry.core.store import RegistryStore
from src.registry.schemas.report import DistrictCount, SexCount, StatsResponse
from src.registry.schemas.supporter import EXPORT_COLUMNS, SupporterRead

logger = logging.getLogger(__name__)


class ReportingService:
    def __init__(self, store: RegistryStore):
        self._store = store

    async def stats(self) -> StatsResponse:
        # independent aggregates, each in its own session
        total, by_sex, by_district = await asyncio.gather(
            self._store.count_supporters(),
            self._store.count_supporters_by("sex"),
            self._store.count_supporters_by("district"),
        )
        return StatsResponse(
            total_supporters=total,
            gender_breakdown=[SexCount(sex=value, count=count) for value, count in by_sex],
            district_breakdown=[DistrictCount(district=value, count=count) for value, count in by_district],
        )

    async def export_csv(self) -> bytes:
        """Every supporter as UTF-8 CSV with a header row, in id order."""
        supporters = await self._store.list_supporters()
        buffer = io.StringIO(newline="")
        writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        for supporter in supporters:
            row = SupporterRead.model_validate(supporter).model_dump(by_alias=True)
            if row["email"] is None:
                row["email"] = ""
            writer.writerow(row)
        logger.info("Exported %d supporters to CSV", len(supporters))
        return buffer.getvalue().encode("utf-8")
