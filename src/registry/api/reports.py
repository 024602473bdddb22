# src/registry/api/reports.py
from fastapi import APIRouter, Depends, Response

from src.registry.core.security import AdminClaims
from src.registry.deps.auth import get_current_admin
from src.registry.deps.services import get_reporting_service
from src.registry.schemas.report import StatsResponse
from src.registry.services.reporting import ReportingService

router = APIRouter(tags=["reports"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    reporting: ReportingService = Depends(get_reporting_service),
    current_admin: AdminClaims = Depends(get_current_admin),
):
    return await reporting.stats()


@router.get("/export/csv")
async def export_csv(
    reporting: ReportingService = Depends(get_reporting_service),
    current_admin: AdminClaims = Depends(get_current_admin),
):
    content = await reporting.export_csv()
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=supporters.csv"},
    )
