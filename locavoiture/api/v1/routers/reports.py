from fastapi import APIRouter, Depends

from locavoiture.api.v1.dependencies import get_report_service, require_privileged
from locavoiture.features.reports.schemas import ReportOut
from locavoiture.features.reports.services import ReportService

router = APIRouter(
    prefix="/admin/reports",
    tags=["admin"],
    responses={404: {"description": "Not Found"}},
    dependencies=[Depends(require_privileged)],
)


@router.get(
    "",
    summary="Rapport d'activité",
    description="Totaux du parc, réservations par statut, revenu, véhicule le plus demandé, histogramme mensuel.",
    response_model=ReportOut,
)
async def current_report(svc: ReportService = Depends(get_report_service)):
    return await svc.current()
