from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from locavoiture.api.v1.dependencies import get_reservation_service, require_actor
from locavoiture.features.errors import AccessDenied
from locavoiture.features.reservations.schemas import (
    ReservationCreatedOut,
    ReservationFormIn,
    ReservationSummaryOut,
)
from locavoiture.features.reservations.services import ReservationService
from locavoiture.features.sessions.actors import Actor

router = APIRouter(
    prefix="/reservations",
    tags=["reservations"],
    responses={404: {"description": "Not Found"}},
)


@router.post(
    "",
    summary="Demander une réservation",
    response_model=ReservationCreatedOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_reservation(
    payload: ReservationFormIn,
    actor: Actor = Depends(require_actor),
    svc: ReservationService = Depends(get_reservation_service),
):
    try:
        return await svc.create(actor, payload)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AccessDenied as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


@router.get(
    "/mine",
    summary="Historique de mes réservations",
    response_model=List[Dict[str, Any]],
)
async def my_reservations(
    actor: Actor = Depends(require_actor),
    svc: ReservationService = Depends(get_reservation_service),
):
    return await svc.history(actor.id)


@router.get(
    "/summary",
    summary="Résumé de mes réservations",
    response_model=ReservationSummaryOut,
)
async def my_summary(
    actor: Actor = Depends(require_actor),
    svc: ReservationService = Depends(get_reservation_service),
):
    return await svc.summary(actor.id)
