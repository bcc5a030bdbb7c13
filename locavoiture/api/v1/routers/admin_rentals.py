from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from locavoiture.api.v1.dependencies import get_reservation_service, require_privileged
from locavoiture.features.reservations.services import ReservationService

router = APIRouter(
    prefix="/admin/rentals",
    tags=["admin"],
    responses={404: {"description": "Not Found"}},
    dependencies=[Depends(require_privileged)],
)


@router.get(
    "",
    summary="Toutes les réservations",
    response_model=List[Dict[str, Any]],
)
async def list_rentals(svc: ReservationService = Depends(get_reservation_service)):
    return await svc.history()


@router.post(
    "/{rental_id}/approve",
    summary="Approuver une demande (-> Active)",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def approve_rental(rental_id: str, svc: ReservationService = Depends(get_reservation_service)):
    try:
        await svc.approve(rental_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/{rental_id}/deny",
    summary="Refuser une demande (suppression)",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def deny_rental(rental_id: str, svc: ReservationService = Depends(get_reservation_service)):
    await svc.deny(rental_id)


@router.post(
    "/{rental_id}/complete",
    summary="Clôturer une location (-> Completed)",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def complete_rental(rental_id: str, svc: ReservationService = Depends(get_reservation_service)):
    try:
        await svc.complete(rental_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
