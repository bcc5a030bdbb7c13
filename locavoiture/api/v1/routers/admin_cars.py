from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from locavoiture.api.v1.dependencies import get_vehicle_service, require_privileged
from locavoiture.features.vehicles.schemas import VehicleFormIn
from locavoiture.features.vehicles.services import VehicleService

router = APIRouter(
    prefix="/admin/cars",
    tags=["admin"],
    responses={404: {"description": "Not Found"}},
    dependencies=[Depends(require_privileged)],
)


@router.get(
    "",
    summary="Parc complet",
    response_model=List[Dict[str, Any]],
)
async def list_cars(svc: VehicleService = Depends(get_vehicle_service)):
    return await svc.list()


@router.post(
    "",
    summary="Ajouter un véhicule",
    status_code=status.HTTP_201_CREATED,
)
async def create_car(payload: VehicleFormIn, svc: VehicleService = Depends(get_vehicle_service)):
    try:
        return {"id": await svc.save(payload)}
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put(
    "/{car_id}",
    summary="Modifier un véhicule",
)
async def update_car(car_id: str, payload: VehicleFormIn, svc: VehicleService = Depends(get_vehicle_service)):
    try:
        return {"id": await svc.save(payload, editing_id=car_id)}
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/{car_id}",
    summary="Supprimer un véhicule",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_car(car_id: str, svc: VehicleService = Depends(get_vehicle_service)):
    await svc.delete(car_id)
    return None
