from fastapi import APIRouter, Depends, HTTPException, Query, status

from locavoiture.api.v1.dependencies import get_vehicle_service
from locavoiture.features.vehicles.schemas import CatalogOut, VehicleOut
from locavoiture.features.vehicles.services import ALL_CATEGORIES, VehicleService

router = APIRouter(
    prefix="/catalog",
    tags=["catalog"],
    responses={404: {"description": "Not Found"}},
)


@router.get(
    "",
    summary="Catalogue des véhicules",
    description="`category` : `all` ou une catégorie (suv, citadine, compacte, luxe, familiale, standard).",
    response_model=CatalogOut,
)
async def list_catalog(
    category: str = Query(ALL_CATEGORIES, examples=["all", "suv"]),
    svc: VehicleService = Depends(get_vehicle_service),
):
    return await svc.catalog(category)


@router.get(
    "/{car_id}",
    summary="Fiche d'un véhicule",
    response_model=VehicleOut,
)
async def get_car(car_id: str, svc: VehicleService = Depends(get_vehicle_service)):
    try:
        return await svc.get(car_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
