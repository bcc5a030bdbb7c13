from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from locavoiture.api.v1.dependencies import get_account_service, require_privileged
from locavoiture.features.accounts.schemas import AccountOut
from locavoiture.features.accounts.services import AccountService
from locavoiture.features.errors import AccessDenied

router = APIRouter(
    prefix="/admin/employees",
    tags=["admin"],
    responses={404: {"description": "Not Found"}},
    dependencies=[Depends(require_privileged)],
)


@router.get(
    "",
    summary="Liste des employés",
    response_model=List[AccountOut],
)
async def list_employees(svc: AccountService = Depends(get_account_service)):
    return await svc.list_employees()


@router.delete(
    "/{employee_id}",
    summary="Supprimer un employé",
    description="Le compte `admin` ne peut pas être supprimé.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_employee(employee_id: str, svc: AccountService = Depends(get_account_service)):
    try:
        await svc.delete_employee(employee_id)
    except AccessDenied as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
