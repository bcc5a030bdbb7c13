from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from locavoiture.api.v1.dependencies import (
    get_account_service,
    get_current_actor,
    get_session_resolver,
)
from locavoiture.features.accounts.schemas import AccountOut, LoginIn, LoginOut, RegisterIn
from locavoiture.features.accounts.services import AccountService
from locavoiture.features.errors import ConflictError, InvalidCredentials
from locavoiture.features.sessions.actors import Actor
from locavoiture.features.sessions.resolver import SessionResolver, is_privileged
from locavoiture.features.sessions.schemas import MeOut

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    responses={404: {"description": "Not Found"}},
)

# -----------------------------
# Register
# -----------------------------
@router.post(
    "/register",
    summary="Créer un compte (employé ou client)",
    status_code=status.HTTP_201_CREATED,
    response_model=AccountOut,
)
async def register(payload: RegisterIn, svc: AccountService = Depends(get_account_service)):
    try:
        return await svc.register(payload.username, payload.password, payload.password_confirm, payload.kind)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

# -----------------------------
# Login
# -----------------------------
@router.post(
    "/login",
    summary="Se connecter",
    description=(
        "Rôle `admin` : compte employé, retourne un access token (Bearer).\n\n"
        "Rôle `utilisateur` : compte client, retourne la session locale à renvoyer "
        "dans l'en-tête `X-Local-Session` (JSON)."
    ),
    response_model=LoginOut,
)
async def login(payload: LoginIn, svc: AccountService = Depends(get_account_service)):
    try:
        return await svc.login(payload.username, payload.password, payload.role)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidCredentials as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

# -----------------------------
# Logout
# -----------------------------
@router.post(
    "/logout",
    summary="Se déconnecter",
    status_code=status.HTTP_204_NO_CONTENT,
)
def logout(svc: AccountService = Depends(get_account_service)):
    svc.logout()
    return None

# -----------------------------
# Me
# -----------------------------
@router.get(
    "/me",
    summary="Qui suis-je ?",
    response_model=MeOut,
)
def me(
    actor: Optional[Actor] = Depends(get_current_actor),
    resolver: SessionResolver = Depends(get_session_resolver),
):
    if actor is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    profile = resolver.lookup_profile(actor)
    return MeOut(
        **actor.descriptor(),
        name=profile.name,
        role=profile.role,
        privileged=is_privileged(actor, profile),
    )
