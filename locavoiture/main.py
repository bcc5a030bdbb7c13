"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l'instance FastAPI (app).

Configure :

CORS (autorisations de qui peut appeler ces API)

titre, version, tags

schéma OpenAPI personnalisé

Inclut les routers (ex : /api/v1/catalog).

Crée le BackendClient au démarrage et le libère à l'arrêt.

🔹 Point unique d'exécution : uvicorn locavoiture.main:app --reload.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from locavoiture.backend.client import BackendClient
from locavoiture.core.config import settings, jwt_settings
from locavoiture.core.openapi import custom_openapi

from locavoiture.api.v1.routers import (
    authentication,
    catalog,
    reservations,
    admin_cars,
    admin_rentals,
    admin_employees,
    reports,
    live,
)

import uvicorn


# Démarrage / arrêt
@asynccontextmanager
async def lifespan(app: FastAPI):
    # un client déjà posé (tests) est conservé
    if getattr(app.state, "backend_client", None) is None:
        app.state.backend_client = BackendClient.from_settings(settings, jwt_settings)
    app.state.backend_client.init()
    print(f"🚀 [app] backend prêt ({app.state.backend_client.database_url})", flush=True)
    yield
    app.state.backend_client.dispose()
    app.state.backend_client = None


app = FastAPI(
    title=settings.APP_NAME,
    lifespan=lifespan,
    version="0.0.1",
    openapi_tags=[
        {"name": "auth", "description": "Comptes, connexion, session courante"},
        {"name": "catalog", "description": "Catalogue public des véhicules"},
        {"name": "reservations", "description": "Réservations du client connecté"},
        {"name": "admin", "description": "Console d'administration (employés)"},
        {"name": "live", "description": "Flux temps réel (WebSocket)"},
    ],
)

# CORS (ajustez selon vos besoins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

# Routers
app.include_router(authentication.router, prefix="/api/v1")
app.include_router(catalog.router, prefix="/api/v1")
app.include_router(reservations.router, prefix="/api/v1")
app.include_router(admin_cars.router, prefix="/api/v1")
app.include_router(admin_rentals.router, prefix="/api/v1")
app.include_router(admin_employees.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")
app.include_router(live.router, prefix="/api/v1")

# Génération du schéma OpenAPI custom
app.openapi = lambda: custom_openapi(app)

app.state.backend_client = None

if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8080, reload=(settings.ENV == "dev")) # http://localhost:8080
