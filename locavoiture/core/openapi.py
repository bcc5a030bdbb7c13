"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) complète le schéma généré par FastAPI avec les conventions
propres à l'API (identités, formats de dates, flux temps réel).
"""

from fastapi.openapi.utils import get_openapi

def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API de location de voitures (catalogue, réservations, console admin).\n\n"
            "### Conventions\n"
            "- Employés : `Authorization: Bearer <token>` (obtenu via `/auth/login`, rôle `admin`).\n"
            "- Clients : en-tête `X-Local-Session` (JSON `{id, username, role}`), identité non vérifiée.\n"
            "- Les routes `/admin/*` exigent un employé authentifié (rôle `admin` ou `staff`).\n"
            "- Horodatages `createdAt` / `updatedAt` : ISO 8601 UTC.\n"
            "- Temps réel : WebSocket `/api/v1/live/{collection}` (snapshots complets).\n"
        ),
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
