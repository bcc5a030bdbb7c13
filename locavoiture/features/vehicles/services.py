"""
➡️ But : Gestion du parc (console admin) et catalogue client.

save() : création ou modification d'une fiche véhicule.
- modèle et prix obligatoires ;
- année illisible -> année courante, prix illisible -> 0 ;
- updatedAt à chaque écriture, createdAt à la création.

catalog() : voitures filtrées par catégorie ("all" = tout).
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from locavoiture.backend.client import BackendClient
from locavoiture.core import collections
from locavoiture.features.reports.aggregations import (
    DEFAULT_CATEGORY,
    group_by_category,
    iso_timestamp,
    normalize_category,
)
from locavoiture.features.vehicles.schemas import CatalogOut, VehicleFormIn
from locavoiture.live.mutations import MutationGateway
from locavoiture.live.subscriptions import fetch_collection, fetch_document

ALL_CATEGORIES = "all"

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def parse_leading_int(value: Any) -> Optional[int]:
    """"2021 (restylée)" -> 2021 ; rien d'exploitable -> None."""
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    return int(match.group(0)) if match else None


def parse_leading_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(0)) if match else None


class VehicleService:
    def __init__(self, client: BackendClient, gateway: MutationGateway):
        self.client = client
        self.gateway = gateway

    # --------------- Commands ---------------
    async def save(self, form: VehicleFormIn, editing_id: Optional[str] = None) -> str:
        model = (form.model or "").strip()
        price = (form.price or "").strip()
        if not model or not price:
            raise ValueError("Le modèle et le prix sont obligatoires.")

        data: Dict[str, Any] = {
            "model": model,
            "category": form.category or DEFAULT_CATEGORY,
            "year": parse_leading_int(form.year) or datetime.now().year,
            "dailyPrice": parse_leading_float(price) or 0,
            "description": (form.description or "").strip(),
            "available": form.available,
            "updatedAt": iso_timestamp(),
        }

        if editing_id:
            await self.gateway.patch(collections.CARS, editing_id, data)
            print(f"🚗 [vehicles] fiche {editing_id} modifiée", flush=True)
            return editing_id

        data["createdAt"] = iso_timestamp()
        car_id = await self.gateway.create(collections.CARS, data)
        print(f"🚗 [vehicles] fiche {car_id} ajoutée", flush=True)
        return car_id

    async def delete(self, car_id: str) -> None:
        await self.gateway.remove(collections.CARS, car_id)

    # --------------- Queries ---------------
    async def get(self, car_id: str) -> Dict[str, Any]:
        car = await fetch_document(self.client, collections.CARS, car_id)
        if car is None:
            raise LookupError("Véhicule introuvable.")
        return car

    async def list(self) -> List[Dict[str, Any]]:
        return await fetch_collection(self.client, collections.CARS)

    async def catalog(self, category: str = ALL_CATEGORIES) -> CatalogOut:
        cars = await self.list()
        groups = group_by_category(cars)
        wanted = (category or ALL_CATEGORIES).strip().lower()
        if wanted == ALL_CATEGORIES:
            items = cars
        else:
            items = groups.get(normalize_category(wanted), [])
        return CatalogOut(
            category=wanted,
            items=items,
            counts={name: len(group) for name, group in groups.items()},
        )
