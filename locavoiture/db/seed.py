from pathlib import Path
from typing import Any, Dict, List

import yaml

from locavoiture.backend.client import BackendClient
from locavoiture.core import collections
from locavoiture.features.accounts.services import AccountService
from locavoiture.features.reports.aggregations import ACTIVE, iso_timestamp
from locavoiture.live.mutations import MutationGateway
from locavoiture.security.password import digest_password


# -----------------------------
# YAML loader
# -----------------------------
def load_seed_yaml(seed_path: str | Path) -> Dict[str, Any]:
    path = Path(seed_path)
    if not path.exists():
        raise FileNotFoundError(f"Seed YAML introuvable: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Le YAML de seed doit contenir un objet racine (mapping).")
    return data


# -----------------------------
# Seeds
# -----------------------------
async def seed_employees(gateway: MutationGateway, data: Dict[str, Any]) -> int:
    """Employés à id fixe (clé `key`), écrits en fusion : relancer le seed ne duplique rien."""
    employees: List[Dict[str, Any]] = data.get("employees", [])
    if not employees:
        print("⚠️ Aucun employé dans le YAML (clé 'employees').")
        return 0

    for emp in employees:
        await gateway.put(collections.EMPLOYEES, emp["key"], {
            "username": emp["username"],
            "password": digest_password(emp["password"]),
            "role": emp.get("role", "staff"),
            "status": emp.get("status", ACTIVE),
            "createdAt": iso_timestamp(),
        })
    print(f"✅ {len(employees)} employés insérés / mis à jour.")
    return len(employees)


async def seed_cars(gateway: MutationGateway, data: Dict[str, Any]) -> int:
    cars: List[Dict[str, Any]] = data.get("cars", [])
    if not cars:
        print("⚠️ Aucun véhicule dans le YAML (clé 'cars').")
        return 0

    now = iso_timestamp()
    for car in cars:
        await gateway.put(collections.CARS, car["key"], {
            "model": car["model"],
            "category": car.get("category", "standard"),
            "year": car.get("year"),
            "dailyPrice": car.get("dailyPrice", 0),
            "description": car.get("description", ""),
            "available": car.get("available", True),
            "createdAt": now,
            "updatedAt": now,
        })
    print(f"✅ {len(cars)} véhicules insérés / mis à jour.")
    return len(cars)


async def seed_all(client: BackendClient, seed_path: str) -> None:
    data = load_seed_yaml(seed_path)
    gateway = MutationGateway(client)

    await AccountService(client, gateway).seed_admin()
    await seed_employees(gateway, data)
    await seed_cars(gateway, data)
