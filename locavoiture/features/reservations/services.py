"""
➡️ But : Cycle de vie d'une réservation.

Client : create() (demande "Pending"), history(), summary().
Console admin : approve() -> "Active", deny() -> suppression, complete() -> "Completed".

Les écritures passent par la MutationGateway ; la confirmation visible côté écrans,
c'est le snapshot suivant de la collection "reservations".
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from locavoiture.backend.client import BackendClient
from locavoiture.core import collections
from locavoiture.features.errors import AccessDenied
from locavoiture.features.reports.aggregations import (
    ACTIVE,
    COMPLETED,
    PENDING,
    daily_price_of,
    duration_days,
    estimated_return_date,
    format_storage_date,
    iso_timestamp,
    parse_date_like,
    reservation_summary,
    sort_by_pickup,
    total_price,
)
from locavoiture.features.reservations.schemas import (
    ReservationCreatedOut,
    ReservationFormIn,
    ReservationSummaryOut,
)
from locavoiture.features.sessions.actors import Actor, BackendAuthenticatedActor
from locavoiture.live.mutations import MutationGateway
from locavoiture.live.subscriptions import fetch_collection, fetch_document

REQUIRED_FIELDS = (
    ("firstName", "Prénom"),
    ("lastName", "Nom"),
    ("phone", "Téléphone"),
    ("pickupTime", "Heure de prise"),
)


class ReservationService:
    def __init__(self, client: BackendClient, gateway: MutationGateway):
        self.client = client
        self.gateway = gateway

    # --------------- Helpers ---------------
    def _validate(self, form: ReservationFormIn, vehicle_model: str) -> None:
        for key, label in REQUIRED_FIELDS:
            if not str(getattr(form, key) or "").strip():
                raise ValueError(f"Veuillez renseigner {label.lower()}.")
        if parse_date_like(form.pickupDate) is None:
            raise ValueError("Veuillez sélectionner une date de prise.")
        if not vehicle_model:
            raise ValueError("Veuillez sélectionner un véhicule à réserver.")

    def _user_email(self, actor: Actor, form: ReservationFormIn) -> Optional[str]:
        if form.email:
            return form.email
        if isinstance(actor, BackendAuthenticatedActor) and actor.email:
            return actor.email
        return actor.display_name_or_email

    # --------------- Commands ---------------
    async def create(
        self,
        actor: Optional[Actor],
        form: ReservationFormIn,
        car: Optional[Mapping[str, Any]] = None,
    ) -> ReservationCreatedOut:
        if car is None and form.vehicleId:
            car = await fetch_document(self.client, collections.CARS, form.vehicleId)

        vehicle_model = (form.vehicleModel or (car or {}).get("model") or "").strip()
        self._validate(form, vehicle_model)

        if actor is None:
            raise AccessDenied("Veuillez vous connecter avant de finaliser votre réservation.")

        pickup = parse_date_like(form.pickupDate)
        days = duration_days(pickup, form.returnDate)
        daily_price = daily_price_of(car)
        total = total_price(daily_price, days)
        return_date = parse_date_like(form.returnDate) or estimated_return_date(pickup, days, form.pickupTime)
        pickup_time = form.pickupTime.strip()

        payload: Dict[str, Any] = {
            "userId": actor.id,
            "userEmail": self._user_email(actor, form),
            "firstName": form.firstName.strip(),
            "lastName": form.lastName.strip(),
            "phone": form.phone.strip(),
            "vehicleModel": vehicle_model,
            "vehicleId": (car or {}).get("id") or form.vehicleId,
            "pickupDate": format_storage_date(pickup),
            "pickupTime": pickup_time,
            "returnDate": format_storage_date(return_date),
            "returnTime": form.returnTime.strip() or pickup_time,
            "days": days,
            "dailyPrice": daily_price,
            "totalPrice": total,
            "notes": form.notes.strip(),
            "status": PENDING,
            "createdAt": iso_timestamp(),
        }
        reservation_id = await self.gateway.create(collections.RESERVATIONS, payload)
        print(f"📅 [reservations] demande {reservation_id} créée pour {actor.id}", flush=True)
        return ReservationCreatedOut(
            id=reservation_id,
            days=days,
            dailyPrice=daily_price,
            totalPrice=total,
            returnDate=payload["returnDate"],
            status=PENDING,
        )

    async def approve(self, reservation_id: str) -> None:
        await self.gateway.patch(
            collections.RESERVATIONS,
            reservation_id,
            {"status": ACTIVE, "approvedAt": iso_timestamp()},
        )

    async def deny(self, reservation_id: str) -> None:
        await self.gateway.remove(collections.RESERVATIONS, reservation_id)

    async def complete(self, reservation_id: str) -> None:
        await self.gateway.patch(
            collections.RESERVATIONS,
            reservation_id,
            {"status": COMPLETED, "completedAt": iso_timestamp()},
        )

    # --------------- Queries ---------------
    async def history(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        where = [("userId", user_id)] if user_id else []
        records = await fetch_collection(self.client, collections.RESERVATIONS, where=where)
        return sort_by_pickup(records, newest_first=True)

    async def summary(self, user_id: Optional[str] = None, now: Optional[datetime] = None) -> ReservationSummaryOut:
        records = await self.history(user_id)
        summary = reservation_summary(records, now or datetime.now())
        return ReservationSummaryOut(
            total=summary.total,
            upcoming=summary.upcoming,
            completed=summary.completed,
            cancelled=summary.cancelled,
            total_spent=summary.total_spent,
            next_reservation=summary.next_reservation,
        )
