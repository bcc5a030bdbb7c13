from dataclasses import asdict
from typing import Any, Mapping, Sequence

from locavoiture.backend.client import BackendClient
from locavoiture.core import collections
from locavoiture.features.reports.aggregations import (
    count_by_status,
    count_where,
    monthly_histogram,
    most_popular_vehicle,
    sum_revenue,
)
from locavoiture.features.reports.schemas import MonthBucketOut, PopularVehicleOut, ReportOut
from locavoiture.live.subscriptions import fetch_collection

Records = Sequence[Mapping[str, Any]]


def build_report(cars: Records, reservations: Records, employees: Records) -> ReportOut:
    """Rapport agrégé à partir de trois snapshots déjà récupérés."""
    popular = most_popular_vehicle(reservations)
    return ReportOut(
        total_cars=len(cars),
        available_cars=count_where(cars, lambda car: bool(car.get("available"))),
        total_reservations=len(reservations),
        reservations_by_status=count_by_status(reservations),
        total_employees=len(employees),
        revenue=round(sum_revenue(reservations, "totalPrice"), 2),
        popular_vehicle=PopularVehicleOut(**asdict(popular)) if popular else None,
        monthly_reservations=[MonthBucketOut(**asdict(b)) for b in monthly_histogram(reservations, "createdAt")],
    )


class ReportService:
    def __init__(self, client: BackendClient):
        self.client = client

    async def current(self) -> ReportOut:
        cars = await fetch_collection(self.client, collections.CARS)
        reservations = await fetch_collection(self.client, collections.RESERVATIONS)
        employees = await fetch_collection(self.client, collections.EMPLOYEES)
        return build_report(cars, reservations, employees)
