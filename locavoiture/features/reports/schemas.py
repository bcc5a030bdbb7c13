from typing import Dict, List, Optional
from pydantic import BaseModel


class PopularVehicleOut(BaseModel):
    key: str
    label: str
    count: int


class MonthBucketOut(BaseModel):
    year: int
    month: int
    label: str     # "YYYY-MM"
    count: int


class ReportOut(BaseModel):
    total_cars: int
    available_cars: int
    total_reservations: int
    reservations_by_status: Dict[str, int]   # Pending / Active / Completed
    total_employees: int
    revenue: float
    popular_vehicle: Optional[PopularVehicleOut] = None
    monthly_reservations: List[MonthBucketOut] = []
