from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ReservationFormIn(BaseModel):
    firstName: str = ""
    lastName: str = ""
    phone: str = ""
    email: Optional[str] = None
    pickupDate: Optional[str] = None    # "YYYY-MM-DD" ou "DD/MM/YYYY"
    pickupTime: str = ""                # "HH:MM"
    returnDate: Optional[str] = None
    returnTime: str = ""
    notes: str = ""
    vehicleModel: str = ""
    vehicleId: Optional[str] = None


class ReservationCreatedOut(BaseModel):
    id: str
    days: int
    dailyPrice: float
    totalPrice: float
    returnDate: str
    status: str


class ReservationSummaryOut(BaseModel):
    total: int
    upcoming: int
    completed: int
    cancelled: int
    total_spent: float
    next_reservation: Optional[datetime] = None
