"""
➡️ But : Fonctions d'agrégation pures sur un snapshot (liste de dicts).

Comptages, normalisation des statuts, revenus, véhicule le plus demandé,
histogramme mensuel, regroupement par catégorie, résumé des réservations.

🔹 Posture face aux données mal formées :

Jamais d'exception. Une date illisible est exclue, un prix illisible vaut 0,
un statut inconnu vaut "Pending".
"""

import math
import re
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

Record = Mapping[str, Any]

PENDING = "Pending"
ACTIVE = "Active"
COMPLETED = "Completed"
CANONICAL_STATUSES = (PENDING, ACTIVE, COMPLETED)

# Sous-chaînes reconnues (en minuscules), variantes françaises et anglaises
COMPLETED_MARKERS = ("completed", "complet", "termin", "clôtur", "clotur", "finished")
ACTIVE_MARKERS = ("active", "actif", "en cours", "confirm", "approved", "approuv", "in progress", "ongoing")
CANCELLED_MARKERS = ("ann", "cancel")

CATEGORIES = ("suv", "citadine", "compacte", "luxe", "familiale", "standard")
DEFAULT_CATEGORY = "standard"

UNKNOWN_VEHICLE_LABEL = "véhicule à confirmer"


# -----------------------------
# Comptages / statuts
# -----------------------------

def count_where(records: Iterable[Record], predicate: Callable[[Record], bool]) -> int:
    return sum(1 for record in records if predicate(record))


def normalize_status(value: Any) -> str:
    """Ramène un statut libre à Pending / Active / Completed (défaut : Pending)."""
    if not isinstance(value, str):
        return PENDING
    text = value.strip().lower()
    if any(marker in text for marker in COMPLETED_MARKERS):
        return COMPLETED
    if any(marker in text for marker in ACTIVE_MARKERS):
        return ACTIVE
    return PENDING


def count_by_status(records: Iterable[Record], field: str = "status") -> Dict[str, int]:
    counts = {status: 0 for status in CANONICAL_STATUSES}
    for record in records:
        counts[normalize_status(record.get(field))] += 1
    return counts


def is_cancelled(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    text = value.lower()
    return any(marker in text for marker in CANCELLED_MARKERS)


# -----------------------------
# Montants
# -----------------------------

def to_number(value: Any) -> float:
    """Conversion numérique tolérante : tout ce qui n'est pas un nombre vaut 0."""
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def sum_revenue(records: Iterable[Record], field: str = "totalPrice") -> float:
    return sum(to_number(record.get(field)) for record in records)


# -----------------------------
# Popularité
# -----------------------------

@dataclass(frozen=True)
class PopularVehicle:
    key: str
    label: str
    count: int


def _vehicle_key(record: Record) -> Optional[str]:
    for field in ("vehicleId", "vehicleModel", "model"):
        value = record.get(field)
        if value not in (None, ""):
            return str(value)
    return None


def most_popular_vehicle(records: Iterable[Record]) -> Optional[PopularVehicle]:
    """
    Véhicule le plus réservé, par vehicleId (à défaut, par nom de modèle).

    Égalité : c'est la première clé entrée dans le décompte qui gagne, donc l'ordre
    du snapshot reçu décide. Aucun ordre total n'est garanti.
    """
    tally: Counter = Counter()
    labels: Dict[str, str] = {}
    for record in records:
        key = _vehicle_key(record)
        if key is None:
            continue
        tally[key] += 1
        if key not in labels or labels[key] == key:
            labels[key] = str(record.get("vehicleModel") or record.get("model") or key)

    if not tally:
        return None
    key, count = max(tally.items(), key=lambda item: item[1])
    return PopularVehicle(key=key, label=labels.get(key, UNKNOWN_VEHICLE_LABEL), count=count)


# -----------------------------
# Dates
# -----------------------------

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")
_DMY_DATE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_TIME = re.compile(r"^(\d{1,2}):(\d{1,2})")


def _parse_time(value: Any) -> tuple:
    if not isinstance(value, str):
        return (0, 0)
    match = _TIME.match(value.strip())
    if not match:
        return (0, 0)
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return (0, 0)
    return (hour, minute)


def parse_date_like(value: Any, time_value: Any = None) -> Optional[datetime]:
    """
    Date "naïve" (heure locale) à partir de ce que contient un document :
    datetime / date, timestamp {"seconds": n}, "YYYY-MM-DD[...]", "DD/MM/YYYY", "DD-MM-YYYY".
    """
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc).replace(tzinfo=None) if value.tzinfo else value
    if isinstance(value, date):
        hour, minute = _parse_time(time_value)
        return datetime(value.year, value.month, value.day, hour, minute)
    if isinstance(value, Mapping) and "seconds" in value:
        seconds = value.get("seconds")
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            return None
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    match = _ISO_DATE.match(text)
    if match:
        if len(text) > 10 and time_value is None:
            try:
                return parse_date_like(datetime.fromisoformat(text.replace("Z", "+00:00")))
            except ValueError:
                pass
        year, month, day = (int(part) for part in match.groups())
    else:
        match = _DMY_DATE.match(text)
        if not match:
            return None
        day, month, year = (int(part) for part in match.groups())

    hour, minute = _parse_time(time_value)
    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None


def pickup_datetime(record: Record) -> Optional[datetime]:
    return parse_date_like(record.get("pickupDate"), record.get("pickupTime"))


# -----------------------------
# Histogramme mensuel
# -----------------------------

@dataclass(frozen=True)
class MonthBucket:
    year: int
    month: int
    label: str
    count: int


def monthly_histogram(records: Iterable[Record], field: str = "createdAt") -> List[MonthBucket]:
    """Comptage par (année, mois), trié chronologiquement ; dates illisibles exclues."""
    counts: Counter = Counter()
    for record in records:
        moment = parse_date_like(record.get(field))
        if moment is None:
            continue
        counts[(moment.year, moment.month)] += 1
    return [
        MonthBucket(year=year, month=month, label=f"{year:04d}-{month:02d}", count=count)
        for (year, month), count in sorted(counts.items())
    ]


# -----------------------------
# Catégories
# -----------------------------

def normalize_category(value: Any) -> str:
    if value is None or str(value).strip() == "":
        return DEFAULT_CATEGORY
    return str(value).strip().lower()


def group_by_category(records: Iterable[Record]) -> Dict[str, List[Record]]:
    groups: Dict[str, List[Record]] = {}
    for record in records:
        groups.setdefault(normalize_category(record.get("category")), []).append(record)
    return groups


def vehicle_label(record: Record) -> str:
    return str(record.get("vehicleModel") or record.get("model") or UNKNOWN_VEHICLE_LABEL)


# -----------------------------
# Réservations d'un client
# -----------------------------

@dataclass(frozen=True)
class ReservationSummary:
    total: int
    upcoming: int
    completed: int
    cancelled: int
    total_spent: float
    next_reservation: Optional[datetime]


def reservation_summary(records: Sequence[Record], now: datetime) -> ReservationSummary:
    upcoming = completed = cancelled = 0
    total_spent = 0.0
    next_reservation: Optional[datetime] = None

    for record in records:
        status = record.get("status")
        pickup = pickup_datetime(record)
        total_spent += to_number(record.get("totalPrice"))

        if is_cancelled(status):
            cancelled += 1
            continue
        if pickup is not None and pickup > now:
            upcoming += 1
            if next_reservation is None or pickup < next_reservation:
                next_reservation = pickup
        elif normalize_status(status) == COMPLETED:
            completed += 1

    return ReservationSummary(
        total=len(records),
        upcoming=upcoming,
        completed=completed,
        cancelled=cancelled,
        total_spent=round(total_spent, 2),
        next_reservation=next_reservation,
    )


def sort_by_pickup(records: Iterable[Record], *, newest_first: bool = True) -> List[Record]:
    # dates illisibles : considérées comme les plus anciennes
    return sorted(
        records,
        key=lambda record: pickup_datetime(record) or datetime.min,
        reverse=newest_first,
    )


def upcoming_reservations(records: Iterable[Record], now: datetime, limit: int = 3) -> List[Record]:
    kept = [
        record for record in records
        if not is_cancelled(record.get("status"))
        and (pickup_datetime(record) or datetime.min) >= now
    ]
    return sort_by_pickup(kept, newest_first=False)[:limit]


# -----------------------------
# Formulaire de réservation
# -----------------------------

def _start_of_day(value: Any) -> Optional[datetime]:
    moment = parse_date_like(value)
    if moment is None:
        return None
    return datetime(moment.year, moment.month, moment.day)


def duration_days(pickup: Any, return_: Any) -> int:
    """Nombre de jours facturés : au moins 1."""
    start = _start_of_day(pickup)
    end = _start_of_day(return_)
    if start is None or end is None:
        return 1
    days = max((end - start).days, 0)
    return days or 1


def daily_price_of(car: Optional[Record]) -> float:
    if not car:
        return 0.0
    return max(to_number(car.get("dailyPrice")), 0.0)


def total_price(daily_price: float, days: int) -> float:
    return round(daily_price * days, 2)


def estimated_return_date(pickup: Any, days: int, pickup_time: Optional[str] = None) -> Optional[datetime]:
    base = _start_of_day(pickup)
    if base is None:
        return None
    result = base + timedelta(days=max(int(days or 1), 1))
    hour, minute = _parse_time(pickup_time)
    return result.replace(hour=hour, minute=minute)


def format_storage_date(moment: Optional[datetime]) -> str:
    if moment is None:
        return ""
    return f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """Horodatage UTC "YYYY-MM-DDTHH:MM:SS.mmmZ" (format des champs createdAt / updatedAt)."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
