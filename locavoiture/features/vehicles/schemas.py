from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class VehicleFormIn(BaseModel):
    model: str = ""
    category: str = "standard"
    year: Optional[str] = None      # saisie libre, convertie au mieux
    price: Optional[str] = None     # idem (prix / jour)
    description: str = ""
    available: bool = True


class VehicleOut(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    model: Optional[str] = None
    category: Optional[str] = None
    year: Optional[int] = None
    dailyPrice: Optional[float] = None
    description: Optional[str] = None
    available: Optional[bool] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class CatalogOut(BaseModel):
    category: str
    items: List[Dict[str, Any]]
    counts: Dict[str, int]
