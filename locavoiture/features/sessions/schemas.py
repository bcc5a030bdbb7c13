from typing import Optional

from pydantic import BaseModel, ConfigDict


class MeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    displayNameOrEmail: Optional[str] = None
    isLocalSession: bool
    name: str
    role: Optional[str] = None
    privileged: bool = False
