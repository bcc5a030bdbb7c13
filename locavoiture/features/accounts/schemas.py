from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

# ---------- Inputs ----------

class RegisterIn(BaseModel):
    username: str = ""
    password: str = ""
    password_confirm: str = ""
    kind: Literal["employee", "customer"] = "employee"

class LoginIn(BaseModel):
    username: str = ""
    password: str = ""
    role: Literal["admin", "utilisateur"] = "admin"


# ---------- Outputs ----------

class LocalSessionOut(BaseModel):
    id: str
    username: str
    role: str = "utilisateur"

class LoginOut(BaseModel):
    id: str
    username: str
    role: str
    # employés : token du backend d'authentification
    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: Optional[int] = None  # secondes
    # clients : session locale (à renvoyer dans X-Local-Session)
    session: Optional[LocalSessionOut] = None

class AccountOut(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    username: str
    role: Optional[str] = None
    status: Optional[str] = None
    createdAt: Optional[str] = None
