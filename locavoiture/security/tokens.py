import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, TypedDict

from jose import jwt, JWTError

# ==========================================================
# 🔧 Configuration : paramètres de génération/validation JWT
# ==========================================================

@dataclass(frozen=True)
class JWTSettings:
    """
    Configuration des tokens JWT émis par le backend d'authentification.

    - `secret` : clé secrète pour signer/valider les tokens
    - `issuer` : émetteur (utilisé dans le payload)
    - `algorithm` : algo de signature (HS256 recommandé)
    - `access_ttl` : durée de vie d'un access token
    """
    secret: str
    issuer: str = "locavoiture"
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=60)


# ==========================================================
# 🧱 Types
# ==========================================================

class TokenPair(TypedDict):
    access_token: str
    token_type: str     # "bearer"
    expires_in: int     # durée de vie de l'access token (en secondes)

class DecodedToken(TypedDict, total=False):
    iss: str
    sub: str            # uid du compte
    email: str
    name: str
    typ: str            # "access"
    jti: str
    iat: int
    exp: int


# ==========================================================
# 🧩 Fonctions utilitaires
# ==========================================================

def _now() -> datetime:
    """Renvoie l'heure UTC actuelle."""
    return datetime.now(timezone.utc)

def new_jti() -> str:
    """Crée un identifiant unique pour un token."""
    return str(uuid.uuid4())


# ==========================================================
# 🎟️ Génération des tokens
# ==========================================================

def create_access_token(
    *,
    uid: str,
    email: Optional[str],
    display_name: Optional[str],
    settings: JWTSettings,
) -> str:
    """
    Crée un access token JWT (par défaut 60 min).
    """
    now = _now()
    payload: DecodedToken = {
        "iss": settings.issuer,
        "sub": str(uid),
        "typ": "access",
        "jti": new_jti(),
        "iat": int(now.timestamp()),
        "exp": int((now + settings.access_ttl).timestamp()),
    }
    if email:
        payload["email"] = email
    if display_name:
        payload["name"] = display_name
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


# ==========================================================
# 🔍 Décodage / Validation
# ==========================================================

def decode_token(token: str, settings: JWTSettings) -> DecodedToken:
    """
    Décode et valide un token JWT (signature + expiration + émetteur).
    Lève JWTError en cas de signature invalide ou expirée.
    """
    decoded = jwt.decode(
        token,
        settings.secret,
        algorithms=[settings.algorithm],
        issuer=settings.issuer,
        options={"verify_aud": False},
    )
    if decoded.get("typ") != "access":
        raise JWTError("Invalid token type")
    return decoded  # type: ignore[return-value]


def mint_token_pair(
    *,
    uid: str,
    email: Optional[str],
    display_name: Optional[str],
    settings: JWTSettings,
) -> TokenPair:
    return {
        "access_token": create_access_token(
            uid=uid,
            email=email,
            display_name=display_name,
            settings=settings,
        ),
        "token_type": "bearer",
        "expires_in": int(settings.access_ttl.total_seconds()),
    }
