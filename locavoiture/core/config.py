"""
➡️ But : Centraliser tous les paramètres configurables (nom d'app, chemin DB, secrets, stockage local...)

Utilise pydantic-settings pour charger automatiquement les variables d'environnement (.env, variables système…).

Fournit un objet settings unique, que tu importes ailleurs :

from locavoiture.core.config import settings
print(settings.APP_NAME)


🔹 Avantages :

Plus propre que des constantes éparpillées dans le code.

Facilite le passage entre environnements (dev / prod / test).
"""

from datetime import timedelta
from typing import List, Optional

from pydantic_settings import BaseSettings
from locavoiture.security.tokens import JWTSettings


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "LocaVoiture"
    ENV: str = "dev"  # dev | prod | test

    # -----------------------------
    # Backend documentaire
    # -----------------------------
    SQLITE_PATH: str = "locavoiture.db"  # fichier SQLite
    # Si tu veux forcer une URL différente (ex: Postgres), définis DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False

    # Collections lisibles sans authentification (flux temps réel publics)
    LIVE_PUBLIC_COLLECTIONS: List[str] = ["cars"]

    # -----------------------------
    # Auth backend (JWT)
    # -----------------------------
    JWT_SECRET_KEY: str = "CHANGE_ME"     # ⚠️ change en prod
    JWT_ISSUER: str = "locavoiture"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TTL_MINUTES: int = 60

    # -----------------------------
    # Stockage local (session "utilisateur")
    # -----------------------------
    LOCAL_STORAGE_PATH: str = ".locavoiture/local_storage.json"
    LOCAL_SESSION_KEY: str = "localUser"

    # -----------------------------
    # Comptes
    # -----------------------------
    PROTECTED_USERNAME: str = "admin"   # non supprimable depuis la console (contrôle client uniquement)
    MIN_PASSWORD_LENGTH: int = 4

    # -----------------------------
    # Seed
    # -----------------------------
    SEED_PATH: str = "locavoiture/db/seed_data.yaml"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context): # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")


# Instance globale importable partout
settings = Settings()

# Objet JWT prêt à l'emploi pour le backend d'authentification
jwt_settings = JWTSettings(
    secret=settings.JWT_SECRET_KEY,
    issuer=settings.JWT_ISSUER,
    algorithm=settings.JWT_ALGORITHM,
    access_ttl=timedelta(minutes=settings.ACCESS_TTL_MINUTES),
)
