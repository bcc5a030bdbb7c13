"""
➡️ But : Configurer la base SQL du backend documentaire.

build_engine() : connexion à la base (sqlite:///locavoiture.db par défaut, mémoire pour les tests).

init_db() : crée les tables à partir des modèles SQLModel.

🔹 Avantages :

Un seul endroit pour gérer les connexions DB.

Aucun moteur global créé à l'import : c'est le BackendClient qui le construit et le libère.
"""

from typing import Dict, Any

from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

# Import all models for creating all tables
from locavoiture.db.models.documents import Document  # noqa: F401


def build_engine(url: str, *, echo: bool = False) -> Engine:
    assert url, "DATABASE_URL must be set"

    is_sqlite = url.startswith("sqlite:")
    is_memory = is_sqlite and (url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url)

    connect_args: Dict[str, Any] = {}
    kwargs: Dict[str, Any] = {}
    if is_sqlite:
        # Requis pour SQLite : les écritures passent par un thread de travail
        connect_args["check_same_thread"] = False
    if is_memory:
        # Une seule connexion partagée, sinon chaque connexion voit une base vide
        kwargs["poolclass"] = StaticPool

    engine = create_engine(
        url,
        echo=echo,
        connect_args=connect_args,
        pool_pre_ping=not is_sqlite,  # ping utile pour Postgres/MySQL ; inutile pour SQLite
        **kwargs,
    )
    return engine


def init_db(engine: Engine) -> None:
    """
    Crée les tables si elles n'existent pas.
    """
    SQLModel.metadata.create_all(engine)
