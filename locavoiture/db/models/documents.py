"""
➡️ But : Stocker les documents sans schéma du backend (voitures, réservations, comptes...).

Une seule table : chaque ligne = un document d'une collection nommée.
Le contenu métier est un objet JSON libre, le client lit/écrit des champs ad hoc.
"""

from typing import Any, Dict

from sqlalchemy import Column, JSON
from sqlmodel import Field

from .base import BaseModelDB


class Document(BaseModelDB, table=True):
    """Document d'une collection, identifié par (collection, id)."""

    __tablename__ = "documents"

    collection: str = Field(primary_key=True, description="Nom de la collection")
    id: str = Field(primary_key=True, description="Identifiant du document dans sa collection")
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
