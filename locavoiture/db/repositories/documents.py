"""
➡️ But : Encapsuler les opérations SQL sur la table Document.

DocumentRepository : CRUD par (collection, id) et lecture d'une collection complète.

Ne contient aucune logique de requête "documentaire" (filtres, tri par champ JSON) :
c'est le DocumentStore qui s'en charge au-dessus.
"""

from typing import Any, Dict, Optional, Sequence

from sqlmodel import select

from locavoiture.db.models.base import utcnow
from locavoiture.db.models.documents import Document
from locavoiture.db.repositories.base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    model = Document

    def get_document(self, collection: str, doc_id: str) -> Optional[Document]:
        return self.get((collection, doc_id))

    def list_collection(self, collection: str) -> Sequence[Document]:
        """Tous les documents d'une collection, dans l'ordre d'insertion."""
        return self.session.exec(
            select(self.model)
            .where(self.model.collection == collection)
            .order_by(self.model.created_at, self.model.id)
        ).all()

    def replace_data(self, entity: Document, data: Dict[str, Any]) -> Document:
        # Nouvel objet dict : la colonne JSON n'est pas suivie en mutation
        return self.update(entity, data=dict(data), updated_at=utcnow())

    def merge_data(self, entity: Document, changes: Dict[str, Any]) -> Document:
        return self.replace_data(entity, {**(entity.data or {}), **changes})
