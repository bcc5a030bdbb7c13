"""
➡️ But : Poignée explicite vers le backend (document store + auth + stockage local).

Rien n'est initialisé à l'import : on construit un BackendClient, on appelle init(),
puis on le passe à l'adaptateur d'abonnement, à la passerelle d'écriture et aux services.
dispose() détache tous les écouteurs et libère le moteur SQL.

Utilisation :
    with BackendClient.from_settings(settings) as client:
        unsubscribe = subscribe(client, "cars", on_data)
"""

from typing import Optional

from sqlalchemy.engine import Engine

from locavoiture.backend.auth import TokenAuthBackend
from locavoiture.backend.documents import ReadRule, SqlDocumentStore
from locavoiture.backend.interfaces import (
    AuthBackend,
    BackendNotInitialized,
    DocumentStore,
    KeyValueStore,
)
from locavoiture.backend.local_storage import FileKeyValueStore, MemoryKeyValueStore
from locavoiture.db.session import build_engine, init_db
from locavoiture.security.tokens import JWTSettings


class BackendClient:
    def __init__(
        self,
        *,
        database_url: str,
        jwt_settings: JWTSettings,
        local_storage_path: Optional[str] = None,
        local_session_key: str = "localUser",
        read_rule: Optional[ReadRule] = None,
        echo: bool = False,
    ):
        self.database_url = database_url
        self.jwt_settings = jwt_settings
        self.local_storage_path = local_storage_path
        self.local_session_key = local_session_key
        self.read_rule = read_rule
        self.echo = echo

        self._engine: Optional[Engine] = None
        self._documents: Optional[SqlDocumentStore] = None
        self._auth: Optional[TokenAuthBackend] = None
        self._local_storage: Optional[KeyValueStore] = None

    @classmethod
    def from_settings(cls, settings, jwt_settings: JWTSettings) -> "BackendClient":
        return cls(
            database_url=settings.DATABASE_URL,
            jwt_settings=jwt_settings,
            local_storage_path=settings.LOCAL_STORAGE_PATH,
            local_session_key=settings.LOCAL_SESSION_KEY,
            echo=settings.DB_ECHO,
        )

    # ---------- Cycle de vie ----------

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    def init(self) -> "BackendClient":
        if self.initialized:
            return self
        engine = build_engine(self.database_url, echo=self.echo)
        init_db(engine)
        self._engine = engine
        self._documents = SqlDocumentStore(engine, read_rule=self.read_rule)
        self._auth = TokenAuthBackend(self.jwt_settings)
        if self.local_storage_path:
            self._local_storage = FileKeyValueStore(self.local_storage_path)
        else:
            self._local_storage = MemoryKeyValueStore()
        return self

    def dispose(self) -> None:
        if self._documents is not None:
            self._documents.close()
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._documents = None
        self._auth = None
        self._local_storage = None

    def __enter__(self) -> "BackendClient":
        return self.init()

    def __exit__(self, *exc) -> None:
        self.dispose()

    # ---------- Services ----------

    def _require(self, service):
        if service is None:
            raise BackendNotInitialized("BackendClient.init() must be called first")
        return service

    @property
    def documents(self) -> DocumentStore:
        return self._require(self._documents)

    @property
    def auth(self) -> AuthBackend:
        return self._require(self._auth)

    @property
    def local_storage(self) -> KeyValueStore:
        return self._require(self._local_storage)
