"""
➡️ But : État local d'un écran synchronisé sur une ou plusieurs collections.

ViewState : au montage on s'abonne, chaque snapshot REMPLACE la liste locale
(pas de diff), au démontage on se désabonne.

LoadingTracker : combine plusieurs abonnements en un seul indicateur "loading".
Vrai au départ, il passe à faux la première fois que TOUS les abonnements suivis
ont répondu (une erreur compte comme une réponse), puis ne revient jamais à vrai.

DashboardState : tableau de bord admin (voitures + réservations + employés),
rapport recalculé à chaque snapshot.
"""

from typing import Callable, Dict, Iterable, List, Optional

from locavoiture.backend.client import BackendClient
from locavoiture.backend.interfaces import Unsubscribe
from locavoiture.core import collections
from locavoiture.features.reports.schemas import ReportOut
from locavoiture.features.reports.services import build_report
from locavoiture.live.subscriptions import OnError, Record, subscribe


class ViewState:
    def __init__(
        self,
        client: BackendClient,
        collection: str,
        *,
        order_by_field: Optional[str] = None,
        order_direction: str = "asc",
        on_change: Optional[Callable[["ViewState"], None]] = None,
        on_error: Optional[OnError] = None,
    ):
        self.client = client
        self.collection = collection
        self.order_by_field = order_by_field
        self.order_direction = order_direction
        self.on_change = on_change
        self.on_error = on_error

        self.items: List[Record] = []
        self.loaded = False
        self.error: Optional[BaseException] = None
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    def mount(self) -> "ViewState":
        if self._unsubscribe is None:
            self._unsubscribe = subscribe(
                self.client,
                self.collection,
                self._handle_data,
                self._handle_error,
                order_by_field=self.order_by_field,
                order_direction=self.order_direction,
            )
        return self

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __enter__(self) -> "ViewState":
        return self.mount()

    def __exit__(self, *exc) -> None:
        self.unmount()

    def _handle_data(self, records: List[Record]) -> None:
        self.items = records
        self.loaded = True
        if self.on_change:
            self.on_change(self)

    def _handle_error(self, error: BaseException) -> None:
        print(f"❌ [view-state] {self.collection}: {error}", flush=True)
        self.error = error
        self.loaded = True
        if self.on_error:
            self.on_error(error)


class LoadingTracker:
    def __init__(self, names: Iterable[str]):
        self._done: Dict[str, bool] = {name: False for name in names}
        if not self._done:
            raise ValueError("LoadingTracker needs at least one subscription to track")
        self.loading = True

    def mark_done(self, name: str) -> None:
        if name not in self._done:
            raise KeyError(name)
        self._done[name] = True
        if self.loading and all(self._done.values()):
            self.loading = False

    def is_done(self, name: str) -> bool:
        return self._done[name]


class DashboardState:
    TRACKED = (collections.CARS, collections.RESERVATIONS, collections.EMPLOYEES)

    def __init__(self, client: BackendClient, *, on_change: Optional[Callable[["DashboardState"], None]] = None):
        self.on_change = on_change
        self.tracker = LoadingTracker(self.TRACKED)
        self.views: Dict[str, ViewState] = {
            name: ViewState(
                client,
                name,
                on_change=lambda view: self._handle_update(view.collection),
                on_error=self._error_handler(name),
            )
            for name in self.TRACKED
        }
        self.report: ReportOut = build_report([], [], [])

    def _error_handler(self, name: str) -> OnError:
        def on_error(error: BaseException) -> None:
            self._handle_update(name)
        return on_error

    @property
    def loading(self) -> bool:
        return self.tracker.loading

    def mount(self) -> "DashboardState":
        for view in self.views.values():
            view.mount()
        return self

    def unmount(self) -> None:
        for view in self.views.values():
            view.unmount()

    def __enter__(self) -> "DashboardState":
        return self.mount()

    def __exit__(self, *exc) -> None:
        self.unmount()

    def _handle_update(self, name: str) -> None:
        self.tracker.mark_done(name)
        self.report = build_report(
            self.views[collections.CARS].items,
            self.views[collections.RESERVATIONS].items,
            self.views[collections.EMPLOYEES].items,
        )
        if self.on_change:
            self.on_change(self)
