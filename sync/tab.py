"""TabController – ein Tab der Kursverwaltung (Laden, Dialog, Absenden, Löschen).

Setzt Loader, Resolver, MutationCoordinator und Formulare zusammen und
führt den Zustand ausschließlich über ``sync.state.reduce``. Gleichzeitige
Aufrufe werden weder gesperrt noch zusammengefasst: das zuletzt
abgeschlossene Neuladen bestimmt den angezeigten Zustand.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Optional

from config.schema import KursverwaltungConfig
from models.entities import TAB_ORDER, EntityType, get_schema
from models.record import Collection, Record
from sync.client import EntityClient
from sync.forms import (
    FormValidationError,
    build_payload,
    empty_form,
    form_from_record,
)
from sync.loader import CollectionLoader, LoadResult
from sync.mutations import MutationAction, MutationCoordinator, MutationResult
from sync.resolver import ReferenceResolver
from sync.state import (
    CancelDelete,
    CloseDialog,
    DeleteFailed,
    DeleteStarted,
    DeleteSucceeded,
    LoadFailed,
    LoadStarted,
    LoadSucceeded,
    OpenCreateDialog,
    OpenEditDialog,
    RequestDelete,
    SetField,
    SubmitFailed,
    SubmitStarted,
    SubmitSucceeded,
    TabState,
    reduce,
)
from sync.views import Card, build_card

logger = logging.getLogger(__name__)


class TabController:
    """Zustand und Aktionen eines Entitäts-Tabs."""

    def __init__(self, entity_type: EntityType,
                 clients: dict[EntityType, EntityClient],
                 config: KursverwaltungConfig,
                 today: Optional[date] = None):
        self.schema = get_schema(entity_type)
        self.config = config
        self.today = today
        self.loader = CollectionLoader(clients)
        self.mutations = MutationCoordinator(clients[self.schema.entity_type], self.load)
        self._state = TabState(entity_type=self.schema.entity_type)

    def __repr__(self) -> str:
        return f"TabController({self.schema.label}, phase={self._state.phase.value})"

    @property
    def state(self) -> TabState:
        return self._state

    @property
    def records(self) -> Collection:
        snap = self._state.snapshot
        return snap.primary if snap is not None else Collection()

    def dispatch(self, action) -> TabState:
        self._state = reduce(self._state, action)
        return self._state

    # ─── Laden ────────────────────────────────────────────────────────────────

    async def load(self) -> LoadResult:
        """Ein vollständiger Ladezyklus; bei Fehler bleibt der alte Snapshot."""
        self.dispatch(LoadStarted())
        result = await self.loader.load(self.schema.entity_type,
                                        self.schema.auxiliary_types)
        if result.ok:
            self.dispatch(LoadSucceeded(result.snapshot))
        else:
            self.dispatch(LoadFailed(result.error or "Laden fehlgeschlagen"))
        return result

    # ─── Dialog ───────────────────────────────────────────────────────────────

    def open_create(self) -> TabState:
        return self.dispatch(OpenCreateDialog(empty_form(self.schema, self.today)))

    def open_edit(self, record_id: str) -> TabState:
        record = self.records.get(record_id)
        if record is None:
            raise KeyError(f"{self.schema.singular} {record_id} ist nicht geladen")
        return self.dispatch(
            OpenEditDialog(record_id, form_from_record(self.schema, record))
        )

    def set_field(self, name: str, value: Any) -> TabState:
        self.schema.field(name)
        return self.dispatch(SetField(name, value))

    def update_form(self, values: dict[str, Any]) -> TabState:
        for name, value in values.items():
            self.set_field(name, value)
        return self._state

    def close_dialog(self) -> TabState:
        return self.dispatch(CloseDialog())

    async def submit(self) -> MutationResult:
        """Sendet das offene Formular (Neuanlage oder Änderung).

        Bei Erfolg wird nach dem Neuladen der Dialog geschlossen; bei Fehler
        bleibt er mit den Eingaben offen.
        """
        dialog = self._state.dialog
        action = MutationAction.UPDATE if dialog.is_edit else MutationAction.CREATE
        self.dispatch(SubmitStarted())

        try:
            original = self.records.get(dialog.editing_id) if dialog.is_edit else None
            payload = build_payload(self.schema, dialog.form, self.config, original)
        except FormValidationError as e:
            logger.warning(f"{self.schema.label}: Formular ungültig: {e}")
            self.dispatch(SubmitFailed(str(e)))
            return MutationResult(action=action, ok=False,
                                  record_id=dialog.editing_id, error=str(e))

        if dialog.is_edit:
            result = await self.mutations.update(dialog.editing_id, payload)
        else:
            result = await self.mutations.create(payload)

        if result.ok:
            self.dispatch(SubmitSucceeded(empty_form(self.schema, self.today)))
        else:
            self.dispatch(SubmitFailed(result.error or "Speichern fehlgeschlagen"))
        return result

    # ─── Löschen ──────────────────────────────────────────────────────────────

    def request_delete(self, record_id: str) -> TabState:
        return self.dispatch(RequestDelete(record_id))

    def cancel_delete(self) -> TabState:
        return self.dispatch(CancelDelete())

    async def confirm_delete(self) -> MutationResult:
        record_id = self._state.delete_candidate
        self.dispatch(DeleteStarted())
        result = await self.mutations.delete(record_id)
        if result.ok:
            self.dispatch(DeleteSucceeded())
        else:
            self.dispatch(DeleteFailed(result.error or "Löschen fehlgeschlagen"))
        return result

    # ─── Anzeige ──────────────────────────────────────────────────────────────

    def resolver(self) -> ReferenceResolver:
        return ReferenceResolver(self.schema, self._state.snapshot,
                                 self.config.display.sentinel)

    def cards(self) -> list[Card]:
        resolver = self.resolver()
        return [build_card(self.schema, r, resolver, self.config.display)
                for r in self.records]

    def choices(self, field_name: str) -> list[tuple[str, str]]:
        """Auswahlmöglichkeiten eines Referenzfelds: (record_id, Beschriftung)."""
        spec = self.schema.field(field_name)
        if not spec.is_reference:
            raise ValueError(f"{self.schema.label}.{field_name} ist kein Referenzfeld")
        snap = self._state.snapshot
        if snap is None:
            return []
        target = get_schema(spec.target)
        return [(r.record_id, target.choice_label(r))
                for r in snap.collection(spec.target)]


class Dashboard:
    """Die fünf Tabs der Kursverwaltung."""

    def __init__(self, clients: dict[EntityType, EntityClient],
                 config: KursverwaltungConfig, today: Optional[date] = None):
        self.config = config
        self.tabs: dict[EntityType, TabController] = {
            et: TabController(et, clients, config, today) for et in TAB_ORDER
        }

    def tab(self, entity_type: EntityType) -> TabController:
        return self.tabs[EntityType(entity_type)]

    async def load_all(self) -> dict[EntityType, LoadResult]:
        results = await asyncio.gather(*(t.load() for t in self.tabs.values()))
        return dict(zip(self.tabs, results))

    def record(self, entity_type: EntityType, record_id: str) -> Optional[Record]:
        return self.tab(entity_type).records.get(record_id)
