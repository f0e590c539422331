"""Zustand eines Tabs und die zugehörige Übergangsfunktion.

Phasen:
  LOADING         erster Ladezyklus läuft
  READY           Sammlung angezeigt, Dialog ggf. offen
  SUBMITTING      Formular abgeschickt, Aufruf läuft
  CONFIRM_DELETE  Löschen angefragt, wartet auf Bestätigung
  DELETING        Löschaufruf läuft

``reduce`` ist rein: derselbe Zustand + dieselbe Aktion ergeben immer
denselben neuen Zustand. Ein Neuladen ersetzt den Snapshot vollständig;
ein fehlgeschlagenes Neuladen lässt ihn unverändert.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Union

from models.entities import EntityType
from sync.loader import Snapshot


class Phase(str, Enum):
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    CONFIRM_DELETE = "confirm_delete"
    DELETING = "deleting"


class InvalidTransition(Exception):
    """Aktion ist in der aktuellen Phase nicht erlaubt."""


@dataclass(frozen=True)
class DialogState:
    open: bool = False
    editing_id: Optional[str] = None       # None = Neuanlage
    form: dict[str, Any] = field(default_factory=dict)

    @property
    def is_edit(self) -> bool:
        return self.editing_id is not None


@dataclass(frozen=True)
class TabState:
    entity_type: EntityType
    snapshot: Optional[Snapshot] = None
    loading: bool = True
    phase: Phase = Phase.LOADING
    dialog: DialogState = field(default_factory=DialogState)
    delete_candidate: Optional[str] = None
    last_error: Optional[str] = None
    load_cycles: int = 0


# ─── Aktionen ───

@dataclass(frozen=True)
class LoadStarted:
    pass


@dataclass(frozen=True)
class LoadSucceeded:
    snapshot: Snapshot


@dataclass(frozen=True)
class LoadFailed:
    error: str


@dataclass(frozen=True)
class OpenCreateDialog:
    form: dict[str, Any]


@dataclass(frozen=True)
class OpenEditDialog:
    record_id: str
    form: dict[str, Any]


@dataclass(frozen=True)
class SetField:
    name: str
    value: Any


@dataclass(frozen=True)
class CloseDialog:
    pass


@dataclass(frozen=True)
class SubmitStarted:
    pass


@dataclass(frozen=True)
class SubmitSucceeded:
    # leeres Formular für die nächste Neuanlage
    form: dict[str, Any]


@dataclass(frozen=True)
class SubmitFailed:
    error: str


@dataclass(frozen=True)
class RequestDelete:
    record_id: str


@dataclass(frozen=True)
class CancelDelete:
    pass


@dataclass(frozen=True)
class DeleteStarted:
    pass


@dataclass(frozen=True)
class DeleteSucceeded:
    pass


@dataclass(frozen=True)
class DeleteFailed:
    error: str


Action = Union[
    LoadStarted, LoadSucceeded, LoadFailed,
    OpenCreateDialog, OpenEditDialog, SetField, CloseDialog,
    SubmitStarted, SubmitSucceeded, SubmitFailed,
    RequestDelete, CancelDelete, DeleteStarted, DeleteSucceeded, DeleteFailed,
]


def _require(state: TabState, action, *phases: Phase) -> None:
    if state.phase not in phases:
        raise InvalidTransition(
            f"{type(action).__name__} in Phase {state.phase.value} nicht erlaubt"
        )


def _settled_phase(state: TabState) -> Phase:
    """Phase nach einem Ladezyklus: laufende Aufrufe behalten ihre Phase."""
    if state.phase == Phase.LOADING:
        return Phase.READY
    return state.phase


def reduce(state: TabState, action: Action) -> TabState:
    """Einzige Übergangsfunktion für den Tab-Zustand."""

    # ── Laden ──
    if isinstance(action, LoadStarted):
        return replace(state, loading=True)

    if isinstance(action, LoadSucceeded):
        return replace(
            state,
            snapshot=action.snapshot,
            loading=False,
            phase=_settled_phase(state),
            load_cycles=state.load_cycles + 1,
        )

    if isinstance(action, LoadFailed):
        return replace(
            state,
            loading=False,
            phase=_settled_phase(state),
            last_error=action.error,
            load_cycles=state.load_cycles + 1,
        )

    # ── Dialog ──
    if isinstance(action, OpenCreateDialog):
        _require(state, action, Phase.READY)
        return replace(state, dialog=DialogState(open=True, form=dict(action.form)),
                       last_error=None)

    if isinstance(action, OpenEditDialog):
        _require(state, action, Phase.READY)
        return replace(
            state,
            dialog=DialogState(open=True, editing_id=action.record_id,
                               form=dict(action.form)),
            last_error=None,
        )

    if isinstance(action, SetField):
        if not state.dialog.open:
            raise InvalidTransition("SetField ohne offenen Dialog")
        form = {**state.dialog.form, action.name: action.value}
        return replace(state, dialog=replace(state.dialog, form=form))

    if isinstance(action, CloseDialog):
        _require(state, action, Phase.READY)
        return replace(state, dialog=DialogState())

    # ── Absenden ──
    if isinstance(action, SubmitStarted):
        # erneutes Absenden während eines laufenden Aufrufs ist erlaubt
        _require(state, action, Phase.READY, Phase.SUBMITTING)
        if not state.dialog.open:
            raise InvalidTransition("SubmitStarted ohne offenen Dialog")
        return replace(state, phase=Phase.SUBMITTING, last_error=None)

    if isinstance(action, SubmitSucceeded):
        _require(state, action, Phase.SUBMITTING, Phase.READY)
        return replace(state, phase=Phase.READY,
                       dialog=DialogState(form=dict(action.form)))

    if isinstance(action, SubmitFailed):
        _require(state, action, Phase.SUBMITTING, Phase.READY)
        # Dialog bleibt offen, Eingaben bleiben erhalten
        return replace(state, phase=Phase.READY, last_error=action.error)

    # ── Löschen ──
    if isinstance(action, RequestDelete):
        _require(state, action, Phase.READY)
        return replace(state, phase=Phase.CONFIRM_DELETE,
                       delete_candidate=action.record_id, last_error=None)

    if isinstance(action, CancelDelete):
        _require(state, action, Phase.CONFIRM_DELETE)
        return replace(state, phase=Phase.READY, delete_candidate=None)

    if isinstance(action, DeleteStarted):
        _require(state, action, Phase.CONFIRM_DELETE)
        return replace(state, phase=Phase.DELETING)

    if isinstance(action, DeleteSucceeded):
        _require(state, action, Phase.DELETING)
        return replace(state, phase=Phase.READY, delete_candidate=None)

    if isinstance(action, DeleteFailed):
        _require(state, action, Phase.DELETING)
        return replace(state, phase=Phase.READY, delete_candidate=None,
                       last_error=action.error)

    raise InvalidTransition(f"Unbekannte Aktion: {action!r}")
