"""Synchronisation mit dem Datensatz-Speicher (Laden, Auflösen, Schreiben)."""

from .client import EntityClient, LivingAppsClient, RecordService, ServiceError, build_clients
from .loader import CollectionLoader, LoadResult, Snapshot
from .resolver import SENTINEL, ReferenceResolver, resolve
from .mutations import MutationAction, MutationCoordinator, MutationResult
from .tab import Dashboard, TabController

__all__ = [
    "EntityClient",
    "LivingAppsClient",
    "RecordService",
    "ServiceError",
    "build_clients",
    "CollectionLoader",
    "LoadResult",
    "Snapshot",
    "SENTINEL",
    "ReferenceResolver",
    "resolve",
    "MutationAction",
    "MutationCoordinator",
    "MutationResult",
    "Dashboard",
    "TabController",
]
