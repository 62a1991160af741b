"""Storage package."""

from .db import get_session, init_db, configure_engine
from .models import KeyValue
from .state_store import (
    STORAGE_KEY,
    BlobStore,
    StateStore,
    PlanImportError,
    export_state,
    import_state,
)

__all__ = [
    "get_session",
    "init_db",
    "configure_engine",
    "KeyValue",
    "STORAGE_KEY",
    "BlobStore",
    "StateStore",
    "PlanImportError",
    "export_state",
    "import_state",
]
