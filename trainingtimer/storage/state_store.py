"""Persisting the training session as one JSON blob.

The whole ``TrainingState`` lives under ``STORAGE_KEY`` in the
key/value table and is overwritten after every change.  Loading is the
one place where errors are recovered from: anything unreadable yields
the default single-timer plan.

Usage::

    store = StateStore(BlobStore())
    state = store.load()
    store.save(state)
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from ..timer.models import TrainingState, default_state
from .db import get_session
from .models import KeyValue

logger = logging.getLogger(__name__)

STORAGE_KEY = "training-timer-state"

_DECODE_ERRORS = (
    json.JSONDecodeError, KeyError, TypeError, ValueError, OverflowError,
    RecursionError,
)


class PlanImportError(Exception):
    """A plan file could not be read or understood."""


# ── key/value blobs ──────────────────────────────────────────────────────


class BlobStore:
    """String blobs keyed by name, backed by the ``kv_store`` table."""

    def get(self, key: str) -> str | None:
        with get_session() as db:
            record = db.get(KeyValue, key)
            return record.value if record else None

    def set(self, key: str, value: str) -> None:
        with get_session() as db:
            record = db.get(KeyValue, key)
            if record is None:
                db.add(KeyValue(key=key, value=value))
            else:
                record.value = value
                record.updated_at = datetime.utcnow()

    def delete(self, key: str) -> None:
        with get_session() as db:
            record = db.get(KeyValue, key)
            if record:
                db.delete(record)


# ── decoding ─────────────────────────────────────────────────────────────


def decode_state(raw: str) -> TrainingState:
    """Parse a stored blob.  Never resumes running."""
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    return replace(TrainingState.from_dict(data), is_running=False)


def encode_state(state: TrainingState) -> str:
    return json.dumps(state.to_dict())


# ── repository ───────────────────────────────────────────────────────────


class StateStore:
    """``load``/``save`` of the session state for ``TimerEngine``."""

    def __init__(self, blobs: BlobStore, *, key: str = STORAGE_KEY) -> None:
        self._blobs = blobs
        self._key = key

    def load(self) -> TrainingState:
        """Stored state, or the default plan if absent or unreadable."""
        try:
            raw = self._blobs.get(self._key)
            if raw is not None:
                return decode_state(raw)
        except (*_DECODE_ERRORS, SQLAlchemyError) as exc:
            logger.warning("Failed to load timer state, using defaults: %s", exc)
        return default_state()

    def save(self, state: TrainingState) -> None:
        self._blobs.set(self._key, encode_state(state))


# ── import / export ──────────────────────────────────────────────────────


def export_state(state: TrainingState, path: Path) -> None:
    """Write *state* to *path* in the stored wire format."""
    path.write_text(
        json.dumps(state.to_dict(), indent=2) + "\n",
        encoding="utf-8",
    )


def import_state(path: Path) -> TrainingState:
    """Read a plan written by ``export_state``.

    Raises ``PlanImportError`` if the file is missing or malformed.
    """
    try:
        return decode_state(path.read_text(encoding="utf-8"))
    except (OSError, *_DECODE_ERRORS) as exc:
        raise PlanImportError(f"Cannot import {path.name}: {exc}") from exc
