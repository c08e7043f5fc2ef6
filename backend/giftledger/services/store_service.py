# Overview: Entity store holding the whole gift dataset as one JSON document.

# backend/giftledger/services/store_service.py
"""
Gift Ledger Entity Store Invariants (authoritative)

- The dataset is one JSON document: every collection plus next_ids counters.
- save() writes the complete document to a temp file in the same directory,
  fsyncs it, then os.replace()s it over the target. A crash leaves either
  the old or the new document, never a partial one.
- Every mutating operation runs inside transaction(): one writer lock,
  a private deep copy of the published dataset, validate + mutate the copy,
  save, then publish. Any exception (including a failed save) discards the
  copy, so in-memory state never diverges from durable state.
- Published datasets are never mutated in place. snapshot() hands them to
  readers without taking the lock.
- Id counters live in the dataset and are saved with the record that
  consumed them.
"""
from __future__ import annotations

import copy
import json
import os
import tempfile
import threading
from contextlib import contextmanager, suppress
from typing import Callable, Iterator

from ..exceptions import StorageError
from ..logging_config import get_logger
from ..models import Dataset


logger = get_logger(__name__)


class EntityStore:
    """Owns the dataset and the exclusive-access discipline around it."""

    def __init__(self, path: str | None = None, seed_factory: Callable[[], Dataset] | None = None):
        self._lock = threading.RLock()
        self._depth = 0
        self._path = path
        self._seed_factory = seed_factory
        self._dataset: Dataset | None = None

    def init_app(self, app) -> None:
        from .seed_service import build_seed_dataset

        path = app.config["GIFTLEDGER_DATA_FILE"]
        if not os.path.isabs(path):
            path = os.path.join(app.instance_path, path)

        password = app.config["SEED_PASSWORD"]
        rounds = app.config["BCRYPT_ROUNDS"]
        self.configure(path, seed_factory=lambda: build_seed_dataset(password=password, rounds=rounds))
        app.extensions["giftledger_store"] = self

    def configure(self, path: str, *, seed_factory: Callable[[], Dataset] | None = None) -> None:
        """Point the store at a data file and drop any cached dataset."""
        with self._lock:
            self._path = path
            self._seed_factory = seed_factory
            self._dataset = None

    @property
    def path(self) -> str:
        if not self._path:
            raise RuntimeError("EntityStore is not configured; call init_app() or configure()")
        return self._path

    def load(self) -> Dataset:
        """
        Read the dataset from disk.

        A missing file materializes the seed dataset and persists it.
        An unreadable or corrupt file raises StorageError; it is never
        silently replaced by the seed.
        """
        path = self.path
        try:
            with open(path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except FileNotFoundError:
            dataset = self._seed_factory() if self._seed_factory else Dataset()
            logger.info("No dataset found, materializing seed data", extra={"path": path})
            self.save(dataset)
            return dataset
        except (OSError, ValueError) as exc:
            logger.error("Failed to read dataset", extra={"path": path}, exc_info=True)
            raise StorageError(f"could not read dataset from {path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise StorageError(f"dataset at {path} is malformed: top level is {type(raw).__name__}, not an object")
        try:
            return Dataset.from_dict(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"dataset at {path} is malformed: {exc}") from exc

    def save(self, dataset: Dataset) -> None:
        """Write the complete dataset atomically (temp file + rename)."""
        path = self.path
        directory = os.path.dirname(path) or "."
        payload = json.dumps(dataset.to_dict(), ensure_ascii=False, indent=2)

        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".giftledger-", suffix=".tmp", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_path, path)
            except BaseException:
                with suppress(FileNotFoundError):
                    os.unlink(tmp_path)
                raise
        except OSError as exc:
            logger.error("Failed to save dataset", extra={"path": path}, exc_info=True)
            raise StorageError(f"could not write dataset to {path}: {exc}") from exc

    def snapshot(self) -> Dataset:
        """Return the published dataset for read-only use."""
        dataset = self._dataset
        if dataset is None:
            with self._lock:
                if self._dataset is None:
                    self._dataset = self.load()
                dataset = self._dataset
        return dataset

    def reload(self) -> Dataset:
        """Discard the in-memory dataset and re-read durable state."""
        with self._lock:
            self._dataset = self.load()
            return self._dataset

    @contextmanager
    def transaction(self) -> Iterator[Dataset]:
        """
        Run one atomic load-validate-mutate-save unit.

        Yields a private copy of the dataset. On clean exit the copy is saved
        and becomes the published dataset; on any exception it is dropped.
        Transactions do not nest: compose inner helpers that take a Dataset.
        """
        with self._lock:
            if self._depth:
                raise RuntimeError("nested store transaction")
            self._depth += 1
            try:
                working = copy.deepcopy(self.snapshot())
                yield working
                self.save(working)
                self._dataset = working
            finally:
                self._depth -= 1
