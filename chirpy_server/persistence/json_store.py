"""
JSON Store - Concurrency-safe gateway to the database file

Module: persistence.json_store
Date: 2026-10-19
Version: 0.1.0

CHANGELOG:
[2026-10-19 v0.1.0] Initial implementation
  - ensure/load/save primitives over a single JSON file
  - Shared read lock / exclusive write lock
  - Mutation lock serializing load-compute-save sequences
  - Atomic writes (temp file + fsync + rename)

ARCHITECTURE:
JSONStore provides:
  - load(): shared lock, many readers at once
  - save(): exclusive lock, blocks readers and other writers
  - mutate(): holds the mutation lock across load, caller changes, save.
    Two concurrent mutations cannot both start from the same snapshot,
    so no update is lost.
    The mutation lock is not reentrant: mutate() must not be nested.

Nothing is cached between calls: every load() re-reads the file.
"""

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from .codec import DocumentSet, decode, encode


class JSONStoreError(Exception):
    """Base JSON store error"""
    pass


class StoreInitError(JSONStoreError):
    """Database file could not be initialized"""
    pass


class StoreIOError(JSONStoreError):
    """File I/O error"""
    pass


class ReadWriteLock:
    """
    Many readers or one writer.

    Writers waiting for the lock block new readers, so a steady stream of
    loads cannot starve a save.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


class JSONStore:
    """
    Single authoritative gateway to the database file.

    Handles:
    - File creation (ensure)
    - Atomic writes (temp file + rename)
    - Thread-safe read/write operations
    - Serialized read-modify-write cycles (mutate)
    """

    def __init__(self, file_path: Union[str, Path]):
        """
        Initialize JSON store

        Args:
            file_path: Path to the database file
        """
        self.logger = logging.getLogger(f"persistence.{self.__class__.__name__}")
        self.file_path = Path(file_path)
        self._lock = ReadWriteLock()
        self._mutation_lock = threading.Lock()

    def ensure(self) -> None:
        """
        Create the database file with an empty document set if missing

        Raises:
            StoreInitError: On any I/O error other than "file not found"
        """
        try:
            os.stat(self.file_path)
            self.logger.info(f"Using existing database: {self.file_path}")
            return
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StoreInitError(f"Cannot access {self.file_path}: {e}")

        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock.write_locked():
                self._write_atomic(encode(DocumentSet()))
        except (OSError, StoreIOError) as e:
            raise StoreInitError(f"Cannot create {self.file_path}: {e}")

        self.logger.info(f"Created new database: {self.file_path}")

    def load(self) -> DocumentSet:
        """
        Load the full document set

        Returns:
            Decoded DocumentSet

        Raises:
            StoreIOError: If file cannot be read
            CorruptDataError: If content is not a valid document set
        """
        with self._lock.read_locked():
            try:
                raw = self.file_path.read_bytes()
            except OSError as e:
                raise StoreIOError(f"Failed to read {self.file_path}: {e}")
        return decode(raw)

    def save(self, documents: DocumentSet) -> None:
        """
        Overwrite the file with the full document set (atomic write)

        Args:
            documents: Data to save

        Raises:
            StoreIOError: If write fails (previous content is left intact)
        """
        raw = encode(documents)
        with self._lock.write_locked():
            self._write_atomic(raw)

    @contextmanager
    def mutate(self) -> Iterator[DocumentSet]:
        """
        Load, let the caller change the documents, then save.

        The whole sequence runs under the mutation lock. If the body raises,
        nothing is written. The lock is not reentrant, so calling mutate()
        inside another mutate() blocks forever.

        Usage:
            with store.mutate() as documents:
                documents.users[1].is_chirpy_red = True
        """
        with self._mutation_lock:
            documents = self.load()
            yield documents
            self.save(documents)

    def _write_atomic(self, raw: bytes) -> None:
        """
        Atomic write: write to temp file, fsync, then rename

        Caller must hold the write lock.

        Raises:
            StoreIOError: If write fails
        """
        temp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        try:
            with open(temp_path, "wb") as f:
                f.write(raw)
                f.flush()
                os.fsync(f.fileno())

            # Set permissions to 0600 (rw-------)
            temp_path.chmod(0o600)

            # Atomic rename
            os.replace(temp_path, self.file_path)

        except OSError as e:
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass
            except OSError as cleanup_error:
                self.logger.warning(f"Could not remove {temp_path}: {cleanup_error}")
            raise StoreIOError(f"Failed to write {self.file_path}: {e}")


