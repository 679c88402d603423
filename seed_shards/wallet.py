"""
Wallet storage backends.

A wallet is a string key-value store scoped per wallet handle. Reads and
writes touch exactly one key; a write replaces the previous value.
"""

import json
import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from . import crypto
from .errors import DecodeError, NotFound, StorageError

log = logging.getLogger(__name__)

_SCOPE_RE = re.compile(r'^[A-Za-z0-9_-][A-Za-z0-9_.-]*$')


class WalletStorage(ABC):
    """Abstract key-value storage scoped per wallet handle."""

    @abstractmethod
    def get(self, scope, key: str) -> str:
        """
        Read the value stored under key.

        Raises:
            NotFound: If nothing is stored under key in this scope.
        """

    @abstractmethod
    def set(self, scope, key: str, value: str) -> None:
        """
        Store value under key, overwriting any previous value.

        Raises:
            StorageError: If the value could not be persisted.
        """


class InMemoryWallet(WalletStorage):
    """Process-local wallet, one dict per scope."""

    def __init__(self):
        self._scopes = {}

    def get(self, scope, key: str) -> str:
        try:
            return self._scopes[scope][key]
        except KeyError:
            raise NotFound(f"No wallet entry for key {key!r}") from None

    def set(self, scope, key: str, value: str) -> None:
        self._scopes.setdefault(scope, {})[key] = value


class FileWallet(WalletStorage):
    """
    Wallet persisted as one file per scope inside a directory.

    Files hold a JSON object of all entries in the scope. With a 32-byte
    key the file is AES-256-GCM encrypted (<scope>.wallet), otherwise it is
    plain JSON (<scope>.json). Every set rewrites the file through a
    temporary file and an atomic replace, holding an instance lock across
    the read-modify-write. Writers in separate processes, or separate
    FileWallet instances on one directory, need outside serialization.
    """

    def __init__(self, directory, key: Optional[bytes] = None):
        if key is not None and len(key) != 32:
            raise ValueError(f"Wallet key must be 32 bytes, got {len(key)}")
        self.directory = Path(directory)
        self.key = key
        self._lock = threading.Lock()

    def path_for(self, scope) -> Path:
        name = str(scope)
        if not _SCOPE_RE.match(name):
            raise StorageError(f"Invalid wallet scope: {name!r}")
        suffix = '.wallet' if self.key else '.json'
        return self.directory / f"{name}{suffix}"

    def _load(self, scope) -> dict:
        path = self.path_for(scope)
        if not path.exists():
            return {}
        try:
            raw = path.read_bytes()
            if self.key:
                raw = crypto.decrypt(raw, self.key)
            entries = json.loads(raw.decode('utf-8'))
        except (OSError, DecodeError, ValueError) as e:
            raise StorageError(f"Cannot read wallet {path}: {e}") from e
        if not isinstance(entries, dict):
            raise StorageError(f"Wallet {path} is not a JSON object")
        return entries

    def get(self, scope, key: str) -> str:
        entries = self._load(scope)
        if key not in entries:
            raise NotFound(f"No wallet entry for key {key!r}")
        return entries[key]

    def set(self, scope, key: str, value: str) -> None:
        with self._lock:
            entries = self._load(scope)
            entries[key] = value
            self._write(scope, entries)

    def _write(self, scope, entries: dict) -> None:
        raw = json.dumps(entries, indent=2, sort_keys=True).encode('utf-8')
        if self.key:
            raw = crypto.encrypt(raw, self.key)

        path = self.path_for(scope)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.directory), prefix='.tmp-')
            try:
                with os.fdopen(fd, 'wb') as f:
                    f.write(raw)
                os.replace(tmp, path)
            except BaseException:
                os.unlink(tmp)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write wallet {path}: {e}") from e
        log.debug("Wallet %s updated (%d entries)", path, len(entries))
