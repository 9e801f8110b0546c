"""
On-disk cache of advert detail documents.

The cache doubles as the "already handled" marker: once `<id>.json` exists,
the advert is never mailed again by this machine. The marker is taken with an
exclusive create before any network call, so two processes racing on the same
advert can never both see FRESH.
"""

from __future__ import annotations

import contextlib
import errno
import json
import os
import threading
from abc import ABC, abstractmethod
from typing import Protocol

from . import logging_bridge
from .advert import Advert
from .detail import AdvertDetail
from .models import CacheResult, ClaimResult


class CacheError(RuntimeError):
    """Network or filesystem failure while populating the cache for an advert."""


class CorruptCache(RuntimeError):
    """Cached detail is missing or cannot be parsed."""


class DetailFetcher(Protocol):
    def get_bytes(self, url: str) -> bytes: ...


# ---- Storage backends -------------------------------------------------------


class DetailStore(ABC):
    """
    Storage for raw advert detail, keyed by advert id.

    Contract:
      - try_claim is atomic: exactly one caller per id ever gets CLAIMED
        (until that claim is released).
      - write is only called by the caller holding the claim.
      - read raises FileNotFoundError when nothing is stored for the id.
    """

    @abstractmethod
    def try_claim(self, advert_id: str) -> ClaimResult:
        raise NotImplementedError

    @abstractmethod
    def write(self, advert_id: str, data: bytes) -> None:
        raise NotImplementedError

    @abstractmethod
    def read(self, advert_id: str) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def release(self, advert_id: str) -> None:
        """Drop a claim whose fetch failed so a later run can try again."""
        raise NotImplementedError


class FileDetailStore(DetailStore):
    """One `<id>.json` file per advert under `directory`."""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, advert_id: str) -> str:
        return os.path.join(self.directory, f"{advert_id}.json")

    def try_claim(self, advert_id: str) -> ClaimResult:
        os.makedirs(self.directory, exist_ok=True)
        try:
            fd = os.open(self.path_for(advert_id), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return ClaimResult.ALREADY_CLAIMED
        os.close(fd)
        return ClaimResult.CLAIMED

    def write(self, advert_id: str, data: bytes) -> None:
        # r+b: the file must already exist (created by try_claim).
        with open(self.path_for(advert_id), "r+b") as f:
            f.truncate(0)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

    def read(self, advert_id: str) -> bytes:
        with open(self.path_for(advert_id), "rb") as f:
            return f.read()

    def release(self, advert_id: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            os.remove(self.path_for(advert_id))


class MemoryDetailStore(DetailStore):
    """In-process store with the same claim semantics; used by tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, bytes] = {}

    def try_claim(self, advert_id: str) -> ClaimResult:
        with self._lock:
            if advert_id in self._data:
                return ClaimResult.ALREADY_CLAIMED
            self._data[advert_id] = b""
            return ClaimResult.CLAIMED

    def write(self, advert_id: str, data: bytes) -> None:
        with self._lock:
            if advert_id not in self._data:
                raise FileNotFoundError(errno.ENOENT, "not claimed", advert_id)
            self._data[advert_id] = bytes(data)

    def read(self, advert_id: str) -> bytes:
        with self._lock:
            if advert_id not in self._data:
                raise FileNotFoundError(errno.ENOENT, "not cached", advert_id)
            return self._data[advert_id]

    def release(self, advert_id: str) -> None:
        with self._lock:
            self._data.pop(advert_id, None)


# ---- Cache ------------------------------------------------------------------


class DetailCache:
    def __init__(self, store: DetailStore, http: DetailFetcher):
        self.store = store
        self.http = http

    def try_fetch_and_store(self, advert: Advert) -> CacheResult:
        """
        Claim the advert, then fetch and store its detail.

        Returns:
            FRESH if this call created the entry, ALREADY_PROCESSED if it existed
            (no network call is made in that case).

        Raises:
            CacheError on any network or filesystem failure. The claim is
            released first, so the entry is only ever left behind by a
            successful fetch.
        """
        try:
            claim = self.store.try_claim(advert.id)
        except OSError as e:
            raise CacheError(f"Cannot create cache entry for {advert.id}: {e}") from e

        if claim is ClaimResult.ALREADY_CLAIMED:
            return CacheResult.ALREADY_PROCESSED

        try:
            body = self.http.get_bytes(advert.detail_url)
            self.store.write(advert.id, body)
        except Exception as e:
            self._release_quietly(advert)
            raise CacheError(f"Fetching detail for {advert.id} failed: {e}") from e

        logging_bridge.activity({
            "component": "job_applier.cache",
            "op": "stored",
            "advert_id": advert.id,
            "bytes": len(body),
        })
        return CacheResult.FRESH

    def load(self, advert: Advert) -> AdvertDetail:
        """
        Read the cached detail for `advert` back from the store.

        Raises:
            CorruptCache if the entry is missing, empty (an interrupted claim), unreadable,
            or not a JSON object.
        """
        try:
            data = self.store.read(advert.id)
        except OSError as e:
            raise CorruptCache(f"No readable cache entry for {advert.id}: {e}") from e
        if not data:
            raise CorruptCache(f"Cache entry for {advert.id} was claimed but never written")

        try:
            doc = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise CorruptCache(f"Cache entry for {advert.id} is not valid JSON") from e

        if not isinstance(doc, dict):
            raise CorruptCache(f"Cache entry for {advert.id} is not a JSON object")
        return AdvertDetail(raw=doc)

    def _release_quietly(self, advert: Advert) -> None:
        try:
            self.store.release(advert.id)
        except OSError as e:
            logging_bridge.error({
                "component": "job_applier.cache",
                "op": "release",
                "advert_id": advert.id,
                "error": repr(e),
            })
