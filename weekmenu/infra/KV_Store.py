"""Key-value store backends for the weekly menu record.

Every backend honours the same small contract:

  get(key)        -> stored value, or None when the key has never been set
  set(key, value) -> None

and raises ``StorageUnavailable`` when the backend itself cannot be reached.
"No record yet" (None) and "storage down" (exception) are never conflated.
A record that exists but cannot be decoded is returned as-is; the menu
service treats any non-object value as stale and rolls it over.
"""
from __future__ import annotations
import copy
import json
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from weekmenu.utilities.config import Settings
from weekmenu.utilities.exceptions import StorageUnavailable

logger = logging.getLogger(__name__)


class KVStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    def close(self) -> None:
        pass


class MemoryKVStore(KVStore):
    """Process-local store. Each instance owns its own data."""

    def __init__(self):
        self._lock = Lock()
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)


class JsonFileKVStore(KVStore):
    """All keys kept in one JSON object on disk, rewritten atomically on set."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = Lock()

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageUnavailable(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageUnavailable(f"Unexpected content in {self.path}")
        return data

    def _atomic_write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".menu_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(data, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            try:
                self._atomic_write(data)
            except OSError as e:
                raise StorageUnavailable(f"Cannot write {self.path}: {e}") from e


class RestKVStore(KVStore):
    """Redis-over-REST store (Upstash / Vercel KV wire protocol).

    GET  {url}/get/{key}  -> {"result": "<json string>" | null}
    POST {url}/set/{key}  body = JSON-encoded value -> {"result": "OK"}
    """

    def __init__(self, url: str, token: str, timeout: float = 5.0, client: Optional[httpx.Client] = None):
        if not url or not token:
            raise ValueError("RestKVStore needs both a URL and a token")
        self.url = url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = {"Authorization": f"Bearer {token}"}

    def _call(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self._client.request(method, f"{self.url}{path}", headers=self._headers, **kwargs)
        except httpx.HTTPError as e:
            raise StorageUnavailable(f"KV request failed: {e}") from e
        if response.status_code >= 400:
            raise StorageUnavailable(
                f"KV responded with HTTP {response.status_code}",
                details={"status_code": response.status_code}
            )
        try:
            body = response.json()
        except ValueError as e:
            raise StorageUnavailable("KV returned a non-JSON body") from e
        if not isinstance(body, dict):
            raise StorageUnavailable("KV returned an unexpected body")
        if body.get("error"):
            raise StorageUnavailable(f"KV error: {body['error']}")
        return body.get("result")

    def get(self, key: str) -> Optional[Any]:
        result = self._call("GET", f"/get/{quote(key, safe=':')}")
        if result is None or not isinstance(result, str):
            return result
        try:
            return json.loads(result)
        except json.JSONDecodeError:
            # a bad record is data, not an outage: hand it back raw
            logger.warning("Stored value under %r is not JSON", key)
            return result

    def set(self, key: str, value: Any) -> None:
        self._call("POST", f"/set/{quote(key, safe=':')}", content=json.dumps(value, ensure_ascii=False))

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def build_store(settings: Settings) -> KVStore:
    """Pick the backend named in settings, or infer it from the KV variables."""
    backend = settings.store_backend
    if not backend:
        backend = "rest" if settings.has_kv_vars else "memory"

    if backend == "rest":
        logger.info("Using REST key-value store at %s", settings.kv_rest_api_url)
        return RestKVStore(settings.kv_rest_api_url, settings.kv_rest_api_token, timeout=settings.http_timeout)
    if backend == "file":
        logger.info("Using JSON file store at %s", settings.menu_file)
        return JsonFileKVStore(settings.menu_file)
    if backend == "memory":
        logger.warning("KV store not configured; menu is kept in memory for this process only")
        return MemoryKVStore()
    raise ValueError(f"Unknown MENU_STORE_BACKEND: {backend!r}")


__all__ = ['KVStore', 'MemoryKVStore', 'JsonFileKVStore', 'RestKVStore', 'build_store']
