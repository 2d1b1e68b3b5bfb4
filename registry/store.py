"""
Record storage.

One interface, RecordStore, with two implementations chosen at startup
by build_store():

  - JsonFileStore: a single JSON array on local disk
  - SupabaseStore: one row per record in a Supabase (PostgREST) table

Both validate the name the same way, return the same Record shape and
list newest-first. Both surface read failures as StorageError; neither
hides a broken backend behind an empty list.
"""

import asyncio
import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Callable

import httpx

from registry.config import Settings
from registry.errors import StorageError, ValidationError
from registry.models.schemas import Record
from registry.timeutil import epoch_ms, local_time, utc_now, utc_timestamp

logger = logging.getLogger(__name__)

NAME_REQUIRED = "İsim gereklidir"


def clean_name(name: str | None) -> str:
    """Trim `name`, rejecting None and whitespace-only input."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(NAME_REQUIRED)
    return name.strip()


def newest_first(records: list[Record]) -> list[Record]:
    return sorted(records, key=lambda r: r.id, reverse=True)


def to_records(rows: list, source: str) -> list[Record]:
    """Validate raw stored rows; any malformed row is a StorageError."""
    try:
        return [Record(**row) for row in rows]
    except (TypeError, ValueError) as e:
        raise StorageError(f"{source} contains a malformed record: {e}") from e


class RecordStore(ABC):
    """Append-only store of name submissions."""

    name: str

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock

    @abstractmethod
    async def append(self, name: str | None, ip: str) -> Record:
        """Validate, timestamp and persist a submission; return the stored record."""

    @abstractmethod
    async def list_all(self) -> list[Record]:
        """Every stored record, id descending."""

    def describe(self) -> dict:
        return {"backend": self.name}

    async def close(self) -> None:
        pass

    def _fields(self, name: str, ip: str) -> tuple[datetime, dict]:
        now = self._clock()
        return now, {
            "name": name,
            "ip": ip,
            "time": local_time(now),
            "timestamp": utc_timestamp(now),
        }


# ---------------------------------------------------------------------------
# Local JSON file
# ---------------------------------------------------------------------------

class JsonFileStore(RecordStore):
    """Records kept as one JSON array, rewritten in full on every append.

    Appends are read-modify-write under a lock, so concurrent requests in
    this process never overwrite each other. Separate processes sharing
    the file are NOT coordinated and can still lose updates.
    """

    name = "file"

    def __init__(self, path: Path | str, clock: Callable[[], datetime] = utc_now):
        super().__init__(clock)
        self.path = Path(path)
        self._lock = threading.Lock()

    def initialize(self) -> None:
        """Create the file holding an empty array if it does not exist."""
        with self._lock:
            if self.path.exists():
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write([])
            logger.info("Created empty record file at %s", self.path)

    async def append(self, name: str | None, ip: str) -> Record:
        cleaned = clean_name(name)
        return await asyncio.to_thread(self._append, cleaned, ip)

    async def list_all(self) -> list[Record]:
        rows = await asyncio.to_thread(self._read_locked)
        return newest_first(to_records(rows, str(self.path)))

    def describe(self) -> dict:
        return {"backend": self.name, "data_file": str(self.path)}

    def _append(self, name: str, ip: str) -> Record:
        with self._lock:
            rows = self._read()
            # A file list_all would reject is never rewritten
            existing = to_records(rows, str(self.path))
            now, fields = self._fields(name, ip)
            last_id = max((r.id for r in existing), default=0)
            # Millisecond ids collide under bursts; keep them strictly increasing
            record = Record(id=max(epoch_ms(now), last_id + 1), **fields)
            rows.append(record.model_dump())
            self._write(rows)

        logger.info("Stored record %d (%s)", record.id, record.name)
        return record

    def _read_locked(self) -> list:
        with self._lock:
            return self._read()

    def _read(self) -> list:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read {self.path}: {e}") from e

        if not isinstance(data, list):
            raise StorageError(f"{self.path} does not contain a JSON array")
        return data

    def _write(self, rows: list) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(rows, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StorageError(f"Could not write {self.path}: {e}") from e


# ---------------------------------------------------------------------------
# Supabase table (PostgREST)
# ---------------------------------------------------------------------------

class SupabaseStore(RecordStore):
    """Records kept as rows of a Supabase table with an auto-increment `id`.

    Expected columns: id (bigint identity), name, ip, time, timestamp (text).
    """

    name = "supabase"

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "submissions",
        timeout: float = 30.0,
        clock: Callable[[], datetime] = utc_now,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(clock)
        self.url = url.rstrip("/")
        self.table = table
        self._client = httpx.AsyncClient(
            base_url=f"{self.url}/rest/v1",
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
            },
            timeout=timeout,
            transport=transport,
        )

    async def append(self, name: str | None, ip: str) -> Record:
        cleaned = clean_name(name)
        _, fields = self._fields(cleaned, ip)

        rows = await self._request(
            "POST",
            f"/{self.table}",
            json=fields,
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise StorageError("Insert returned no row")

        record = to_records(rows[:1], f"Table {self.table}")[0]
        logger.info("Stored record %d (%s)", record.id, record.name)
        return record

    async def list_all(self) -> list[Record]:
        rows = await self._request(
            "GET",
            f"/{self.table}",
            params={"select": "*", "order": "id.desc"},
        )
        return newest_first(to_records(rows, f"Table {self.table}"))

    def describe(self) -> dict:
        return {"backend": self.name, "table": self.table}

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> list:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"Supabase unreachable: {e}") from e

        if resp.is_error:
            raise StorageError(_error_message(resp))

        try:
            data = resp.json()
        except ValueError as e:
            raise StorageError(f"Supabase returned invalid JSON: {e}") from e

        if isinstance(data, dict):
            data = [data]
        return data


def _error_message(resp: httpx.Response) -> str:
    """Pull the human-readable message out of a PostgREST error body."""
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.text or f"HTTP {resp.status_code}"


def build_store(settings: Settings) -> RecordStore:
    if settings.storage_backend == "supabase":
        return SupabaseStore(
            url=settings.supabase_url,
            key=settings.supabase_key,
            table=settings.supabase_table,
            timeout=settings.supabase_timeout,
        )
    store = JsonFileStore(settings.data_file)
    store.initialize()
    return store
