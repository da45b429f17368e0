from __future__ import annotations

import json
import logging
import shutil
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union
from uuid import uuid4

from pydantic import BaseModel

from tradedesk.storage.errors import DuplicateRecord, RecordNotFound

log = logging.getLogger(__name__)

Record = Dict[str, Any]

# one lock per file, shared by every repository instance pointing at it
_file_locks: Dict[str, threading.RLock] = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _file_locks_guard:
        return _file_locks.setdefault(str(path.resolve()), threading.RLock())


def _json_default(o: Any) -> Any:
    if isinstance(o, (date, datetime)):
        return o.isoformat()
    return str(o)


class JsonRepository:
    """
    Generic JSON-file repository, one array of records per file.
    - configurable primary key
    - rotating backups (backup_enabled, backup_keep)
    - skips the write when the content did not change (fewer .bak files)
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        entity_name: str = "entity",
        key: str = "id",
        *,
        backup_enabled: bool = True,
        backup_keep: int = 5,
    ) -> None:
        self.filepath = Path(filepath)
        self.entity_name = entity_name
        self.key = key
        self.backup_enabled = backup_enabled
        self.backup_keep = max(0, int(backup_keep))

        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        self._lock = _lock_for(self.filepath)
        with self._lock:
            if not self.filepath.exists():
                self._write_raw([])

    @property
    def lock(self) -> threading.RLock:
        """Held by callers doing read-modify-write across several calls."""
        return self._lock

    # ---------------- low-level I/O ---------------- #

    def _read_raw(self) -> List[Record]:
        try:
            with self.filepath.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, list) else []
        except FileNotFoundError:
            return []
        except json.JSONDecodeError:
            # corrupt file: keep a copy aside and start from an empty list
            backup = self.filepath.with_suffix(".corrupt.json")
            log.warning("Corrupt %s file %s, copied to %s", self.entity_name, self.filepath, backup)
            try:
                shutil.copy2(self.filepath, backup)
            except OSError:
                log.exception("Could not back up corrupt file %s", self.filepath)
            return []

    def _backups(self) -> List[Path]:
        return sorted(self.filepath.parent.glob(f"{self.filepath.stem}.*.bak.json"))

    def _rotate_backups(self) -> None:
        if not self.backup_enabled or self.backup_keep <= 0:
            return
        files = self._backups()
        # keep the most recent ones
        for old in files[: max(0, len(files) - self.backup_keep)]:
            old.unlink(missing_ok=True)

    def _write_raw(self, data: Iterable[Mapping[str, Any]]) -> None:
        with self._lock:
            new_dump = json.dumps(list(data), ensure_ascii=False, indent=2, default=_json_default)

            if self.filepath.exists():
                if self.filepath.read_text(encoding="utf-8") == new_dump:
                    return

                if self.backup_enabled:
                    ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
                    backup = self.filepath.with_suffix(f".{ts}.bak.json")
                    shutil.copy2(self.filepath, backup)
                    self._rotate_backups()

            tmp = self.filepath.with_suffix(".tmp")
            tmp.write_text(new_dump, encoding="utf-8")
            tmp.replace(self.filepath)
            log.debug("Wrote %s (%s)", self.filepath, self.entity_name)

    # ---------------- helpers ---------------- #

    @staticmethod
    def _to_dict(item: Union[BaseModel, Mapping[str, Any]]) -> Record:
        if isinstance(item, BaseModel):
            return json.loads(item.model_dump_json())
        return dict(item)

    # ---------------- CRUD ---------------- #

    def list_all(self) -> List[Record]:
        return self._read_raw()

    def get_by_id(self, obj_id: Any) -> Optional[Record]:
        k = self.key
        for it in self._read_raw():
            if str(it.get(k)) == str(obj_id):
                return it
        return None

    def add(self, item: Union[BaseModel, Mapping[str, Any]]) -> Record:
        record = self._to_dict(item)
        k = self.key
        with self._lock:
            if not record.get(k):
                record[k] = uuid4().hex
            data = self._read_raw()
            if any(str(d.get(k)) == str(record[k]) for d in data):
                raise DuplicateRecord(self.entity_name, k, record[k])
            data.append(record)
            self._write_raw(data)
        return record

    def update(self, item: Union[BaseModel, Mapping[str, Any]]) -> Record:
        record = self._to_dict(item)
        k = self.key
        obj_id = record.get(k)
        if not obj_id:
            raise RecordNotFound(self.entity_name, k, obj_id)
        with self._lock:
            data = self._read_raw()
            for idx, existing in enumerate(data):
                if str(existing.get(k)) == str(obj_id):
                    merged = {**existing, **record}
                    data[idx] = merged
                    self._write_raw(data)
                    return merged
        raise RecordNotFound(self.entity_name, k, obj_id)

    def upsert(self, item: Union[BaseModel, Mapping[str, Any]]) -> Record:
        with self._lock:
            try:
                return self.update(item)
            except RecordNotFound:
                return self.add(item)

    def delete(self, obj_id: Any) -> bool:
        k = self.key
        with self._lock:
            data = self._read_raw()
            new_data = [d for d in data if str(d.get(k)) != str(obj_id)]
            changed = len(new_data) != len(data)
            if changed:
                self._write_raw(new_data)
        return changed

    # ---------------- queries ---------------- #

    def find(self, predicate: Callable[[Record], bool]) -> List[Record]:
        return [r for r in self._read_raw() if predicate(r)]

    def find_one(self, predicate: Callable[[Record], bool]) -> Optional[Record]:
        for r in self._read_raw():
            if predicate(r):
                return r
        return None
