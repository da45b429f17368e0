from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from tradedesk import config
from tradedesk.models.settings import Settings
from tradedesk.storage.json_repo import JsonRepository

log = logging.getLogger(__name__)

SETTINGS_ID = "settings"


class SettingsService:
    def __init__(self, data_dir: Optional[str | Path] = None) -> None:
        base = Path(data_dir) if data_dir else config.data_dir()
        self.repo = JsonRepository(base / "settings.json", entity_name="settings", key="id", backup_enabled=False)

    def get(self) -> Settings:
        with self.repo.lock:
            d = self.repo.get_by_id(SETTINGS_ID)
            if d is None:
                s = Settings(id=SETTINGS_ID)
                self.repo.add(s)
                log.info("Initialised default settings in %s", self.repo.filepath)
                return s
        return Settings.model_validate(d)

    def update(self, **changes: Any) -> Settings:
        with self.repo.lock:
            s = Settings.model_validate({**self.get().model_dump(), **changes})
            self.repo.upsert(s)
        return s

    def next_sequence(self) -> int:
        """Hand out the current counter value and persist counter + 1."""
        with self.repo.lock:
            s = self.get()
            seq = max(1, int(s.next_sequence))
            self.repo.upsert({"id": SETTINGS_ID, "next_sequence": seq + 1})
        log.debug("Assigned document sequence %s", seq)
        return seq
