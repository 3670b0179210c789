"""
Storage for logged work days.

One entry per (trial_id, date). Writing the same day twice replaces the
earlier entry, so a contractor can correct a check-in without creating
duplicates that would be double-counted on the dashboard.

Layout of the JSON store (under the data directory):

    entries/<trial_id>/<YYYY-MM-DD>.json

Each file holds {"meta": {...}, "data": {...}} where data is the
validated DailyWorkData and meta records the trial, date and save time.
"""

import json
import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

from .config import get_data_path
from .inputs import InvalidInputError
from .schemas import DailyWorkData

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)

TRIAL_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# Fixed pool of file locks; keys share a lock by hash
LOCK_STRIPES = 64


def check_trial_id(trial_id: str) -> str:
    """Trial ids become directory names, so only [A-Za-z0-9_-] is allowed."""
    if not isinstance(trial_id, str) or not TRIAL_ID_PATTERN.match(trial_id):
        raise InvalidInputError([f"trial_id: must match {TRIAL_ID_PATTERN.pattern}, got {trial_id!r}"])
    return trial_id


class EntryRepository(ABC):
    """Where logged days live."""

    @abstractmethod
    def get(self, trial_id: str, entry_date: date) -> Optional[DailyWorkData]:
        """Return the entry for a day, or None if nothing was logged."""

    @abstractmethod
    def upsert(self, trial_id: str, entry_date: date, work: DailyWorkData) -> None:
        """Insert or replace the entry for a day."""


class InMemoryEntryRepository(EntryRepository):
    """Dict-backed store for tests and one-off calculations."""

    def __init__(self):
        self._entries: Dict[Tuple[str, date], DailyWorkData] = {}
        self._lock = threading.Lock()

    def get(self, trial_id: str, entry_date: date) -> Optional[DailyWorkData]:
        with self._lock:
            return self._entries.get((check_trial_id(trial_id), entry_date))

    def upsert(self, trial_id: str, entry_date: date, work: DailyWorkData) -> None:
        with self._lock:
            self._entries[(check_trial_id(trial_id), entry_date)] = work

    def __len__(self) -> int:
        return len(self._entries)


class JsonEntryRepository(EntryRepository):
    """One JSON file per logged day under <data_dir>/entries/."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else get_data_path()
        self._locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))

    @property
    def entries_dir(self) -> Path:
        return self.data_dir / "entries"

    def path_for(self, trial_id: str, entry_date: date) -> Path:
        return self.entries_dir / check_trial_id(trial_id) / f"{entry_date.isoformat()}.json"

    def _lock_for(self, trial_id: str, entry_date: date) -> threading.Lock:
        return self._locks[hash((trial_id, entry_date)) % LOCK_STRIPES]

    def get(self, trial_id: str, entry_date: date) -> Optional[DailyWorkData]:
        path = self.path_for(trial_id, entry_date)
        with self._lock_for(trial_id, entry_date):
            if not path.exists():
                return None
            with open(path) as f:
                record = json.load(f)
        return DailyWorkData.model_validate(record["data"])

    def upsert(self, trial_id: str, entry_date: date, work: DailyWorkData) -> None:
        path = self.path_for(trial_id, entry_date)
        record = {
            "meta": {
                "trial_id": trial_id,
                "entry_date": entry_date.isoformat(),
                "saved_at": datetime.now().isoformat(),
            },
            "data": work.model_dump(mode="json"),
        }

        with self._lock_for(trial_id, entry_date):
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".entry-", suffix=".json")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(record, f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise

        logger.debug(f"Saved entry {trial_id}/{entry_date.isoformat()} -> {path}")
