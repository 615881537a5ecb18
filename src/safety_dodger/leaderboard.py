"""
Local leaderboard persistence.

The whole leaderboard lives in one JSON file as an array of
``{"name", "dept", "score", "dateISO"}`` objects sorted by score, highest
first.  Every change is a read-modify-write of the full list.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Union

from .errors import LeaderboardImportError, RecordValidationError, StorageError

logger = logging.getLogger(__name__)


def iso_now(now=None):
    """UTC timestamp with ms precision and 'Z' suffix."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    return now.isoformat(timespec="milliseconds") + "Z"


@dataclass(frozen=True)
class ScoreRecord:
    name: str
    dept: str
    score: Union[int, float]
    date_iso: str

    @classmethod
    def create(cls, name, dept, score, now=None):
        """Build a record for a finished run; name and department are required."""
        name = (name or "").strip()
        dept = (dept or "").strip()
        if not name or not dept:
            raise RecordValidationError("Please enter your department and name.")
        return cls(name=name, dept=dept, score=int(score), date_iso=iso_now(now))

    @classmethod
    def from_dict(cls, data):
        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ValueError(f"record has no numeric score: {data!r}")
        if not math.isfinite(score):
            raise ValueError(f"record score is not finite: {data!r}")
        # imported scores keep their JSON value, floats included
        return cls(
            name=str(data.get("name") or ""),
            dept=str(data.get("dept") or ""),
            score=score,
            date_iso=str(data.get("dateISO") or ""),
        )

    def to_dict(self):
        return {"name": self.name, "dept": self.dept, "score": self.score, "dateISO": self.date_iso}


def sort_records(records):
    # sorted() is stable, so ties keep their insertion order
    return sorted(records, key=lambda r: r.score, reverse=True)


def parse_records(text) -> List[ScoreRecord]:
    """Parse a JSON array of records, dropping falsy entries."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("expected a JSON array of records")
    out = []
    for entry in data:
        if not entry:
            continue
        if not isinstance(entry, dict):
            raise ValueError(f"record is not an object: {entry!r}")
        out.append(ScoreRecord.from_dict(entry))
    return out


class LeaderboardStore:
    def __init__(self, path):
        self.path = Path(path)
        self.records: List[ScoreRecord] = []

    def load(self):
        """Read the stored leaderboard.  Missing or corrupt storage reads as empty."""
        self.records = []
        if not self.path.exists():
            return list(self.records)
        try:
            text = self.path.read_text(encoding="utf-8")
            self.records = parse_records(text)
        except (OSError, ValueError, OverflowError, RecursionError) as e:
            logger.warning("Leaderboard at %s is unreadable, starting empty: %s", self.path, e)
            self.records = []
        return list(self.records)

    def _persist(self, records):
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"could not write leaderboard to {self.path}: {e}") from e
        self.records = list(records)

    def save(self, record):
        records = sort_records(self.records + [record])
        self._persist(records)
        logger.info("Saved %s (%s) with score %d", record.name, record.dept, record.score)
        return list(self.records)

    def clear(self):
        """Erase every stored record.  Callers ask for confirmation first."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"could not remove {self.path}: {e}") from e
        self.records = []
        logger.info("Leaderboard cleared")

    def export(self):
        return json.dumps([r.to_dict() for r in self.records], indent=2, ensure_ascii=False)

    def export_file(self, path):
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.export() + "\n", encoding="utf-8")
        except OSError as e:
            raise StorageError(f"could not write export to {path}: {e}") from e
        logger.info("Exported %d records to %s", len(self.records), path)
        return path

    def import_text(self, text):
        """Merge records parsed from text.  Leaves storage untouched on failure."""
        try:
            incoming = parse_records(text)
        except (ValueError, OverflowError, RecursionError) as e:
            raise LeaderboardImportError(f"not a valid leaderboard JSON array: {e}") from e
        merged = sort_records(self.records + incoming)
        self._persist(merged)
        logger.info("Imported %d records", len(incoming))
        return list(self.records)

    def import_file(self, path):
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise LeaderboardImportError(f"could not read {path}: {e}") from e
        return self.import_text(text)
