"""
JSON file persistence for work orders.

The whole collection lives in one JSON array. Every call re-reads the file
and every mutation rewrites it entirely; there is no cache between calls.
A missing, unparseable or non-array file is reinitialised to [] instead of
failing. Any other I/O error propagates to the caller.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional
import json
import logging
import threading
import uuid

from api.core.config import get_settings

logger = logging.getLogger(__name__)

# Serialises read-modify-write spans within this process.
_lock = threading.RLock()


def format_timestamp(moment: datetime) -> str:
    """ISO 8601, UTC, millisecond precision, 'Z' suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class JsonWorkOrderRepository:
    """Whole-file CRUD helpers over the work orders JSON document."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else get_settings().work_orders_file

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _stamp_after(self, previous: str | None) -> str:
        now = self._now().astimezone(timezone.utc)
        # Stamps are stored at millisecond precision; compare at the same precision.
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)
        if isinstance(previous, str) and previous:
            try:
                last = parse_timestamp(previous)
            except ValueError:
                last = None
            if last is not None and now <= last:
                now = last + timedelta(milliseconds=1)
        return format_timestamp(now)

    # -------------------------- raw file --------------------------
    def load_all(self) -> list[dict]:
        with _lock:
            try:
                raw = self.path.read_text(encoding="utf-8")
            except FileNotFoundError:
                logger.info("Work orders file %s missing; initialising empty collection", self.path)
                self.save_all([])
                return []
            except UnicodeDecodeError as exc:
                logger.warning(
                    "Work orders file %s is not valid UTF-8 (byte offset %d); reinitialising",
                    self.path,
                    exc.start,
                )
                self.save_all([])
                return []
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError as exc:
                logger.warning("Work orders file %s is not valid JSON (%s); reinitialising", self.path, exc)
                self.save_all([])
                return []
            if not isinstance(parsed, list):
                logger.warning(
                    "Work orders file %s holds %s instead of an array; reinitialising",
                    self.path,
                    type(parsed).__name__,
                )
                self.save_all([])
                return []
            return parsed

    def save_all(self, records: list[dict]) -> None:
        with _lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")

    # -------------------------- records --------------------------
    def find_by_id(self, record_id: str) -> Optional[dict]:
        for record in self.load_all():
            if isinstance(record, dict) and record.get("id") == record_id:
                return record
        return None

    def insert(self, fields: dict) -> dict:
        with _lock:
            records = self.load_all()
            existing = {r.get("id") for r in records if isinstance(r, dict)}
            new_id = str(uuid.uuid4())
            while new_id in existing:
                new_id = str(uuid.uuid4())
            record = {key: value for key, value in fields.items() if key not in ("id", "updatedAt")}
            record["id"] = new_id
            record["updatedAt"] = self._stamp_after(None)
            records.append(record)
            self.save_all(records)
            return record

    def replace(self, record_id: str, fields: dict) -> Optional[dict]:
        """Shallow-merge non-None fields over the stored record; id is kept, updatedAt re-stamped."""
        with _lock:
            records = self.load_all()
            for index, current in enumerate(records):
                if isinstance(current, dict) and current.get("id") == record_id:
                    break
            else:
                return None
            updated = dict(current)
            for key, value in fields.items():
                if value is not None:
                    updated[key] = value
            updated["id"] = record_id
            updated["updatedAt"] = self._stamp_after(current.get("updatedAt"))
            records[index] = updated
            self.save_all(records)
            return updated

    def delete_by_id(self, record_id: str) -> bool:
        with _lock:
            records = self.load_all()
            remaining = [r for r in records if not (isinstance(r, dict) and r.get("id") == record_id)]
            if len(remaining) == len(records):
                return False
            self.save_all(remaining)
            return True
