"""Session persistence in a single JSON file.

Stands in for the app's key-value store: the whole session list is kept
as one JSON array. Reads never raise on a damaged file; writes are
atomic via a temp file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from vetanesthesia.models import AnesthesiaSession
from vetanesthesia.utils.config import get_sessions_path
from vetanesthesia.utils.timefmt import parse_timestamp

logger = logging.getLogger(__name__)


def parse_sessions_json(raw: str | None) -> list:
    """Decode a stored blob; anything but a JSON array yields []."""
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (ValueError, TypeError) as e:
        logger.warning("Discarding unreadable session data: %s", e)
        return []
    if not isinstance(parsed, list):
        logger.warning("Session data is %s, expected a list", type(parsed).__name__)
        return []
    return parsed


def upsert_session(
    sessions: list[AnesthesiaSession], session: AnesthesiaSession
) -> list[AnesthesiaSession]:
    """Return a new list with *session* replacing the one with the same id, or appended."""
    result = list(sessions)
    for i, s in enumerate(result):
        if s.id == session.id:
            result[i] = session
            return result
    result.append(session)
    return result


def find_latest_unfinished(sessions: list[AnesthesiaSession]) -> Optional[AnesthesiaSession]:
    """Most recently started session without an end time, if any."""
    unfinished = []
    for s in sessions:
        if s.end_time:
            continue
        started = parse_timestamp(s.start_time)
        if started is None:
            continue
        unfinished.append((started, s))
    if not unfinished:
        return None
    return max(unfinished, key=lambda pair: pair[0])[1]


class SessionStore:
    """Reads and writes the session list for one JSON file."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path is not None else get_sessions_path()

    def load_sessions(self) -> list[AnesthesiaSession]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Failed to read sessions from %s: %s", self.path, e)
            return []

        data = parse_sessions_json(raw)
        sessions = [AnesthesiaSession.from_dict(d) for d in data if isinstance(d, dict)]
        skipped = len(data) - len(sessions)
        if skipped:
            logger.warning("Skipped %d malformed session entries in %s", skipped, self.path)
        return sessions

    def save_sessions(self, sessions: list[AnesthesiaSession]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [s.to_dict() for s in sessions]

        temp_path = self.path.with_suffix(".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            temp_path.replace(self.path)
            logger.info("Saved %d sessions to %s", len(sessions), self.path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def save_session(self, session: AnesthesiaSession) -> None:
        self.save_sessions(upsert_session(self.load_sessions(), session))

    def delete_session(self, session_id: str) -> None:
        sessions = self.load_sessions()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            logger.info("Session %s not found, nothing deleted", session_id)
        self.save_sessions(remaining)

    def get_session(self, session_id: str) -> Optional[AnesthesiaSession]:
        for s in self.load_sessions():
            if s.id == session_id:
                return s
        return None

    def latest_unfinished(self) -> Optional[AnesthesiaSession]:
        return find_latest_unfinished(self.load_sessions())
