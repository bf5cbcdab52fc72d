import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, Optional

from photoshoot.models.collage import Session
from photoshoot.services.locks import KeyedLocks

logger = logging.getLogger(__name__)

FOLDER_TIME_FORMAT = "%H-%M-%S_%d-%m-%Y"


def session_folder_name(group_id: str, created_at: datetime, tz: Optional[tzinfo] = None) -> str:
    """Build ``HH-MM-SS_DD-MM-YYYY_<group_id>`` from the session creation time."""
    local = created_at.astimezone(tz)
    return f"{local.strftime(FOLDER_TIME_FORMAT)}_{group_id}"


class SessionStore:
    """Maps a capture group to its current session folder.

    Devices in one group never talk to each other, so they meet in the same
    folder purely by capture time: every capture within ``timeout_ms`` of the
    session's creation reuses it, a later one starts a new session. State lives
    in memory only; a restart mid-shoot splits the shoot into two folders.
    """

    def __init__(self, timeout_ms: int = 10_000, utc_offset_minutes: Optional[int] = None):
        self.timeout = timedelta(milliseconds=timeout_ms)
        self.tz = None if utc_offset_minutes is None else timezone(timedelta(minutes=utc_offset_minutes))
        self._sessions: Dict[str, Session] = {}
        self._locks = KeyedLocks()

    def resolve(self, group_id: str, now: Optional[datetime] = None) -> Session:
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        with self._locks.hold(group_id):
            existing = self._sessions.get(group_id)
            if existing is not None and now - existing.created_at <= self.timeout:
                logger.debug("Using existing session for %s: %s", group_id, existing.folder_name)
                return existing

            session = Session(
                group_id=group_id,
                created_at=now,
                folder_name=session_folder_name(group_id, now, self.tz),
            )
            self._sessions[group_id] = session
            logger.info("Created new session for %s: %s", group_id, session.folder_name)
            return session

    def get(self, group_id: str) -> Optional[Session]:
        return self._sessions.get(group_id)
