"""
In-memory session repository for local development and tests.
"""
import copy
import threading
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from chunked_upload_api.core.exceptions import ValidationException
from chunked_upload_api.models.upload_session import UploadSession
from chunked_upload_api.repositories.session_repository import SessionRepository


class InMemorySessionRepository(SessionRepository):
    """Session repository backed by a dict guarded by a single lock."""

    def __init__(self):
        self._sessions: Dict[str, UploadSession] = {}
        self._lock = threading.Lock()

    def create(self, session: UploadSession) -> None:
        with self._lock:
            if session.upload_id in self._sessions:
                raise ValidationException(f"Upload session '{session.upload_id}' already exists")
            self._sessions[session.upload_id] = copy.deepcopy(session)

    def get_by_id(self, upload_id: str) -> Optional[UploadSession]:
        with self._lock:
            session = self._sessions.get(upload_id)
            return copy.deepcopy(session) if session else None

    def add_received_chunk(self, upload_id: str, chunk_index: int) -> Optional[Tuple[bool, UploadSession]]:
        with self._lock:
            session = self._sessions.get(upload_id)
            if session is None:
                return None
            added = chunk_index not in session.received_chunks
            session.received_chunks.add(chunk_index)
            return added, copy.deepcopy(session)

    def claim_for_assembly(self, upload_id: str) -> bool:
        with self._lock:
            session = self._sessions.get(upload_id)
            if session is None or session.status != UploadSession.STATUS_OPEN:
                return False
            session.status = UploadSession.STATUS_ASSEMBLING
            return True

    def release_claim(self, upload_id: str) -> None:
        with self._lock:
            session = self._sessions.get(upload_id)
            if session is not None:
                session.status = UploadSession.STATUS_OPEN

    def delete(self, upload_id: str) -> Optional[UploadSession]:
        with self._lock:
            return self._sessions.pop(upload_id, None)

    def list_expired(self, now: datetime) -> List[str]:
        with self._lock:
            return [s.upload_id for s in self._sessions.values() if s.is_expired(now)]
